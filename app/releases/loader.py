"""YAML release snapshot loader.

A snapshot is a static export of releases and conditions that the
``memory`` store backend serves without a database:

    conditions:
      - id: c-eu
        application_id: 6f1c...
        name: EU pilot
        rules:
          countries: [DE, FR]
    releases:
      - id: r-42
        application_id: 6f1c...
        version_name: "4.2.0"
        version_code: "42"
        status: active
        condition_ids: [c-eu]
"""

import hashlib
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from app.releases.models import Condition, Release, ReleaseStatus, RuleSet
from app.releases.store import InMemoryReleaseStore


def compute_snapshot_hash(content: str) -> str:
    """Compute SHA256 hash of snapshot content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def condition_from_dict(data: dict[str, Any]) -> Condition:
    """Build a Condition from a snapshot entry.

    Rules may be nested under ``rules`` or given inline on the entry.
    """
    rules = data.get("rules")
    if rules is None:
        rules = {k: v for k, v in data.items() if k not in ("id", "application_id", "name")}
    return Condition(
        id=str(data["id"]),
        application_id=str(data["application_id"]),
        name=str(data.get("name", "")),
        rules=RuleSet.from_dict(rules),
        created_at=_parse_datetime(data.get("created_at")),
    )


def release_from_dict(data: dict[str, Any]) -> Release:
    """Build a Release from a snapshot entry."""
    return Release(
        id=str(data["id"]),
        application_id=str(data["application_id"]),
        version_name=str(data["version_name"]),
        version_code=str(data["version_code"]),
        status=ReleaseStatus(str(data.get("status", ReleaseStatus.ACTIVE.value)).lower()),
        condition_ids=tuple(str(cid) for cid in data.get("condition_ids") or ()),
        created_at=_parse_datetime(data.get("created_at")),
    )


def condition_to_dict(condition: Condition) -> dict[str, Any]:
    return {
        "id": condition.id,
        "application_id": condition.application_id,
        "name": condition.name,
        "rules": condition.rules.to_dict(),
        "created_at": condition.created_at.isoformat() if condition.created_at else None,
    }


def release_to_dict(release: Release) -> dict[str, Any]:
    return {
        "id": release.id,
        "application_id": release.application_id,
        "version_name": release.version_name,
        "version_code": release.version_code,
        "status": release.status.value,
        "condition_ids": list(release.condition_ids),
        "created_at": release.created_at.isoformat() if release.created_at else None,
    }


def dump_snapshot(releases: list[Release], conditions: list[Condition]) -> str:
    """Serialise releases and conditions to snapshot YAML."""
    return yaml.safe_dump(
        {
            "conditions": [condition_to_dict(c) for c in conditions],
            "releases": [release_to_dict(r) for r in releases],
        },
        sort_keys=False,
    )


def parse_snapshot(content: str) -> InMemoryReleaseStore:
    """Parse snapshot YAML into an in-memory store.

    Raises:
        yaml.YAMLError: If YAML is invalid
        KeyError, ValueError: If an entry is missing required fields
    """
    data = yaml.safe_load(content) or {}
    return InMemoryReleaseStore(
        releases=[release_from_dict(r) for r in data.get("releases") or []],
        conditions=[condition_from_dict(c) for c in data.get("conditions") or []],
    )


def load_snapshot(path: str | Path) -> tuple[InMemoryReleaseStore, str]:
    """Load a snapshot file and compute its hash.

    Returns:
        Tuple of (populated store, SHA256 hash of the file)

    Raises:
        FileNotFoundError: If the snapshot file doesn't exist
    """
    filepath = Path(path)
    if not filepath.exists():
        raise FileNotFoundError(f"Release snapshot not found: {filepath}")

    content = filepath.read_text(encoding="utf-8")
    return parse_snapshot(content), compute_snapshot_hash(content)
