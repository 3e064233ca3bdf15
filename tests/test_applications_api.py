"""Application management API tests."""

import yaml
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.application import Application
from app.models.audit_event import AuditEvent
from app.models.condition import Condition
from app.models.release import Release
from app.models.user import User

APPS_URL = "/api/v1/apps"


class TestCreateApplication:
    """Creating applications."""

    async def test_creator_is_admin_member(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_user: User,
        other_user: User,
    ) -> None:
        response = await client.post(
            APPS_URL,
            json={
                "name": "Dispatch",
                "package_name": "com.example.dispatch",
                "member_emails": [other_user.email, "nobody@releases.local"],
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["owner_id"] == test_user.id
        members = {m["email"]: m["role"] for m in data["members"]}
        assert members == {test_user.email: "admin", other_user.email: "user"}

    async def test_invalid_package_name(
        self,
        client: AsyncClient,
        auth_headers: dict,
    ) -> None:
        response = await client.post(
            APPS_URL,
            json={"name": "Dispatch", "package_name": "dispatch"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    async def test_name_too_short(
        self,
        client: AsyncClient,
        auth_headers: dict,
    ) -> None:
        response = await client.post(
            APPS_URL,
            json={"name": "D", "package_name": "com.example.dispatch"},
            headers=auth_headers,
        )

        assert response.status_code == 400

    async def test_requires_authentication(self, client: AsyncClient) -> None:
        response = await client.post(
            APPS_URL,
            json={"name": "Dispatch", "package_name": "com.example.dispatch"},
        )

        assert response.status_code == 401


class TestAccess:
    """Membership checks."""

    async def test_member_sees_application(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
    ) -> None:
        listing = await client.get(APPS_URL, headers=auth_headers)
        detail = await client.get(f"{APPS_URL}/{test_application.id}", headers=auth_headers)

        assert [a["id"] for a in listing.json()] == [test_application.id]
        assert detail.status_code == 200
        assert detail.json()["package_name"] == "com.example.fleet"

    async def test_non_member_forbidden(
        self,
        client: AsyncClient,
        other_headers: dict,
        test_application: Application,
    ) -> None:
        listing = await client.get(APPS_URL, headers=other_headers)
        detail = await client.get(f"{APPS_URL}/{test_application.id}", headers=other_headers)

        assert listing.json() == []
        assert detail.status_code == 403

    async def test_superadmin_sees_everything(
        self,
        client: AsyncClient,
        admin_headers: dict,
        test_application: Application,
    ) -> None:
        response = await client.get(f"{APPS_URL}/{test_application.id}", headers=admin_headers)

        assert response.status_code == 200

    async def test_unknown_application(
        self,
        client: AsyncClient,
        auth_headers: dict,
    ) -> None:
        response = await client.get(
            f"{APPS_URL}/00000000-0000-4000-8000-000000000000", headers=auth_headers
        )

        assert response.status_code == 404


class TestUpdateAndDelete:
    """Changing and removing applications."""

    async def test_replace_members_keeps_owner(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_user: User,
        other_user: User,
        test_application: Application,
    ) -> None:
        response = await client.patch(
            f"{APPS_URL}/{test_application.id}",
            json={"name": "Fleet Driver Pro", "member_emails": [other_user.email]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Fleet Driver Pro"
        assert {m["user_id"] for m in data["members"]} == {test_user.id, other_user.id}

    async def test_plain_member_cannot_update(
        self,
        client: AsyncClient,
        auth_headers: dict,
        other_user: User,
        other_headers: dict,
        test_application: Application,
    ) -> None:
        await client.patch(
            f"{APPS_URL}/{test_application.id}",
            json={"member_emails": [other_user.email]},
            headers=auth_headers,
        )

        response = await client.patch(
            f"{APPS_URL}/{test_application.id}",
            json={"name": "Hijacked"},
            headers=other_headers,
        )

        assert response.status_code == 403

    async def test_delete_cascades(
        self,
        client: AsyncClient,
        async_session: AsyncSession,
        auth_headers: dict,
        test_application: Application,
        make_condition,
        make_release,
    ) -> None:
        condition = await make_condition(test_application, countries=["DE"])
        await make_release(test_application, "10", conditions=[condition])

        response = await client.delete(
            f"{APPS_URL}/{test_application.id}", headers=auth_headers
        )

        assert response.status_code == 204
        for model in (Application, Release, Condition):
            result = await async_session.execute(select(model))
            assert result.scalars().all() == []

        audit = await async_session.execute(
            select(AuditEvent).where(AuditEvent.action == "application.delete")
        )
        assert len(audit.scalars().all()) == 1


class TestDashboardAndExports:
    """Read-only views of an application."""

    async def test_dashboard(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
        make_condition,
        make_release,
    ) -> None:
        await make_condition(test_application)
        await make_release(test_application, "10")
        latest = await make_release(test_application, "12", minutes=1)
        await make_release(test_application, "20", status="paused")

        await client.post(
            "/api/v1/releases/check",
            json={
                "appId": test_application.id,
                "country": "DE",
                "companyId": 1,
                "driverId": "d",
                "vehicleId": "v",
                "versionName": "1.0.0",
                "versionCode": 1,
            },
        )

        response = await client.get(
            f"{APPS_URL}/{test_application.id}/dashboard", headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["releases_by_status"] == {"active": 2, "paused": 1}
        assert data["total_releases"] == 3
        assert data["total_conditions"] == 1
        assert data["latest_active_release"]["id"] == latest.id
        assert data["device_checks_last_24h"] == 1
        assert data["updates_required_last_24h"] == 1

    async def test_device_checks_listing(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
    ) -> None:
        for driver in ("d-1", "d-2"):
            await client.post(
                "/api/v1/releases/check",
                json={
                    "appId": test_application.id,
                    "country": "DE",
                    "companyId": 1,
                    "driverId": driver,
                    "vehicleId": "v",
                    "versionName": "1.0.0",
                    "versionCode": 1,
                },
            )

        everything = await client.get(
            f"{APPS_URL}/{test_application.id}/device-checks", headers=auth_headers
        )
        filtered = await client.get(
            f"{APPS_URL}/{test_application.id}/device-checks",
            params={"driver_id": "d-2"},
            headers=auth_headers,
        )

        assert len(everything.json()) == 2
        assert [c["driver_id"] for c in filtered.json()] == ["d-2"]

    async def test_snapshot_export(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
        make_condition,
        make_release,
    ) -> None:
        condition = await make_condition(test_application, countries=["DE"])
        release = await make_release(test_application, "10", conditions=[condition])

        response = await client.get(
            f"{APPS_URL}/{test_application.id}/snapshot", headers=auth_headers
        )

        assert response.status_code == 200
        snapshot = yaml.safe_load(response.text)
        assert snapshot["releases"][0]["id"] == release.id
        assert snapshot["releases"][0]["condition_ids"] == [condition.id]
        assert snapshot["conditions"][0]["rules"]["countries"] == ["DE"]

    async def test_audit_listing(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
    ) -> None:
        await client.post(
            f"{APPS_URL}/{test_application.id}/conditions",
            json={"name": "Germany", "countries": ["DE"]},
            headers=auth_headers,
        )

        response = await client.get(
            f"{APPS_URL}/{test_application.id}/audit", headers=auth_headers
        )

        assert response.status_code == 200
        events = response.json()
        assert [e["action"] for e in events] == ["condition.create"]
        assert events[0]["metadata"]["countries"] == ["DE"]
