"""Tests for the public release check endpoints."""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1 import release_check
from app.models.application import Application
from app.models.device_check import DeviceCheck
from app.releases.selector import ReleaseSelector

CHECK_URL = "/api/v1/releases/check"


def check_body(application: Application, **overrides) -> dict:
    body = {
        "appId": application.id,
        "country": "DE",
        "companyId": 7,
        "driverId": "d-1",
        "vehicleId": "v-1",
        "versionName": "1.0.5",
        "versionCode": 5,
    }
    body.update(overrides)
    return body


class TestCheckOutcomes:
    """Response shapes for each outcome."""

    async def test_update_required(
        self,
        client: AsyncClient,
        test_application: Application,
        make_release,
    ) -> None:
        latest = await make_release(test_application, "20", version_name="2.0.0")

        response = await client.post(CHECK_URL, json=check_body(test_application))

        assert response.status_code == 200
        data = response.json()
        assert data["updateRequired"] is True
        assert data["currentVersion"] == {"versionName": "1.0.5", "versionCode": 5}
        assert data["latestVersion"] == {
            "id": latest.id,
            "versionName": "2.0.0",
            "versionCode": 20,
        }
        assert data["message"] == "Update required: 2.0.0 (20) is available"

    async def test_up_to_date(
        self,
        client: AsyncClient,
        test_application: Application,
        make_release,
    ) -> None:
        await make_release(test_application, "5")

        response = await client.post(CHECK_URL, json=check_body(test_application))

        assert response.status_code == 200
        data = response.json()
        assert data["updateRequired"] is False
        assert "latestVersion" not in data
        assert data["message"] == "Current version is up to date"

    async def test_no_releases(
        self,
        client: AsyncClient,
        test_application: Application,
    ) -> None:
        response = await client.post(CHECK_URL, json=check_body(test_application))

        assert response.status_code == 200
        data = response.json()
        assert data["updateRequired"] is False
        assert data["message"] == "No releases available for your context"

    async def test_conditions_apply(
        self,
        client: AsyncClient,
        test_application: Application,
        make_condition,
        make_release,
    ) -> None:
        vehicles = await make_condition(test_application, vehicle_ids=["v-9"])
        await make_release(test_application, "30", conditions=[vehicles])
        await make_release(test_application, "10")

        response = await client.post(CHECK_URL, json=check_body(test_application))
        targeted = await client.post(
            CHECK_URL, json=check_body(test_application, vehicleId="v-9")
        )

        assert response.json()["latestVersion"]["versionCode"] == 10
        assert targeted.json()["latestVersion"]["versionCode"] == 30


class TestRequestFormats:
    """Aliases and the query-string variant."""

    async def test_legacy_field_names(
        self,
        client: AsyncClient,
        test_application: Application,
        make_release,
    ) -> None:
        await make_release(test_application, "20")
        body = check_body(test_application)
        legacy = (("companyId", "company"), ("driverId", "driver"), ("vehicleId", "vehicle"))
        for new, old in legacy:
            body[old] = body.pop(new)

        response = await client.post(CHECK_URL, json=body)

        assert response.status_code == 200
        assert response.json()["updateRequired"] is True

    async def test_numeric_identifiers(
        self,
        client: AsyncClient,
        test_application: Application,
        make_condition,
        make_release,
    ) -> None:
        drivers = await make_condition(test_application, driver_ids=["1234"])
        await make_release(test_application, "20", conditions=[drivers])

        response = await client.post(
            CHECK_URL, json=check_body(test_application, driverId=1234, vehicleId=99)
        )

        assert response.status_code == 200
        assert response.json()["updateRequired"] is True

    async def test_query_string_variant(
        self,
        client: AsyncClient,
        test_application: Application,
        make_release,
    ) -> None:
        await make_release(test_application, "20")

        response = await client.get(
            CHECK_URL,
            params={
                "appId": test_application.id,
                "country": "DE",
                "company": "7",
                "driver": "d-1",
                "vehicle": "v-1",
                "versionName": "1.0.5",
                "versionCode": "5",
            },
        )

        assert response.status_code == 200
        assert response.json()["updateRequired"] is True


class TestValidation:
    """Malformed requests are rejected before evaluation."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"appId": "not-a-uuid"},
            {"companyId": 0},
            {"versionCode": -1},
            {"versionName": ""},
            {"country": ""},
            {"driverId": ""},
        ],
    )
    async def test_invalid_fields(
        self,
        client: AsyncClient,
        test_application: Application,
        overrides: dict,
    ) -> None:
        response = await client.post(CHECK_URL, json=check_body(test_application, **overrides))

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Validation failed"
        assert len(data["details"]) >= 1

    @pytest.mark.parametrize("field", ["companyId", "versionCode", "driverId", "vehicleId"])
    async def test_boolean_values_rejected(
        self,
        client: AsyncClient,
        test_application: Application,
        field: str,
    ) -> None:
        response = await client.post(CHECK_URL, json=check_body(test_application, **{field: True}))

        assert response.status_code == 400
        fields = {tuple(d["loc"])[-1] for d in response.json()["details"]}
        assert field in fields

    async def test_country_wider_than_column(
        self,
        client: AsyncClient,
        test_application: Application,
    ) -> None:
        response = await client.post(
            CHECK_URL, json=check_body(test_application, country="D" * 11)
        )

        assert response.status_code == 400

    async def test_missing_fields(self, client: AsyncClient) -> None:
        response = await client.post(CHECK_URL, json={"country": "DE"})

        assert response.status_code == 400
        fields = {tuple(d["loc"])[-1] for d in response.json()["details"]}
        assert "appId" in fields or "app_id" in fields

    async def test_invalid_query_string(self, client: AsyncClient) -> None:
        response = await client.get(CHECK_URL, params={"appId": str(uuid.uuid4())})

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"


class TestActivityAndFailures:
    """Device check recording and internal errors."""

    async def test_check_is_recorded(
        self,
        client: AsyncClient,
        async_session: AsyncSession,
        test_application: Application,
        make_release,
    ) -> None:
        latest = await make_release(test_application, "20")

        await client.post(
            CHECK_URL,
            json=check_body(test_application, driverRef="ext-42"),
        )

        result = await async_session.execute(
            select(DeviceCheck).where(DeviceCheck.application_id == test_application.id)
        )
        checks = result.scalars().all()
        assert len(checks) == 1
        assert checks[0].driver_id == "d-1"
        assert checks[0].driver_ref == "ext-42"
        assert checks[0].update_required is True
        assert checks[0].latest_release_id == latest.id

    async def test_recording_failure_keeps_response(
        self,
        client: AsyncClient,
        test_application: Application,
        make_release,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        await make_release(test_application, "20")
        body = check_body(test_application)

        async def failing_record(*args, **kwargs):
            raise OperationalError("INSERT INTO device_checks", {}, Exception("disk full"))

        monkeypatch.setattr(release_check, "record_device_check", failing_record)

        response = await client.post(CHECK_URL, json=body)

        assert response.status_code == 200
        data = response.json()
        assert data["updateRequired"] is True
        assert data["latestVersion"]["versionCode"] == 20

    async def test_internal_error(
        self,
        client: AsyncClient,
        test_application: Application,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        async def broken(self, *args, **kwargs):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(ReleaseSelector, "check_for_update", broken)

        response = await client.post(CHECK_URL, json=check_body(test_application))

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "message": "Failed to check release requirements",
        }
