"""Condition management API tests."""

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.application import Application
from app.models.release import release_conditions


def conditions_url(application: Application) -> str:
    return f"/api/v1/apps/{application.id}/conditions"


class TestCreateCondition:
    """Creating conditions."""

    async def test_create(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
    ) -> None:
        response = await client.post(
            conditions_url(test_application),
            json={
                "name": "  DACH pilot ",
                "countries": ["DE", "AT", "DE", " "],
                "company_ids": [3, 3, 1],
                "driver_ids": ["d1"],
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "DACH pilot"
        assert data["countries"] == ["AT", "DE"]
        assert data["company_ids"] == [1, 3]
        assert data["driver_ids"] == ["d1"]
        assert data["vehicle_ids"] == []

    async def test_drivers_and_vehicles_rejected(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
    ) -> None:
        response = await client.post(
            conditions_url(test_application),
            json={"name": "Both", "driver_ids": ["d1"], "vehicle_ids": ["v1"]},
            headers=auth_headers,
        )

        assert response.status_code == 400
        messages = " ".join(d["msg"] for d in response.json()["details"])
        assert "Driver IDs and Vehicle IDs cannot be used at the same time." in messages

    async def test_blank_name_rejected(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
    ) -> None:
        response = await client.post(
            conditions_url(test_application),
            json={"name": "   "},
            headers=auth_headers,
        )

        assert response.status_code == 400

    async def test_non_member_forbidden(
        self,
        client: AsyncClient,
        other_headers: dict,
        test_application: Application,
    ) -> None:
        response = await client.post(
            conditions_url(test_application),
            json={"name": "Sneaky"},
            headers=other_headers,
        )

        assert response.status_code == 403


class TestListAndGet:
    """Reading conditions."""

    async def test_newest_first(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
    ) -> None:
        for name in ("first", "second"):
            await client.post(
                conditions_url(test_application), json={"name": name}, headers=auth_headers
            )

        response = await client.get(conditions_url(test_application), headers=auth_headers)

        assert [c["name"] for c in response.json()] == ["second", "first"]

    async def test_legacy_rows_are_normalised(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
        make_condition,
    ) -> None:
        condition = await make_condition(test_application, countries='["DE"]')

        response = await client.get(
            f"{conditions_url(test_application)}/{condition.id}", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["countries"] == ["DE"]

    async def test_unknown_condition(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
    ) -> None:
        response = await client.get(
            f"{conditions_url(test_application)}/00000000-0000-4000-8000-000000000000",
            headers=auth_headers,
        )

        assert response.status_code == 404


class TestUpdateCondition:
    """Updating conditions in place."""

    async def test_partial_update(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
        make_condition,
    ) -> None:
        condition = await make_condition(test_application, countries=["DE"], driver_ids=["d1"])

        response = await client.patch(
            f"{conditions_url(test_application)}/{condition.id}",
            json={"countries": ["FR"]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["countries"] == ["FR"]
        assert data["driver_ids"] == ["d1"]

    async def test_update_cannot_add_second_axis(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
        make_condition,
    ) -> None:
        condition = await make_condition(test_application, driver_ids=["d1"])

        response = await client.patch(
            f"{conditions_url(test_application)}/{condition.id}",
            json={"vehicle_ids": ["v1"]},
            headers=auth_headers,
        )

        assert response.status_code == 400

    async def test_switch_axis(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
        make_condition,
    ) -> None:
        condition = await make_condition(test_application, driver_ids=["d1"])

        response = await client.patch(
            f"{conditions_url(test_application)}/{condition.id}",
            json={"driver_ids": [], "vehicle_ids": ["v1"]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["vehicle_ids"] == ["v1"]
        assert response.json()["driver_ids"] == []

    async def test_update_affects_evaluation(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_application: Application,
        make_condition,
        make_release,
    ) -> None:
        condition = await make_condition(test_application, countries=["FR"])
        await make_release(test_application, "10", conditions=[condition])
        evaluate_url = f"/api/v1/apps/{test_application.id}/evaluate"

        before = await client.post(evaluate_url, json={"country": "DE"}, headers=auth_headers)
        await client.patch(
            f"{conditions_url(test_application)}/{condition.id}",
            json={"countries": ["DE"]},
            headers=auth_headers,
        )
        after = await client.post(evaluate_url, json={"country": "DE"}, headers=auth_headers)

        assert before.json()["release"] is None
        assert after.json()["release"]["version_code"] == "10"


class TestDeleteCondition:
    """Deleting conditions."""

    async def test_delete_detaches_from_releases(
        self,
        client: AsyncClient,
        async_session: AsyncSession,
        auth_headers: dict,
        test_application: Application,
        make_condition,
        make_release,
    ) -> None:
        condition = await make_condition(test_application, countries=["FR"])
        release = await make_release(test_application, "10", conditions=[condition])

        response = await client.delete(
            f"{conditions_url(test_application)}/{condition.id}", headers=auth_headers
        )

        assert response.status_code == 204
        links = await async_session.execute(select(release_conditions))
        assert links.all() == []

        # With no conditions left the release is open to everyone
        evaluation = await client.post(
            f"/api/v1/apps/{test_application.id}/evaluate",
            json={"country": "DE"},
            headers=auth_headers,
        )
        assert evaluation.json()["release"]["id"] == release.id
