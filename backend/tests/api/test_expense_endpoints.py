"""Integration tests for monthly expense endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient


async def _month(client, headers, month, *items):
    response = await client.post("/api/expenses/", json={"month": month}, headers=headers)
    assert response.status_code == 201
    expense_id = response.json()["data"]["id"]
    for name, amount in items:
        added = await client.post(
            f"/api/expenses/{expense_id}/items",
            json={"name": name, "amount": amount},
            headers=headers,
        )
        assert added.status_code == 201
    return expense_id


@pytest.mark.api
class TestExpenseEndpoints:
    """Test expense API endpoints."""

    @pytest.mark.asyncio
    async def test_month_lifecycle(self, async_client: AsyncClient, auth_headers):
        expense_id = await _month(async_client, auth_headers, "2024-01", ("Rent", 500), ("Food", 120.5))

        by_month = await async_client.get("/api/expenses/month/2024-01", headers=auth_headers)
        by_id = await async_client.get(f"/api/expenses/{expense_id}", headers=auth_headers)

        assert by_month.status_code == 200
        assert by_month.json()["data"]["total_amount"] == 620.5
        assert [i["name"] for i in by_month.json()["data"]["items"]] == ["Rent", "Food"]
        assert by_id.json()["data"]["month"] == "2024-01"

        listed = await async_client.get("/api/expenses/", headers=auth_headers)
        assert listed.json()["data"][0]["item_count"] == 2

        deleted = await async_client.delete("/api/expenses/month/2024-01", headers=auth_headers)
        assert deleted.status_code == 200
        missing = await async_client.get("/api/expenses/month/2024-01", headers=auth_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_item_update_and_delete(self, async_client: AsyncClient, auth_headers):
        await _month(async_client, auth_headers, "2024-01", ("Rent", 500))
        month = await async_client.get("/api/expenses/month/2024-01", headers=auth_headers)
        item_id = month.json()["data"]["items"][0]["id"]

        updated = await async_client.put(
            f"/api/expenses/items/{item_id}", json={"amount": 450}, headers=auth_headers
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["amount"] == 450

        month = await async_client.get("/api/expenses/month/2024-01", headers=auth_headers)
        assert month.json()["data"]["total_amount"] == 450

        deleted = await async_client.delete(f"/api/expenses/items/{item_id}", headers=auth_headers)
        assert deleted.status_code == 200
        month = await async_client.get("/api/expenses/month/2024-01", headers=auth_headers)
        assert month.json()["data"]["total_amount"] == 0

    @pytest.mark.asyncio
    async def test_invalid_month(self, async_client: AsyncClient, auth_headers):
        created = await async_client.post(
            "/api/expenses/", json={"month": "2024-13"}, headers=auth_headers
        )
        fetched = await async_client.get("/api/expenses/month/January", headers=auth_headers)

        assert created.status_code == 422
        assert fetched.status_code == 422

    @pytest.mark.asyncio
    async def test_copy(self, async_client: AsyncClient, auth_headers):
        await _month(async_client, auth_headers, "2024-01", ("Rent", 500), ("Food", 100))

        response = await async_client.post(
            "/api/expenses/copy",
            json={"source_month": "2024-01", "target_month": "2024-02"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["total_amount"] == 600

        missing = await async_client.post(
            "/api/expenses/copy",
            json={"source_month": "2020-01", "target_month": "2020-02"},
            headers=auth_headers,
        )
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_trends(self, async_client: AsyncClient, auth_headers):
        await _month(async_client, auth_headers, "2024-01", ("Rent", 500), ("Food", 80))
        await _month(async_client, auth_headers, "2024-02", ("Rent", 520))

        trend = await async_client.get("/api/expenses/trend", headers=auth_headers)
        item = await async_client.get("/api/expenses/trend/item/Food", headers=auth_headers)
        items = await async_client.post(
            "/api/expenses/trend/items", json={"names": ["Rent", "Food"]}, headers=auth_headers
        )
        names = await async_client.get("/api/expenses/item-names", headers=auth_headers)

        assert [t["month"] for t in trend.json()["data"]] == ["2024-01", "2024-02"]
        assert [p["amount"] for p in item.json()["data"]] == [80, 0]
        assert [p["amount"] for p in items.json()["data"]["trends"]["Rent"]] == [500, 520]
        assert names.json()["data"] == ["Food", "Rent"]

    @pytest.mark.asyncio
    async def test_tracked_items(self, async_client: AsyncClient, auth_headers):
        saved = await async_client.put(
            "/api/expenses/tracked-items",
            json={"items": ["Rent", "Food", "Rent"]},
            headers=auth_headers,
        )
        fetched = await async_client.get("/api/expenses/tracked-items", headers=auth_headers)

        assert saved.json()["data"]["items"] == ["Rent", "Food"]
        assert fetched.json()["data"]["items"] == ["Rent", "Food"]

    @pytest.mark.asyncio
    async def test_other_users_months_hidden(
        self, async_client: AsyncClient, auth_headers, second_auth_headers
    ):
        expense_id = await _month(async_client, auth_headers, "2024-01", ("Rent", 500))

        by_id = await async_client.get(f"/api/expenses/{expense_id}", headers=second_auth_headers)
        add = await async_client.post(
            f"/api/expenses/{expense_id}/items",
            json={"name": "Sneaky", "amount": 1},
            headers=second_auth_headers,
        )
        listed = await async_client.get("/api/expenses/", headers=second_auth_headers)

        assert by_id.status_code == 404
        assert add.status_code == 404
        assert listed.json()["data"] == []

    @pytest.mark.asyncio
    async def test_unknown_item(self, async_client: AsyncClient, auth_headers):
        response = await async_client.delete(f"/api/expenses/items/{uuid4()}", headers=auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_copy_accepts_camel_case_body(self, async_client: AsyncClient, auth_headers):
        await _month(async_client, auth_headers, "2024-01", ("Rent", 500))

        response = await async_client.post(
            "/api/expenses/copy",
            json={"sourceMonth": "2024-01", "targetMonth": "2024-03"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["month"] == "2024-03"
        assert response.json()["data"]["total_amount"] == 500

    @pytest.mark.asyncio
    async def test_copy_validates_camel_case_months(self, async_client: AsyncClient, auth_headers):
        response = await async_client.post(
            "/api/expenses/copy",
            json={"sourceMonth": "2024-13", "targetMonth": "2024-03"},
            headers=auth_headers,
        )

        assert response.status_code == 422
