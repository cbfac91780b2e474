"""Tests for asset endpoints."""

from uuid import uuid4

import pytest


@pytest.mark.asyncio
class TestAssetsAPI:
    async def test_create_with_ordered_categories(self, client, portfolio):
        response = await client.post(
            "/assets",
            data={
                "name": "Debenture X",
                "asset_type_id": str(portfolio.fixed_income_type.id),
                "category_ids": [str(portfolio.acoes.id), str(portfolio.renda_fixa.id)],
                "auto_yield": "on",
            },
        )

        assert response.status_code == 303
        item = (await client.get("/assets", params={"query": "debenture"})).json()["items"][0]
        assert [category["name"] for category in item["categories"]] == ["Ações", "Renda Fixa"]
        assert item["asset_type_name"] == "Fixed income"
        assert item["auto_yield"] is True

    async def test_update_replaces_categories(self, client, portfolio):
        response = await client.post(
            f"/assets/{portfolio.petr4.id}",
            data={
                "name": "PETR4",
                "asset_type_id": str(portfolio.equity_type.id),
                "category_ids": [str(portfolio.cdb.id)],
            },
        )

        assert response.status_code == 303
        item = (await client.get(f"/assets/{portfolio.petr4.id}")).json()
        assert [category["name"] for category in item["categories"]] == ["CDB"]
        assert item["auto_yield"] is False

    async def test_unknown_asset_type(self, client, seed_db):
        response = await client.post("/assets", data={"name": "Ghost", "asset_type_id": str(uuid4())})

        assert response.status_code == 422
        assert response.json()["errors"] == {"asset_type_id": ["Asset type not found"]}

    async def test_list_by_category_subtree(self, client, portfolio):
        body = (await client.get("/assets", params={"category_id": str(portfolio.renda_fixa.id)})).json()

        assert [item["name"] for item in body["items"]] == ["CDB Banco Inter", "Tesouro Selic"]

    async def test_delete_referenced_asset_conflicts(self, client, portfolio):
        response = await client.delete(f"/assets/{portfolio.petr4.id}")

        assert response.status_code == 409

    async def test_delete_unused_asset(self, client, portfolio):
        await client.post("/assets", data={"name": "Unused asset"})
        item = (await client.get("/assets", params={"query": "unused"})).json()["items"][0]

        response = await client.delete(f"/assets/{item['id']}")

        assert response.status_code == 204
        assert (await client.get(f"/assets/{item['id']}")).status_code == 404
