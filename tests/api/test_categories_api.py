"""Tests for category endpoints."""

from uuid import uuid4

import pytest


@pytest.mark.asyncio
class TestCategoriesAPI:
    async def test_create_under_parent(self, client, portfolio):
        response = await client.post(
            "/categories", data={"name": "LCI", "parent_id": str(portfolio.renda_fixa.id)}
        )

        assert response.status_code == 303
        listing = (await client.get("/categories", params={"query": "lci"})).json()
        assert listing["items"][0]["parent_name"] == "Renda Fixa"

    async def test_blank_parent_creates_root(self, client, seed_db):
        response = await client.post("/categories", data={"name": "Cripto", "parent_id": ""})

        assert response.status_code == 303
        item = (await client.get("/categories")).json()["items"][0]
        assert item["parent_id"] is None
        assert item["parent_name"] is None

    async def test_descendants(self, client, portfolio):
        response = await client.get(f"/categories/{portfolio.renda_fixa.id}/descendants")

        body = response.json()
        assert body["category_ids"][0] == str(portfolio.renda_fixa.id)
        assert set(body["category_ids"]) == {
            str(portfolio.renda_fixa.id),
            str(portfolio.cdb.id),
            str(portfolio.cdb_liquidez.id),
        }

    async def test_move_under_descendant_rejected(self, client, portfolio):
        response = await client.post(
            f"/categories/{portfolio.renda_fixa.id}",
            data={"name": "Renda Fixa", "parent_id": str(portfolio.cdb_liquidez.id)},
        )

        assert response.status_code == 422
        assert response.json()["errors"]["parent_id"] == ["A category cannot be moved under its own descendant"]

    async def test_unknown_parent_rejected(self, client, seed_db):
        response = await client.post("/categories", data={"name": "LCI", "parent_id": str(uuid4())})

        assert response.status_code == 422
        assert response.json()["errors"]["parent_id"] == ["Parent category not found"]

    async def test_malformed_parent_rejected(self, client, seed_db):
        response = await client.post("/categories", data={"name": "LCI", "parent_id": "not-a-uuid"})

        assert response.status_code == 422
        assert "parent_id" in response.json()["errors"]

    async def test_delete_detaches_children(self, client, portfolio):
        response = await client.delete(f"/categories/{portfolio.cdb.id}")

        assert response.status_code == 204
        child = (await client.get(f"/categories/{portfolio.cdb_liquidez.id}")).json()
        assert child["parent_id"] is None

    async def test_update_missing(self, client, seed_db):
        response = await client.post(f"/categories/{uuid4()}", data={"name": "LCI"})

        assert response.status_code == 404
        assert response.json()["message"] == "Category not found. Cannot update."
