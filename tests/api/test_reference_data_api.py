"""Tests for bank and asset type endpoints."""

from uuid import uuid4

import pytest
from factories import AssetTypeFactory, BankFactory


@pytest.mark.asyncio
class TestBanksAPI:
    async def test_create_and_search(self, client, seed_db):
        response = await client.post("/banks", data={"name": "  Nubank  "})

        assert response.status_code == 303
        assert response.headers["location"] == "/banks"
        listing = (await client.get("/banks", params={"query": "nu"})).json()
        assert [item["name"] for item in listing["items"]] == ["Nubank"]

    async def test_duplicate_name_conflicts(self, client, seed_db):
        await BankFactory.create_async(seed_db, name="Nubank")
        await seed_db.commit()

        response = await client.post("/banks", data={"name": "Nubank"})

        assert response.status_code == 409
        assert response.json()["errors"] == {"name": ["This name is already in use."]}

    async def test_rename_to_taken_name_conflicts(self, client, seed_db):
        await BankFactory.create_async(seed_db, name="Nubank")
        other = await BankFactory.create_async(seed_db, name="Banco Inter")
        await seed_db.commit()

        response = await client.post(f"/banks/{other.id}", data={"name": "Nubank"})

        assert response.status_code == 409

    async def test_rename(self, client, seed_db):
        bank = await BankFactory.create_async(seed_db, name="Banco Inter")
        await seed_db.commit()

        response = await client.post(f"/banks/{bank.id}", data={"name": "Inter"})

        assert response.status_code == 303
        assert (await client.get(f"/banks/{bank.id}")).json()["name"] == "Inter"

    async def test_short_name_rejected(self, client, seed_db):
        response = await client.post("/banks", data={"name": "XP"})

        assert response.status_code == 422
        assert "name" in response.json()["errors"]

    async def test_update_missing_bank(self, client, seed_db):
        response = await client.post(f"/banks/{uuid4()}", data={"name": "Nubank"})

        assert response.status_code == 404
        assert response.json()["message"] == "Bank not found. Cannot update."

    async def test_delete_referenced_bank_conflicts(self, client, portfolio):
        response = await client.delete(f"/banks/{portfolio.inter.id}")

        assert response.status_code == 409
        assert response.json()["detail"] == "Cannot delete bank while investments reference it."

    async def test_delete_unused_bank(self, client, seed_db):
        bank = await BankFactory.create_async(seed_db, name="Nubank")
        await seed_db.commit()

        response = await client.delete(f"/banks/{bank.id}")

        assert response.status_code == 204
        assert (await client.get(f"/banks/{bank.id}")).status_code == 404


@pytest.mark.asyncio
class TestAssetTypesAPI:
    async def test_pages_of_six(self, client, seed_db):
        for i in range(7):
            await AssetTypeFactory.create_async(seed_db, name=f"Type {i}")
        await seed_db.commit()

        first = (await client.get("/asset-types")).json()
        second = (await client.get("/asset-types", params={"page": 2})).json()

        assert first["total"] == 7
        assert first["total_pages"] == 2
        assert len(first["items"]) == 6
        assert [item["name"] for item in second["items"]] == ["Type 6"]

    async def test_update_missing_asset_type(self, client, seed_db):
        response = await client.post(f"/asset-types/{uuid4()}", data={"name": "Equity"})

        assert response.status_code == 404
        assert response.json()["message"] == "Asset type not found. Cannot update."

    async def test_invalid_page(self, client, seed_db):
        response = await client.get("/asset-types", params={"page": 0})

        assert response.status_code == 422
