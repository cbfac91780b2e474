"""Tests for the investment table, previous balance lookup and roll-forward."""

from datetime import date
from uuid import uuid4

import pytest
from factories import ClientFactory, InvestmentFactory

from carteira.schemas.investment import InvestmentFilters, InvestmentForm
from carteira.services.investments import (
    InvestmentNotFoundError,
    InvestmentReferenceError,
    NothingToRollForwardError,
    compute_auto_yield,
    create_investment,
    delete_investment,
    get_investment,
    get_previous_balance,
    list_investment_table,
    roll_forward,
    update_investment,
)


def _form(portfolio, asset, **overrides) -> InvestmentForm:
    data = {
        "year": "2024",
        "month": "4",
        "client_id": str(portfolio.robson.id),
        "bank_id": str(portfolio.inter.id),
        "asset_id": str(asset.id),
    }
    data.update(overrides)
    return InvestmentForm.model_validate(data)


def test_auto_yield_nets_out_cash_movements():
    assert (
        compute_auto_yield(
            gross_balance=105000,
            previous_balance=100000,
            amount_redeemed=2000,
            incurred_tax=500,
            amount_applied=3000,
        )
        == 4500
    )


@pytest.mark.asyncio
class TestInvestmentTable:
    async def test_groups_by_client_and_period(self, db, portfolio):
        table = await list_investment_table(db, InvestmentFilters(), page=1, page_size=12)

        assert [group.label for group in table.groups] == [
            ("Ana Costa", "2024", "03"),
            ("Robson Silva", "2024", "03"),
            ("Robson Silva", "2024", "02"),
        ]
        assert table.total_groups == 3
        assert table.total_pages == 1
        assert table.totals.gross_balance == 284500

    async def test_records_inside_a_group_sorted_by_bank_and_asset(self, db, portfolio):
        table = await list_investment_table(db, InvestmentFilters(), page=1, page_size=12)

        robson_march = table.groups[1]
        assert [(r.bank.name, r.asset.name) for r in robson_march.records] == [
            ("Banco Inter", "CDB Banco Inter"),
            ("XP Investimentos", "PETR4"),
            ("XP Investimentos", "Tesouro Selic"),
        ]
        assert robson_march.totals.gross_balance == 174500

    async def test_client_year_month_filter(self, db, portfolio):
        filters = InvestmentFilters(client="robson", year="2024", month="3")

        table = await list_investment_table(db, filters, page=1, page_size=12)

        assert len(table.groups) == 1
        assert len(table.groups[0].records) == 3

    async def test_clients_sharing_a_name_are_separate_groups(self, db, portfolio):
        namesake = await ClientFactory.create_async(db, name="Robson Silva")
        await InvestmentFactory.create_async(
            db, namesake, portfolio.inter, portfolio.cdb_inter, year="2024", month="03", gross_balance=7000
        )
        filters = InvestmentFilters(client="robson", year="2024", month="3")

        table = await list_investment_table(db, filters, page=1, page_size=12)

        assert table.total_groups == 2
        assert [group.label for group in table.groups] == [("Robson Silva", "2024", "03")] * 2
        assert {group.client_id for group in table.groups} == {portfolio.robson.id, namesake.id}
        assert sorted(group.totals.gross_balance for group in table.groups) == [7000, 174500]

    async def test_category_filter_includes_descendants(self, db, portfolio):
        filters = InvestmentFilters(category_id=portfolio.renda_fixa.id)

        table = await list_investment_table(db, filters, page=1, page_size=12)

        assert [group.label for group in table.groups] == [
            ("Robson Silva", "2024", "03"),
            ("Robson Silva", "2024", "02"),
        ]
        assert {r.asset.name for r in table.records} == {"CDB Banco Inter", "Tesouro Selic"}

    async def test_pages_are_whole_groups(self, db, portfolio):
        table = await list_investment_table(db, InvestmentFilters(), page=2, page_size=1)

        assert table.total_pages == 3
        assert [group.label for group in table.groups] == [("Robson Silva", "2024", "03")]
        assert len(table.records) == 3

    async def test_page_past_the_end_is_empty(self, db, portfolio):
        table = await list_investment_table(db, InvestmentFilters(), page=5, page_size=12)

        assert table.groups == []
        assert table.total_groups == 3

    async def test_no_matches(self, db, portfolio):
        table = await list_investment_table(db, InvestmentFilters(client="nobody"), page=1, page_size=12)

        assert table.groups == []
        assert table.total_pages == 1
        assert table.totals.gross_balance == 0


@pytest.mark.asyncio
class TestPreviousBalance:
    async def test_found(self, db, portfolio):
        previous = await get_previous_balance(
            db, portfolio.robson.id, portfolio.inter.id, portfolio.cdb_inter.id, "2024", "03"
        )

        assert previous.found is True
        assert (previous.year, previous.month) == ("2024", "02")
        assert previous.gross_balance == 101000
        assert previous.net_balance == 100800

    async def test_january_looks_at_december(self, db, portfolio):
        previous = await get_previous_balance(
            db, portfolio.robson.id, portfolio.inter.id, portfolio.cdb_inter.id, "2024", "01"
        )

        assert previous.found is False
        assert (previous.year, previous.month) == ("2023", "12")
        assert previous.gross_balance == 0


@pytest.mark.asyncio
class TestSaveInvestment:
    async def test_create_defaults_previous_balance_and_auto_yield(self, db, portfolio):
        investment = await create_investment(db, _form(portfolio, portfolio.cdb_inter, gross_balance="R$ 1.030,00"))

        assert investment.year == "2024"
        assert investment.month == "04"
        assert investment.date == date(2024, 4, 30)
        assert investment.previous_balance == 102000
        assert investment.gross_balance == 103000
        assert investment.monthly_yield == 1000
        assert investment.client.name == "Robson Silva"

    async def test_manual_yield_kept_for_regular_assets(self, db, portfolio):
        form = _form(
            portfolio,
            portfolio.tesouro,
            bank_id=str(portfolio.xp.id),
            previous_balance="500",
            gross_balance="510",
            monthly_yield="7,50",
        )

        investment = await create_investment(db, form)

        assert investment.previous_balance == 50000
        assert investment.monthly_yield == 750

    async def test_previous_balance_zero_without_history(self, db, portfolio):
        investment = await create_investment(db, _form(portfolio, portfolio.petr4, gross_balance="100"))

        assert investment.previous_balance == 0

    async def test_missing_reference(self, db, portfolio):
        form = _form(portfolio, portfolio.cdb_inter, bank_id=str(uuid4()))

        with pytest.raises(InvestmentReferenceError) as exc_info:
            await create_investment(db, form)

        assert exc_info.value.field == "bank_id"

    async def test_update_recomputes_values(self, db, portfolio):
        march = portfolio.records[1]
        form = _form(portfolio, portfolio.cdb_inter, month="3", gross_balance="1025")

        investment = await update_investment(db, march.id, form)

        assert investment.previous_balance == 101000
        assert investment.gross_balance == 102500
        assert investment.monthly_yield == 1500

    async def test_update_missing(self, db, portfolio):
        with pytest.raises(InvestmentNotFoundError):
            await update_investment(db, uuid4(), _form(portfolio, portfolio.cdb_inter))

    async def test_delete(self, db, portfolio):
        target = portfolio.records[0]

        await delete_investment(db, target.id)

        with pytest.raises(InvestmentNotFoundError):
            await get_investment(db, target.id)


@pytest.mark.asyncio
class TestRollForward:
    async def test_copies_latest_period_into_next_month(self, db, portfolio):
        result = await roll_forward(db, InvestmentFilters(client="Robson"))

        assert result.source == ("2024", "03")
        assert result.target == ("2024", "04")
        assert len(result.created) == 3
        assert result.skipped == 0
        by_asset = {copy.asset_id: copy for copy in result.created}
        cdb_copy = by_asset[portfolio.cdb_inter.id]
        assert cdb_copy.previous_balance == 102000
        assert cdb_copy.gross_balance == 0
        assert cdb_copy.monthly_yield == 0
        assert cdb_copy.date == date(2024, 4, 30)

    async def test_existing_positions_are_skipped(self, db, portfolio):
        await roll_forward(db, InvestmentFilters(client="Robson"))

        again = await roll_forward(db, InvestmentFilters(client="Robson", year="2024", month="3"))

        assert again.created == []
        assert again.skipped == 3

    async def test_explicit_source_period(self, db, portfolio):
        result = await roll_forward(db, InvestmentFilters(year="2024", month="2"))

        assert result.source == ("2024", "02")
        assert result.target == ("2024", "03")
        # Robson's CDB already has a March record
        assert result.created == []
        assert result.skipped == 1

    async def test_nothing_matches(self, db, portfolio):
        with pytest.raises(NothingToRollForwardError):
            await roll_forward(db, InvestmentFilters(client="nobody"))

    async def test_empty_source_period(self, db, portfolio):
        with pytest.raises(NothingToRollForwardError):
            await roll_forward(db, InvestmentFilters(year="2023", month="12"))
