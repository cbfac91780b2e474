"""Tests for grouping, totals and percentage metrics."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from carteira.models.investment import MONETARY_FIELDS
from carteira.services.aggregation import (
    MonetaryTotals,
    PercentageMetrics,
    compute_metrics,
    grand_totals,
    group_totals,
    percentage_base,
    record_metrics,
)


def make_record(client: str, year: str, month: str, **amounts):
    values = {name: 0 for name in MONETARY_FIELDS}
    values.update(amounts)
    return SimpleNamespace(client=SimpleNamespace(name=client), year=year, month=month, **values)


@pytest.fixture
def records():
    return [
        make_record("Robson", "2024", "03", previous_balance=100000, gross_balance=101000, monthly_yield=1000),
        make_record("Robson", "2024", "03", amount_applied=50000, gross_balance=50500, monthly_yield=500),
        make_record("Ana", "2024", "03", previous_balance=10000, gross_balance=9000),
        make_record("Robson", "2024", "02", previous_balance=99000, gross_balance=100000, monthly_dividends=250),
    ]


def test_groups_keep_first_seen_order(records) -> None:
    groups = group_totals(records)

    assert [group.label for group in groups] == [
        ("Robson", "2024", "03"),
        ("Ana", "2024", "03"),
        ("Robson", "2024", "02"),
    ]
    assert [len(group.records) for group in groups] == [2, 1, 1]


def test_sum_of_group_totals_equals_grand_total(records) -> None:
    groups = group_totals(records)

    summed = MonetaryTotals.zero()
    for group in groups:
        summed = summed + group.totals

    assert summed == grand_totals(records)
    for name in MONETARY_FIELDS:
        assert getattr(summed, name) == sum(getattr(record, name) for record in records)


def test_same_client_and_period_form_one_group() -> None:
    rows = [make_record("Robson", "2024", "03", gross_balance=100 * i) for i in range(1, 4)]

    groups = group_totals(rows)

    assert len(groups) == 1
    assert groups[0].totals.gross_balance == 600


def test_client_name_attribute_takes_precedence() -> None:
    row = make_record("ignored", "2024", "03")
    row.client_name = "Robson"

    assert group_totals([row])[0].client == "Robson"


def test_clients_sharing_a_name_stay_apart() -> None:
    first = make_record("Robson", "2024", "03", gross_balance=100)
    second = make_record("Robson", "2024", "03", gross_balance=200)
    third = make_record("Robson", "2024", "03", gross_balance=300)
    first.client_id = third.client_id = 1
    second.client_id = 2

    groups = group_totals([first, second, third])

    assert [group.client_id for group in groups] == [1, 2]
    assert [group.label for group in groups] == [("Robson", "2024", "03")] * 2
    assert [group.totals.gross_balance for group in groups] == [400, 200]


def test_grand_totals_of_nothing_is_zero() -> None:
    assert grand_totals([]) == MonetaryTotals()
    assert group_totals([]) == []


def test_from_record_treats_missing_amounts_as_zero() -> None:
    row = SimpleNamespace(gross_balance=None, net_balance=500)

    totals = MonetaryTotals.from_record(row)

    assert totals.gross_balance == 0
    assert totals.net_balance == 500
    assert totals.previous_balance == 0


def test_adding_a_non_total_is_rejected() -> None:
    with pytest.raises(TypeError):
        MonetaryTotals() + 5


def test_as_dict_follows_column_order() -> None:
    assert list(MonetaryTotals().as_dict()) == list(MONETARY_FIELDS)


def test_metrics_over_previous_balance() -> None:
    totals = MonetaryTotals(
        previous_balance=100000,
        gross_balance=110000,
        monthly_yield=5000,
        monthly_dividends=1000,
    )

    metrics = compute_metrics(totals)

    assert metrics.growth == Decimal("10")
    assert metrics.yield_pct == Decimal("5")
    assert metrics.dividends_pct == Decimal("1")
    assert metrics.yield_plus_dividends_pct == Decimal("6")


def test_base_falls_back_to_amount_applied() -> None:
    totals = MonetaryTotals(amount_applied=50000, gross_balance=50500, monthly_yield=500)

    metrics = compute_metrics(totals)

    assert percentage_base(totals) == 50000
    assert metrics.yield_pct == Decimal("1")
    assert metrics.growth == Decimal("101")


def test_zero_base_yields_no_percentages() -> None:
    totals = MonetaryTotals(gross_balance=1000, monthly_yield=10)

    metrics = compute_metrics(totals)

    assert metrics == PercentageMetrics()
    assert all(value is None for value in metrics.as_dict().values())


def test_negative_growth() -> None:
    metrics = compute_metrics(MonetaryTotals(previous_balance=10000, gross_balance=9000))

    assert metrics.growth == Decimal("-10")


def test_percentages_are_quantized() -> None:
    metrics = compute_metrics(MonetaryTotals(previous_balance=3, monthly_yield=1), decimals=6)

    assert metrics.yield_pct == Decimal("33.333333")
    assert metrics.yield_pct.as_tuple().exponent == -6


def test_record_metrics_uses_the_record_amounts(records) -> None:
    metrics = record_metrics(records[0])

    assert metrics.growth == Decimal("1")
    assert metrics.yield_pct == Decimal("1")


def test_group_metrics_are_computed_from_totals(records) -> None:
    group = group_totals(records)[0]

    assert group.metrics == compute_metrics(group.totals)
