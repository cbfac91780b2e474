"""Aggregation engine for monthly investment records.

Pure functions: callers load and order the records, this module only groups,
sums and derives percentages. Inputs are any objects exposing the nine
monetary attributes plus ``year``/``month`` (ORM ``Investment`` rows with their
``client`` loaded, or plain namespaces in tests).
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, fields
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from carteira.config import settings
from carteira.models.investment import MONETARY_FIELDS

HUNDRED = Decimal("100")

GroupKey = tuple[Any, str, str]


@dataclass(frozen=True)
class MonetaryTotals:
    """Sum of the nine monetary fields, in cents."""

    previous_balance: int = 0
    monthly_yield: int = 0
    monthly_dividends: int = 0
    amount_applied: int = 0
    amount_redeemed: int = 0
    incurred_tax: int = 0
    projected_tax: int = 0
    gross_balance: int = 0
    net_balance: int = 0

    @classmethod
    def zero(cls) -> "MonetaryTotals":
        return cls()

    @classmethod
    def from_record(cls, record: Any) -> "MonetaryTotals":
        return cls(**{name: int(getattr(record, name, 0) or 0) for name in MONETARY_FIELDS})

    def __add__(self, other: "MonetaryTotals") -> "MonetaryTotals":
        if not isinstance(other, MonetaryTotals):
            return NotImplemented
        return MonetaryTotals(**{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)})

    def as_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in MONETARY_FIELDS}


@dataclass(frozen=True)
class PercentageMetrics:
    """Percentages (ratio x 100) relative to the base amount.

    Every value is ``None`` when the base is zero.
    """

    growth: Decimal | None = None
    yield_pct: Decimal | None = None
    dividends_pct: Decimal | None = None
    yield_plus_dividends_pct: Decimal | None = None

    def as_dict(self) -> dict[str, Decimal | None]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class InvestmentGroup:
    """Records of one client in one period. ``client`` is the display name."""

    client: str
    year: str
    month: str
    records: list[Any] = field(default_factory=list)
    totals: MonetaryTotals = field(default_factory=MonetaryTotals.zero)
    client_id: Any = None

    @property
    def label(self) -> tuple[str, str, str]:
        return self.client, self.year, self.month

    @property
    def metrics(self) -> PercentageMetrics:
        return compute_metrics(self.totals)


def percentage_base(totals: MonetaryTotals) -> int:
    """Previous balance, or the amount applied for a position opened this month."""
    if totals.previous_balance != 0:
        return totals.previous_balance
    return totals.amount_applied


def _percent(numerator: int, base: int, decimals: int) -> Decimal:
    quantum = Decimal(1).scaleb(-decimals)
    return (Decimal(numerator) / Decimal(base) * HUNDRED).quantize(quantum, rounding=ROUND_HALF_UP)


def compute_metrics(totals: MonetaryTotals, decimals: int | None = None) -> PercentageMetrics:
    places = settings.percentage_decimals if decimals is None else decimals
    base = percentage_base(totals)
    if base == 0:
        return PercentageMetrics()

    return PercentageMetrics(
        growth=_percent(totals.gross_balance - totals.previous_balance, base, places),
        yield_pct=_percent(totals.monthly_yield, base, places),
        dividends_pct=_percent(totals.monthly_dividends, base, places),
        yield_plus_dividends_pct=_percent(totals.monthly_yield + totals.monthly_dividends, base, places),
    )


def record_metrics(record: Any, decimals: int | None = None) -> PercentageMetrics:
    return compute_metrics(MonetaryTotals.from_record(record), decimals)


def client_label(record: Any) -> str:
    client = getattr(record, "client_name", None)
    if client is None:
        client = record.client.name
    return client


def default_group_key(record: Any) -> GroupKey:
    """Client id, falling back to the name for records without one, plus the period."""
    client = getattr(record, "client_id", None)
    if client is None:
        client = client_label(record)
    return client, record.year, record.month


def group_totals(
    records: Iterable[Any],
    key: Callable[[Any], GroupKey] = default_group_key,
) -> list[InvestmentGroup]:
    """Bucket records by (client, year, month) in first-seen order and sum each bucket.

    Clients sharing a name stay in separate buckets when the records carry
    ``client_id``.
    """
    groups: dict[GroupKey, InvestmentGroup] = {}

    for record in records:
        group_key = key(record)
        group = groups.get(group_key)
        if group is None:
            group = groups[group_key] = InvestmentGroup(
                client=client_label(record),
                year=record.year,
                month=record.month,
                client_id=getattr(record, "client_id", None),
            )
        group.records.append(record)
        group.totals = group.totals + MonetaryTotals.from_record(record)

    return list(groups.values())


def grand_totals(records: Iterable[Any]) -> MonetaryTotals:
    total = MonetaryTotals.zero()
    for record in records:
        total = total + MonetaryTotals.from_record(record)
    return total
