"""Investment records and portfolio analytics API router."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from carteira.config import settings
from carteira.deps import DbSession
from carteira.logger import get_logger, log_exception
from carteira.models import Investment
from carteira.schemas import (
    AggregatedMetricsResponse,
    DistributionResponse,
    DistributionSliceResponse,
    FormState,
    InvestmentFilters,
    InvestmentForm,
    InvestmentGroupResponse,
    InvestmentResponse,
    InvestmentTableResponse,
    MonetaryTotalsResponse,
    PercentageMetricsResponse,
    PerformancePointResponse,
    PreviousBalanceResponse,
    RollForwardResponse,
)
from carteira.services import analytics, diversification
from carteira.services import investments as investment_service
from carteira.services.aggregation import MonetaryTotals, PercentageMetrics, compute_metrics, record_metrics
from carteira.services.diversification import DistributionSlice, SnapshotPolicy
from carteira.services.investments import (
    InvestmentNotFoundError,
    InvestmentReferenceError,
    NothingToRollForwardError,
)
from carteira.utils.exceptions import raise_internal_error, raise_not_found
from carteira.utils.formatting import format_decimals, generate_pagination
from carteira.utils.forms import (
    form_failure,
    form_response,
    parse_form,
    read_form,
    redirect_to,
    store_failure,
    update_target_missing,
)

router = APIRouter(prefix="/investments", tags=["investments"])
logger = get_logger(__name__)

ENTITY = "investment"
LIST_PATH = "/investments"
PERCENT_DISPLAY_DECIMALS = 2


def investment_filters(
    client: str | None = None,
    year: str | None = None,
    month: str | None = None,
    bank: str | None = None,
    asset: str | None = None,
    asset_type: str | None = None,
    category_id: str | None = None,
) -> InvestmentFilters:
    try:
        return InvestmentFilters(
            client=client,
            year=year,
            month=month,
            bank=bank,
            asset=asset,
            asset_type=asset_type,
            category_id=category_id,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False)) from e


Filters = Annotated[InvestmentFilters, Depends(investment_filters)]


def _metrics(metrics: PercentageMetrics) -> PercentageMetricsResponse:
    return PercentageMetricsResponse(**metrics.as_dict())


def _totals(totals: MonetaryTotals) -> MonetaryTotalsResponse:
    return MonetaryTotalsResponse(**totals.as_dict())


def _slice(item: DistributionSlice) -> DistributionSliceResponse:
    response = DistributionSliceResponse.model_validate(item)
    response.percentage_display = format_decimals(item.percentage, PERCENT_DISPLAY_DECIMALS)
    return response


def to_investment_response(investment: Investment) -> InvestmentResponse:
    response = InvestmentResponse.model_validate(investment)
    response.client_name = investment.client.name
    response.bank_name = investment.bank.name
    response.asset_name = investment.asset.name
    response.asset_type_name = investment.asset.asset_type.name if investment.asset.asset_type else None
    response.metrics = _metrics(record_metrics(investment))
    return response


def _bad_reference(error: InvestmentReferenceError, data: dict) -> Response:
    return form_failure(
        str(error),
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        data,
        errors={error.field: [str(error)]},
    )


@router.get("", response_model=InvestmentTableResponse)
async def list_investments(
    filters: Filters,
    db: DbSession,
    page: int = Query(1, ge=1),
) -> InvestmentTableResponse:
    """Investment table paged by (client, year, month) group with group and page totals."""
    table = await investment_service.list_investment_table(
        db, filters, page, settings.investment_groups_page_size
    )
    return InvestmentTableResponse(
        groups=[
            InvestmentGroupResponse(
                client=group.client,
                year=group.year,
                month=group.month,
                items=[to_investment_response(record) for record in group.records],
                totals=_totals(group.totals),
                metrics=_metrics(group.metrics),
            )
            for group in table.groups
        ],
        totals=_totals(table.totals),
        metrics=_metrics(compute_metrics(table.totals)),
        page=table.page,
        total_pages=table.total_pages,
        total_groups=table.total_groups,
        pagination=generate_pagination(table.page, table.total_pages),
    )


@router.get("/metrics", response_model=AggregatedMetricsResponse)
async def get_metrics(filters: Filters, db: DbSession) -> AggregatedMetricsResponse:
    """Summary cards over the filtered records; balances are from the latest month."""
    metrics = await analytics.get_aggregated_metrics(db, filters)
    return AggregatedMetricsResponse.model_validate(metrics)


@router.get("/performance", response_model=list[PerformancePointResponse])
async def get_performance(filters: Filters, db: DbSession) -> list[PerformancePointResponse]:
    points = await analytics.get_performance_series(db, filters)
    return [PerformancePointResponse.model_validate(point) for point in points]


@router.get("/diversification/categories", response_model=DistributionResponse)
async def get_category_diversification(
    filters: Filters,
    db: DbSession,
    snapshot: SnapshotPolicy = SnapshotPolicy.LATEST,
) -> DistributionResponse:
    slices = await diversification.get_category_distribution(db, filters, snapshot)
    return DistributionResponse(
        snapshot=snapshot.value,
        items=[_slice(item) for item in slices],
    )


@router.get("/diversification/banks", response_model=DistributionResponse)
async def get_bank_diversification(
    filters: Filters,
    db: DbSession,
    snapshot: SnapshotPolicy = SnapshotPolicy.LATEST,
) -> DistributionResponse:
    slices = await diversification.get_bank_distribution(db, filters, snapshot)
    return DistributionResponse(
        snapshot=snapshot.value,
        items=[_slice(item) for item in slices],
    )


@router.get("/previous", response_model=PreviousBalanceResponse)
async def get_previous_balance(
    client_id: UUID,
    bank_id: UUID,
    asset_id: UUID,
    db: DbSession,
    year: int = Query(..., ge=1),
    month: int = Query(..., ge=1, le=12),
) -> PreviousBalanceResponse:
    """Gross and net balance of the same position in the preceding month."""
    previous = await investment_service.get_previous_balance(db, client_id, bank_id, asset_id, year, month)
    return PreviousBalanceResponse(
        found=previous.found,
        year=previous.year,
        month=previous.month,
        gross_balance=previous.gross_balance,
        net_balance=previous.net_balance,
    )


@router.post("/roll-forward", response_model=RollForwardResponse)
async def roll_forward(request: Request, db: DbSession) -> RollForwardResponse:
    """Copy the latest (or filtered) month into the next month with balances carried over."""
    data = await read_form(request)
    try:
        filters = InvestmentFilters.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False)) from e

    try:
        result = await investment_service.roll_forward(db, filters)
        await db.commit()
    except NothingToRollForwardError as e:
        logger.info("Nothing to roll forward", filters=filters.model_dump(mode="json", exclude_none=True))
        raise_not_found("Investments to copy", cause=e)
    except SQLAlchemyError as e:
        await db.rollback()
        log_exception(logger, e, "Failed to copy investments")
        raise_internal_error("Database Error: Failed to copy investments.", cause=e)

    return RollForwardResponse(
        source_year=result.source[0],
        source_month=result.source[1],
        target_year=result.target[0],
        target_month=result.target[1],
        created=len(result.created),
        skipped=result.skipped,
    )


@router.get("/{investment_id}", response_model=InvestmentResponse)
async def get_investment(investment_id: UUID, db: DbSession) -> InvestmentResponse:
    try:
        investment = await investment_service.get_investment(db, investment_id)
    except InvestmentNotFoundError as e:
        logger.debug("Investment not found", investment_id=str(investment_id))
        raise_not_found("Investment", cause=e)
    return to_investment_response(investment)


@router.post("", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
async def create_investment(request: Request, db: DbSession) -> Response:
    data = await read_form(request)
    form = parse_form(InvestmentForm, data, action="create", entity=ENTITY)
    if isinstance(form, FormState):
        return form_response(form)

    try:
        investment = await investment_service.create_investment(db, form)
        await db.commit()
    except InvestmentReferenceError as e:
        return _bad_reference(e, data)
    except SQLAlchemyError as e:
        return await store_failure(db, e, logger, action="create", entity=ENTITY, data=data)

    logger.info(
        "Investment created",
        investment_id=str(investment.id),
        period=f"{investment.year}-{investment.month}",
    )
    return redirect_to(LIST_PATH)


@router.post("/{investment_id}", response_model=None, status_code=status.HTTP_303_SEE_OTHER)
async def update_investment(investment_id: UUID, request: Request, db: DbSession) -> Response:
    data = await read_form(request)
    try:
        await investment_service.get_investment(db, investment_id)
    except InvestmentNotFoundError:
        logger.debug("Investment not found for update", investment_id=str(investment_id))
        return update_target_missing(ENTITY, data)

    form = parse_form(InvestmentForm, data, action="update", entity=ENTITY)
    if isinstance(form, FormState):
        return form_response(form)

    try:
        await investment_service.update_investment(db, investment_id, form)
        await db.commit()
    except InvestmentReferenceError as e:
        return _bad_reference(e, data)
    except SQLAlchemyError as e:
        return await store_failure(db, e, logger, action="update", entity=ENTITY, data=data)

    return redirect_to(LIST_PATH)


@router.delete("/{investment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_investment(investment_id: UUID, db: DbSession) -> None:
    try:
        await investment_service.delete_investment(db, investment_id)
        await db.commit()
    except InvestmentNotFoundError as e:
        raise_not_found("Investment", cause=e)
    except SQLAlchemyError as e:
        await db.rollback()
        log_exception(logger, e, "Failed to delete investment", investment_id=str(investment_id))
        raise_internal_error("Database Error: Failed to delete investment.", cause=e)
