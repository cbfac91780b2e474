"""Dashboard API router."""

from fastapi import APIRouter

from carteira.config import settings
from carteira.deps import DbSession
from carteira.routers.invoices import to_invoice_response
from carteira.schemas import DashboardCardsResponse, LatestInvoicesResponse
from carteira.services import dashboard as dashboard_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/cards", response_model=DashboardCardsResponse)
async def get_cards(db: DbSession) -> DashboardCardsResponse:
    """Invoice and client counts plus paid/pending invoice totals."""
    cards = await dashboard_service.get_card_data(db)
    return DashboardCardsResponse.model_validate(cards)


@router.get("/latest-invoices", response_model=LatestInvoicesResponse)
async def get_latest_invoices(db: DbSession) -> LatestInvoicesResponse:
    invoices = await dashboard_service.get_latest_invoices(db, settings.latest_invoices_limit)
    return LatestInvoicesResponse(items=[to_invoice_response(invoice) for invoice in invoices])
