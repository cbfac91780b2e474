"""API routers."""

from carteira.routers import assets, categories, clients, dashboard, investments, invoices
from carteira.routers.reference_data import asset_types_router, banks_router

__all__ = [
    "asset_types_router",
    "assets",
    "banks_router",
    "categories",
    "clients",
    "dashboard",
    "investments",
    "invoices",
]
