"""SQLAlchemy models package."""

from carteira.models.catalog import Asset, AssetCategory, AssetType, Bank, Category
from carteira.models.client import Client, Invoice, InvoiceStatus
from carteira.models.investment import MONETARY_FIELDS, Investment

__all__ = [
    "MONETARY_FIELDS",
    "Asset",
    "AssetCategory",
    "AssetType",
    "Bank",
    "Category",
    "Client",
    "Investment",
    "Invoice",
    "InvoiceStatus",
]
