"""
Service layer for the inventory ledger.

The service layer holds the business logic between callers (UI, scripts,
CLI) and the database. Every function takes an explicit InventoryStore.

Modules:
- material_registry: raw material lookup, creation, edits, stock deltas
- purchase_ledger: purchase drafts, validation and ledger queries
- reconciliation_service: purchase create/update/delete with stock effects
- stock_classifier: out/low/in stock classification and alert feed
- valuation_service: inventory and purchase totals
- supplier_service: suppliers referenced by purchases
- store / database: persistence handle, engines and sessions
"""

from .exceptions import (
    PurchaseNotFound,
    RawMaterialNotFound,
    ReferenceNotFound,
    ServiceError,
    StorageError,
    SupplierNotFoundError,
    ValidationError,
)
from .purchase_ledger import PurchaseDraft
from .reconciliation_service import create_purchase, delete_purchase, update_purchase
from .stock_classifier import classify, classify_material, low_stock_alerts
from .store import InventoryStore
from .valuation_service import compute_totals

__all__ = [
    # Exceptions
    "ServiceError",
    "ValidationError",
    "ReferenceNotFound",
    "SupplierNotFoundError",
    "PurchaseNotFound",
    "RawMaterialNotFound",
    "StorageError",
    # Store
    "InventoryStore",
    # Purchases
    "PurchaseDraft",
    "create_purchase",
    "update_purchase",
    "delete_purchase",
    # Stock
    "classify",
    "classify_material",
    "low_stock_alerts",
    "compute_totals",
]
