"""Reconciliation Service - keeps raw material stock in step with purchases.

This is the only module that writes purchases, and the only one that
changes a purchase and a raw material together. Each operation validates
first, then performs its ledger write and registry write inside one unit of
work, so a storage failure leaves both writes applied or neither.

Stock effects:
- create: +quantity on the material named by the purchase. A material that
  does not exist yet is created with the purchase quantity and price and the
  default reorder threshold.
- update: +(new quantity - old quantity) on the material named by the NEW
  draft, with the new price. Not clamped, so stock can go negative.
- delete: quantity = max(0, quantity - purchase quantity). Clamped at zero.

Known behaviors that are kept as-is:
- update resolves the material by the new name; when the name changes, the
  material named by the old name is never decremented.
- update does not clamp while delete does.

Every applied change is also written to the StockMovement audit trail in
the same unit of work.
"""

import logging
from decimal import Decimal
from typing import Optional, Tuple

from ..models import MovementReason, Purchase, RawMaterial, StockMovement
from ..utils.constants import DEFAULT_MIN_STOCK
from ..utils.validators import normalize_name
from . import material_registry, purchase_ledger, supplier_service
from .exceptions import StorageError, ValidationError
from .logging_utils import get_service_logger, log_operation
from .purchase_ledger import DraftInput
from .store import InventoryStore

logger = get_service_logger(__name__)


# =============================================================================
# Internal Helpers
# =============================================================================


def _validate(operation: str, draft: DraftInput) -> dict:
    """Validate a draft, logging the failure before re-raising."""
    try:
        return purchase_ledger.validate_purchase_draft(draft)
    except ValidationError as e:
        log_operation(
            logger,
            operation=operation,
            outcome="validation_failed",
            level=logging.WARNING,
            errors=e.errors,
        )
        raise


def _record_movement(
    store: InventoryStore,
    material: RawMaterial,
    purchase_id: int,
    reason: MovementReason,
    quantity_delta: Decimal,
) -> StockMovement:
    """Append an audit row for a stock change that was just applied."""
    movement = StockMovement(
        material_id=material.id,
        material_name=material.name,
        purchase_id=purchase_id,
        reason=reason.value,
        quantity_delta=quantity_delta,
        quantity_after=material.quantity,
    )
    return store.add_item(movement)


def _receive_stock(store: InventoryStore, purchase: Purchase) -> Tuple[RawMaterial, bool]:
    """Add a new purchase's quantity to its material, creating it if needed.

    Returns:
        (material, created) where created is True for a new material
    """
    material = material_registry.find_by_name(store, purchase.material_name)
    if material is not None:
        material = material_registry.apply_delta(
            store,
            purchase.material_name,
            purchase.quantity,
            purchase.price_per_unit,
        )
        return material, False

    material = material_registry.create_material(
        store,
        name=purchase.material_name,
        quantity=purchase.quantity,
        unit_price=purchase.price_per_unit,
        min_stock=DEFAULT_MIN_STOCK,
        supplier_id=purchase.supplier_id,
    )
    return material, True


def _log_storage_error(operation: str, error: StorageError, **context) -> None:
    log_operation(
        logger,
        operation=operation,
        outcome="storage_error",
        level=logging.ERROR,
        error=str(error),
        **context,
    )


# =============================================================================
# Public API Functions
# =============================================================================


def create_purchase(store: InventoryStore, draft: DraftInput) -> Purchase:
    """Record a purchase and add its quantity to the material's stock.

    Args:
        store: Store handle
        draft: PurchaseDraft or mapping with supplier_id, material_name,
            quantity, price_per_unit and optional purchase_date,
            payment_status, due_date, invoice_ref, notes

    Returns:
        Created Purchase with total_amount = quantity * price_per_unit

    Raises:
        ValidationError: If a field is missing or invalid (nothing written)
        SupplierNotFoundError: If supplier_id does not resolve (nothing written)
        StorageError: If either write fails (both rolled back)

    Example:
        >>> purchase = create_purchase(store, {
        ...     "supplier_id": 1,
        ...     "material_name": "Teak Wood",
        ...     "quantity": 100,
        ...     "price_per_unit": 800,
        ... })
        >>> purchase.total_amount
        Decimal('80000.00')
    """
    values = _validate("create_purchase", draft)
    supplier_service.get_supplier_or_raise(store, values["supplier_id"])

    try:
        with store.unit_of_work():
            purchase = store.add_item(Purchase(**values))
            material, created = _receive_stock(store, purchase)
            _record_movement(
                store,
                material,
                purchase.id,
                MovementReason.PURCHASE_CREATED,
                purchase.quantity,
            )
    except StorageError as e:
        _log_storage_error("create_purchase", e, material_name=values["material_name"])
        raise

    if created:
        log_operation(
            logger,
            operation="create_purchase",
            outcome="material_created",
            material_id=material.id,
            material_name=material.name,
        )
    log_operation(
        logger,
        operation="create_purchase",
        outcome="success",
        purchase_id=purchase.id,
        material_id=material.id,
        quantity_delta=str(purchase.quantity),
    )
    return purchase


def update_purchase(store: InventoryStore, purchase_id: int, draft: DraftInput) -> Purchase:
    """Edit a purchase and apply the quantity difference to stock.

    The difference (new quantity - original quantity) is applied to the
    material named by the new draft, and that material's unit price becomes
    the new price. No lower clamp is applied. If the material name changed,
    the material named by the original purchase keeps its stock.

    Args:
        store: Store handle
        purchase_id: Purchase to edit
        draft: Complete replacement values (same keys as create_purchase)

    Returns:
        Updated Purchase

    Raises:
        ValidationError: If a field is missing or invalid (nothing written)
        PurchaseNotFound: If purchase_id does not exist
        SupplierNotFoundError: If supplier_id does not resolve (nothing written)
        StorageError: If either write fails (both rolled back)
    """
    values = _validate("update_purchase", draft)
    purchase = purchase_ledger.get_purchase(store, purchase_id)
    supplier_service.get_supplier_or_raise(store, values["supplier_id"])

    original_key = purchase.material_key
    quantity_diff = values["quantity"] - Decimal(purchase.quantity)
    material: Optional[RawMaterial] = None

    try:
        with store.unit_of_work():
            purchase.update_from_dict(values)
            store.update_item(purchase)

            material = material_registry.find_by_name(store, values["material_name"])
            if material is not None:
                material = material_registry.apply_delta(
                    store,
                    values["material_name"],
                    quantity_diff,
                    values["price_per_unit"],
                )
                _record_movement(
                    store,
                    material,
                    purchase.id,
                    MovementReason.PURCHASE_UPDATED,
                    quantity_diff,
                )
    except StorageError as e:
        _log_storage_error("update_purchase", e, purchase_id=purchase_id)
        raise

    if normalize_name(values["material_name"]) != original_key:
        log_operation(
            logger,
            operation="update_purchase",
            outcome="material_renamed",
            level=logging.WARNING,
            purchase_id=purchase.id,
            original_material_key=original_key,
            material_name=values["material_name"],
        )
    if material is None:
        log_operation(
            logger,
            operation="update_purchase",
            outcome="orphaned",
            level=logging.WARNING,
            purchase_id=purchase.id,
            material_name=values["material_name"],
        )
    else:
        log_operation(
            logger,
            operation="update_purchase",
            outcome="success",
            purchase_id=purchase.id,
            material_id=material.id,
            quantity_delta=str(quantity_diff),
        )
    return purchase


def delete_purchase(store: InventoryStore, purchase_id: int) -> None:
    """Delete a purchase and remove its quantity from stock.

    The material's quantity becomes max(0, quantity - purchase quantity).
    A purchase whose material no longer exists is still deleted.

    Args:
        store: Store handle
        purchase_id: Purchase to delete

    Raises:
        PurchaseNotFound: If purchase_id does not exist
        StorageError: If either write fails (both rolled back)
    """
    purchase = purchase_ledger.get_purchase(store, purchase_id)
    removed = Decimal(purchase.quantity)
    material: Optional[RawMaterial] = None

    try:
        with store.unit_of_work():
            material = material_registry.find_by_name(store, purchase.material_name)
            if material is not None:
                remaining = max(Decimal("0"), Decimal(material.quantity or 0) - removed)
                material_registry.set_quantity(store, material, remaining)
                _record_movement(
                    store,
                    material,
                    purchase.id,
                    MovementReason.PURCHASE_DELETED,
                    -removed,
                )
            store.delete_item(Purchase, purchase.id)
    except StorageError as e:
        _log_storage_error("delete_purchase", e, purchase_id=purchase_id)
        raise

    if material is None:
        log_operation(
            logger,
            operation="delete_purchase",
            outcome="orphaned",
            level=logging.WARNING,
            purchase_id=purchase_id,
        )
    else:
        log_operation(
            logger,
            operation="delete_purchase",
            outcome="success",
            purchase_id=purchase_id,
            material_id=material.id,
            quantity_delta=str(-removed),
        )
