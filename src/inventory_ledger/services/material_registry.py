"""Material Registry - raw material records and stock adjustments.

This module owns RawMaterial records: lookup by case-insensitive name,
creation with a defaulted reorder threshold, direct edits, deletion, and the
stock delta primitive used by purchase reconciliation.

Key Features:
- find_by_name() matches on the normalized name index (trimmed, collapsed
  whitespace, case-folded)
- apply_delta() adds a quantity delta and overwrites the unit price with
  the latest purchase price (no weighted averaging, no clamping)
- Direct edits are allowed but can desynchronize stock from the ledger
- Deleting a material never touches purchases that name it

All functions take an explicit InventoryStore handle.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..models import RawMaterial, StockMovement
from ..utils.constants import (
    DEFAULT_MIN_STOCK,
    MAX_CATEGORY_LENGTH,
    MAX_NAME_LENGTH,
    MAX_UNIT_LENGTH,
)
from ..utils.validators import (
    normalize_name,
    to_decimal,
    validate_non_negative_number,
    validate_required_string,
    validate_string_length,
)
from . import supplier_service
from .exceptions import RawMaterialNotFound, ValidationError
from .logging_utils import get_service_logger, log_operation
from .store import InventoryStore

logger = get_service_logger(__name__)

# Fields a direct edit may change
EDITABLE_FIELDS = (
    "name",
    "category",
    "quantity",
    "unit",
    "unit_price",
    "min_stock",
    "supplier_id",
    "notes",
)


def coerce_min_stock(value: Any) -> Decimal:
    """Return value as a Decimal threshold, or the default when absent/non-numeric.

    Examples:
        >>> coerce_min_stock(None)
        Decimal('10')
        >>> coerce_min_stock("abc")
        Decimal('10')
        >>> coerce_min_stock("25")
        Decimal('25')
    """
    number = to_decimal(value)
    return DEFAULT_MIN_STOCK if number is None else number


def _validate_material_fields(data: Dict[str, Any], require_name: bool) -> List[str]:
    """Collect validation errors for material fields present in data."""
    errors = []
    checks = []

    if require_name or "name" in data:
        checks.append(validate_required_string(data.get("name"), "name"))
        checks.append(validate_string_length(data.get("name"), MAX_NAME_LENGTH, "name"))
    if data.get("category") is not None:
        checks.append(validate_string_length(data["category"], MAX_CATEGORY_LENGTH, "category"))
    if data.get("unit") is not None:
        checks.append(validate_string_length(data["unit"], MAX_UNIT_LENGTH, "unit"))
    if "quantity" in data:
        checks.append(validate_non_negative_number(data["quantity"], "quantity"))
    if "unit_price" in data:
        checks.append(validate_non_negative_number(data["unit_price"], "unit_price"))

    for is_valid, error in checks:
        if not is_valid:
            errors.append(error)
    return errors


# =============================================================================
# Lookup
# =============================================================================


def find_by_name(store: InventoryStore, name: str) -> Optional[RawMaterial]:
    """Find a material by case-insensitive name.

    At most one match is expected but not enforced. When several materials
    share a normalized name the oldest one wins and a warning is logged.

    Args:
        store: Store handle
        name: Material name in any letter case

    Returns:
        Matching RawMaterial, or None
    """
    key = normalize_name(name)
    if not key:
        return None

    matches = store.find_all(RawMaterial, RawMaterial.name_key == key)
    if len(matches) > 1:
        log_operation(
            logger,
            operation="find_by_name",
            outcome="duplicate_names",
            level=logging.WARNING,
            material_name=name,
            material_ids=[m.id for m in matches],
        )
    return matches[0] if matches else None


def get_material(store: InventoryStore, material_id: int) -> RawMaterial:
    """Get a material by ID.

    Raises:
        RawMaterialNotFound: If no material has this ID
    """
    material = store.get_item(RawMaterial, material_id)
    if material is None:
        raise RawMaterialNotFound(material_id)
    return material


def list_materials(store: InventoryStore, category: Optional[str] = None) -> List[RawMaterial]:
    """List materials in insertion order, optionally filtered by category."""
    if category is None:
        return store.get_all(RawMaterial)
    return store.find_all(RawMaterial, RawMaterial.category == category)


def get_material_movements(store: InventoryStore, material_id: int) -> List[StockMovement]:
    """Get the reconciliation audit trail for a material, oldest first."""
    return store.find_all(StockMovement, StockMovement.material_id == material_id)


# =============================================================================
# Writes
# =============================================================================


def create_material(
    store: InventoryStore,
    name: str,
    quantity: Any = 0,
    unit_price: Any = 0,
    min_stock: Any = None,
    category: Optional[str] = None,
    unit: Optional[str] = None,
    supplier_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> RawMaterial:
    """Create a raw material.

    Args:
        store: Store handle
        name: Material name (required)
        quantity: Opening stock (>= 0)
        unit_price: Price per unit (>= 0)
        min_stock: Reorder threshold; defaults to 10 when absent or non-numeric
        category: Optional grouping
        unit: Optional unit of measure
        supplier_id: Optional preferred supplier (must exist if given)
        notes: Optional notes

    Returns:
        Created RawMaterial

    Raises:
        ValidationError: If a field is missing or invalid
        SupplierNotFoundError: If supplier_id does not resolve
    """
    data = {
        "name": name,
        "quantity": quantity,
        "unit_price": unit_price,
        "category": category,
        "unit": unit,
    }
    errors = _validate_material_fields(data, require_name=True)
    if errors:
        raise ValidationError(errors)

    if supplier_id is not None:
        supplier_service.get_supplier_or_raise(store, supplier_id)

    material = RawMaterial(
        name=name.strip(),
        category=category,
        quantity=to_decimal(quantity),
        unit=unit,
        unit_price=to_decimal(unit_price),
        min_stock=coerce_min_stock(min_stock),
        supplier_id=supplier_id,
        notes=notes,
    )
    store.add_item(material)

    log_operation(
        logger,
        operation="create_material",
        outcome="success",
        level=logging.DEBUG,
        material_id=material.id,
        material_name=material.name,
    )
    return material


def update_material(store: InventoryStore, material_id: int, data: Dict[str, Any]) -> RawMaterial:
    """Edit a material directly.

    Direct edits bypass the purchase ledger. Changing quantity here can
    desynchronize stock from recorded purchases, and renaming breaks the
    link for purchases that name the old material.

    Args:
        store: Store handle
        material_id: Material to edit
        data: Fields to change (see EDITABLE_FIELDS)

    Returns:
        Updated RawMaterial

    Raises:
        RawMaterialNotFound: If no material has this ID
        ValidationError: If a field is invalid or not editable
        SupplierNotFoundError: If a new supplier_id does not resolve
    """
    unknown = sorted(set(data) - set(EDITABLE_FIELDS))
    errors = [f"{field}: Cannot be edited" for field in unknown]
    errors.extend(_validate_material_fields(data, require_name=False))
    if errors:
        raise ValidationError(errors)

    material = get_material(store, material_id)

    if data.get("supplier_id") is not None:
        supplier_service.get_supplier_or_raise(store, data["supplier_id"])

    changes = dict(data)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
    for field in ("quantity", "unit_price"):
        if field in changes:
            changes[field] = to_decimal(changes[field])
    if "min_stock" in changes:
        changes["min_stock"] = coerce_min_stock(changes["min_stock"])

    material.update_from_dict(changes)
    return store.update_item(material)


def delete_material(store: InventoryStore, material_id: int) -> None:
    """Delete a material.

    Purchases that name the material are left untouched and become
    orphaned (see purchase_ledger.find_orphaned_purchases).

    Raises:
        RawMaterialNotFound: If no material has this ID
    """
    if not store.delete_item(RawMaterial, material_id):
        raise RawMaterialNotFound(material_id)


def apply_delta(
    store: InventoryStore,
    name: str,
    quantity_delta: Any,
    new_unit_price: Any,
) -> RawMaterial:
    """Add a quantity delta to a material and overwrite its unit price.

    The latest purchase price wins; there is no weighted averaging. The
    resulting quantity is not clamped, so a large negative delta can take
    stock below zero.

    Args:
        store: Store handle
        name: Material name in any letter case
        quantity_delta: Signed quantity change
        new_unit_price: Price that replaces the current unit price

    Returns:
        Updated RawMaterial

    Raises:
        RawMaterialNotFound: If no material matches the name
    """
    material = find_by_name(store, name)
    if material is None:
        raise RawMaterialNotFound(name)

    material.quantity = Decimal(material.quantity or 0) + to_decimal(quantity_delta)
    material.unit_price = to_decimal(new_unit_price)
    return store.update_item(material)


def set_quantity(store: InventoryStore, material: RawMaterial, quantity: Any) -> RawMaterial:
    """Overwrite a material's quantity.

    The caller decides any clamping policy before calling.
    """
    material.quantity = to_decimal(quantity)
    return store.update_item(material)
