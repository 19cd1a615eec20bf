"""Supplier Service - supplier records that purchases refer to.

This module provides the small amount of supplier management the ledger
needs: create, look up, list and deactivate. Purchases validate their
supplier reference through get_supplier_or_raise().

All functions take an explicit InventoryStore handle.

Example Usage:
    >>> supplier = create_supplier(store, name="Timber Traders Ltd", phone="9841000000")
    >>> get_supplier(store, supplier.id).name
    'Timber Traders Ltd'
"""

from typing import List, Optional

from ..models import Supplier
from ..utils.constants import MAX_NAME_LENGTH
from ..utils.validators import validate_required_string, validate_string_length
from .exceptions import SupplierNotFoundError, ValidationError
from .store import InventoryStore


def create_supplier(
    store: InventoryStore,
    name: str,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    notes: Optional[str] = None,
) -> Supplier:
    """Create a new supplier.

    Args:
        store: Store handle
        name: Supplier name (required)
        phone: Contact number (optional)
        address: Address (optional)
        notes: Additional notes (optional)

    Returns:
        Supplier: Created supplier

    Raises:
        ValidationError: If name is missing or too long
    """
    errors = []
    for is_valid, error in (
        validate_required_string(name, "name"),
        validate_string_length(name, MAX_NAME_LENGTH, "name"),
    ):
        if not is_valid:
            errors.append(error)
    if errors:
        raise ValidationError(errors)

    supplier = Supplier(
        name=name.strip(),
        phone=phone,
        address=address,
        notes=notes,
    )
    return store.add_item(supplier)


def get_supplier(store: InventoryStore, supplier_id: int) -> Optional[Supplier]:
    """Get supplier by ID, or None if not found."""
    return store.get_item(Supplier, supplier_id)


def get_supplier_or_raise(store: InventoryStore, supplier_id: int) -> Supplier:
    """Get supplier by ID.

    Raises:
        SupplierNotFoundError: If no supplier has this ID
    """
    supplier = store.get_item(Supplier, supplier_id)
    if supplier is None:
        raise SupplierNotFoundError(supplier_id)
    return supplier


def get_all_suppliers(store: InventoryStore, include_inactive: bool = False) -> List[Supplier]:
    """Get all suppliers sorted by name, optionally including inactive ones."""
    criteria = [] if include_inactive else [Supplier.is_active.is_(True)]
    return store.find_all(Supplier, *criteria, order_by=Supplier.name)


def deactivate_supplier(store: InventoryStore, supplier_id: int) -> Supplier:
    """Soft-delete a supplier.

    Purchase history keeps pointing at the supplier; it is only hidden
    from get_all_suppliers() by default.

    Raises:
        SupplierNotFoundError: If no supplier has this ID
    """
    supplier = get_supplier_or_raise(store, supplier_id)
    supplier.is_active = False
    return store.update_item(supplier)
