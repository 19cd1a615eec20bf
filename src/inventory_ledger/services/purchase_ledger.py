"""Purchase Ledger - purchase drafts, validation and ledger queries.

This module owns Purchase records on the read side and the rules every
purchase write must satisfy. Stock effects are applied by
reconciliation_service, which is the only writer of purchases.

Key Features:
- PurchaseDraft: raw input collected from a form or script
- validate_purchase_draft(): collects every field error, fails before writes
- compute_total_amount(): quantity * price_per_unit, rounded to cents
- Ledger queries: by id, filtered listing, orphaned and overdue purchases
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

from ..models import PaymentStatus, Purchase, RawMaterial
from ..utils.constants import (
    ERROR_INVALID_DATE,
    ERROR_REQUIRED_FIELD,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_REFERENCE_LENGTH,
    MONEY_QUANTUM,
    PRICE_QUANTUM,
    QUANTITY_QUANTUM,
)
from ..utils.datetime_utils import parse_iso_date
from ..utils.validators import (
    normalize_name,
    to_decimal,
    to_scaled_decimal,
    validate_positive_number,
    validate_required_string,
    validate_string_length,
)
from .exceptions import PurchaseNotFound, ValidationError
from .store import InventoryStore


@dataclass
class PurchaseDraft:
    """Unvalidated purchase input.

    Numeric fields may be numbers or numeric strings; dates may be ISO-8601
    strings or date objects. validate_purchase_draft() turns a draft into
    typed values.

    Attributes:
        supplier_id: Supplier the purchase was made from
        material_name: Free-text material name (matched case-insensitively)
        quantity: Quantity purchased (> 0)
        price_per_unit: Price per unit (> 0)
        purchase_date: Purchase date (defaults to today)
        payment_status: Paid, Partial or Unpaid (defaults to Unpaid)
        due_date: Optional payment due date
        invoice_ref: Optional invoice attachment reference
        notes: Optional notes
    """

    supplier_id: Any
    material_name: Optional[str]
    quantity: Any
    price_per_unit: Any
    purchase_date: Any = None
    payment_status: Any = PaymentStatus.UNPAID
    due_date: Any = None
    invoice_ref: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PurchaseDraft":
        """Build a draft from a mapping, ignoring unknown keys."""
        fields = cls.__dataclass_fields__
        return cls(**{key: value for key, value in data.items() if key in fields})


DraftInput = Union[PurchaseDraft, Mapping[str, Any]]


def as_draft(draft: DraftInput) -> PurchaseDraft:
    """Accept a PurchaseDraft or a plain mapping."""
    if isinstance(draft, PurchaseDraft):
        return draft
    return PurchaseDraft.from_dict(draft)


def compute_total_amount(quantity: Any, price_per_unit: Any) -> Decimal:
    """Calculate a purchase total rounded to cents.

    Examples:
        >>> compute_total_amount(100, 800)
        Decimal('80000.00')
        >>> compute_total_amount("2.5", "10.333")
        Decimal('25.83')
    """
    total = to_decimal(quantity) * to_decimal(price_per_unit)
    return total.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _parse_supplier_id(value: Any) -> Optional[int]:
    """Return supplier id as int, or None when missing or malformed."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return int(text) if text.isdigit() else None


def _parse_payment_status(value: Any) -> Optional[PaymentStatus]:
    """Match a payment status by value, ignoring letter case."""
    if value is None:
        return PaymentStatus.UNPAID
    if isinstance(value, PaymentStatus):
        return value
    text = str(value).strip().casefold()
    for status in PaymentStatus:
        if status.value.casefold() == text:
            return status
    return None


def _payment_status_error() -> str:
    allowed = ", ".join(status.value for status in PaymentStatus)
    return f"payment_status: Must be one of {allowed}"


def validate_purchase_draft(draft: DraftInput) -> Dict[str, Any]:
    """Validate a purchase draft and return typed field values.

    All field errors are collected before raising, and nothing is written.

    Args:
        draft: PurchaseDraft or mapping with the same keys

    Returns:
        Dict with supplier_id (int), material_name (str), quantity and
        price_per_unit (Decimal), total_amount (Decimal), purchase_date and
        due_date (date), payment_status (str), invoice_ref and notes

    Raises:
        ValidationError: If any field is missing or invalid
    """
    draft = as_draft(draft)
    errors = []

    # Rounded to the column scale before the positivity checks
    quantity = to_scaled_decimal(draft.quantity, QUANTITY_QUANTUM)
    price_per_unit = to_scaled_decimal(draft.price_per_unit, PRICE_QUANTUM)

    supplier_id = _parse_supplier_id(draft.supplier_id)
    if supplier_id is None:
        errors.append(f"supplier_id: {ERROR_REQUIRED_FIELD}")

    for is_valid, error in (
        validate_required_string(draft.material_name, "material_name"),
        validate_string_length(draft.material_name, MAX_NAME_LENGTH, "material_name"),
        validate_positive_number(quantity, "quantity"),
        validate_positive_number(price_per_unit, "price_per_unit"),
        validate_string_length(draft.invoice_ref, MAX_REFERENCE_LENGTH, "invoice_ref"),
        validate_string_length(draft.notes, MAX_NOTES_LENGTH, "notes"),
    ):
        if not is_valid:
            errors.append(error)

    payment_status = _parse_payment_status(draft.payment_status)
    if payment_status is None:
        errors.append(_payment_status_error())

    purchase_date = None
    due_date = None
    try:
        purchase_date = parse_iso_date(draft.purchase_date) or date.today()
    except ValueError:
        errors.append(f"purchase_date: {ERROR_INVALID_DATE}")
    try:
        due_date = parse_iso_date(draft.due_date)
    except ValueError:
        errors.append(f"due_date: {ERROR_INVALID_DATE}")
    if purchase_date and due_date and due_date < purchase_date:
        errors.append("due_date: Cannot be before purchase_date")

    if errors:
        raise ValidationError(errors)

    return {
        "supplier_id": supplier_id,
        "material_name": str(draft.material_name).strip(),
        "quantity": quantity,
        "price_per_unit": price_per_unit,
        "total_amount": compute_total_amount(quantity, price_per_unit),
        "purchase_date": purchase_date,
        "due_date": due_date,
        "payment_status": payment_status.value,
        "invoice_ref": draft.invoice_ref,
        "notes": draft.notes,
    }


def draft_from_purchase(purchase: Purchase) -> PurchaseDraft:
    """Build an editable draft pre-filled from a stored purchase."""
    return PurchaseDraft(
        supplier_id=purchase.supplier_id,
        material_name=purchase.material_name,
        quantity=purchase.quantity,
        price_per_unit=purchase.price_per_unit,
        purchase_date=purchase.purchase_date,
        payment_status=purchase.payment_status,
        due_date=purchase.due_date,
        invoice_ref=purchase.invoice_ref,
        notes=purchase.notes,
    )


# =============================================================================
# Ledger Queries
# =============================================================================


def get_purchase(store: InventoryStore, purchase_id: int) -> Purchase:
    """Retrieve a purchase by ID.

    Raises:
        PurchaseNotFound: If purchase_id doesn't exist
    """
    purchase = store.get_item(Purchase, purchase_id)
    if purchase is None:
        raise PurchaseNotFound(purchase_id)
    return purchase


def list_purchases(
    store: InventoryStore,
    supplier_id: Optional[int] = None,
    payment_status: Optional[Union[PaymentStatus, str]] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: Optional[int] = None,
) -> List[Purchase]:
    """List purchases with optional filters.

    Args:
        store: Store handle
        supplier_id: Filter by supplier
        payment_status: Filter by payment status (any letter case)
        start_date: Filter by purchase date >= this
        end_date: Filter by purchase date <= this
        limit: Maximum number of results

    Returns:
        List of Purchase records, newest purchase date first

    Raises:
        ValidationError: If payment_status is not Paid, Partial or Unpaid
    """
    criteria = []
    if supplier_id is not None:
        criteria.append(Purchase.supplier_id == supplier_id)
    if payment_status is not None:
        status = _parse_payment_status(payment_status)
        if status is None:
            raise ValidationError([_payment_status_error()])
        criteria.append(Purchase.payment_status == status.value)
    if start_date is not None:
        criteria.append(Purchase.purchase_date >= start_date)
    if end_date is not None:
        criteria.append(Purchase.purchase_date <= end_date)

    return store.find_all(
        Purchase,
        *criteria,
        order_by=(Purchase.purchase_date.desc(), Purchase.id.desc()),
        limit=limit,
    )


def find_purchases_for_material(store: InventoryStore, name: str) -> List[Purchase]:
    """List purchases that name a material, matched case-insensitively."""
    return store.find_all(Purchase, Purchase.material_key == normalize_name(name))


def find_orphaned_purchases(store: InventoryStore) -> List[Purchase]:
    """List purchases whose material name matches no raw material.

    Orphans appear when a material is renamed or deleted after purchases
    were recorded against it.
    """
    known_keys = {material.name_key for material in store.get_all(RawMaterial)}
    return [p for p in store.get_all(Purchase) if p.material_key not in known_keys]


def get_overdue_purchases(store: InventoryStore, today: Optional[date] = None) -> List[Purchase]:
    """List unpaid or partially paid purchases whose due date has passed.

    Args:
        store: Store handle
        today: Reference date (defaults to date.today())

    Returns:
        Overdue purchases, earliest due date first
    """
    today = today or date.today()
    pending = [status.value for status in PaymentStatus.pending()]
    return store.find_all(
        Purchase,
        Purchase.due_date.isnot(None),
        Purchase.due_date < today,
        Purchase.payment_status.in_(pending),
        order_by=Purchase.due_date,
    )
