"""Valuation Service - inventory and purchase totals.

Totals are recomputed from current records on every call; nothing is
cached or maintained incrementally.

Example Usage:
    >>> totals = compute_totals(store)
    >>> totals["total_material_value"]
    Decimal('120000.00')
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable

from ..models import Purchase, RawMaterial
from ..utils.constants import MONEY_QUANTUM
from .stock_classifier import ALERT_STATUSES, classify_material
from .store import InventoryStore


def _money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def compute_totals_from(
    materials: Iterable[RawMaterial],
    purchases: Iterable[Purchase],
) -> Dict[str, Any]:
    """Roll up materials and purchases into dashboard totals.

    Args:
        materials: All raw materials
        purchases: All purchases

    Returns:
        Dict with:
            - total_material_value: sum of quantity * unit_price
            - total_purchase_value: sum of total_amount
            - pending_payments_count: purchases that are Unpaid or Partial
            - outstanding_amount: total_amount of those pending purchases
            - material_count, purchase_count, low_stock_count
    """
    materials = list(materials)
    purchases = list(purchases)

    total_material_value = sum(
        (Decimal(m.quantity or 0) * Decimal(m.unit_price or 0) for m in materials),
        Decimal("0"),
    )
    total_purchase_value = sum(
        (Decimal(p.total_amount or 0) for p in purchases),
        Decimal("0"),
    )
    pending = [p for p in purchases if p.is_pending_payment]
    outstanding_amount = sum((Decimal(p.total_amount or 0) for p in pending), Decimal("0"))
    low_stock_count = sum(1 for m in materials if classify_material(m) in ALERT_STATUSES)

    return {
        "total_material_value": _money(total_material_value),
        "total_purchase_value": _money(total_purchase_value),
        "pending_payments_count": len(pending),
        "outstanding_amount": _money(outstanding_amount),
        "material_count": len(materials),
        "purchase_count": len(purchases),
        "low_stock_count": low_stock_count,
    }


def compute_totals(store: InventoryStore) -> Dict[str, Any]:
    """Compute totals over everything currently in the store."""
    return compute_totals_from(store.get_all(RawMaterial), store.get_all(Purchase))
