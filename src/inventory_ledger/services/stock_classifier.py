"""Stock Classifier - stock level status for raw materials.

Pure functions, no state:

- quantity <= 0              -> OUT_OF_STOCK
- 0 < quantity <= min_stock  -> LOW_STOCK
- quantity > min_stock       -> IN_STOCK

A missing or non-numeric min_stock falls back to the default threshold (10).
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List

from ..models import RawMaterial, StockStatus
from ..utils.constants import LOW_STOCK_ALERT_LIMIT
from ..utils.validators import to_decimal
from .material_registry import coerce_min_stock

ALERT_STATUSES = (StockStatus.OUT_OF_STOCK, StockStatus.LOW_STOCK)


def classify(quantity: Any, min_stock: Any = None) -> StockStatus:
    """Classify a stock level.

    Args:
        quantity: Current quantity (missing/non-numeric counts as zero)
        min_stock: Reorder threshold (missing/non-numeric uses the default)

    Returns:
        StockStatus

    Examples:
        >>> classify(0, 10)
        <StockStatus.OUT_OF_STOCK: 'out_of_stock'>
        >>> classify(5, 10)
        <StockStatus.LOW_STOCK: 'low_stock'>
        >>> classify(15, None)
        <StockStatus.IN_STOCK: 'in_stock'>
    """
    amount = to_decimal(quantity)
    if amount is None:
        amount = Decimal("0")
    threshold = coerce_min_stock(min_stock)

    if amount <= 0:
        return StockStatus.OUT_OF_STOCK
    if amount <= threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def classify_material(material: RawMaterial) -> StockStatus:
    """Classify a raw material by its quantity and min_stock."""
    return classify(material.quantity, material.min_stock)


def low_stock_alerts(
    materials: Iterable[RawMaterial],
    limit: int = LOW_STOCK_ALERT_LIMIT,
) -> List[Dict[str, Any]]:
    """Build the low stock alert feed.

    Returns the first ``limit`` materials that are low or out of stock, in
    the order the materials were given.

    Args:
        materials: Materials in display order
        limit: Maximum number of alerts

    Returns:
        List of dicts with material_id, name, quantity, min_stock, unit,
        status and label
    """
    alerts = []
    if limit <= 0:
        return alerts

    for material in materials:
        status = classify_material(material)
        if status not in ALERT_STATUSES:
            continue
        alerts.append(
            {
                "material_id": material.id,
                "name": material.name,
                "quantity": material.quantity,
                "min_stock": coerce_min_stock(material.min_stock),
                "unit": material.unit,
                "status": status,
                "label": status.label,
            }
        )
        if len(alerts) >= limit:
            break
    return alerts
