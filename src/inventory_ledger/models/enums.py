"""
Enumerations for purchases and stock tracking.

This module contains enums used across the ledger:
- PaymentStatus: Payment attribute of a purchase
- StockStatus: Classification of a material's stock level
- MovementReason: Why a stock movement was recorded
"""

from enum import Enum


class PaymentStatus(str, Enum):
    """
    Payment status of a purchase.

    This is a payment attribute, not a lifecycle state: a purchase can
    move between any of these values through an edit.

    Values:
        PAID: Supplier has been paid in full
        PARTIAL: Part of the amount has been paid
        UNPAID: Nothing has been paid yet
    """

    PAID = "Paid"
    PARTIAL = "Partial"
    UNPAID = "Unpaid"

    @classmethod
    def pending(cls) -> tuple:
        """Statuses that still owe money to the supplier."""
        return (cls.UNPAID, cls.PARTIAL)


class StockStatus(str, Enum):
    """
    Stock level classification for a raw material.

    Values:
        OUT_OF_STOCK: quantity <= 0
        LOW_STOCK: 0 < quantity <= min_stock
        IN_STOCK: quantity > min_stock
    """

    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    IN_STOCK = "in_stock"

    @property
    def label(self) -> str:
        """Display label used for badges."""
        return {
            StockStatus.OUT_OF_STOCK: "Out of Stock",
            StockStatus.LOW_STOCK: "Low Stock",
            StockStatus.IN_STOCK: "In Stock",
        }[self]


class MovementReason(str, Enum):
    """Reason recorded on a stock movement."""

    PURCHASE_CREATED = "purchase_created"
    PURCHASE_UPDATED = "purchase_updated"
    PURCHASE_DELETED = "purchase_deleted"
