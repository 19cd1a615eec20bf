"""
Purchase model for raw material purchase transactions.

This module contains the Purchase model which records the acquisition of a
quantity of a named material from a supplier at a given price.

Key design decisions:
- material_name is a soft reference: matched case-insensitively against
  RawMaterial.name_key, never a foreign key
- total_amount is derived (quantity * price_per_unit) at write time
- payment_status is a payment attribute, not a lifecycle state
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship, validates

from ..utils.validators import normalize_name
from .base import BaseModel
from .enums import PaymentStatus


class Purchase(BaseModel):
    """
    Purchase model representing a purchase transaction.

    Attributes:
        purchase_date: Date of purchase
        supplier_id: Foreign key to Supplier
        material_name: Material name as entered on the purchase
        material_key: Normalized material name for registry matching
        quantity: Quantity purchased (> 0)
        price_per_unit: Price per unit (> 0)
        total_amount: quantity * price_per_unit, rounded to cents
        payment_status: Paid, Partial or Unpaid
        due_date: Optional payment due date
        invoice_ref: Optional reference to an invoice attachment
        notes: Optional user notes

    Relationships:
        supplier: Many-to-One with Supplier
    """

    __tablename__ = "purchases"

    purchase_date = Column(Date, nullable=False, index=True)
    supplier_id = Column(
        Integer,
        ForeignKey("suppliers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    material_name = Column(String(200), nullable=False)
    material_key = Column(String(200), nullable=False)
    quantity = Column(Numeric(14, 3), nullable=False)
    price_per_unit = Column(Numeric(12, 4), nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=False)
    payment_status = Column(String(10), nullable=False, default=PaymentStatus.UNPAID.value)
    due_date = Column(Date, nullable=True, index=True)
    invoice_ref = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    supplier = relationship("Supplier", foreign_keys=[supplier_id])

    __table_args__ = (
        Index("idx_purchase_material_key", "material_key"),
        Index("idx_purchase_payment_status", "payment_status"),
        CheckConstraint("quantity > 0", name="ck_purchase_quantity_positive"),
        CheckConstraint("price_per_unit > 0", name="ck_purchase_price_positive"),
        CheckConstraint(
            "payment_status IN ('Paid', 'Partial', 'Unpaid')",
            name="ck_purchase_payment_status",
        ),
    )

    @validates("material_name")
    def _validate_material_name(self, _key: str, value: str) -> str:
        """Keep material_key in step with every material_name assignment."""
        self.material_key = normalize_name(value)
        return value

    @validates("payment_status")
    def _validate_payment_status(self, _key: str, value) -> str:
        """Store the enum's value string."""
        return PaymentStatus(value).value

    @property
    def is_pending_payment(self) -> bool:
        """True while money is still owed on this purchase."""
        return self.payment_status in (PaymentStatus.UNPAID.value, PaymentStatus.PARTIAL.value)

    def days_until_due(self, today: Optional[date] = None) -> Optional[int]:
        """
        Days remaining until the payment due date.

        Args:
            today: Reference date (defaults to date.today())

        Returns:
            Days until due (negative when past due), or None without a due date
        """
        if self.due_date is None:
            return None
        today = today or date.today()
        return (self.due_date - today).days

    def __repr__(self) -> str:
        """String representation of purchase."""
        total = Decimal(self.total_amount) if self.total_amount is not None else Decimal("0")
        return (
            f"Purchase(id={self.id}, "
            f"material='{self.material_name}', "
            f"date={self.purchase_date}, "
            f"quantity={self.quantity}, "
            f"total={total:.2f})"
        )
