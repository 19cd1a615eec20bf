"""
Supplier model for tracking raw material suppliers.

This model represents vendors that purchases are recorded against.

Example: "Timber Traders Ltd" with a phone number and address.
"""

from sqlalchemy import Boolean, Column, Index, String, Text

from .base import BaseModel


class Supplier(BaseModel):
    """
    Supplier model representing vendors where materials are purchased.

    Attributes:
        name: Supplier name (e.g., "Timber Traders Ltd")
        phone: Optional contact number
        address: Optional address
        notes: Optional notes
        is_active: Soft delete flag (True = active, False = deactivated)
    """

    __tablename__ = "suppliers"

    name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Soft delete flag
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_supplier_name", "name"),
        Index("idx_supplier_active", "is_active"),
    )

    def __repr__(self) -> str:
        """String representation of supplier."""
        return f"Supplier(id={self.id}, name='{self.name}')"
