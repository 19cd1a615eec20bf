"""
RawMaterial model for stocked input commodities.

A raw material is tracked by name, quantity and unit cost (e.g., "Teak Wood",
150 kg at 800 per kg). Purchases refer to materials by name, matched
case-insensitively through the normalized ``name_key`` column.
"""

from decimal import Decimal

from sqlalchemy import Column, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship, validates

from ..utils.constants import DEFAULT_MIN_STOCK
from ..utils.validators import normalize_name
from .base import BaseModel


class RawMaterial(BaseModel):
    """
    RawMaterial model representing a stocked input commodity.

    Attributes:
        name: Display name as entered (e.g., "Teak Wood")
        name_key: Normalized name used for purchase matching (e.g., "teak wood")
        category: Free-text grouping (e.g., "Wood", "Fabric")
        quantity: Current stock level in ``unit``
        unit: Unit of measure (e.g., "kg", "m", "pcs")
        unit_price: Latest purchase price per unit
        min_stock: Reorder threshold for low stock alerts
        supplier_id: Optional preferred supplier
        notes: User notes

    Note:
        ``quantity`` is maintained by purchase reconciliation but is not
        enforced by a constraint. Direct edits can desynchronize it from
        the purchase ledger.
    """

    __tablename__ = "raw_materials"

    name = Column(String(200), nullable=False)
    name_key = Column(String(200), nullable=False)
    category = Column(String(100), nullable=True)
    quantity = Column(Numeric(14, 3), nullable=False, default=Decimal("0"))
    unit = Column(String(20), nullable=True)
    unit_price = Column(Numeric(12, 4), nullable=False, default=Decimal("0"))
    min_stock = Column(Numeric(14, 3), nullable=False, default=DEFAULT_MIN_STOCK)
    supplier_id = Column(
        Integer,
        ForeignKey("suppliers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    notes = Column(Text, nullable=True)

    supplier = relationship("Supplier", foreign_keys=[supplier_id])
    movements = relationship(
        "StockMovement",
        back_populates="material",
        order_by="StockMovement.id",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_raw_material_name_key", "name_key"),
        Index("idx_raw_material_category", "category"),
    )

    @validates("name")
    def _validate_name(self, _key: str, value: str) -> str:
        """Keep name_key in step with every name assignment."""
        self.name_key = normalize_name(value)
        return value

    @property
    def stock_value(self) -> Decimal:
        """Value of the stock on hand (quantity * unit_price)."""
        return Decimal(self.quantity or 0) * Decimal(self.unit_price or 0)

    def __repr__(self) -> str:
        """String representation of raw material."""
        return f"RawMaterial(id={self.id}, name='{self.name}', quantity={self.quantity})"

    def to_dict(self) -> dict:
        """
        Convert raw material to dictionary.

        Returns:
            Dictionary representation with computed stock_value
        """
        result = super().to_dict()
        result["stock_value"] = str(self.stock_value)
        return result
