"""
StockMovement model for the purchase reconciliation audit trail.

Every stock change applied by purchase reconciliation is recorded here,
inside the same unit of work as the change itself. Records are immutable.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class StockMovement(BaseModel):
    """
    StockMovement model for the immutable reconciliation audit trail.

    Attributes:
        material_id: FK to RawMaterial (set to NULL if the material is deleted)
        material_name: Material name at the time of the movement
        purchase_id: ID of the purchase that caused the movement (plain
            integer, kept after the purchase itself is deleted)
        reason: MovementReason value
        quantity_delta: Signed change requested by the purchase
        quantity_after: Material quantity after the change was applied

    Note:
        quantity_after can differ from the previous quantity plus
        quantity_delta when a deletion is clamped at zero.
    """

    __tablename__ = "stock_movements"

    # Movements are immutable
    updated_at = None

    material_id = Column(
        Integer,
        ForeignKey("raw_materials.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    material_name = Column(String(200), nullable=False)
    purchase_id = Column(Integer, nullable=True, index=True)
    reason = Column(String(30), nullable=False)
    quantity_delta = Column(Numeric(14, 3), nullable=False)
    quantity_after = Column(Numeric(14, 3), nullable=False)

    material = relationship("RawMaterial", back_populates="movements")

    __table_args__ = (Index("idx_stock_movement_reason", "reason"),)

    def __repr__(self) -> str:
        """String representation of stock movement."""
        return (
            f"StockMovement(id={self.id}, "
            f"material='{self.material_name}', "
            f"reason='{self.reason}', "
            f"delta={self.quantity_delta})"
        )
