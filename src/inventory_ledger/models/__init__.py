"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .enums import MovementReason, PaymentStatus, StockStatus
from .supplier import Supplier
from .raw_material import RawMaterial
from .purchase import Purchase
from .stock_movement import StockMovement

__all__ = [
    "Base",
    "BaseModel",
    # Enums
    "MovementReason",
    "PaymentStatus",
    "StockStatus",
    # Entities
    "Supplier",
    "RawMaterial",
    "Purchase",
    "StockMovement",
]
