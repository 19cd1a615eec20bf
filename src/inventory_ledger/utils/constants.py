"""
Constants for the Inventory Ledger application.

This module defines system-wide constants including:
- Application metadata
- Stock threshold defaults
- Numeric precision for money and quantities
- Field limits and validation messages
"""

from decimal import Decimal

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Inventory Ledger"
APP_VERSION = "0.1.0"
DATABASE_VERSION = "1.0"
DATABASE_FILENAME = "inventory_ledger.db"

# ============================================================================
# Stock Thresholds
# ============================================================================

# Applied when a material has no usable minimum stock level
DEFAULT_MIN_STOCK = Decimal("10")

# Number of entries in the low stock alert feed
LOW_STOCK_ALERT_LIMIT = 5

# ============================================================================
# Numeric Precision
# ============================================================================

MONEY_QUANTUM = Decimal("0.01")
PRICE_QUANTUM = Decimal("0.0001")
QUANTITY_QUANTUM = Decimal("0.001")

# ============================================================================
# Field Limits
# ============================================================================

MAX_NAME_LENGTH = 200
MAX_CATEGORY_LENGTH = 100
MAX_UNIT_LENGTH = 20
MAX_REFERENCE_LENGTH = 255
MAX_NOTES_LENGTH = 2000

# ============================================================================
# Validation Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_NUMBER = "Must be a valid number"
ERROR_INVALID_POSITIVE = "Must be greater than zero"
ERROR_INVALID_NON_NEGATIVE = "Cannot be negative"
ERROR_INVALID_DATE = "Must be an ISO-8601 date (YYYY-MM-DD)"
