"""Inventory Ledger - purchase-to-stock reconciliation for small workshops."""

from .utils.constants import APP_VERSION

__version__ = APP_VERSION
