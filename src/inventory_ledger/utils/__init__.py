"""Utilities package for the inventory ledger."""

from .config import Config, get_config, reset_config
from .validators import normalize_name, to_decimal

__all__ = [
    "Config",
    "get_config",
    "reset_config",
    "normalize_name",
    "to_decimal",
]
