"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across reconciliation, registry and
ledger operations.

Usage:
    from inventory_ledger.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="create_purchase",
        outcome="success",
        purchase_id=12,
        material_name="Teak Wood",
    )
"""

import logging
from typing import Any

LOGGER_PREFIX = "inventory_ledger.services"


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance with the 'inventory_ledger.services' prefix.

    Example:
        >>> logger = get_service_logger("inventory_ledger.services.reconciliation_service")
        >>> logger.name
        'inventory_ledger.services.reconciliation_service'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter, so handlers and
    formatters can read each field as a record attribute.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "create_purchase")
        outcome: Outcome description (e.g., "success", "storage_error")
        level: Log level (default: INFO)
        **context: Additional context fields (purchase_id, material_name,
            quantity_delta, error, ...)

    Example:
        >>> log_operation(
        ...     logger,
        ...     operation="delete_purchase",
        ...     outcome="orphaned",
        ...     level=logging.WARNING,
        ...     purchase_id=7,
        ...     material_name="Oak",
        ... )
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
