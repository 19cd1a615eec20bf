"""Service layer exception classes for the inventory ledger.

This module defines the exceptions raised by the service layer so callers
get consistent error handling across registry, ledger and reconciliation
operations.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── ReferenceNotFound
    │   ├── SupplierNotFoundError
    │   ├── PurchaseNotFound
    │   └── RawMaterialNotFound
    └── StorageError
"""


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions inherit from this class.
    """

    pass


class ValidationError(ServiceError):
    """Raised when input validation fails, before any write happens.

    Args:
        errors: List of field error messages

    Example:
        >>> raise ValidationError(["quantity: Must be greater than zero"])
        ValidationError: Validation failed: quantity: Must be greater than zero
    """

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class ReferenceNotFound(ServiceError):
    """Raised when an id or name reference does not resolve."""

    pass


class SupplierNotFoundError(ReferenceNotFound):
    """Raised when a supplier cannot be found by ID.

    Example:
        >>> raise SupplierNotFoundError(123)
        SupplierNotFoundError: Supplier with ID 123 not found
    """

    def __init__(self, supplier_id: int):
        self.supplier_id = supplier_id
        super().__init__(f"Supplier with ID {supplier_id} not found")


class PurchaseNotFound(ReferenceNotFound):
    """Raised when purchase record cannot be found by ID.

    Example:
        >>> raise PurchaseNotFound(789)
        PurchaseNotFound: Purchase with ID 789 not found
    """

    def __init__(self, purchase_id: int):
        self.purchase_id = purchase_id
        super().__init__(f"Purchase with ID {purchase_id} not found")


class RawMaterialNotFound(ReferenceNotFound):
    """Raised when a raw material cannot be found by ID or name."""

    def __init__(self, identifier):
        self.identifier = identifier
        if isinstance(identifier, int):
            message = f"Raw material with ID {identifier} not found"
        else:
            message = f"Raw material '{identifier}' not found"
        super().__init__(message)


class StorageError(ServiceError):
    """Raised when the persistence layer fails a read or write.

    Args:
        message: Description of the failed operation
        original_error: The underlying exception, if any
    """

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Storage error: {message}")
