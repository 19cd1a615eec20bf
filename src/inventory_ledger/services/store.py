"""Inventory store - explicit persistence handle for the service layer.

The store wraps one SQLAlchemy session and offers the small collaborator
contract the registry, ledger and reconciliation services rely on:

- add_item(record) -> record       (flush assigns the id)
- update_item(record) -> record
- delete_item(model, id) -> bool
- get_item(model, id) -> record | None
- get_all(model) -> list
- find_all / find_first for filtered reads

Every SQLAlchemy failure surfaces as StorageError. Writes run inside a unit
of work: a standalone call commits by itself, while calls made inside
``with store.unit_of_work():`` join that unit and commit or roll back
together.

Example:
    >>> with store.unit_of_work():
    ...     store.add_item(purchase)
    ...     store.update_item(material)
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .exceptions import StorageError


class InventoryStore:
    """Persistence handle bound to a single session.

    Args:
        session: SQLAlchemy session owned by this store
    """

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    @property
    def in_unit_of_work(self) -> bool:
        """True while a unit of work is open on this store."""
        return self._depth > 0

    @contextmanager
    def unit_of_work(self) -> Iterator["InventoryStore"]:
        """
        Group writes so they are applied together or not at all.

        Only the outermost unit commits; nested units join it. Any exception
        rolls the whole unit back and propagates to the caller.

        Raises:
            StorageError: If the commit or any SQLAlchemy operation fails
        """
        outermost = self._depth == 0
        self._depth += 1
        try:
            yield self
            if outermost:
                self.session.commit()
        except SQLAlchemyError as e:
            if outermost:
                self.session.rollback()
            raise StorageError(f"unit of work failed: {e}", e) from e
        except Exception:
            if outermost:
                self.session.rollback()
            raise
        finally:
            self._depth -= 1

    @contextmanager
    def _storage_errors(self, action: str) -> Iterator[None]:
        """Translate SQLAlchemy failures into StorageError."""
        try:
            yield
        except SQLAlchemyError as e:
            raise StorageError(f"{action} failed: {e}", e) from e

    # =========================================================================
    # Writes
    # =========================================================================

    def add_item(self, record: Any) -> Any:
        """Insert a record and return it with its id assigned."""
        with self.unit_of_work():
            with self._storage_errors(f"add {type(record).__name__}"):
                self.session.add(record)
                self.session.flush()
        return record

    def update_item(self, record: Any) -> Any:
        """Persist changes made to a record."""
        with self.unit_of_work():
            with self._storage_errors(f"update {type(record).__name__}"):
                self.session.add(record)
                self.session.flush()
        return record

    def delete_item(self, model: Type, item_id: int) -> bool:
        """
        Delete a record by id.

        Returns:
            True if a record was deleted, False if none matched
        """
        with self.unit_of_work():
            with self._storage_errors(f"delete {model.__name__}"):
                record = self.session.get(model, item_id)
                if record is None:
                    return False
                self.session.delete(record)
                self.session.flush()
        return True

    # =========================================================================
    # Reads
    # =========================================================================

    def get_item(self, model: Type, item_id: int) -> Optional[Any]:
        """Fetch a record by id, or None."""
        with self._storage_errors(f"get {model.__name__}"):
            return self.session.get(model, item_id)

    def get_all(self, model: Type) -> List[Any]:
        """Fetch every record of a model in insertion (id) order."""
        with self._storage_errors(f"list {model.__name__}"):
            return self.session.query(model).order_by(model.id).all()

    def find_all(
        self,
        model: Type,
        *criteria: Any,
        order_by: Any = None,
        limit: Optional[int] = None,
    ) -> List[Any]:
        """
        Fetch records matching SQLAlchemy filter criteria.

        Args:
            model: Model class to query
            *criteria: Filter expressions (e.g., Purchase.supplier_id == 3)
            order_by: Ordering expression or tuple of expressions (defaults to model.id)
            limit: Maximum number of results
        """
        with self._storage_errors(f"query {model.__name__}"):
            query = self.session.query(model).filter(*criteria)
            if order_by is None:
                order_by = model.id
            if isinstance(order_by, (tuple, list)):
                query = query.order_by(*order_by)
            else:
                query = query.order_by(order_by)
            if limit is not None:
                query = query.limit(limit)
            return query.all()

    def find_first(self, model: Type, *criteria: Any) -> Optional[Any]:
        """Fetch the oldest record matching the criteria, or None."""
        results = self.find_all(model, *criteria, limit=1)
        return results[0] if results else None

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()
