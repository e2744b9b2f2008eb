"""Document store facade over a SQLAlchemy session.

Managers never touch the session directly. They go through the handful of
query methods below, which keeps every store failure on one path: the
session is rolled back, the error is logged, and ``StoreUnavailableError``
is raised. Nothing here retries.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import ConcurrentModificationError, StoreUnavailableError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class DocumentStore:
    """Per-collection find/insert/update/delete on SQLAlchemy models."""

    def __init__(self, db: Session):
        """Initialize DocumentStore.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def _fail(self, operation: str, model: Type, exc: Exception) -> StoreUnavailableError:
        self.db.rollback()
        logger.error(
            "Document store %s failed on %s: %s",
            operation,
            getattr(model, "__tablename__", model),
            exc,
        )
        return StoreUnavailableError()

    def find_by_id(self, model: Type[ModelT], key_column, value: Any) -> Optional[ModelT]:
        """Find one document by an identifying column.

        Args:
            model: Model class (the collection).
            key_column: Column holding the document id, e.g. ``ClassModel.class_id``.
            value: The id to look up.

        Returns:
            The model instance or None.
        """
        return self.find_one(model, key_column == value)

    def find_one(self, model: Type[ModelT], *criteria) -> Optional[ModelT]:
        try:
            return self.db.query(model).filter(*criteria).first()
        except SQLAlchemyError as exc:
            raise self._fail("find_one", model, exc) from exc

    def find_by_filter(
        self,
        model: Type[ModelT],
        *criteria,
        order_by: Optional[List] = None,
        limit: Optional[int] = None,
    ) -> List[ModelT]:
        try:
            query = self.db.query(model).filter(*criteria)
            if order_by is not None:
                query = query.order_by(*order_by)
            if limit is not None:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as exc:
            raise self._fail("find_by_filter", model, exc) from exc

    def insert(self, instance: ModelT) -> ModelT:
        try:
            self.db.add(instance)
            self.db.commit()
            self.db.refresh(instance)
            return instance
        except SQLAlchemyError as exc:
            raise self._fail("insert", type(instance), exc) from exc

    def update_fields(
        self,
        model: Type,
        key_column,
        value: Any,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> int:
        """Atomically set fields on one document.

        When ``expected_version`` is given the update only applies if the
        stored ``version`` still equals it, and the version is bumped. A
        mismatch means someone else wrote first.

        Args:
            model: Model class (the collection).
            key_column: Column holding the document id.
            value: The id of the document to update.
            fields: Column name to new value.
            expected_version: Version read before the change, or None for an
                unconditional update.

        Returns:
            Number of updated documents. Without ``expected_version`` a
            missing document gives 0 rather than an error.

        Raises:
            ConcurrentModificationError: If the version no longer matches.
            StoreUnavailableError: If the store fails.
        """
        values = dict(fields)
        stmt = update(model).where(key_column == value)
        if expected_version is not None:
            stmt = stmt.where(model.version == expected_version)
            values["version"] = expected_version + 1
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        try:
            result = self.db.execute(stmt)
            if result.rowcount == 0:
                self.db.rollback()
            else:
                self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("update_fields", model, exc) from exc

        if result.rowcount == 0:
            if expected_version is not None:
                raise ConcurrentModificationError()
            return 0
        # Drop stale identity-map copies so the next read sees the new row
        self.db.expire_all()
        return result.rowcount

    def delete_by_filter(self, model: Type, *criteria) -> int:
        """Delete every document matching the criteria.

        Returns:
            Number of deleted documents.
        """
        try:
            count = (
                self.db.query(model)
                .filter(*criteria)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete_by_filter", model, exc) from exc
        self.db.expire_all()
        return count
