"""
Storage capabilities the pipeline relies on, independent of the database product.

``upsert_by_key`` makes "one row per conflict key" a property of the model's
unique constraint rather than of a particular client API.
"""

from typing import Any, Dict, Optional, Sequence, Type
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

logger = logging.getLogger(__name__)


class Repository:
    def __init__(self, db: Session):
        self.db = db

    def _insert(self, model):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            raise NotImplementedError(f"upsert is not supported on {dialect}")
        return insert(model.__table__)

    def upsert_by_key(
        self,
        model: Type,
        values: Dict[str, Any],
        conflict_keys: Sequence[str],
        update_columns: Optional[Sequence[str]] = None,
    ) -> None:
        """
        Insert a row, or update it in place when the conflict key already exists.

        Args:
            model: ORM class whose table carries a unique constraint on conflict_keys
            values: Column values for the row
            conflict_keys: Columns forming the unique key
            update_columns: Columns overwritten on conflict (default: every
                non-key column present in values)
        """
        stmt = self._insert(model).values(**values)

        columns = update_columns if update_columns is not None else list(values)
        set_ = {
            name: stmt.excluded[name]
            for name in columns
            if name in values and name not in conflict_keys
        }

        if set_:
            stmt = stmt.on_conflict_do_update(index_elements=list(conflict_keys), set_=set_)
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_keys))

        self.db.execute(stmt)

    def insert_unique(self, instance) -> bool:
        """
        Insert a new row, failing cleanly if a unique constraint rejects it.

        Returns:
            True if the row was committed, False if it already exists.
        """
        self.db.add(instance)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(
                f"Unique constraint rejected {type(instance).__name__}: {e.orig}"
            )
            return False
        self.db.refresh(instance)
        return True
