"""
Base Repository - shared data access for the local store

Each repository maps one table. Rows are plain dicts using the table's
column names, which are also the column names of the remote Supabase
tables, so the same mapping serves both stores.

Author: TM3
Date: 2026-10-19
"""
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, func, select


class BaseRepository:
    """
    Repository for one local table

    Subclasses set `model` and implement `to_row` / `from_row`.
    Returns domain models, not ORM records.
    """

    model = None
    # Column used by find_all, newest first when descending
    order_by: str = "id"
    descending: bool = False

    def __init__(self, session_factory):
        self._session_factory = session_factory

    # =========================================================================
    # Mapping
    # =========================================================================

    def to_row(self, entity) -> Dict[str, Any]:
        """Domain model -> JSON-compatible row"""
        raise NotImplementedError

    def from_row(self, row: Dict[str, Any]):
        """Row (local or remote) -> domain model"""
        raise NotImplementedError

    def _record_to_row(self, record) -> Dict[str, Any]:
        return {column.name: getattr(record, column.name) for column in self.model.__table__.columns}

    # =========================================================================
    # Queries
    # =========================================================================

    def find_all(self) -> List:
        """
        Get every entity in the table

        Returns:
            Domain models ordered by `order_by`
        """
        column = getattr(self.model, self.order_by)
        statement = select(self.model).order_by(column.desc() if self.descending else column.asc())

        with self._session_factory() as session:
            records = session.scalars(statement).all()
            return [self.from_row(self._record_to_row(record)) for record in records]

    def find_by_id(self, entity_id: str) -> Optional[Any]:
        with self._session_factory() as session:
            record = session.get(self.model, entity_id)
            if record is None:
                return None
            return self.from_row(self._record_to_row(record))

    def count(self) -> int:
        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(self.model))

    # =========================================================================
    # Commands
    # =========================================================================

    def save(self, entity) -> None:
        """Insert or update one entity"""
        self.save_all([entity])

    def save_all(self, entities: Iterable) -> None:
        """Insert or update many entities in one transaction"""
        with self._session_factory() as session:
            for entity in entities:
                session.merge(self.model(**self.to_row(entity)))
            session.commit()

    def delete(self, entity_id: str) -> None:
        """Delete by ID; unknown IDs are ignored"""
        with self._session_factory() as session:
            session.execute(delete(self.model).where(self.model.id == entity_id))
            session.commit()

    def replace_all(self, entities: Iterable) -> None:
        """Replace the whole table contents in one transaction"""
        with self._session_factory() as session:
            session.execute(delete(self.model))
            for entity in entities:
                session.add(self.model(**self.to_row(entity)))
            session.commit()
