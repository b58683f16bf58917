"""Key-value access to persisted entities."""

from __future__ import annotations

from typing import TypeVar

from sqlalchemy.orm import Session

EntityT = TypeVar("EntityT")


class EntityStore:
    """Load and upsert whole records by (entity type, id).

    There are no partial updates: callers load a record, mutate it and save
    it back. Saving a record whose id already exists overwrites it.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def load(self, entity_type: type[EntityT], entity_id: str) -> EntityT | None:
        return self._session.get(entity_type, entity_id)

    def save(self, record: EntityT) -> EntityT:
        return self._session.merge(record)
