"""Checkpoint persistence for the index runner."""

from __future__ import annotations

from landverse.models import IndexerCursor

from .entity_store import EntityStore


def cursor_key(contract_version: str, strategy: str, address: str | None) -> str:
    return f"{contract_version}:{strategy}:{(address or 'local').lower()}"


class CursorRepository:
    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def get(self, cursor_id: str) -> IndexerCursor | None:
        return self._store.load(IndexerCursor, cursor_id)

    def last_indexed_block(self, cursor_id: str) -> int | None:
        cursor = self.get(cursor_id)
        return cursor.last_indexed_block if cursor else None

    def advance(self, cursor_id: str, block_number: int) -> IndexerCursor:
        cursor = self.get(cursor_id)
        if cursor is None:
            cursor = IndexerCursor(cursor_id=cursor_id, last_indexed_block=block_number)
        elif block_number < cursor.last_indexed_block:
            raise ValueError(
                f"Cursor {cursor_id} cannot move backwards "
                f"({cursor.last_indexed_block} -> {block_number})"
            )
        else:
            cursor.last_indexed_block = block_number
        return self._store.save(cursor)
