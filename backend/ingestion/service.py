from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

from loguru import logger
from sqlalchemy.orm import Session

from landverse.core.config import ContractVersion
from landverse.db import SessionLocal

from .abi import catalogue_for
from .normalize import EventDecodeError, event_from_payload


@contextmanager
def session_scope() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _read_payloads(path: Path) -> list[dict[str, Any]]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".jsonl":
        payloads = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                payloads.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise EventDecodeError(f"{path}:{line_number} is not valid JSON: {exc}") from exc
        return payloads

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise EventDecodeError(f"{path} is not valid JSON: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("events", [])
    if not isinstance(data, list):
        raise EventDecodeError(f"{path} must hold a list of events")
    return data


def load_event_file(path: str | Path, version: ContractVersion | str) -> list[Any]:
    """Parse an exported event file (``.json`` array or ``.jsonl``) into typed events."""

    source = Path(path)
    catalogue = catalogue_for(version)
    events = [event_from_payload(payload, catalogue) for payload in _read_payloads(source)]
    events.sort(key=lambda event: event.envelope.sort_key)
    logger.info("Loaded {} {} events from {}", len(events), catalogue.version.value, source)
    return events


class EventFileSource:
    """Event source backed by an in-memory list, usually loaded from a file."""

    def __init__(self, events: Iterable[Any]) -> None:
        self.events = sorted(events, key=lambda event: event.envelope.sort_key)

    @classmethod
    def from_path(cls, path: str | Path, version: ContractVersion | str) -> "EventFileSource":
        return cls(load_event_file(path, version))

    def latest_block(self) -> int:
        if not self.events:
            return 0
        return self.events[-1].envelope.block_number

    def fetch_events(self, from_block: int, to_block: int) -> list[Any]:
        return [
            event
            for event in self.events
            if from_block <= event.envelope.block_number <= to_block
        ]
