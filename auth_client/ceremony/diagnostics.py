# (c) Copyright Datacraft, 2026
"""Diagnostics sink for ceremony events."""
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CeremonyEvent:
	"""One recorded ceremony event."""
	name: str
	level: int = logging.INFO
	fields: dict[str, Any] = field(default_factory=dict)
	created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class DiagnosticsSink:
	"""Logs ceremony events and keeps the most recent ones in memory."""

	def __init__(self, history: int = 100):
		self._events: deque[CeremonyEvent] = deque(maxlen=history)
		self._lock = threading.Lock()

	def record(self, name: str, level: int = logging.INFO, **fields: Any) -> CeremonyEvent:
		event = CeremonyEvent(name=name, level=level, fields=fields)
		with self._lock:
			self._events.append(event)

		details = " ".join(f"{key}={value}" for key, value in fields.items())
		logger.log(level, f"{name} {details}".rstrip())
		return event

	def events(self, name: str | None = None) -> list[CeremonyEvent]:
		with self._lock:
			events = list(self._events)
		if name is None:
			return events
		return [event for event in events if event.name == name]

	def clear(self) -> None:
		with self._lock:
			self._events.clear()
