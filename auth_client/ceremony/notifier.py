# (c) Copyright Datacraft, 2026
"""Publish/subscribe channel for ceremony outcomes."""
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from auth_client.schema import AuthenticationOutcome, CeremonyKind

logger = logging.getLogger(__name__)


class Signal(str, Enum):
	"""Signals published by the ceremony coordinator."""
	USER_SIGNED_IN = "user_signed_in"
	MODAL_CEREMONY_CANCELED = "modal_ceremony_canceled"
	CEREMONY_FAILED = "ceremony_failed"


@dataclass(frozen=True)
class Notification:
	"""What subscribers receive."""
	signal: Signal
	kind: CeremonyKind | None = None
	outcome: AuthenticationOutcome | None = None
	error: BaseException | None = None


Subscriber = Callable[[Notification], None]


class OutcomeNotifier:
	"""Multi-subscriber event channel.

	Delivery is synchronous, in registration order, fire-and-forget: a
	subscriber that raises is logged and the remaining ones still run.
	"""

	def __init__(self):
		self._subscribers: dict[Signal, list[Subscriber]] = {signal: [] for signal in Signal}
		self._lock = threading.Lock()

	def subscribe(self, signal: Signal, callback: Subscriber) -> Callable[[], None]:
		"""Register ``callback`` and return a function that unregisters it."""
		signal = Signal(signal)
		with self._lock:
			self._subscribers[signal].append(callback)

		def unsubscribe() -> None:
			with self._lock:
				if callback in self._subscribers[signal]:
					self._subscribers[signal].remove(callback)

		return unsubscribe

	def subscriber_count(self, signal: Signal) -> int:
		return len(self._subscribers[Signal(signal)])

	def publish(
		self,
		signal: Signal,
		*,
		kind: CeremonyKind | None = None,
		outcome: AuthenticationOutcome | None = None,
		error: BaseException | None = None,
	) -> Notification:
		notification = Notification(signal=Signal(signal), kind=kind, outcome=outcome, error=error)
		with self._lock:
			subscribers = list(self._subscribers[notification.signal])

		for callback in subscribers:
			try:
				callback(notification)
			except Exception:
				logger.exception(f"Subscriber {callback!r} failed on {notification.signal.value}")
		return notification


# Process-wide channel
default_notifier = OutcomeNotifier()
