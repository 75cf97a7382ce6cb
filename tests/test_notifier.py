from __future__ import annotations

import logging

from auth_client.ceremony import DiagnosticsSink, Notification, OutcomeNotifier, Signal, default_notifier
from auth_client.schema import PasswordVerified


def test_delivery_follows_registration_order() -> None:
	notifier = OutcomeNotifier()
	order: list[str] = []
	notifier.subscribe(Signal.USER_SIGNED_IN, lambda n: order.append("first"))
	notifier.subscribe(Signal.USER_SIGNED_IN, lambda n: order.append("second"))
	notifier.subscribe(Signal.MODAL_CEREMONY_CANCELED, lambda n: order.append("canceled"))

	notifier.publish(Signal.USER_SIGNED_IN, outcome=PasswordVerified(username="alice"))

	assert order == ["first", "second"]


def test_unsubscribe_stops_delivery() -> None:
	notifier = OutcomeNotifier()
	received: list[Notification] = []
	unsubscribe = notifier.subscribe(Signal.MODAL_CEREMONY_CANCELED, received.append)

	unsubscribe()
	unsubscribe()
	notifier.publish(Signal.MODAL_CEREMONY_CANCELED)

	assert received == []
	assert notifier.subscriber_count(Signal.MODAL_CEREMONY_CANCELED) == 0


def test_failing_subscriber_does_not_block_others(caplog) -> None:
	notifier = OutcomeNotifier()
	received: list[Notification] = []

	def explode(notification: Notification) -> None:
		raise RuntimeError("subscriber bug")

	notifier.subscribe(Signal.USER_SIGNED_IN, explode)
	notifier.subscribe(Signal.USER_SIGNED_IN, received.append)

	with caplog.at_level(logging.ERROR):
		notification = notifier.publish(Signal.USER_SIGNED_IN)

	assert received == [notification]
	assert "subscriber bug" in caplog.text


def test_signals_accept_plain_names() -> None:
	notifier = OutcomeNotifier()
	received: list[Notification] = []
	notifier.subscribe("user_signed_in", received.append)  # type: ignore[arg-type]

	notifier.publish(Signal.USER_SIGNED_IN)

	assert received[0].signal is Signal.USER_SIGNED_IN


def test_default_notifier_is_shared() -> None:
	from auth_client.ceremony.notifier import default_notifier as again

	assert default_notifier is again


def test_diagnostics_keeps_bounded_history(caplog) -> None:
	sink = DiagnosticsSink(history=2)

	with caplog.at_level(logging.INFO, logger="auth_client.ceremony.diagnostics"):
		sink.record("ceremony_started", kind="sign_up_with_passkey")
		sink.record("ceremony_dispatched")
		sink.record("ceremony_finished", logging.WARNING, state="failed")

	assert [event.name for event in sink.events()] == ["ceremony_dispatched", "ceremony_finished"]
	assert sink.events("ceremony_finished")[0].fields == {"state": "failed"}
	assert "ceremony_started kind=sign_up_with_passkey" in caplog.text
	sink.clear()
	assert sink.events() == []
