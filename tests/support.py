from __future__ import annotations

import asyncio
from typing import Any

from auth_client.ceremony import (
	CeremonyRequest,
	ChallengeUnavailable,
	Notification,
	OutcomeNotifier,
	Signal,
)
from auth_client.config import Settings
from auth_client.schema import CeremonyKind


def make_settings(**overrides: Any) -> Settings:
	values = {"server_url": "https://rp.example.com", "rp_id": "rp.example.com"}
	values.update(overrides)
	return Settings(**values)


class StaticChallengeSource:
	def __init__(self, challenge: bytes = bytes.fromhex("abcd")) -> None:
		self.challenge = challenge
		self.kinds: list[CeremonyKind] = []

	async def fetch(self, kind: CeremonyKind) -> bytes:
		self.kinds.append(kind)
		return self.challenge


class FailingChallengeSource:
	async def fetch(self, kind: CeremonyKind) -> bytes:
		raise ChallengeUnavailable("server unreachable")


class ScriptedAuthenticator:
	"""Answers every ceremony with the next scripted credential or error."""

	def __init__(self, *results: Any, gate: asyncio.Event | None = None) -> None:
		self.results = list(results)
		self.gate = gate
		self.calls: list[tuple[CeremonyRequest, Any]] = []

	async def perform_requests(self, request: CeremonyRequest, anchor: Any) -> Any:
		self.calls.append((request, anchor))
		if self.gate is not None:
			await self.gate.wait()
		result = self.results.pop(0)
		if isinstance(result, BaseException):
			raise result
		return result


class RecordingVerifier:
	def __init__(self, accept: bool = True) -> None:
		self.accept = accept
		self.seen: list[tuple[bytes, Any]] = []

	async def verify(self, challenge: bytes, credential: Any) -> bool:
		self.seen.append((challenge, credential))
		return self.accept


class NotificationRecorder:
	def __init__(self, notifier: OutcomeNotifier) -> None:
		self.received: list[Notification] = []
		for signal in Signal:
			notifier.subscribe(signal, self.received.append)

	def of(self, signal: Signal) -> list[Notification]:
		return [n for n in self.received if n.signal is signal]


class ParkedAuthenticator:
	"""Parks every ceremony on a future the test resolves, like a callback bridge."""

	def __init__(self) -> None:
		self.pending: list[asyncio.Future] = []
		self.anchors: list[Any] = []

	async def perform_requests(self, request: CeremonyRequest, anchor: Any) -> Any:
		future = asyncio.get_running_loop().create_future()
		self.pending.append(future)
		self.anchors.append(anchor)
		return await future

	async def wait_for_calls(self, count: int) -> None:
		for _ in range(100):
			if len(self.pending) >= count:
				return
			await asyncio.sleep(0)
		raise AssertionError(f"expected {count} authenticator calls, saw {len(self.pending)}")
