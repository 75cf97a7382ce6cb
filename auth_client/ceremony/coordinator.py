# (c) Copyright Datacraft, 2026
"""Authentication ceremony coordinator.

Owns the lifecycle of one sign-in or sign-up ceremony at a time:

	idle -> in_flight -> completed | failed | canceled -> idle

Terminal states are not kept; they are visible through ``last_state`` and
through the notification that accompanies them.
"""
import asyncio
import logging
import threading
from typing import Any, Coroutine

from webauthn.helpers import bytes_to_base64url

from auth_client.config import Settings, get_settings
from auth_client.schema import (
	AuthenticationOutcome,
	CeremonyKind,
	CeremonyState,
	PasskeyAsserted,
	PasskeyRegistered,
	PasswordVerified,
)

from .authenticator import (
	PasswordCredential,
	PlatformAssertion,
	PlatformAuthenticator,
	PlatformCredential,
	PlatformRegistration,
)
from .challenge import ChallengeSource, HttpChallengeSource
from .diagnostics import DiagnosticsSink
from .errors import (
	AuthorizationError,
	CeremonyInProgressError,
	ChallengeUnavailable,
	UnexpectedCredentialError,
	VerificationError,
	VerificationRejected,
	classify_error,
)
from .notifier import OutcomeNotifier, Signal, default_notifier
from .requests import CredentialRequestBuilder
from .verification import CredentialVerifier, HttpCredentialVerifier

logger = logging.getLogger(__name__)


def classify_credential(credential: PlatformCredential) -> AuthenticationOutcome:
	"""Turn the authenticator's credential into an outcome.

	Raises:
		UnexpectedCredentialError: for anything but the three promised types
	"""
	if isinstance(credential, PlatformRegistration):
		return PasskeyRegistered(credential_id=bytes_to_base64url(credential.credential_id))
	if isinstance(credential, PlatformAssertion):
		return PasskeyAsserted(credential_id=bytes_to_base64url(credential.credential_id))
	if isinstance(credential, PasswordCredential):
		return PasswordVerified(username=credential.user)
	raise UnexpectedCredentialError(credential)


class CeremonyCoordinator:
	"""Runs passkey/password ceremonies against the platform authenticator.

	At most one ceremony is in flight. A second ``start_*`` call while one is
	running raises ``CeremonyInProgressError`` and leaves the running
	ceremony untouched.
	"""

	def __init__(
		self,
		authenticator: PlatformAuthenticator,
		challenge_source: ChallengeSource | None = None,
		verifier: CredentialVerifier | None = None,
		notifier: OutcomeNotifier | None = None,
		builder: CredentialRequestBuilder | None = None,
		diagnostics: DiagnosticsSink | None = None,
		settings: Settings | None = None,
	):
		self.settings = settings or get_settings()
		self.authenticator = authenticator
		self.challenge_source = challenge_source or HttpChallengeSource(self.settings)
		self.verifier = verifier or HttpCredentialVerifier(self.settings)
		self.notifier = notifier or default_notifier
		self.builder = builder or CredentialRequestBuilder(self.settings)
		self.diagnostics = diagnostics or DiagnosticsSink(self.settings.diagnostics_history)

		# Guards everything below; completion handlers may run on another thread
		self._lock = threading.RLock()
		self._state = CeremonyState.IDLE
		self._last_state: CeremonyState | None = None
		self._kind: CeremonyKind | None = None
		self._anchor: Any = None
		self._challenge: bytes | None = None
		self._generation = 0
		self._tasks: set[asyncio.Task] = set()

	@property
	def state(self) -> CeremonyState:
		return self._state

	@property
	def last_state(self) -> CeremonyState | None:
		"""Terminal state of the most recent ceremony."""
		return self._last_state

	@property
	def is_performing_modal_request(self) -> bool:
		return self._state is CeremonyState.IN_FLIGHT

	@property
	def active_anchor(self) -> Any:
		return self._anchor

	@property
	def kind(self) -> CeremonyKind | None:
		return self._kind

	def start_sign_in(
		self,
		anchor: Any,
		prefer_immediately_available_credentials: bool = False,
	) -> asyncio.Task:
		"""Sign in with a passkey or a saved password.

		With ``prefer_immediately_available_credentials`` the authenticator
		only offers credentials already on the device and stays quiet
		otherwise.
		"""
		loop = asyncio.get_running_loop()
		kind = CeremonyKind.SIGN_IN_WITH_PASSKEY_OR_PASSWORD
		generation = self._admit(kind, anchor)
		return self._spawn(loop, generation, self._run(
			generation,
			kind,
			anchor,
			prefer_immediately_available_credentials=prefer_immediately_available_credentials,
		))

	def start_sign_up(self, anchor: Any, display_name: str) -> asyncio.Task:
		"""Register a new passkey for ``display_name``."""
		if not display_name or not display_name.strip():
			raise ValueError("display_name is expected to be non-empty")

		loop = asyncio.get_running_loop()
		kind = CeremonyKind.SIGN_UP_WITH_PASSKEY
		generation = self._admit(kind, anchor)
		return self._spawn(loop, generation, self._run(generation, kind, anchor, display_name=display_name))

	async def complete_with_credential(
		self,
		credential: PlatformCredential,
	) -> AuthenticationOutcome | None:
		"""Success half of the authenticator callback pair, for the current ceremony."""
		with self._lock:
			generation = self._generation
		return await self._complete_with_credential(generation, credential)

	def complete_with_error(self, error: BaseException) -> None:
		"""Error half of the authenticator callback pair, for the current ceremony."""
		with self._lock:
			generation = self._generation
		self._complete_with_error(generation, error)

	async def _complete_with_credential(
		self,
		generation: int,
		credential: PlatformCredential,
	) -> AuthenticationOutcome | None:
		with self._lock:
			if not self._is_current(generation) or self._challenge is None:
				self.diagnostics.record(
					"stray_completion",
					logging.WARNING,
					credential=type(credential).__name__,
					generation=generation,
				)
				return None
			kind = self._kind
			challenge = self._challenge

		try:
			outcome = classify_credential(credential)
		except UnexpectedCredentialError as e:
			self.diagnostics.record("unexpected_credential", logging.CRITICAL, error=e)
			self._end(generation, CeremonyState.FAILED)
			raise

		self.diagnostics.record("credential_received", kind=kind.value, outcome=outcome.kind)

		error: Exception | None = None
		try:
			if not await self.verifier.verify(challenge, credential):
				error = VerificationRejected(f"Server rejected {outcome.kind}")
				self.diagnostics.record("verification_rejected", logging.WARNING, outcome=outcome.kind)
		except VerificationError as e:
			self.diagnostics.record("verification_failed", logging.ERROR, error=e)
			error = e

		if error is not None:
			ended = self._fail(generation, error)
		else:
			ended = self._end(generation, CeremonyState.COMPLETED) is not None
		if not ended:
			# Ended elsewhere while the server was verifying
			self.diagnostics.record("verified_after_end", logging.WARNING, outcome=outcome.kind)
			return None
		if error is not None:
			return None

		self.notifier.publish(Signal.USER_SIGNED_IN, kind=kind, outcome=outcome)
		return outcome

	def _complete_with_error(self, generation: int, error: BaseException) -> None:
		code = classify_error(error)
		if isinstance(error, AuthorizationError):
			level = logging.INFO if error.is_cancellation else logging.ERROR
			self.diagnostics.record("authorization_error", level, code=code.value, message=error.message)
		else:
			self.diagnostics.record("unexpected_authorization_error", logging.ERROR, error=error)

		if isinstance(error, AuthorizationError) and error.is_cancellation:
			kind = self._end(generation, CeremonyState.CANCELED)
			if kind is not None:
				self.notifier.publish(Signal.MODAL_CEREMONY_CANCELED, kind=kind, error=error)
				return
		elif self._fail(generation, error):
			return
		self.diagnostics.record("stray_completion", logging.WARNING, error=code.value, generation=generation)

	def _admit(self, kind: CeremonyKind, anchor: Any) -> int:
		with self._lock:
			if self._state is not CeremonyState.IDLE:
				self.diagnostics.record(
					"ceremony_rejected",
					logging.WARNING,
					requested=kind.value,
					active=self._kind.value if self._kind else None,
				)
				raise CeremonyInProgressError(
					f"A {self._kind.value if self._kind else 'ceremony'} is already in flight"
				)
			self._generation += 1
			self._state = CeremonyState.IN_FLIGHT
			self._kind = kind
			self._anchor = anchor
			self._challenge = None
			self.diagnostics.record("ceremony_started", kind=kind.value, generation=self._generation)
			return self._generation

	def _spawn(self, loop: asyncio.AbstractEventLoop, generation: int, coro: Coroutine) -> asyncio.Task:
		task = loop.create_task(coro)
		self._tasks.add(task)
		task.add_done_callback(self._tasks.discard)
		# A task cancelled before its first step never reaches the finally in _run
		task.add_done_callback(lambda _: self._abandon(generation))
		task.add_done_callback(_log_task_error)
		return task

	async def _run(
		self,
		generation: int,
		kind: CeremonyKind,
		anchor: Any,
		*,
		display_name: str | None = None,
		prefer_immediately_available_credentials: bool = False,
	) -> AuthenticationOutcome | None:
		try:
			try:
				challenge = await self.challenge_source.fetch(kind)
			except ChallengeUnavailable as e:
				self.diagnostics.record("challenge_unavailable", logging.ERROR, kind=kind.value, error=e)
				self._fail(generation, e)
				return None
			if not challenge:
				self.diagnostics.record("challenge_unavailable", logging.ERROR, kind=kind.value, error="empty")
				self._fail(generation, ChallengeUnavailable("Empty challenge"))
				return None

			request = self.builder.build(
				kind,
				challenge,
				display_name=display_name,
				prefer_immediately_available_credentials=prefer_immediately_available_credentials,
			)
			with self._lock:
				if not self._is_current(generation):
					# Ended by a stray callback while the challenge was in transit
					return None
				self._challenge = challenge

			self.diagnostics.record(
				"ceremony_dispatched",
				kind=kind.value,
				requests=len(request.requests),
				immediate=request.prefer_immediately_available_credentials,
			)
			try:
				credential = await self.authenticator.perform_requests(request, anchor)
			except Exception as e:
				self._complete_with_error(generation, e)
				return None
			return await self._complete_with_credential(generation, credential)
		finally:
			self._abandon(generation)

	def _abandon(self, generation: int) -> None:
		with self._lock:
			if self._is_current(generation):
				self.diagnostics.record("ceremony_aborted", logging.ERROR, kind=self._kind.value)
				self._finish(CeremonyState.FAILED)

	def _is_current(self, generation: int) -> bool:
		return self._generation == generation and self._state is CeremonyState.IN_FLIGHT

	def _end(self, generation: int, state: CeremonyState) -> CeremonyKind | None:
		"""Move ceremony ``generation`` to ``state`` if it is still the one in flight.

		Returns its kind, or None when that ceremony already ended.
		"""
		with self._lock:
			if not self._is_current(generation):
				return None
			return self._finish(state)

	def _finish(self, state: CeremonyState) -> CeremonyKind | None:
		with self._lock:
			kind = self._kind
			self._last_state = state
			self._state = CeremonyState.IDLE
			self._kind = None
			self._anchor = None
			self._challenge = None
		self.diagnostics.record("ceremony_finished", kind=kind.value if kind else None, state=state.value)
		return kind

	def _fail(self, generation: int, error: BaseException) -> bool:
		kind = self._end(generation, CeremonyState.FAILED)
		if kind is None:
			return False
		if self.settings.publish_failures:
			self.notifier.publish(Signal.CEREMONY_FAILED, kind=kind, error=error)
		return True


def _log_task_error(task: asyncio.Task) -> None:
	if task.cancelled():
		return
	error = task.exception()
	if error is not None:
		logger.critical(f"Ceremony task crashed: {error!r}")
