# (c) Copyright Datacraft, 2026
"""Ceremony error types and the authenticator error taxonomy."""
from enum import Enum


class AuthorizationErrorCode(str, Enum):
	"""Error codes an authenticator can report."""
	CANCELED = "canceled"
	FAILED = "failed"
	INVALID_RESPONSE = "invalid_response"
	NOT_HANDLED = "not_handled"
	NOT_INTERACTIVE = "not_interactive"
	UNKNOWN = "unknown"


class CeremonyError(Exception):
	"""Base ceremony error."""
	pass


class ChallengeUnavailable(CeremonyError):
	"""The server did not hand out a usable challenge."""
	pass


class CeremonyInProgressError(CeremonyError):
	"""A ceremony is already in flight."""
	pass


class AuthorizationError(CeremonyError):
	"""Error reported by the platform authenticator."""

	def __init__(self, code: AuthorizationErrorCode, message: str | None = None):
		self.code = AuthorizationErrorCode(code)
		self.message = message or self.code.value
		super().__init__(self.message)

	@property
	def is_cancellation(self) -> bool:
		return self.code is AuthorizationErrorCode.CANCELED


class UnexpectedCredentialError(CeremonyError):
	"""The authenticator returned a credential type it never promised.

	This is a broken contract with the platform, not a recoverable error.
	"""

	def __init__(self, credential: object):
		self.credential = credential
		super().__init__(
			f"Received unknown authorization type: {type(credential).__name__}"
		)


class VerificationError(CeremonyError):
	"""The verification server could not be reached or answered garbage."""
	pass


class VerificationRejected(CeremonyError):
	"""The verification server refused the credential."""
	pass


def classify_error(error: BaseException) -> AuthorizationErrorCode:
	"""Map any authenticator failure onto the taxonomy.

	Errors that did not come from the authenticator itself are ``UNKNOWN``.
	"""
	if isinstance(error, AuthorizationError):
		return error.code
	return AuthorizationErrorCode.UNKNOWN
