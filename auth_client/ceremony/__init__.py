# (c) Copyright Datacraft, 2026
"""Passkey / password authentication ceremonies."""

from .authenticator import (
	PasswordCredential,
	PlatformAssertion,
	PlatformAuthenticator,
	PlatformRegistration,
)
from .challenge import ChallengeSource, HttpChallengeSource, LocalChallengeSource
from .coordinator import CeremonyCoordinator, classify_credential
from .diagnostics import CeremonyEvent, DiagnosticsSink
from .errors import (
	AuthorizationError,
	AuthorizationErrorCode,
	CeremonyError,
	CeremonyInProgressError,
	ChallengeUnavailable,
	UnexpectedCredentialError,
	VerificationError,
	VerificationRejected,
)
from .notifier import Notification, OutcomeNotifier, Signal, default_notifier
from .requests import (
	AssertionRequest,
	CeremonyRequest,
	CredentialRequestBuilder,
	PasswordRequest,
	RegistrationRequest,
)
from .verification import AcceptAllVerifier, CredentialVerifier, HttpCredentialVerifier

__all__ = [
	"AcceptAllVerifier",
	"AssertionRequest",
	"AuthorizationError",
	"AuthorizationErrorCode",
	"CeremonyCoordinator",
	"CeremonyError",
	"CeremonyEvent",
	"CeremonyInProgressError",
	"CeremonyRequest",
	"ChallengeSource",
	"ChallengeUnavailable",
	"CredentialRequestBuilder",
	"CredentialVerifier",
	"DiagnosticsSink",
	"HttpChallengeSource",
	"HttpCredentialVerifier",
	"LocalChallengeSource",
	"Notification",
	"OutcomeNotifier",
	"PasswordCredential",
	"PasswordRequest",
	"PlatformAssertion",
	"PlatformAuthenticator",
	"PlatformRegistration",
	"RegistrationRequest",
	"Signal",
	"UnexpectedCredentialError",
	"VerificationError",
	"VerificationRejected",
	"classify_credential",
	"default_notifier",
]
