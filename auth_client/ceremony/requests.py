# (c) Copyright Datacraft, 2026
"""Request descriptors handed to the platform authenticator."""

import uuid
from dataclasses import dataclass, field

from webauthn import (
	generate_authentication_options,
	generate_registration_options,
	options_to_json,
)
from webauthn.helpers.structs import (
	AttestationConveyancePreference,
	AuthenticatorAttachment,
	AuthenticatorSelectionCriteria,
	COSEAlgorithmIdentifier,
	PublicKeyCredentialCreationOptions,
	PublicKeyCredentialRequestOptions,
	ResidentKeyRequirement,
	UserVerificationRequirement,
)

from auth_client.config import Settings, get_settings
from auth_client.schema import CeremonyKind


@dataclass(frozen=True)
class AssertionRequest:
	"""Ask for proof of possession of an existing platform passkey."""
	options: PublicKeyCredentialRequestOptions

	def to_json(self) -> str:
		return options_to_json(self.options)


@dataclass(frozen=True)
class PasswordRequest:
	"""Ask for a stored password for the relying party."""
	rp_id: str


@dataclass(frozen=True)
class RegistrationRequest:
	"""Ask the authenticator to create a new passkey."""
	options: PublicKeyCredentialCreationOptions
	user_handle: bytes
	display_name: str

	def to_json(self) -> str:
		return options_to_json(self.options)


CredentialRequest = AssertionRequest | PasswordRequest | RegistrationRequest


@dataclass(frozen=True)
class CeremonyRequest:
	"""Everything dispatched to the authenticator for one ceremony."""
	kind: CeremonyKind
	challenge: bytes
	requests: tuple[CredentialRequest, ...]
	prefer_immediately_available_credentials: bool = False

	def __post_init__(self):
		if not self.challenge:
			raise ValueError("challenge is expected to be non-empty")

		types = sorted(type(r).__name__ for r in self.requests)
		if self.kind is CeremonyKind.SIGN_IN_WITH_PASSKEY_OR_PASSWORD:
			if types != ["AssertionRequest", "PasswordRequest"]:
				raise ValueError(
					f"Sign-in needs one assertion and one password request, got {types}"
				)
		elif types != ["RegistrationRequest"]:
			raise ValueError(f"Sign-up needs exactly one registration request, got {types}")

	def first(self, request_type: type) -> CredentialRequest | None:
		for request in self.requests:
			if isinstance(request, request_type):
				return request
		return None


def new_user_handle() -> bytes:
	"""Opaque, non-guessable user handle. Never reused across registrations."""
	return str(uuid.uuid4()).encode()


@dataclass
class CredentialRequestBuilder:
	"""Builds the authenticator requests for each ceremony kind."""

	settings: Settings = field(default_factory=get_settings)

	def build(
		self,
		kind: CeremonyKind,
		challenge: bytes,
		*,
		display_name: str | None = None,
		prefer_immediately_available_credentials: bool = False,
	) -> CeremonyRequest:
		if kind is CeremonyKind.SIGN_UP_WITH_PASSKEY:
			return self.build_sign_up(challenge, display_name or "")
		return self.build_sign_in(challenge, prefer_immediately_available_credentials)

	def build_sign_in(
		self,
		challenge: bytes,
		prefer_immediately_available_credentials: bool = False,
	) -> CeremonyRequest:
		"""Passkey assertion plus password fallback; the authenticator picks one.

		The allow list is left empty so discoverable credentials are offered.
		"""
		options = generate_authentication_options(
			rp_id=self.settings.rp_id,
			challenge=challenge,
			timeout=self.settings.webauthn_timeout,
			user_verification=UserVerificationRequirement.PREFERRED,
		)
		return CeremonyRequest(
			kind=CeremonyKind.SIGN_IN_WITH_PASSKEY_OR_PASSWORD,
			challenge=challenge,
			requests=(
				AssertionRequest(options=options),
				PasswordRequest(rp_id=self.settings.rp_id),
			),
			prefer_immediately_available_credentials=prefer_immediately_available_credentials,
		)

	def build_sign_up(self, challenge: bytes, display_name: str) -> CeremonyRequest:
		if not display_name or not display_name.strip():
			raise ValueError("display_name is expected to be non-empty")

		user_handle = new_user_handle()
		options = generate_registration_options(
			rp_id=self.settings.rp_id,
			rp_name=self.settings.rp_name,
			user_id=user_handle,
			user_name=display_name,
			user_display_name=display_name,
			challenge=challenge,
			timeout=self.settings.webauthn_timeout,
			attestation=AttestationConveyancePreference.NONE,
			authenticator_selection=AuthenticatorSelectionCriteria(
				authenticator_attachment=AuthenticatorAttachment.PLATFORM,
				resident_key=ResidentKeyRequirement.PREFERRED,
				user_verification=UserVerificationRequirement.PREFERRED,
			),
			supported_pub_key_algs=[
				COSEAlgorithmIdentifier.ECDSA_SHA_256,
				COSEAlgorithmIdentifier.RSASSA_PKCS1_v1_5_SHA_256,
			],
		)
		return CeremonyRequest(
			kind=CeremonyKind.SIGN_UP_WITH_PASSKEY,
			challenge=challenge,
			requests=(
				RegistrationRequest(
					options=options,
					user_handle=user_handle,
					display_name=display_name,
				),
			),
		)
