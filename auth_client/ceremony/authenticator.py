# (c) Copyright Datacraft, 2026
"""Platform authenticator contract and the credentials it hands back."""
from dataclasses import dataclass
from typing import Any, Protocol

from webauthn.helpers import bytes_to_base64url

from .requests import CeremonyRequest


@dataclass(frozen=True)
class PlatformRegistration:
	"""A newly created platform passkey."""
	credential_id: bytes
	attestation_object: bytes
	client_data_json: bytes

	def to_webauthn_json(self) -> dict:
		credential_id = bytes_to_base64url(self.credential_id)
		return {
			"id": credential_id,
			"rawId": credential_id,
			"type": "public-key",
			"response": {
				"attestationObject": bytes_to_base64url(self.attestation_object),
				"clientDataJSON": bytes_to_base64url(self.client_data_json),
			},
		}


@dataclass(frozen=True)
class PlatformAssertion:
	"""Proof of possession of an existing platform passkey."""
	credential_id: bytes
	authenticator_data: bytes
	signature: bytes
	client_data_json: bytes
	user_handle: bytes | None = None

	def to_webauthn_json(self) -> dict:
		credential_id = bytes_to_base64url(self.credential_id)
		response = {
			"authenticatorData": bytes_to_base64url(self.authenticator_data),
			"clientDataJSON": bytes_to_base64url(self.client_data_json),
			"signature": bytes_to_base64url(self.signature),
		}
		if self.user_handle is not None:
			response["userHandle"] = bytes_to_base64url(self.user_handle)
		return {
			"id": credential_id,
			"rawId": credential_id,
			"type": "public-key",
			"response": response,
		}


@dataclass(frozen=True)
class PasswordCredential:
	"""A stored password picked by the user."""
	user: str
	password: str

	def __repr__(self) -> str:
		return f"PasswordCredential(user={self.user!r}, password='***')"


PlatformCredential = PlatformRegistration | PlatformAssertion | PasswordCredential


class PlatformAuthenticator(Protocol):
	"""The platform credential UI.

	``perform_requests`` resolves with exactly one credential, or raises
	exactly one error (``AuthorizationError`` for authenticator-classified
	failures). It may wait indefinitely on the user; timeouts and
	cancellation belong to the platform.
	"""

	async def perform_requests(self, request: CeremonyRequest, anchor: Any) -> PlatformCredential:
		...
