# (c) Copyright Datacraft, 2026
"""Server-side verification of ceremony credentials."""
import logging
from typing import Protocol

import httpx
from pydantic import BaseModel, ValidationError
from webauthn.helpers import bytes_to_base64url

from auth_client.config import Settings, get_settings
from auth_client.schema import (
	CredentialVerificationRequest,
	PasswordVerificationRequest,
	VerificationResponse,
)

from .authenticator import (
	PasswordCredential,
	PlatformAssertion,
	PlatformCredential,
	PlatformRegistration,
)
from .errors import UnexpectedCredentialError, VerificationError

logger = logging.getLogger(__name__)


class CredentialVerifier(Protocol):
	"""Returns True when the server accepts the credential."""

	async def verify(self, challenge: bytes, credential: PlatformCredential) -> bool:
		...


class AcceptAllVerifier:
	"""Accepts everything. Only for demos without a server."""

	async def verify(self, challenge: bytes, credential: PlatformCredential) -> bool:
		return True


class HttpCredentialVerifier:
	"""Forward credentials to the verification server."""

	def __init__(
		self,
		settings: Settings | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self.settings = settings or get_settings()
		self._transport = transport

	def _route(self, challenge: bytes, credential: PlatformCredential) -> tuple[str, BaseModel]:
		if isinstance(credential, PlatformRegistration):
			path = self.settings.register_verify_path
		elif isinstance(credential, PlatformAssertion):
			path = self.settings.authenticate_verify_path
		elif isinstance(credential, PasswordCredential):
			return self.settings.password_verify_path, PasswordVerificationRequest(
				username=credential.user,
				password=credential.password,
			)
		else:
			raise UnexpectedCredentialError(credential)

		return path, CredentialVerificationRequest(
			challenge=bytes_to_base64url(challenge),
			credential=credential.to_webauthn_json(),
		)

	async def verify(self, challenge: bytes, credential: PlatformCredential) -> bool:
		path, payload = self._route(challenge, credential)
		url = f"{self.settings.server_url.rstrip('/')}{path}"

		try:
			async with httpx.AsyncClient(transport=self._transport) as client:
				response = await client.post(
					url,
					json=payload.model_dump(),
					timeout=self.settings.request_timeout,
				)
		except httpx.HTTPError as e:
			logger.error(f"Verification request to {url} failed: {e}")
			raise VerificationError(str(e)) from e

		if response.is_client_error:
			logger.info(f"Verification rejected by {url}: HTTP {response.status_code}")
			return False
		if not response.is_success:
			raise VerificationError(f"Verification server answered HTTP {response.status_code}")

		try:
			body = VerificationResponse.model_validate(response.json())
		except (ValueError, ValidationError) as e:
			raise VerificationError("Malformed verification response") from e

		if not body.success:
			logger.info(f"Verification rejected by {url}: {body.message}")
		return body.success
