# (c) Copyright Datacraft, 2026
"""Challenge sources for authentication ceremonies."""
import logging
from typing import Protocol

import httpx
from pydantic import ValidationError
from webauthn.helpers import base64url_to_bytes, generate_challenge

from auth_client.config import Settings, get_settings
from auth_client.schema import ChallengeResponse, CeremonyKind

from .errors import ChallengeUnavailable

logger = logging.getLogger(__name__)


class ChallengeSource(Protocol):
	"""Hands out a fresh, single-use challenge per ceremony."""

	async def fetch(self, kind: CeremonyKind) -> bytes:
		...


class HttpChallengeSource:
	"""Fetch challenges from the verification server."""

	def __init__(
		self,
		settings: Settings | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	):
		self.settings = settings or get_settings()
		self._transport = transport

	@property
	def url(self) -> str:
		return f"{self.settings.server_url.rstrip('/')}{self.settings.challenge_path}"

	async def fetch(self, kind: CeremonyKind) -> bytes:
		try:
			async with httpx.AsyncClient(transport=self._transport) as client:
				response = await client.get(
					self.url,
					params={"ceremony": kind.value},
					timeout=self.settings.request_timeout,
				)
				response.raise_for_status()
				body = ChallengeResponse.model_validate(response.json())
		except httpx.HTTPError as e:
			logger.error(f"Challenge request to {self.url} failed: {e}")
			raise ChallengeUnavailable(str(e)) from e
		except (ValueError, ValidationError) as e:
			logger.error(f"Malformed challenge response from {self.url}: {e}")
			raise ChallengeUnavailable("Malformed challenge response") from e

		try:
			challenge = base64url_to_bytes(body.challenge)
		except ValueError as e:
			raise ChallengeUnavailable("Challenge is not valid base64url") from e

		if not challenge:
			raise ChallengeUnavailable("Server returned an empty challenge")
		return challenge


class LocalChallengeSource:
	"""Generate challenges locally, for demos without a server."""

	async def fetch(self, kind: CeremonyKind) -> bytes:
		return generate_challenge()
