# (c) Copyright Datacraft, 2026
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class CeremonyKind(str, Enum):
    SIGN_IN_WITH_PASSKEY_OR_PASSWORD = "sign_in_with_passkey_or_password"
    SIGN_UP_WITH_PASSKEY = "sign_up_with_passkey"


class CeremonyState(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"


class PasskeyRegistered(BaseModel):
    kind: Literal["passkey_registered"] = "passkey_registered"
    credential_id: str  # Base64URL encoded

    model_config = ConfigDict(frozen=True)


class PasskeyAsserted(BaseModel):
    kind: Literal["passkey_asserted"] = "passkey_asserted"
    credential_id: str  # Base64URL encoded

    model_config = ConfigDict(frozen=True)


class PasswordVerified(BaseModel):
    kind: Literal["password_verified"] = "password_verified"
    username: str

    model_config = ConfigDict(frozen=True)


AuthenticationOutcome = Annotated[
    Union[PasskeyRegistered, PasskeyAsserted, PasswordVerified],
    Field(discriminator="kind"),
]


class ChallengeResponse(BaseModel):
    """Body returned by the challenge endpoint."""
    challenge: str  # Base64URL encoded


class VerificationResponse(BaseModel):
    """Body returned by the verification endpoints."""
    success: bool
    message: str | None = None


class PasswordVerificationRequest(BaseModel):
    username: str
    password: str


class CredentialVerificationRequest(BaseModel):
    challenge: str  # Base64URL encoded
    credential: dict
