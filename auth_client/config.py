# (c) Copyright Datacraft, 2026
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Relying party settings
    rp_id: str = Field(default="developerinsider.github.io", description="Relying Party ID (domain)")
    rp_name: str = Field(default="passKeyDemo", description="Relying Party display name")
    webauthn_timeout: int = Field(gt=0, default=60000, description="Authenticator timeout hint in ms")

    # Verification server
    server_url: str = Field(default="https://localhost", description="Base URL of the verification server")
    challenge_path: str = "/webauthn/challenge"
    register_verify_path: str = "/webauthn/register/complete"
    authenticate_verify_path: str = "/webauthn/authenticate/complete"
    password_verify_path: str = "/token"
    request_timeout: float = Field(gt=0, default=10.0, description="HTTP timeout in seconds")

    # Ceremony behaviour
    publish_failures: bool = Field(default=True, description="Publish ceremony_failed for non-cancel errors")
    diagnostics_history: int = Field(gt=0, default=100, description="Ceremony events kept in memory")

    model_config = SettingsConfigDict(env_prefix='ac_')


@lru_cache()
def get_settings():
    return Settings()
