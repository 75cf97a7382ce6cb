from __future__ import annotations

import json

import pytest
from webauthn.helpers import bytes_to_base64url
from webauthn.helpers.structs import AuthenticatorAttachment

from auth_client.ceremony import (
	AssertionRequest,
	CeremonyRequest,
	CredentialRequestBuilder,
	PasswordRequest,
	RegistrationRequest,
)
from auth_client.ceremony.requests import new_user_handle
from auth_client.schema import CeremonyKind
from tests.support import make_settings

CHALLENGE = bytes.fromhex("abcd")


@pytest.fixture
def builder() -> CredentialRequestBuilder:
	return CredentialRequestBuilder(make_settings(rp_id="rp.example.com", rp_name="Example"))


def test_sign_in_carries_assertion_and_password(builder: CredentialRequestBuilder) -> None:
	request = builder.build_sign_in(CHALLENGE, prefer_immediately_available_credentials=True)

	assert request.kind is CeremonyKind.SIGN_IN_WITH_PASSKEY_OR_PASSWORD
	assert request.prefer_immediately_available_credentials is True
	assertion = request.first(AssertionRequest)
	assert assertion.options.challenge == CHALLENGE
	assert assertion.options.rp_id == "rp.example.com"
	assert not assertion.options.allow_credentials
	assert request.first(PasswordRequest) == PasswordRequest(rp_id="rp.example.com")
	assert request.first(RegistrationRequest) is None


def test_sign_up_binds_display_name_handle_and_challenge(builder: CredentialRequestBuilder) -> None:
	request = builder.build_sign_up(CHALLENGE, "Alice Example")

	assert request.kind is CeremonyKind.SIGN_UP_WITH_PASSKEY
	[registration] = request.requests
	assert isinstance(registration, RegistrationRequest)
	assert registration.display_name == "Alice Example"
	assert registration.options.challenge == CHALLENGE
	assert registration.options.user.id == registration.user_handle
	assert registration.options.user.display_name == "Alice Example"
	assert registration.options.rp.id == "rp.example.com"
	assert registration.options.authenticator_selection.authenticator_attachment is AuthenticatorAttachment.PLATFORM


def test_build_dispatches_on_kind(builder: CredentialRequestBuilder) -> None:
	sign_up = builder.build(CeremonyKind.SIGN_UP_WITH_PASSKEY, CHALLENGE, display_name="alice")
	sign_in = builder.build(CeremonyKind.SIGN_IN_WITH_PASSKEY_OR_PASSWORD, CHALLENGE)

	assert sign_up.first(RegistrationRequest) is not None
	assert sign_in.first(AssertionRequest) is not None


def test_sign_up_rejects_blank_display_name(builder: CredentialRequestBuilder) -> None:
	with pytest.raises(ValueError):
		builder.build_sign_up(CHALLENGE, "")


def test_user_handles_are_unique(builder: CredentialRequestBuilder) -> None:
	handles = {builder.build_sign_up(CHALLENGE, "alice").first(RegistrationRequest).user_handle for _ in range(20)}
	assert len(handles) == 20
	assert new_user_handle() not in handles


def test_options_render_as_webauthn_json(builder: CredentialRequestBuilder) -> None:
	assertion = builder.build_sign_in(CHALLENGE).first(AssertionRequest)
	registration = builder.build_sign_up(CHALLENGE, "alice").first(RegistrationRequest)

	assert json.loads(assertion.to_json())["challenge"] == bytes_to_base64url(CHALLENGE)
	created = json.loads(registration.to_json())
	assert created["challenge"] == bytes_to_base64url(CHALLENGE)
	assert created["user"]["id"] == bytes_to_base64url(registration.user_handle)


def test_ceremony_request_enforces_shape(builder: CredentialRequestBuilder) -> None:
	sign_in = builder.build_sign_in(CHALLENGE)
	sign_up = builder.build_sign_up(CHALLENGE, "alice")

	with pytest.raises(ValueError):
		CeremonyRequest(kind=CeremonyKind.SIGN_IN_WITH_PASSKEY_OR_PASSWORD, challenge=CHALLENGE, requests=sign_up.requests)
	with pytest.raises(ValueError):
		CeremonyRequest(kind=CeremonyKind.SIGN_UP_WITH_PASSKEY, challenge=CHALLENGE, requests=sign_in.requests)
	with pytest.raises(ValueError):
		CeremonyRequest(kind=CeremonyKind.SIGN_UP_WITH_PASSKEY, challenge=b"", requests=sign_up.requests)
