"""
Unit tests for Google identity token verification.
The google-auth verification call is replaced so no network access happens.
"""

import pytest
from google.auth import exceptions as google_exceptions

from newsroom.services import token_verifier
from newsroom.services.token_verifier import GoogleTokenVerifier, Identity, VerificationError

CLIENT_ID = "client.apps.googleusercontent.com"


def test_verify_returns_subject_and_email(monkeypatch):
    seen = {}

    def fake_verify(token, request, audience=None):
        seen["token"] = token
        seen["audience"] = audience
        return {"sub": "1234", "email": "editor@example.com", "aud": audience}

    monkeypatch.setattr(token_verifier.google_id_token, "verify_oauth2_token", fake_verify)

    identity = GoogleTokenVerifier(CLIENT_ID).verify(" raw-token ")

    assert identity == Identity(subject="1234", email="editor@example.com")
    assert seen == {"token": "raw-token", "audience": CLIENT_ID}


def test_verify_allows_tokens_without_email(monkeypatch):
    monkeypatch.setattr(
        token_verifier.google_id_token,
        "verify_oauth2_token",
        lambda token, request, audience=None: {"sub": "99"},
    )
    assert GoogleTokenVerifier(CLIENT_ID).verify("t") == Identity(subject="99", email=None)


@pytest.mark.parametrize(
    "error",
    [
        ValueError("Token expired"),
        google_exceptions.TransportError("connection refused"),
        google_exceptions.InvalidValue("wrong audience"),
    ],
)
def test_verify_maps_library_failures(monkeypatch, error):
    def fake_verify(token, request, audience=None):
        raise error

    monkeypatch.setattr(token_verifier.google_id_token, "verify_oauth2_token", fake_verify)
    with pytest.raises(VerificationError):
        GoogleTokenVerifier(CLIENT_ID).verify("t")


def test_verify_rejects_claims_without_subject(monkeypatch):
    monkeypatch.setattr(
        token_verifier.google_id_token,
        "verify_oauth2_token",
        lambda token, request, audience=None: {"email": "x@example.com"},
    )
    with pytest.raises(VerificationError):
        GoogleTokenVerifier(CLIENT_ID).verify("t")


@pytest.mark.parametrize("client_id, token", [(CLIENT_ID, ""), (CLIENT_ID, "  "), ("", "t")])
def test_verify_rejects_without_calling_google(monkeypatch, client_id, token):
    def fail(*args, **kwargs):
        raise AssertionError("google should not be called")

    monkeypatch.setattr(token_verifier.google_id_token, "verify_oauth2_token", fail)
    with pytest.raises(VerificationError):
        GoogleTokenVerifier(client_id).verify(token)
