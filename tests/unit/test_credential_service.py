"""Unit tests for password hashing and session tokens."""

import time

import pytest
from authlib.jose import jwt

from src.mylibrary.core.errors import ConfigurationError, TokenExpired, TokenInvalid
from src.mylibrary.core.models.identity import Identity
from src.mylibrary.core.services import CredentialService
from src.mylibrary.runtime.config.config_data import AuthConfig
from tests.fixtures.core import TEST_SECRET


@pytest.fixture
def identity() -> Identity:
    return Identity(id="user-1", username="alice", email="a@x.com")


class TestConstruction:
    """The signing secret is mandatory."""

    @pytest.mark.parametrize("secret", [None, "", "   "])
    def test_missing_secret_is_fatal(self, secret):
        with pytest.raises(ConfigurationError):
            CredentialService(AuthConfig(token_signing_secret=secret))


class TestPasswords:
    def test_hash_is_salted_and_not_plaintext(self, credential_service):
        first = credential_service.hash_password("secret1")
        second = credential_service.hash_password("secret1")

        assert "secret1" not in first
        assert first != second
        assert first.startswith("$2")

    def test_verify_accepts_correct_password(self, credential_service):
        hashed = credential_service.hash_password("secret1")
        assert credential_service.verify_password("secret1", hashed) is True

    def test_verify_rejects_wrong_password(self, credential_service):
        hashed = credential_service.hash_password("secret1")
        assert credential_service.verify_password("secret2", hashed) is False

    def test_verify_rejects_garbage_hash(self, credential_service):
        """A corrupt stored hash fails verification instead of raising."""
        assert credential_service.verify_password("secret1", "not-a-hash") is False


class TestTokens:
    def test_issued_token_round_trips(self, credential_service, identity):
        token = credential_service.issue_token(identity)
        claims = credential_service.verify_token(token)

        assert claims.subject == "user-1"
        assert claims.username == "alice"
        assert claims.email == "a@x.com"
        assert claims.issuer == "mylibrary"

    def test_default_lifetime_is_24_hours(self, credential_service, identity):
        before = int(time.time())
        claims = credential_service.verify_token(credential_service.issue_token(identity))

        assert claims.expires_at - claims.issued_at == 24 * 3600
        assert claims.issued_at >= before

    def test_expired_token(self, credential_service, identity):
        token = credential_service.issue_token(identity, expires_in_seconds=-10)

        with pytest.raises(TokenExpired):
            credential_service.verify_token(token)

    def test_token_signed_with_other_secret(self, credential_service, identity):
        other = CredentialService(AuthConfig(token_signing_secret="another-secret"))
        token = other.issue_token(identity)

        with pytest.raises(TokenInvalid):
            credential_service.verify_token(token)

    def test_tampered_token(self, credential_service, identity):
        token = credential_service.issue_token(identity)
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload[:-2] + "AA", signature])

        with pytest.raises(TokenInvalid):
            credential_service.verify_token(tampered)

    @pytest.mark.parametrize("token", ["", "abc", "a.b.c", "....."])
    def test_malformed_token(self, credential_service, token):
        with pytest.raises(TokenInvalid):
            credential_service.verify_token(token)

    def test_foreign_issuer_rejected(self, credential_service):
        now = int(time.time())
        token = jwt.encode(
            {"alg": "HS256"},
            {"iss": "someone-else", "sub": "user-1", "iat": now, "exp": now + 60},
            TEST_SECRET,
        ).decode()

        with pytest.raises(TokenInvalid):
            credential_service.verify_token(token)

    def test_token_without_expiry_rejected(self, credential_service):
        token = jwt.encode(
            {"alg": "HS256"},
            {"iss": "mylibrary", "sub": "user-1"},
            TEST_SECRET,
        ).decode()

        with pytest.raises(TokenInvalid):
            credential_service.verify_token(token)

    def test_token_with_other_algorithm_rejected(self, credential_service):
        now = int(time.time())
        token = jwt.encode(
            {"alg": "HS512"},
            {"iss": "mylibrary", "sub": "user-1", "iat": now, "exp": now + 60},
            TEST_SECRET,
        ).decode()

        with pytest.raises(TokenInvalid):
            credential_service.verify_token(token)
