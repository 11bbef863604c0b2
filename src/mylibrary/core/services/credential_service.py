"""Password hashing and session token issuance/verification."""

import time

import bcrypt
from authlib.jose import JoseError, jwt
from authlib.jose.errors import ExpiredTokenError
from loguru import logger

from src.mylibrary.core.errors import ConfigurationError, TokenExpired, TokenInvalid
from src.mylibrary.core.models.identity import Identity, TokenClaims
from src.mylibrary.runtime.config.config_data import AuthConfig


class CredentialService:
    """Hashes passwords and issues/validates signed session tokens.

    The signing secret is read once at construction; a missing secret is a
    fatal misconfiguration.
    """

    def __init__(self, auth_config: AuthConfig):
        secret = auth_config.token_signing_secret
        if not secret or not secret.strip():
            raise ConfigurationError("Token signing secret is not configured")

        self._secret = secret
        self._algorithm = auth_config.algorithm
        self._issuer = auth_config.issuer
        self._ttl_seconds = auth_config.token_ttl_seconds
        self._clock_skew = auth_config.clock_skew
        self._bcrypt_rounds = auth_config.bcrypt_rounds

    def hash_password(self, plaintext: str) -> str:
        """Return a salted bcrypt hash of ``plaintext``."""
        hashed = bcrypt.hashpw(
            plaintext.encode("utf-8"), bcrypt.gensalt(rounds=self._bcrypt_rounds)
        )
        return hashed.decode("utf-8")

    def verify_password(self, plaintext: str, password_hash: str) -> bool:
        """Check ``plaintext`` against a stored hash using bcrypt's own comparison."""
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False

    def issue_token(self, identity: Identity, expires_in_seconds: int | None = None) -> str:
        """Issue a signed session token for ``identity``.

        Args:
            identity: The user the token speaks for
            expires_in_seconds: Lifetime override; defaults to the configured TTL

        Returns:
            Compact serialized JWT
        """
        now = int(time.time())
        lifetime = self._ttl_seconds if expires_in_seconds is None else expires_in_seconds
        payload = {
            "iss": self._issuer,
            "sub": identity.id,
            "username": identity.username,
            "email": identity.email,
            "iat": now,
            "exp": now + lifetime,
        }
        header = {"alg": self._algorithm, "typ": "JWT"}
        token = jwt.encode(header, payload, self._secret)
        return token.decode() if isinstance(token, bytes) else token

    def verify_token(self, token: str) -> TokenClaims:
        """Validate signature, structure and expiry of a session token.

        Raises:
            TokenExpired: If the token is past its expiration.
            TokenInvalid: For any other signature or structure problem.
        """
        claims_options = {
            "iss": {"essential": True, "value": self._issuer},
            "sub": {"essential": True},
            "exp": {"essential": True},
        }
        try:
            claims = jwt.decode(token, self._secret, claims_options=claims_options)
            claims.validate(leeway=self._clock_skew)
        except ExpiredTokenError as e:
            raise TokenExpired() from e
        except (JoseError, ValueError, TypeError) as e:
            logger.debug("Session token rejected: {}", type(e).__name__)
            raise TokenInvalid() from e

        if claims.header.get("alg") != self._algorithm:
            raise TokenInvalid("Unexpected token algorithm")

        return TokenClaims.from_jwt_payload(dict(claims))
