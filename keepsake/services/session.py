"""Session credential signing and verification.

A session credential is a stateless HS256 JWT whose subject is the project
id. It is minted once per successful token exchange and checked on every
later request without touching the database.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from jwt.exceptions import PyJWTError

from keepsake.core.config import Settings
from keepsake.core.errors import ConfigurationError, CredentialInvalid

logger = logging.getLogger(__name__)

SESSION_TOKEN_TYPE = "session"


@dataclass(frozen=True)
class SessionClaims:
    """Decoded claims of a valid session credential."""

    project_id: UUID
    issued_at: datetime
    expires_at: datetime


class SessionSigner:
    """Mints and verifies session credentials with a server-held key."""

    def __init__(
        self,
        secret: str | None,
        lifetime: timedelta = timedelta(days=14),
        algorithm: str = "HS256",
    ):
        if not secret:
            raise ConfigurationError("A signing secret is required for session credentials")
        self._secret = secret
        self.lifetime = lifetime
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionSigner":
        """Build a signer from application settings.

        Raises ConfigurationError when PROJECT_TOKEN_SECRET is not set.
        """
        return cls(
            settings.require_project_token_secret(),
            lifetime=timedelta(days=settings.session_lifetime_days),
            algorithm=settings.jwt_algorithm,
        )

    def mint(self, project_id: UUID, issued_at: datetime | None = None) -> str:
        """Create a signed credential for a project."""
        iat = issued_at or datetime.now(UTC)
        payload = {
            "sub": str(project_id),
            "type": SESSION_TOKEN_TYPE,
            "iat": iat,
            "exp": iat + self.lifetime,
        }
        token = jwt.encode(payload, self._secret, algorithm=self.algorithm)
        # PyJWT 2.x returns str; older type stubs may declare bytes
        return str(token)

    def decode(self, credential: str) -> SessionClaims:
        """Decode and validate a credential.

        Raises CredentialInvalid on a bad signature, malformed token,
        unexpected type, bad subject or expiry.
        """
        try:
            payload = jwt.decode(
                credential,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise CredentialInvalid("Session credential has expired") from e
        except PyJWTError as e:
            raise CredentialInvalid(f"Invalid session credential: {e}") from e

        if payload.get("type") != SESSION_TOKEN_TYPE:
            raise CredentialInvalid("Not a session credential")

        try:
            project_id = UUID(payload["sub"])
        except (TypeError, ValueError) as e:
            raise CredentialInvalid("Session credential has an invalid subject") from e

        return SessionClaims(
            project_id=project_id,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )

    def verify(self, credential: str | None) -> SessionClaims | None:
        """Return the claims of a valid credential, or None.

        Every failure means "no session"; callers never see why.
        """
        if not credential:
            return None
        try:
            return self.decode(credential)
        except CredentialInvalid as e:
            logger.debug(f"Rejected session credential: {e}")
            return None
