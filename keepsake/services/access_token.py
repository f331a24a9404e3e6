"""Access-token service: one-time project links and their exchange for sessions."""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy import DateTime, func, literal, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from keepsake.core.errors import InvalidToken, PersistenceError
from keepsake.models import PROJECT_STATUS_ACTIVE, Interviewee, Project
from keepsake.schemas.project import OwnerMetadata
from keepsake.services.session import SessionSigner

logger = logging.getLogger(__name__)

# 24 random bytes -> 32 base64url characters, 192 bits of entropy
TOKEN_BYTES = 24
# Anything longer cannot be a token we issued; rejected without a query
MAX_TOKEN_LENGTH = 64

DEFAULT_RETENTION_DAYS = 365


def generate_project_token() -> str:
    """Generate an unguessable, URL-safe bearer token for a share link."""
    return secrets.token_urlsafe(TOKEN_BYTES)


@dataclass(frozen=True)
class CreatedProject:
    """Result of onboarding. ``token`` is the only copy of the plaintext link secret."""

    project_id: UUID
    token: str
    project: Project


@dataclass(frozen=True)
class ExchangeResult:
    """Outcome of a token exchange.

    A failed exchange carries no detail: unknown, expired and inactive
    tokens all look the same.
    """

    ok: bool
    project_id: UUID | None = None
    session_credential: str | None = None

    @classmethod
    def rejected(cls) -> "ExchangeResult":
        return cls(ok=False)


class AccessTokenService:
    """Creates projects with one-time tokens and exchanges tokens for sessions."""

    def __init__(
        self,
        db: AsyncSession,
        signer: SessionSigner,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ):
        self.db = db
        self.signer = signer
        self.retention_days = retention_days

    async def create_project_and_token(self, metadata: OwnerMetadata) -> CreatedProject:
        """Create a project, its interviewee record and a fresh access token.

        Both rows are written in one transaction. Raises PersistenceError if
        the store fails, in which case nothing is persisted.
        """
        now = datetime.now(UTC)
        token = generate_project_token()

        project = Project(
            id=uuid.uuid4(),
            token=token,
            status=PROJECT_STATUS_ACTIVE,
            expires_at=now + timedelta(days=self.retention_days),
            token_used_at=None,
        )
        interviewee = Interviewee(
            project_id=project.id,
            name=metadata.name,
            dob=metadata.dob,
            relationship_to_owner=metadata.relationship,
            themes=list(metadata.themes),
            output_prefs={"type": metadata.output},
        )

        try:
            self.db.add_all([project, interviewee])
            await self.db.flush()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Failed to create project")
            raise PersistenceError("Failed to create project") from e

        logger.info(f"Created project {project.id} (expires {project.expires_at.date()})")
        return CreatedProject(project_id=project.id, token=token, project=project)

    async def exchange_token(self, presented_token: str | None) -> ExchangeResult:
        """Exchange a one-time token for a session credential.

        On success the token is rotated, so the presented value can never be
        exchanged again. Returns ``ExchangeResult(ok=False)`` for every
        rejection. Raises PersistenceError if the store fails mid-rotation;
        no credential is minted in that case.
        """
        try:
            project_id, issued_at = await self._exchange(presented_token)
        except InvalidToken as e:
            logger.info(f"Token exchange rejected: {e}")
            return ExchangeResult.rejected()

        credential = self.signer.mint(project_id, issued_at=issued_at)
        logger.info(f"Token exchanged for project {project_id}")
        return ExchangeResult(ok=True, project_id=project_id, session_credential=credential)

    async def _exchange(self, presented_token: str | None) -> tuple[UUID, datetime]:
        if not presented_token or len(presented_token) > MAX_TOKEN_LENGTH:
            raise InvalidToken("malformed token")

        now = datetime.now(UTC)
        try:
            project_id = await self._find_exchangeable(presented_token, now)
            if project_id is None:
                raise InvalidToken("no exchangeable project")

            rotated = await self._rotate(project_id, presented_token, generate_project_token(), now)
            if not rotated:
                # A concurrent exchange rotated the token between our read and write
                await self.db.rollback()
                raise InvalidToken(f"lost rotation race for project {project_id}")

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Failed to rotate project token")
            raise PersistenceError("Failed to rotate project token") from e

        return project_id, now

    async def _find_exchangeable(self, token: str, now: datetime) -> UUID | None:
        """Id of the active, unexpired project whose current token matches."""
        result = await self.db.execute(
            select(Project.id).where(
                Project.token == token,
                Project.status == PROJECT_STATUS_ACTIVE,
                Project.expires_at > now,
            )
        )
        return result.scalar_one_or_none()

    async def _rotate(
        self,
        project_id: UUID,
        presented_token: str,
        new_token: str,
        now: datetime,
    ) -> bool:
        """Replace the token only if it still equals the presented value.

        Returns False when no row matched, i.e. another exchange won.
        """
        result = await self.db.execute(
            update(Project)
            .where(
                Project.id == project_id,
                Project.token == presented_token,
                Project.status == PROJECT_STATUS_ACTIVE,
                Project.expires_at > now,
            )
            .values(
                token=new_token,
                token_used_at=func.coalesce(
                    Project.token_used_at, literal(now, DateTime(timezone=True))
                ),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
