"""Project service - lookups and lifecycle changes for an authenticated project."""

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from keepsake.models import PROJECT_STATUS_DELETE_PENDING, InterviewSession, Project

logger = logging.getLogger(__name__)


class ProjectService:
    """Service for project data behind a verified session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_latest_session(self, project_id: UUID) -> InterviewSession | None:
        """Most recent interview session for a project, if any."""
        result = await self.db.execute(
            select(InterviewSession)
            .where(InterviewSession.project_id == project_id)
            .order_by(InterviewSession.created_at.desc(), InterviewSession.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def mark_delete_pending(self, project_id: UUID) -> bool:
        """Soft-delete a project.

        Its access token stops being exchangeable immediately. Returns False
        if the project does not exist.
        """
        result = await self.db.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(status=PROJECT_STATUS_DELETE_PENDING)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return False
        await self.db.flush()
        logger.info(f"Project {project_id} marked for deletion")
        return True
