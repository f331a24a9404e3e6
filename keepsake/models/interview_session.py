"""Interview session model - one recording/transcription pass for a project."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from keepsake.models.base import BaseModel

if TYPE_CHECKING:
    from keepsake.models.project import Project


class InterviewSession(BaseModel):
    """An interview session.

    Rows are written by the upload and transcription steps; the access
    service only reads the most recent one for a project.
    """

    __tablename__ = "interview_sessions"
    __table_args__ = (
        Index("ix_interview_sessions_project_created", "project_id", "created_at"),
    )

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    transcript_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    project: Mapped["Project"] = relationship(back_populates="sessions")
