"""Project model - owns the one-time access token for a memoir workspace."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from keepsake.models.base import BaseModel

if TYPE_CHECKING:
    from keepsake.models.interview_session import InterviewSession
    from keepsake.models.interviewee import Interviewee

PROJECT_STATUS_ACTIVE = "active"
PROJECT_STATUS_DELETE_PENDING = "delete_pending"

ProjectStatus = Enum(
    PROJECT_STATUS_ACTIVE,
    PROJECT_STATUS_DELETE_PENDING,
    name="project_status",
    create_constraint=True,
)


class Project(BaseModel):
    """A memoir project reachable through a shareable one-time link.

    The current ``token`` is the only bearer secret that can be exchanged
    for a session. It is replaced on every successful exchange, so a value
    that has been rotated away never works again. ``expires_at`` is fixed
    at creation; ``token_used_at`` records the first exchange and is kept
    for auditing only.
    """

    __tablename__ = "projects"

    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(
        ProjectStatus,
        nullable=False,
        default=PROJECT_STATUS_ACTIVE,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    token_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    interviewee: Mapped["Interviewee | None"] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        uselist=False,
    )
    sessions: Mapped[list["InterviewSession"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        # Never include the token
        return f"<Project {self.id} status={self.status}>"
