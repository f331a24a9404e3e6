"""Interviewee model - owner metadata created alongside a project."""

import uuid
from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Date, ForeignKey, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from keepsake.models.base import BaseModel

if TYPE_CHECKING:
    from keepsake.models.project import Project

# JSONB on PostgreSQL, plain JSON elsewhere (local SQLite)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Interviewee(BaseModel):
    """The person being interviewed, plus their output preferences."""

    __tablename__ = "interviewees"

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    relationship_to_owner: Mapped[str | None] = mapped_column(
        "relationship", String(255), nullable=True
    )
    themes: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    output_prefs: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    project: Mapped["Project"] = relationship(back_populates="interviewee")

    def __repr__(self) -> str:
        return f"<Interviewee {self.name} project={self.project_id}>"
