"""Pydantic schemas for onboarding, token exchange and session endpoints."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class OwnerMetadata(BaseModel):
    """Project/owner details collected at onboarding.

    Opaque to the access core; stored alongside the project for the
    interview, outline and export steps.
    """

    name: str = Field(..., min_length=1, max_length=255, description="Interviewee name")
    dob: date | None = Field(None, description="Interviewee date of birth")
    relationship: str | None = Field(None, max_length=255)
    themes: list[str] = Field(
        default_factory=list,
        description="Themes to cover; a comma-separated string is accepted",
    )
    output: str = Field("book", min_length=1, max_length=50, description="Output format")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("dob", "relationship", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("themes", mode="before")
    @classmethod
    def split_themes(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return v


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OnboardResponse(CamelModel):
    """Response after a project has been created."""

    project_id: UUID
    share_url: str


class ExchangeRequest(BaseModel):
    """JSON body for token exchange."""

    token: str | None = Field(None, strict=True)


class CurrentSessionResponse(CamelModel):
    """The authenticated project and its latest interview session."""

    project_id: UUID
    session_id: UUID | None = None
    transcript_id: str | None = None


class OkResponse(BaseModel):
    """Generic success response."""

    ok: bool = True
