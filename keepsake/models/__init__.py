# Keepsake Models
from keepsake.models.base import BaseModel
from keepsake.models.interview_session import InterviewSession
from keepsake.models.interviewee import Interviewee
from keepsake.models.project import (
    PROJECT_STATUS_ACTIVE,
    PROJECT_STATUS_DELETE_PENDING,
    Project,
)

__all__ = [
    "BaseModel",
    "InterviewSession",
    "Interviewee",
    "Project",
    "PROJECT_STATUS_ACTIVE",
    "PROJECT_STATUS_DELETE_PENDING",
]
