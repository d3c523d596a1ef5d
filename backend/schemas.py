"""
backend/schemas.py

Request schemas (DTOs) for the projects and tasks endpoints.
Client payloads never carry an owner or an id; those come from the auth
context and the URL.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

try:
    from backend.models import TaskItemStatus
except ModuleNotFoundError:
    from models import TaskItemStatus


NAME_MAX_LENGTH = 100


def _trim(v):
    if isinstance(v, str):
        return v.strip()
    return v


class ProjectDto(BaseModel):
    """Request schema for creating or replacing a project.

    - name is required, trimmed, 1-100 chars
    - description is optional free text (null is stored as "")
    """
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, description="Project name (required, 1-100 chars)")
    description: Optional[str] = Field("", description="Free-text description")

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        """Trim whitespace from name."""
        return _trim(v)

    @field_validator("description", mode="after")
    @classmethod
    def default_description(cls, v):
        return v or ""


class TaskDto(BaseModel):
    """Request schema for creating or replacing a task.

    status is one of Todo, InProgress, Done and defaults to Todo when omitted.
    """
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, description="Task name (required, 1-100 chars)")
    description: Optional[str] = Field("", description="Free-text description")
    status: TaskItemStatus = Field(TaskItemStatus.Todo, description="Todo, InProgress or Done (default Todo)")

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        """Trim whitespace from name."""
        return _trim(v)

    @field_validator("description", mode="after")
    @classmethod
    def default_description(cls, v):
        return v or ""
