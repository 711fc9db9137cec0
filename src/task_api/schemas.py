from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import TaskStatus

TITLE_MAX_LENGTH = 200

# Fields a caller may change after creation. id and user_id are never merged.
MUTABLE_FIELDS = ("status", "title", "description")


def _normalize_title(value: str) -> str:
    """
    Strip surrounding whitespace and enforce 1..TITLE_MAX_LENGTH characters.
    """
    s = value.strip()
    if not (1 <= len(s) <= TITLE_MAX_LENGTH):
        raise ValueError(f"title length must be between 1 and {TITLE_MAX_LENGTH} characters")
    return s


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new task. The owner is taken from the request, not the body.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Write report",
                "description": "Quarterly numbers for the board",
                "status": "TODO",
            }
        }
    )

    title: str = Field(..., description="Short title for the task (stripped, 1..200 characters)")
    description: str = Field(..., description="Free-form description of the task")
    status: Optional[TaskStatus] = Field(default=TaskStatus.TODO, description="Task status; null or omitted means TODO")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _normalize_title(v)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        """
        An explicit null status falls back to TODO, same as omitting it.
        """
        return TaskStatus.TODO if v is None else v


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Partial update (patch) for an existing task.
    All fields are optional; only fields present in the payload are applied.
    Unknown keys, including id and userId, are ignored.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "DONE",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the task (stripped, 1..200 characters)")
    description: Optional[str] = Field(default=None, description="Free-form description of the task")
    status: Optional[TaskStatus] = Field(default=None, description="Task status")

    @field_validator("title", "description", "status", mode="before")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        """
        A field that is sent must carry a value; null cannot clear it.
        """
        if v is None:
            raise ValueError("field may be omitted but not null")
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _normalize_title(v)

    # PUBLIC_INTERFACE
    def changes(self) -> dict[str, Any]:
        """Return only the explicitly set mutable fields of this patch."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if k in MUTABLE_FIELDS}


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "9b1deb4d-3b7d-4bad-9bdd-2b0d7b3dcb6d",
                "status": "TODO",
                "title": "Write report",
                "description": "Quarterly numbers for the board",
                "userId": "u1",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the task")
    status: TaskStatus = Field(..., description="Task status")
    title: str = Field(..., description="Short title for the task")
    description: str = Field(..., description="Free-form description of the task")
    user_id: str = Field(..., alias="userId", description="Identity that owns the task")
