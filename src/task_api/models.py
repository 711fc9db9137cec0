from __future__ import annotations

from enum import Enum
from typing import TypedDict


# PUBLIC_INTERFACE
class TaskStatus(str, Enum):
    """Lifecycle state of a task. Wire values equal the member names."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    Storage record for a task kept by the repository.

    Fields:
    - id: UUID4 string assigned by the repository, never changes
    - status: TaskStatus member
    - title: Short title (trimmed on input via schemas)
    - description: Free-form description
    - user_id: Owning identity, fixed at creation
    """

    id: str
    status: TaskStatus
    title: str
    description: str
    user_id: str
