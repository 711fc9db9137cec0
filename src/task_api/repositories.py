from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from threading import RLock
from typing import List

from .exceptions import TaskNotFoundError
from .models import TaskEntity
from .schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract repository contract for task storage backends.

    Every lookup is scoped by owner: a task that exists but belongs to a
    different owner is reported exactly like a missing one.
    """

    @abstractmethod
    def create(self, owner_id: str, data: TaskCreate) -> TaskEntity:
        """Create and return a new TaskEntity owned by owner_id."""

    @abstractmethod
    def get(self, task_id: str, owner_id: str) -> TaskEntity:
        """Return the task, or raise TaskNotFoundError."""

    @abstractmethod
    def update(self, task_id: str, owner_id: str, data: TaskUpdate) -> TaskEntity:
        """Apply the fields set in data and return the updated task, or raise TaskNotFoundError."""

    @abstractmethod
    def delete(self, task_id: str, owner_id: str) -> None:
        """Delete the task, or raise TaskNotFoundError."""

    @abstractmethod
    def list(self, owner_id: str) -> List[TaskEntity]:
        """Return all tasks of owner_id in creation order."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository. State lives as long as the instance.

    Tasks are kept in a dict keyed by id; insertion order is creation order.
    Callers always receive copies.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[str, TaskEntity] = {}

    def _new_id(self) -> str:
        return str(uuid.uuid4())

    def _lookup(self, task_id: str, owner_id: str) -> TaskEntity:
        # Caller must hold the lock.
        item = self._items.get(task_id)
        if item is None or item["user_id"] != owner_id:
            logger.info("Task %s not found for owner %r", task_id, owner_id)
            raise TaskNotFoundError(task_id)
        return item

    def create(self, owner_id: str, data: TaskCreate) -> TaskEntity:
        entity: TaskEntity = {
            "id": self._new_id(),
            "status": data.status,
            "title": data.title,
            "description": data.description,
            "user_id": owner_id,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        logger.debug("Created task %s for owner %r", entity["id"], owner_id)
        return entity.copy()

    def get(self, task_id: str, owner_id: str) -> TaskEntity:
        with self._lock:
            return self._lookup(task_id, owner_id).copy()

    def update(self, task_id: str, owner_id: str, data: TaskUpdate) -> TaskEntity:
        with self._lock:
            existing = self._lookup(task_id, owner_id)

            # Only explicitly set mutable fields; identity fields stay untouched
            changes = data.changes()
            if changes:
                existing.update(changes)  # type: ignore[typeddict-item]
                logger.debug("Updated task %s fields=%s", task_id, sorted(changes))
            return existing.copy()

    def delete(self, task_id: str, owner_id: str) -> None:
        with self._lock:
            self._lookup(task_id, owner_id)
            del self._items[task_id]
        logger.debug("Deleted task %s", task_id)

    def list(self, owner_id: str) -> List[TaskEntity]:
        with self._lock:
            return [t.copy() for t in self._items.values() if t["user_id"] == owner_id]
