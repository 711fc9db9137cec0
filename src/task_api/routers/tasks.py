from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..auth import get_owner_id
from ..exceptions import TaskNotFoundError
from ..repositories import Repository
from ..schemas import TaskCreate, TaskOut, TaskUpdate

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)

_NOT_FOUND_RESPONSE = {"description": "Task not found"}


def _get_repo(request: Request) -> Repository:
    """
    Dependency returning the repository the app was built with.
    """
    return request.app.state.repository


def _not_found(exc: TaskNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="List all tasks of the requesting user in creation order.",
    responses={
        200: {"description": "List retrieved successfully"},
    },
)
def list_tasks(
    owner_id: str = Depends(get_owner_id),
    repo: Repository = Depends(_get_repo),
) -> List[TaskOut]:
    """
    List the caller's tasks.
    """
    return [TaskOut(**it) for it in repo.list(owner_id)]


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    description="Get a single task of the requesting user by ID.",
    responses={
        200: {"description": "Task found"},
        404: _NOT_FOUND_RESPONSE,
    },
)
def get_task(
    task_id: str,
    owner_id: str = Depends(get_owner_id),
    repo: Repository = Depends(_get_repo),
) -> TaskOut:
    """
    Retrieve a single task by its ID.
    """
    try:
        item = repo.get(task_id, owner_id)
    except TaskNotFoundError as exc:
        raise _not_found(exc) from exc
    return TaskOut(**item)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task owned by the requesting user and return it.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"description": "Validation error"},
    },
)
def create_task(
    payload: TaskCreate,
    owner_id: str = Depends(get_owner_id),
    repo: Repository = Depends(_get_repo),
) -> TaskOut:
    """
    Create a new task.
    """
    created = repo.create(owner_id, payload)
    return TaskOut(**created)


def _update(task_id: str, owner_id: str, payload: TaskUpdate, repo: Repository) -> TaskOut:
    try:
        updated = repo.update(task_id, owner_id, payload)
    except TaskNotFoundError as exc:
        raise _not_found(exc) from exc
    return TaskOut(**updated)


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description=(
        "Update an existing task. Only the fields present in the body are changed; "
        "omitted fields keep their values. id and userId cannot be changed."
    ),
    responses={
        200: {"description": "Task updated"},
        400: {"description": "Validation error"},
        404: _NOT_FOUND_RESPONSE,
    },
)
def put_task(
    task_id: str,
    payload: TaskUpdate,
    owner_id: str = Depends(get_owner_id),
    repo: Repository = Depends(_get_repo),
) -> TaskOut:
    """
    Update a task with merge semantics.
    """
    return _update(task_id, owner_id, payload, repo)


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=TaskOut,
    summary="Patch Task",
    description="Partially update fields of a task. Same semantics as PUT.",
    responses={
        200: {"description": "Task updated"},
        400: {"description": "Validation error"},
        404: _NOT_FOUND_RESPONSE,
    },
)
def patch_task(
    task_id: str,
    payload: TaskUpdate,
    owner_id: str = Depends(get_owner_id),
    repo: Repository = Depends(_get_repo),
) -> TaskOut:
    """
    Partial update of a task.
    """
    return _update(task_id, owner_id, payload, repo)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    description="Delete a task of the requesting user by ID.",
    responses={
        204: {"description": "Task deleted"},
        404: _NOT_FOUND_RESPONSE,
    },
)
def delete_task(
    task_id: str,
    owner_id: str = Depends(get_owner_id),
    repo: Repository = Depends(_get_repo),
) -> None:
    """
    Delete a task. Returns 204 on success, 404 if not found.
    """
    try:
        repo.delete(task_id, owner_id)
    except TaskNotFoundError as exc:
        raise _not_found(exc) from exc
    return None
