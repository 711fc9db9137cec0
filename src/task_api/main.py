from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import get_basic_auth_dependency
from .logging_setup import setup_logging
from .repositories import InMemoryRepository, Repository
from .routers import tasks as tasks_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "CRUD operations for tasks, scoped to the requesting user.",
    },
]


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    logger.info("Validation failed for %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            # ctx may hold the raised ValueError, which is not JSON serializable
            "detail": jsonable_encoder(exc.errors(), custom_encoder={Exception: str}),
        },
    )


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The repository is owned by the returned app (app.state.repository) and
    lives as long as it does; pass one in to share or inspect state in tests.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Task Backend",
        description="Backend API service for managing per-user tasks.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings
    app.state.repository = repository if repository is not None else InMemoryRepository()

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health. Reveals nothing about stored tasks.
        """
        return {"message": "Healthy", "backend": "memory"}

    auth_dep = get_basic_auth_dependency(settings)
    app.include_router(tasks_router.router, dependencies=[Depends(auth_dep)])

    logger.info(
        "Task backend ready cors=%s basic_auth=%s user_header=%s",
        "*" if allow_all else ",".join(settings.cors_allow_origins),
        settings.enable_basic_auth,
        settings.user_id_header,
    )
    return app


app = create_app()
