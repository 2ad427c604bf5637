"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.config import Settings
from taskboard.database import close_db, create_engine, create_session_factory, get_session, init_db
from taskboard.errors import NotFoundError, TaskboardError
from taskboard.logging_setup import configure_logging
from taskboard.models import (
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    Task,
    TaskCompletion,
    TaskCreate,
    TaskUpdate,
)
from taskboard.store import TaskStore

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}
NOT_FOUND_RESPONSES = {
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    **ERROR_RESPONSES,
}

router = APIRouter()


def get_task_store(session: AsyncSession = Depends(get_session)) -> TaskStore:
    """FastAPI dependency for TaskStore."""
    return TaskStore(session)


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse()


@router.get("/tasks", response_model=list[Task], tags=["Tasks"], responses=ERROR_RESPONSES)
async def list_tasks(store: TaskStore = Depends(get_task_store)) -> list[Task]:
    """List active tasks, newest first."""
    return await store.list_all()


@router.post(
    "/tasks",
    response_model=Task,
    status_code=status.HTTP_201_CREATED,
    tags=["Tasks"],
    responses=ERROR_RESPONSES,
)
async def create_task(data: TaskCreate, store: TaskStore = Depends(get_task_store)) -> Task:
    """Create a new task."""
    return await store.create(**data.model_dump())


@router.put("/tasks/{task_id}", response_model=Task, tags=["Tasks"], responses=NOT_FOUND_RESPONSES)
async def update_task(
    task_id: int, data: TaskUpdate, store: TaskStore = Depends(get_task_store)
) -> Task:
    """Replace the title, description, due date and priority of a task."""
    task = await store.update(task_id, **data.model_dump())
    if task is None:
        raise NotFoundError(task_id)
    return task


@router.patch(
    "/tasks/{task_id}/complete",
    response_model=Task,
    tags=["Tasks"],
    responses=NOT_FOUND_RESPONSES,
)
async def set_task_completed(
    task_id: int, data: TaskCompletion, store: TaskStore = Depends(get_task_store)
) -> Task:
    """Mark a task complete or incomplete."""
    task = await store.set_completed(task_id, data.completed)
    if task is None:
        raise NotFoundError(task_id)
    return task


@router.delete(
    "/tasks/{task_id}",
    response_model=MessageResponse,
    tags=["Tasks"],
    responses=ERROR_RESPONSES,
)
async def delete_task(task_id: int, store: TaskStore = Depends(get_task_store)) -> MessageResponse:
    """Soft-delete a task. Deleting an unknown or already deleted id also succeeds."""
    await store.soft_delete(task_id)
    return MessageResponse(message="Task deleted")


async def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    """Render domain errors as ``{"error": message}`` with their status code."""
    if isinstance(exc, NotFoundError):
        logger.info("%s %s -> task %s not found", request.method, request.url.path, exc.task_id)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body and path validation failures in the shared error shape."""
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "detail": jsonable_encoder(exc.errors())},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for failures nothing else mapped; never exposes the exception."""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API application with its own database engine."""
    settings = settings or Settings.from_env()
    engine = create_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db(engine)
        async with app.state.session_factory() as session:
            total = await TaskStore(session).count()
        logger.info("Taskboard API ready db=%s total=%s", engine.url.render_as_string(), total)
        yield
        await close_db(engine)
        logger.info("Taskboard API shut down")

    app = FastAPI(
        title="Taskboard API",
        description="Personal task manager with calendar due dates and soft deletion.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Any origin may call the API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["*"],
    )
    app.add_exception_handler(TaskboardError, taskboard_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
    app.include_router(router)
    return app


settings = Settings.from_env()
configure_logging(settings.log_level)
app = create_app(settings)


def run() -> None:
    """Serve the module-level app with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
