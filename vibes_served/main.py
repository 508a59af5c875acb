from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Any, Awaitable, Callable, Optional

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.responses import Response

from .ai import AiClient, create_ai_client
from .config import Settings, load_settings
from .db import MAX_PAGE_SIZE, ContentStore
from .log import configure_logging
from .models import Idea, IdeaPage, RandomIdeas
from .services.idea_store import IdeaStore


logger = logging.getLogger("vibes_served")

MAX_GENERATED_IDEAS = 12
INVALID_COUNT_ERROR = "Invalid 'count'. Must be an integer between 1 and 12."

OPENAPI_TAGS = [
    {"name": "hello", "description": "Greeting endpoint"},
    {"name": "ops", "description": "Operational endpoints"},
    {"name": "ideas", "description": "Idea listing and generation"},
]


class Message(BaseModel):
    message: str


class Status(BaseModel):
    status: str


class VersionInfo(BaseModel):
    version: str
    commit: str


class ErrorBody(BaseModel):
    error: str


def _parse_int(raw: Optional[str], default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_count(raw: Optional[str]) -> Optional[int]:
    """Strict parse for generate-ideas; ``None`` means invalid."""
    if raw is None:
        return 1
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if not value.is_integer():
        return None
    count = int(value)
    if count < 1 or count > MAX_GENERATED_IDEAS:
        return None
    return count


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_ai_client(request: Request) -> AiClient:
    return request.app.state.ai_client


def get_content_store(request: Request) -> ContentStore:
    store = getattr(request.app.state, "content_store", None)
    if store is None:
        raise RuntimeError("Content store not initialized")
    return store


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.ideas_backend == "content":
            try:
                app.state.content_store = ContentStore(settings.db_path)
                logger.info(f"Content store opened at {settings.db_path}")
            except Exception as e:
                logger.exception(f"CRITICAL: Database initialization failed: {e}")
                raise
        logger.info("Startup complete, app ready to serve requests")
        yield
        store = getattr(app.state, "content_store", None)
        if store is not None:
            store.close()
            app.state.content_store = None
        logger.info("Shutting down gracefully...")

    app = FastAPI(
        title="Vibes Only Served API",
        version=settings.app_version,
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.ai_client = create_ai_client(settings.ai_provider)
    app.state.content_store = None

    @app.middleware("http")
    async def logging_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = perf_counter()
        outcome = "error"
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            outcome = "success" if status < 400 else "error"
        except Exception:
            outcome = "exception"
            raise
        finally:
            logger.info(
                "request",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "status": status,
                    "duration_ms": int((perf_counter() - start) * 1000),
                    "outcome": outcome,
                },
            )
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    _register_routes(app, settings)
    return app


def _register_routes(app: FastAPI, settings: Settings) -> None:
    @app.get("/api/v1/hello", response_model=Message, tags=["hello"], summary="Hello world")
    def hello(name: str = Query("World", description='Name to greet. Defaults to "World".')) -> Message:
        return Message(message=f"Hello, {name}!")

    @app.get("/healthz", response_model=Status, tags=["ops"], summary="Liveness probe")
    def healthz() -> Status:
        return Status(status="ok")

    @app.get("/readyz", response_model=Status, tags=["ops"], summary="Readiness probe")
    def readyz() -> Status:
        return Status(status="ready")

    @app.get("/version", response_model=VersionInfo, tags=["ops"], summary="App version and commit")
    def version(s: Settings = Depends(get_settings)) -> VersionInfo:
        return VersionInfo(version=s.app_version, commit=s.git_commit)

    @app.get(
        "/api/v1/generate-ideas",
        response_model=list[Idea],
        responses={400: {"model": ErrorBody}},
        tags=["ideas"],
        summary="Generate dummy ideas",
        description="Returns N dummy ideas. All ideas are identical except for unique ids.",
    )
    def generate_ideas(
        count: Optional[str] = Query(None, description="Integer between 1 and 12, default 1"),
        ai_client: AiClient = Depends(get_ai_client),
    ) -> Any:
        n = _parse_count(count)
        if n is None:
            return JSONResponse(status_code=400, content={"error": INVALID_COUNT_ERROR})
        return ai_client.generate_ideas(n)

    if settings.ideas_backend == "content":
        @app.get("/api/v1/ideas", response_model=IdeaPage, response_model_exclude_none=True, tags=["ideas"], summary="List ideas (paginated)")
        def list_ideas_page(
            limit: Optional[str] = Query(None, description=f"Page size, clamped to 1..{MAX_PAGE_SIZE}"),
            offset: Optional[str] = Query(None, description="Rows to skip, clamped to >= 0"),
            store: ContentStore = Depends(get_content_store),
        ) -> Any:
            return store.list_page(limit=_parse_int(limit, 20), offset=_parse_int(offset, 0))

        @app.get("/api/v1/ideas/random", response_model=RandomIdeas, tags=["ideas"], summary="Random ideas")
        def random_ideas(
            count: Optional[str] = Query(None, description=f"Number of ideas, clamped to 1..{MAX_PAGE_SIZE}"),
            store: ContentStore = Depends(get_content_store),
        ) -> Any:
            return {"ideas": store.random_sample(_parse_int(count, 1))}
    else:
        @app.get("/api/v1/ideas", response_model=list[Idea], tags=["ideas"], summary="List ideas")
        def list_ideas(s: Settings = Depends(get_settings)) -> list[Idea]:
            store = IdeaStore(storage_file_path=s.db_file_path)
            try:
                return store.list()
            finally:
                store.close()


app = create_app()


def main() -> None:
    settings: Settings = app.state.settings
    logger.info(f"Server starting on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
