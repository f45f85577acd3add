"""FastAPI application exposing sandbox manifests and log reports."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from ..config import ConfigError
from ..errors import NoActiveSessionError, SandboxScanError, SessionClosedError
from ..logging import get_logger
from ..session import SandboxSession, SessionRegistry

T = TypeVar("T")

logger = get_logger("service")


class HealthResponse(BaseModel):
    status: str


class FailureResponse(BaseModel):
    success: bool = False
    error: str


class SessionReleasedResponse(BaseModel):
    success: bool = True
    released: Optional[str] = None


class SandboxFilesResponse(BaseModel):
    success: bool = True
    files: Dict[str, str]
    structure: str
    fileCount: int
    manifest: Dict[str, Any]


class DependencyErrorModel(BaseModel):
    # Snapshot records may carry fields of their own; they are passed through.
    model_config = ConfigDict(extra="allow")

    type: str
    package: str
    message: str
    file: str


class ViteErrorsResponse(BaseModel):
    success: bool = True
    hasErrors: bool
    errors: List[DependencyErrorModel]


class SandboxLogsResponse(BaseModel):
    success: bool = True
    hasErrors: bool
    logs: List[str]
    status: str


def _failure(status_code: int, message: str) -> JSONResponse:
    payload = FailureResponse(error=message)
    return JSONResponse(status_code=status_code, content=payload.model_dump())


async def _run_blocking(func: Callable[[], T]) -> T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def create_app(registry: SessionRegistry | None = None) -> FastAPI:
    """Create the FastAPI application bound to ``registry``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        app.state.registry.clear()

    app = FastAPI(title="Sandbox Scan Service", version="0.1.0", lifespan=lifespan)
    app.state.registry = registry or SessionRegistry()

    async def get_session() -> SandboxSession:
        return app.state.registry.require()

    async def _guarded(route: str, func: Callable[[], Dict[str, Any]]) -> Any:
        try:
            return await _run_blocking(func)
        except (SandboxScanError, ConfigError):
            raise
        except Exception as exc:
            logger.exception("[%s] Error: %s", route, exc)
            return _failure(500, str(exc) or exc.__class__.__name__)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/sandbox-files", response_model=SandboxFilesResponse)
    async def sandbox_files(session: SandboxSession = Depends(get_session)) -> Any:
        def _build() -> Dict[str, Any]:
            return {"success": True, **session.build_manifest().to_dict()}

        return await _guarded("sandbox-files", _build)

    @app.get("/monitor-vite-logs", response_model=ViteErrorsResponse)
    async def monitor_vite_logs(session: SandboxSession = Depends(get_session)) -> Any:
        def _mine() -> Dict[str, Any]:
            return {"success": True, **session.mine_dependency_errors().to_dict()}

        return await _guarded("monitor-vite-logs", _mine)

    @app.get("/sandbox-logs", response_model=SandboxLogsResponse)
    async def sandbox_logs(session: SandboxSession = Depends(get_session)) -> Any:
        def _read() -> Dict[str, Any]:
            return {"success": True, **session.read_log_status().to_dict()}

        return await _guarded("sandbox-logs", _read)

    @app.delete("/session", response_model=SessionReleasedResponse)
    async def release_session() -> SessionReleasedResponse:
        current = app.state.registry.current()
        app.state.registry.clear()
        return SessionReleasedResponse(released=current.name if current else None)

    @app.exception_handler(NoActiveSessionError)
    async def no_session_handler(_: Any, exc: NoActiveSessionError) -> JSONResponse:
        return _failure(404, str(exc))

    @app.exception_handler(SessionClosedError)
    async def closed_session_handler(_: Any, exc: SessionClosedError) -> JSONResponse:
        return _failure(400, str(exc))

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return _failure(400, str(exc))

    @app.exception_handler(SandboxScanError)
    async def scan_error_handler(_: Any, exc: SandboxScanError) -> JSONResponse:
        logger.error("Sandbox operation failed: %s", exc)
        return _failure(500, str(exc))

    return app


def run_service(
    registry: SessionRegistry | None = None, host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(registry), host=host, port=port)


__all__ = ["create_app", "run_service"]
