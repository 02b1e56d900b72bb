"""FastAPI server exposing the mirroring WebSocket and status endpoints."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import APIRouter, FastAPI, Request, WebSocket, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from droid_mirror import __version__
from droid_mirror.config import MirrorConfig
from droid_mirror.daemon.core import MirrorCore
from droid_mirror.errors import MirrorError, adb_command_error, session_not_found_error
from droid_mirror.stream.transport import WebSocketTransport
from droid_mirror.validation import validate_device_id

logger = structlog.get_logger()

router = APIRouter(prefix="/api")


def _error_response(error: MirrorError, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "error": error.to_dict()},
    )


def _core(request: Request) -> MirrorCore:
    core: MirrorCore = request.app.state.core
    return core


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Health check endpoint."""
    core = _core(request)
    sessions = await core.sessions.list_sessions()
    return {
        "status": "ok",
        "version": __version__,
        "running": core.is_running,
        "active_sessions": len(sessions),
        "frame_interval_ms": core.config.frame_interval_ms,
    }


@router.get("/devices", response_model=None)
async def list_devices(request: Request) -> dict[str, Any] | JSONResponse:
    """List devices attached to the adb server."""
    core = _core(request)
    try:
        devices = await core.device_manager.list_devices()
    except MirrorError as exc:
        return _error_response(exc, status_code=503)
    except Exception as exc:
        logger.warning("device_list_failed", error=str(exc))
        return _error_response(adb_command_error("devices", str(exc)), status_code=503)
    return {"devices": devices}


@router.get("/sessions")
async def list_sessions(request: Request) -> dict[str, Any]:
    """List active mirroring sessions."""
    core = _core(request)
    sessions = await core.sessions.list_sessions()
    return {"sessions": [session.describe() for session in sessions]}


@router.get("/sessions/{session_id}", response_model=None)
async def session_info(request: Request, session_id: str) -> dict[str, Any] | JSONResponse:
    """Get one live session."""
    core = _core(request)
    session = await core.sessions.get_session(session_id)
    if session is None:
        return _error_response(session_not_found_error(session_id), status_code=404)
    return session.describe()


@router.websocket("/screen/{device_id}")
async def screen(websocket: WebSocket, device_id: str) -> None:
    """Stream the device screen and accept input commands.

    Connect: ws://host:5679/api/screen/{device_id}
    """
    try:
        validate_device_id(device_id)
    except MirrorError as exc:
        logger.warning("screen_rejected", device_id=device_id, reason=exc.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=exc.message)
        return

    core: MirrorCore = websocket.app.state.core
    await websocket.accept()
    transport = WebSocketTransport(websocket)
    logger.info("screen_connected", device_id=device_id, remote=transport.remote)
    session = core.create_session(device_id, transport)
    await core.sessions.run(session)


def create_app(config: MirrorConfig | None = None) -> FastAPI:
    """Build the application for one server process."""
    config = config or MirrorConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage server lifecycle."""
        logger.info("server_starting", host=config.host, port=config.port)
        app.state.core = MirrorCore(config)
        await app.state.core.start()
        yield
        logger.info("server_stopping")
        await app.state.core.stop()

    app = FastAPI(
        title="Droid Mirror",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app

