from __future__ import annotations

"""
FastAPI app for the background editor.

One EditorSession per browser session, addressed by id. Upload creates the
session; reset (DELETE) destroys it, and idle sessions expire. Every
transition endpoint returns the resulting SessionView.
"""

import logging
from contextlib import asynccontextmanager
from importlib import resources
from typing import Optional

import httpx
from fastapi import FastAPI, File, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, Response

from bg_editor import __version__
from bg_editor.app.errors import (
    AppError,
    BackgroundUnavailableError,
    ConfigError,
    InvalidSelectionError,
    NothingToExportError,
    OperationInProgressError,
    SessionNotFoundError,
)
from bg_editor.app.settings import Settings
from bg_editor.llms.providers.gemini_client import GeminiImageClient
from bg_editor.session.editor import EditorSession, ImageTransformer
from bg_editor.session.session_manager import SessionManager
from bg_editor.session.state import Phase
from bg_editor.tools.image_ops.transformer import RemoteImageTransformer
from bg_editor.web.schemas import (
    BackgroundChoiceBody,
    ErrorBody,
    ImageSlot,
    PresetList,
    SessionView,
    session_view,
    to_selection,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    SessionNotFoundError: 404,
    NothingToExportError: 404,
    OperationInProgressError: 409,
    InvalidSelectionError: 422,
    BackgroundUnavailableError: 422,
    ConfigError: 500,
}


def _status_for(exc: AppError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return 400


def create_app(
    settings: Settings,
    transformer: Optional[ImageTransformer] = None,
    http: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the app. `transformer` and `http` are injectable; when omitted the
    Gemini-backed transformer is built from settings and an httpx client is
    opened for the app's lifetime.
    """
    if transformer is None:
        transformer = RemoteImageTransformer(GeminiImageClient.from_settings(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_http = app.state.http is None
        if owns_http:
            app.state.http = httpx.AsyncClient(timeout=settings.fetch_timeout_s)
        try:
            yield
        finally:
            if owns_http:
                await app.state.http.aclose()
                app.state.http = None

    app = FastAPI(title="AI Background Editor", version=__version__, lifespan=lifespan)
    app.state.http = http

    def _new_editor(session_id: str) -> EditorSession:
        if app.state.http is None:
            raise ConfigError("HTTP client is not ready; is the app running?")
        return EditorSession(
            transformer,
            app.state.http,
            settings.preset_backgrounds,
            export_filename=settings.export_filename,
            session_id=session_id,
        )

    sessions = SessionManager(
        _new_editor,
        idle_ttl_s=settings.session_idle_ttl_s,
        max_sessions=settings.max_sessions,
    )
    app.state.sessions = sessions

    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError) -> JSONResponse:
        status = _status_for(exc)
        if status >= 500:
            logger.error("request failed", extra={"path": request.url.path, "error": exc.message})
        return JSONResponse(status_code=status, content=ErrorBody(error=exc.message).model_dump())

    # -------------------------
    # front-end
    # -------------------------
    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        return resources.files("bg_editor.web").joinpath("static/index.html").read_text(encoding="utf-8")

    @app.get("/api/presets", response_model=PresetList)
    async def list_presets() -> PresetList:
        return PresetList(presets=list(settings.preset_backgrounds))

    # -------------------------
    # session lifecycle
    # -------------------------
    @app.post("/api/sessions", response_model=SessionView, status_code=201)
    async def upload_image(file: UploadFile = File(...)):
        editor = sessions.create_session()
        phase = await editor.upload_image(file)
        if phase == Phase.EMPTY:
            # Upload failures are unrecoverable: the session is destroyed.
            error = editor.state.error or "An unknown error occurred during background removal."
            sessions.drop_session(editor.session_id)
            return JSONResponse(status_code=422, content=ErrorBody(error=error).model_dump())
        return session_view(editor)

    @app.get("/api/sessions/{session_id}", response_model=SessionView)
    async def get_session(session_id: str) -> SessionView:
        return session_view(sessions.load_session(session_id))

    @app.delete("/api/sessions/{session_id}", status_code=204)
    async def reset_session(session_id: str) -> Response:
        sessions.drop_session(session_id)
        return Response(status_code=204)

    # -------------------------
    # transitions
    # -------------------------
    @app.put("/api/sessions/{session_id}/background", response_model=SessionView)
    async def select_background(session_id: str, choice: BackgroundChoiceBody) -> SessionView:
        editor = sessions.load_session(session_id)
        editor.select_background(to_selection(choice.root))
        return session_view(editor)

    @app.post("/api/sessions/{session_id}/background/upload", response_model=SessionView)
    async def upload_background(session_id: str, file: UploadFile = File(...)) -> SessionView:
        editor = sessions.load_session(session_id)
        await editor.upload_custom_background(file)
        return session_view(editor)

    @app.post("/api/sessions/{session_id}/cartoon/toggle", response_model=SessionView)
    async def toggle_cartoon(session_id: str) -> SessionView:
        editor = sessions.load_session(session_id)
        editor.toggle_cartoon()
        return session_view(editor)

    @app.post("/api/sessions/{session_id}/generate", response_model=SessionView)
    async def generate(session_id: str) -> SessionView:
        editor = sessions.load_session(session_id)
        await editor.generate()
        return session_view(editor)

    # -------------------------
    # images & export
    # -------------------------
    @app.get("/api/sessions/{session_id}/images/{slot}")
    async def get_image(session_id: str, slot: ImageSlot) -> Response:
        s = sessions.load_session(session_id).state
        image = {
            "original": s.original_image,
            "foreground": s.foreground_image,
            "cartoon": s.cartoon_version,
            "final": s.final_image,
            "display": s.display_image(),
        }[slot]
        if image is None:
            return JSONResponse(status_code=404, content=ErrorBody(error=f"No {slot} image yet.").model_dump())
        return Response(content=image.data, media_type=image.media_type, headers={"Cache-Control": "no-store"})

    @app.get("/api/sessions/{session_id}/export")
    async def export(session_id: str) -> Response:
        download = sessions.load_session(session_id).export()
        return Response(
            content=download.data,
            media_type=download.media_type,
            headers={"Content-Disposition": download.content_disposition},
        )

    return app
