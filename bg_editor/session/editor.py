from __future__ import annotations

"""
Editor state machine.

    EMPTY -> UPLOADING -> BACKGROUND_REMOVED -> GENERATING -> COMPOSITED
                 |                                  |
                 +-> EMPTY (+error)                 +-> ERRORED (images kept)

Remote calls are awaited one after another. `upload_image` and `generate`
are single-flight: a second call while `loading` is set raises
OperationInProgressError. `reset` may run at any time; results of calls
started before the reset are discarded when they arrive.
"""

import logging
from typing import Callable, Optional, Protocol, Sequence

import httpx

from bg_editor.app.errors import (
    AppError,
    BackgroundUnavailableError,
    InvalidSelectionError,
    NothingToExportError,
    OperationInProgressError,
    RemoteSoftFailure,
)
from bg_editor.session.state import (
    ColorBackground,
    ImageArtifact,
    Phase,
    PresetBackground,
    SessionState,
    UploadBackground,
    initial_state,
)
from bg_editor.tools import codec
from bg_editor.tools.exporters.download import DEFAULT_FILENAME, Download, build_download

logger = logging.getLogger(__name__)

MSG_REMOVING = "Removing background..."
MSG_CARTOON = "Applying cartoon magic..."
MSG_COMPOSITING = "Compositing your masterpiece..."

ERR_REMOVE_BG = "Failed to remove background. The AI couldn't process the image."
ERR_CARTOON = "Failed to create cartoon version."
ERR_COMPOSITE = "Failed to generate the final image."
ERR_CUSTOM_BG = "Failed to load custom background."


class ImageTransformer(Protocol):
    async def remove_background(self, subject: ImageArtifact) -> Optional[ImageArtifact]: ...

    async def cartoonify(self, subject: ImageArtifact) -> Optional[ImageArtifact]: ...

    async def composite_onto_image(
        self, subject: ImageArtifact, background: ImageArtifact
    ) -> Optional[ImageArtifact]: ...

    async def composite_onto_color(self, subject: ImageArtifact, hex_color: str) -> Optional[ImageArtifact]: ...


class _Stale(Exception):
    """The session was reset while a call was in flight."""


class EditorSession:
    def __init__(
        self,
        transformer: ImageTransformer,
        http: httpx.AsyncClient,
        presets: Sequence[str],
        *,
        export_filename: str = DEFAULT_FILENAME,
        session_id: str = "",
    ):
        if not presets:
            raise ValueError("at least one preset background is required")
        self.transformer = transformer
        self.http = http
        self.presets = tuple(presets)
        self.export_filename = export_filename
        self.session_id = session_id

        self.state: SessionState = initial_state(self.presets[0])
        # Bumped by reset(); async work compares its captured token before applying results.
        self._generation = 0

    # -------------------------
    # read-only views
    # -------------------------
    @property
    def phase(self) -> Phase:
        return self.state.phase

    def display_image(self) -> Optional[ImageArtifact]:
        return self.state.display_image()

    def export(self) -> Download:
        if self.state.final_image is None:
            raise NothingToExportError()
        return build_download(self.state.final_image, self.export_filename)

    # -------------------------
    # transitions
    # -------------------------
    async def upload_image(self, upload: codec.UploadedFile) -> Phase:
        """
        Encode the file and remove its background. Any failure wipes the
        whole session back to EMPTY and records the error message.
        """
        token = self._begin(MSG_REMOVING)
        # images derived from a previous photo are no longer valid
        self.state.original_image = None
        self.state.foreground_image = None
        self.state.cartoon_version = None
        self.state.final_image = None
        try:
            original = await codec.encode_local_file(upload)
            self._check(token)
            self.state.original_image = original

            foreground = await self.transformer.remove_background(original)
            self._check(token)
            if foreground is None:
                raise RemoteSoftFailure(ERR_REMOVE_BG)
            self.state.foreground_image = foreground
            self._log("foreground ready", image=foreground)
        except _Stale:
            return self._discard(token, "upload")
        except AppError as e:
            if not self._is_current(token):
                return self._discard(token, "upload")
            logger.warning("background removal failed", extra={"session_id": self.session_id, "error": e.message})
            self._reset_state()
            self.state.error = e.message
        finally:
            self._end(token)
        return self.phase

    def select_background(self, selection: PresetBackground | ColorBackground | UploadBackground) -> Phase:
        """Pure state update; no remote call."""
        if isinstance(selection, PresetBackground):
            if selection.url not in self.presets:
                raise InvalidSelectionError(f"Unknown preset background: {selection.url}")
            self.state.background = selection
        elif isinstance(selection, ColorBackground):
            self.state.background = selection
        elif isinstance(selection, UploadBackground):
            # re-attach whatever was uploaded before, even after switching tabs
            self.state.background = UploadBackground(image=self.state.custom_background)
        else:
            raise InvalidSelectionError(f"Unsupported background selection: {selection!r}")
        return self.phase

    async def upload_custom_background(self, upload: codec.UploadedFile) -> Phase:
        token = self._generation
        try:
            artifact = await codec.encode_local_file(upload)
        except AppError as e:
            if self._is_current(token):
                logger.warning("custom background rejected", extra={"session_id": self.session_id, "error": e.message})
                self.state.error = ERR_CUSTOM_BG
            return self.phase
        if not self._is_current(token):
            return self._discard(token, "custom_background")

        self.state.custom_background = artifact
        self.state.background = UploadBackground(image=artifact)
        self.state.error = None
        return self.phase

    def toggle_cartoon(self) -> bool:
        """Flip the effect; a cached cartoon version survives toggling."""
        self.state.cartoon_enabled = not self.state.cartoon_enabled
        return self.state.cartoon_enabled

    async def generate(self) -> Phase:
        """
        Composite the (optionally cartoonified) foreground onto the selected
        background. Failures are recorded but keep the session's images.
        """
        if self.state.foreground_image is None:
            return self.phase

        token = self._begin("")
        self.state.final_image = None
        try:
            subject = await self._active_foreground(token)

            self.state.loading_message = MSG_COMPOSITING
            result = await self._composite(token, subject)
            self._check(token)
            if result is None:
                raise RemoteSoftFailure(ERR_COMPOSITE)
            self.state.final_image = result
            self._log("final image ready", image=result)
        except _Stale:
            return self._discard(token, "generate")
        except AppError as e:
            if not self._is_current(token):
                return self._discard(token, "generate")
            logger.warning("generation failed", extra={"session_id": self.session_id, "error": e.message})
            self.state.error = e.message
        finally:
            self._end(token)
        return self.phase

    def reset(self) -> Phase:
        """Back to EMPTY from any state; in-flight results will be dropped."""
        self._generation += 1
        self._reset_state()
        return self.phase

    # -------------------------
    # generate helpers
    # -------------------------
    async def _active_foreground(self, token: int) -> ImageArtifact:
        foreground = self.state.foreground_image
        if not self.state.cartoon_enabled:
            return foreground

        if self.state.cartoon_version is not None:
            return self.state.cartoon_version

        self.state.loading_message = MSG_CARTOON
        cartoon = await self.transformer.cartoonify(foreground)
        self._check(token)
        if cartoon is None:
            raise RemoteSoftFailure(ERR_CARTOON)
        self.state.cartoon_version = cartoon
        return cartoon

    async def _composite(self, token: int, subject: ImageArtifact) -> Optional[ImageArtifact]:
        bg = self.state.background
        if isinstance(bg, ColorBackground):
            return await self.transformer.composite_onto_color(subject, bg.color)
        if isinstance(bg, PresetBackground):
            bg_image = await codec.encode_remote_url(bg.url, self.http)
            self._check(token)
            return await self.transformer.composite_onto_image(subject, bg_image)
        if isinstance(bg, UploadBackground):
            if bg.image is None:
                raise BackgroundUnavailableError()
            return await self.transformer.composite_onto_image(subject, bg.image)
        raise InvalidSelectionError(f"Unsupported background selection: {bg!r}")

    # -------------------------
    # bookkeeping
    # -------------------------
    def _begin(self, message: str) -> int:
        # No await between the check and the set, so this is atomic on the event loop.
        if self.state.loading:
            raise OperationInProgressError()
        self.state.error = None
        self.state.loading = True
        self.state.loading_message = message
        return self._generation

    def _end(self, token: int) -> None:
        if self._is_current(token):
            self.state.loading = False
            self.state.loading_message = ""

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def _check(self, token: int) -> None:
        if not self._is_current(token):
            raise _Stale()

    def _discard(self, token: int, op: str) -> Phase:
        logger.info(
            "discarding result of %s started before reset",
            op,
            extra={"session_id": self.session_id, "token": token, "generation": self._generation},
        )
        return self.phase

    def _reset_state(self) -> None:
        self.state = initial_state(self.presets[0])

    def _log(self, msg: str, *, image: ImageArtifact) -> None:
        logger.info(
            msg,
            extra={
                "session_id": self.session_id,
                "media_type": image.media_type,
                "bytes": image.size,
                "sha256": image.short_sha256,
            },
        )


EditorFactory = Callable[[str], EditorSession]
