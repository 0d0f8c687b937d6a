from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, RootModel

from bg_editor.session.editor import EditorSession
from bg_editor.session.state import (
    HEX_COLOR_PATTERN,
    ColorBackground,
    Phase,
    PresetBackground,
    UploadBackground,
)

ImageSlot = Literal["original", "foreground", "cartoon", "final", "display"]

# -----------------------------
# Requests
# -----------------------------

class PresetChoice(BaseModel):
    kind: Literal["preset"]
    url: str


class ColorChoice(BaseModel):
    kind: Literal["color"]
    color: str = Field(pattern=HEX_COLOR_PATTERN)


class UploadChoice(BaseModel):
    """Re-select the previously uploaded custom background."""
    kind: Literal["upload"]


BackgroundChoice = Annotated[
    Union[PresetChoice, ColorChoice, UploadChoice],
    Field(discriminator="kind"),
]


class BackgroundChoiceBody(RootModel[BackgroundChoice]):
    """JSON body of PUT /background: one of the tagged choices above."""


def to_selection(choice: PresetChoice | ColorChoice | UploadChoice):
    if isinstance(choice, PresetChoice):
        return PresetBackground(url=choice.url)
    if isinstance(choice, ColorChoice):
        return ColorBackground(color=choice.color)
    return UploadBackground()

# -----------------------------
# Responses
# -----------------------------

class BackgroundView(BaseModel):
    kind: Literal["preset", "color", "upload"]
    url: Optional[str] = None
    color: Optional[str] = None
    has_image: bool = False


class SessionView(BaseModel):
    session_id: str
    phase: Phase
    loading: bool
    loading_message: str = ""
    error: Optional[str] = None
    background: BackgroundView
    has_custom_background: bool = False
    cartoon_enabled: bool = False
    images: Dict[str, bool] = Field(default_factory=dict)


class PresetList(BaseModel):
    presets: List[str]


class ErrorBody(BaseModel):
    error: str


def _background_view(bg) -> BackgroundView:
    if isinstance(bg, PresetBackground):
        return BackgroundView(kind="preset", url=bg.url, has_image=True)
    if isinstance(bg, ColorBackground):
        return BackgroundView(kind="color", color=bg.color)
    return BackgroundView(kind="upload", has_image=bg.image is not None)


def session_view(editor: EditorSession) -> SessionView:
    s = editor.state
    return SessionView(
        session_id=editor.session_id,
        phase=s.phase,
        loading=s.loading,
        loading_message=s.loading_message,
        error=s.error,
        background=_background_view(s.background),
        has_custom_background=s.custom_background is not None,
        cartoon_enabled=s.cartoon_enabled,
        images={
            "original": s.original_image is not None,
            "foreground": s.foreground_image is not None,
            "cartoon": s.cartoon_version is not None,
            "final": s.final_image is not None,
        },
    )
