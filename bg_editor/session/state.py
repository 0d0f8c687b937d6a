from __future__ import annotations

import base64
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from bg_editor.core.hashing import sha256_of_bytes, short_digest


class ImageArtifact(BaseModel):
    """
    An image held in memory: raw bytes plus the declared media type.
    Produced by the codec (uploads, URL fetches) or by the remote model.
    """
    model_config = ConfigDict(frozen=True)

    data: bytes
    media_type: str = "image/png"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def sha256(self) -> str:
        return sha256_of_bytes(self.data)

    @property
    def short_sha256(self) -> str:
        return short_digest(self.data)

    @property
    def size(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"ImageArtifact(media_type={self.media_type!r}, size={self.size}, sha256={self.short_sha256!r})"


# -----------------------------
# Background selection
# -----------------------------

HEX_COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"


class PresetBackground(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["preset"] = "preset"
    url: str


class ColorBackground(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["color"] = "color"
    color: str = Field(pattern=HEX_COLOR_PATTERN)


class UploadBackground(BaseModel):
    """Custom uploaded background; `image` is None until a file is uploaded."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["upload"] = "upload"
    image: Optional[ImageArtifact] = None


BackgroundSelection = Annotated[
    Union[PresetBackground, ColorBackground, UploadBackground],
    Field(discriminator="kind"),
]


# -----------------------------
# Session state
# -----------------------------

class Phase(str, Enum):
    EMPTY = "empty"
    UPLOADING = "uploading"
    BACKGROUND_REMOVED = "background_removed"
    GENERATING = "generating"
    COMPOSITED = "composited"
    ERRORED = "errored"


class SessionState(BaseModel):
    """
    Working set of one editing session. Mutated only by EditorSession.
    """
    model_config = ConfigDict(validate_assignment=True)

    original_image: Optional[ImageArtifact] = None
    foreground_image: Optional[ImageArtifact] = None
    cartoon_version: Optional[ImageArtifact] = None
    final_image: Optional[ImageArtifact] = None

    background: BackgroundSelection
    custom_background: Optional[ImageArtifact] = None
    cartoon_enabled: bool = False

    loading: bool = False
    loading_message: str = ""
    error: Optional[str] = None

    @property
    def phase(self) -> Phase:
        if self.loading:
            return Phase.GENERATING if self.foreground_image is not None else Phase.UPLOADING
        if self.foreground_image is None:
            return Phase.EMPTY
        if self.final_image is not None:
            return Phase.COMPOSITED
        if self.error:
            return Phase.ERRORED
        return Phase.BACKGROUND_REMOVED

    def display_image(self) -> Optional[ImageArtifact]:
        if self.final_image is not None:
            return self.final_image
        if self.cartoon_enabled and self.cartoon_version is not None:
            return self.cartoon_version
        return self.foreground_image


def initial_state(default_preset: str) -> SessionState:
    return SessionState(background=PresetBackground(url=default_preset))
