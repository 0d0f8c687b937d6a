from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from bg_editor.session.state import ImageArtifact

DEFAULT_FILENAME = "edited-image.png"


@dataclass(frozen=True)
class Download:
    data: bytes
    media_type: str
    filename: str

    @property
    def content_disposition(self) -> str:
        return f"attachment; filename=\"{self.filename}\"; filename*=UTF-8''{quote(self.filename)}"


def build_download(artifact: ImageArtifact, filename: str = DEFAULT_FILENAME) -> Download:
    """
    Package the final image as a downloadable file.
    The filename is fixed; the media type is whatever the model returned.
    """
    return Download(data=artifact.data, media_type=artifact.media_type, filename=filename)
