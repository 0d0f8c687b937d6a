from __future__ import annotations

"""
Image codec adapter.

Turns user input (uploaded files, remote URLs, base64 strings) into
ImageArtifact values and back into displayable forms. No image decoding
happens here: bytes are carried as-is with their declared media type.
"""

import base64
import binascii
import logging
from typing import Optional, Protocol

import httpx

from bg_editor.app.errors import FetchError, ReadError
from bg_editor.session.state import ImageArtifact

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"


class UploadedFile(Protocol):
    """What we need from an upload (FastAPI's UploadFile satisfies this)."""
    filename: Optional[str]
    content_type: Optional[str]

    async def read(self, size: int = -1) -> bytes: ...


def encode_bytes(data: bytes, media_type: Optional[str]) -> ImageArtifact:
    return ImageArtifact(data=bytes(data), media_type=media_type or DEFAULT_MEDIA_TYPE)


async def encode_local_file(upload: UploadedFile) -> ImageArtifact:
    """
    Read an uploaded file into an ImageArtifact.
    The declared content type must claim to be an image; the bytes are not inspected.
    """
    media_type = (upload.content_type or "").split(";")[0].strip().lower()
    if not media_type.startswith("image/"):
        raise ReadError(f"'{upload.filename or 'upload'}' is not an image (type: {media_type or 'unknown'}).")

    try:
        data = await upload.read()
    except (OSError, RuntimeError) as e:
        raise ReadError(f"Failed to read '{upload.filename or 'upload'}': {e}") from e

    if not data:
        raise ReadError("Empty image upload.")
    return encode_bytes(data, media_type)


async def encode_remote_url(url: str, http: httpx.AsyncClient) -> ImageArtifact:
    """Fetch an image URL and wrap the body with the response's content type."""
    try:
        resp = await http.get(url, follow_redirects=True)
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FetchError(f"Background image server error: {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise FetchError(f"Failed to fetch background image: {e}") from e

    content_type = resp.headers.get("content-type", "").split(";")[0].strip() or "image/jpeg"
    logger.debug("fetched background", extra={"url": url, "bytes": len(resp.content), "media_type": content_type})
    return encode_bytes(resp.content, content_type)


def decode_base64(b64: str, media_type: str) -> ImageArtifact:
    try:
        data = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ReadError(f"Invalid base64 image data: {e}") from e
    return encode_bytes(data, media_type)


def to_data_url(artifact: ImageArtifact) -> str:
    return f"data:{artifact.media_type};base64,{artifact.to_base64()}"
