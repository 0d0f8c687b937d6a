# bg_editor/llms/providers/gemini_client.py
from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Any, List, Optional, Sequence

from google import genai
from google.genai import types

from bg_editor.app.errors import ConfigError, RemoteTransportFailure
from bg_editor.app.settings import Settings
from bg_editor.core.ids import new_request_id
from bg_editor.session.state import ImageArtifact

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"


def extract_image(resp: Any) -> Optional[ImageArtifact]:
    """
    Read the first candidate's first part. Returns None when that part
    carries no inline image data (the model answered with text, was
    blocked, or returned nothing).
    """
    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None

    inline_data = getattr(parts[0], "inline_data", None)
    if not inline_data:
        return None
    mime = getattr(inline_data, "mime_type", None) or "image/png"
    data = getattr(inline_data, "data", None)

    # data may be bytes or base64 str
    if isinstance(data, (bytes, bytearray)):
        return ImageArtifact(data=bytes(data), media_type=mime) if data else None
    if isinstance(data, str) and data:
        try:
            return ImageArtifact(data=base64.b64decode(data), media_type=mime)
        except (binascii.Error, ValueError):
            logger.warning("inline image data was not valid base64")
    return None


class GeminiImageClient:
    """
    Gemini image-editing wrapper.
    Each call sends image parts followed by one text instruction and asks for an IMAGE response.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        project_id: Optional[str] = None,
        location: str = "us-central1",
        model: str = DEFAULT_IMAGE_MODEL,
        client: Optional[genai.Client] = None,
    ):
        self.model = model

        if client is not None:
            self.client = client
        elif api_key and project_id:
            # Vertex AI with API key
            self.client = genai.Client(vertexai=True, api_key=api_key)
        elif api_key:
            # Gemini API directly
            self.client = genai.Client(api_key=api_key)
        elif project_id:
            # Vertex AI with Application Default Credentials
            self.client = genai.Client(vertexai=True, project=project_id, location=location)
        else:
            raise ConfigError(
                "Either an API key (Gemini API / Vertex AI) or a project id (Vertex AI with ADC) is required"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiImageClient":
        return cls(
            api_key=settings.gemini_api_key,
            project_id=settings.gcp_project,
            location=settings.gcp_location,
            model=settings.image_model,
        )

    def _build_parts(self, images: Sequence[ImageArtifact], instruction: str) -> List[types.Part]:
        parts = [types.Part.from_bytes(data=img.data, mime_type=img.media_type) for img in images]
        parts.append(types.Part.from_text(text=instruction))
        return parts

    async def edit(
        self,
        images: Sequence[ImageArtifact],
        instruction: str,
        *,
        op: str = "edit",
    ) -> Optional[ImageArtifact]:
        """
        One best-effort request, no retries.
        Returns None on a soft failure (no image in the response);
        raises RemoteTransportFailure when the call itself fails.
        """
        request_id = new_request_id()
        config = types.GenerateContentConfig(response_modalities=["IMAGE"])
        started = time.perf_counter()
        try:
            resp = await self.client.aio.models.generate_content(
                model=self.model,
                contents=self._build_parts(images, instruction),
                config=config,
            )
        except Exception as e:
            # credential refresh errors do not derive from APIError
            logger.error(
                "image model call failed",
                extra={"op": op, "model": self.model, "request_id": request_id, "error": str(e)},
            )
            raise RemoteTransportFailure(f"The image service request failed: {e}") from e

        result = extract_image(resp)
        logger.info(
            "image model call finished",
            extra={
                "op": op,
                "model": self.model,
                "request_id": request_id,
                "latency_ms": int((time.perf_counter() - started) * 1000),
                "inputs": len(images),
                "has_image": result is not None,
            },
        )
        return result
