from __future__ import annotations

from typing import Optional

from bg_editor.llms.prompt_registry import get_prompt
from bg_editor.llms.providers.gemini_client import GeminiImageClient
from bg_editor.session.state import ImageArtifact


async def compose_onto_image(
    client: GeminiImageClient,
    subject: ImageArtifact,
    background: ImageArtifact,
) -> Optional[ImageArtifact]:
    """
    Layer the subject over a background image.
    Order matters: the prompt refers to "the first image" and "the second image".
    """
    return await client.edit([subject, background], get_prompt("compose_image"), op="compose_image")


async def compose_onto_color(
    client: GeminiImageClient,
    subject: ImageArtifact,
    hex_color: str,
) -> Optional[ImageArtifact]:
    return await client.edit([subject], get_prompt("compose_color", color=hex_color), op="compose_color")
