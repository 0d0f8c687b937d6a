from __future__ import annotations

from typing import Optional

from bg_editor.llms.prompt_registry import get_prompt
from bg_editor.llms.providers.gemini_client import GeminiImageClient
from bg_editor.session.state import ImageArtifact


async def remove_bg(client: GeminiImageClient, subject: ImageArtifact) -> Optional[ImageArtifact]:
    """Isolate the subject onto a transparent background."""
    return await client.edit([subject], get_prompt("remove_bg"), op="remove_bg")
