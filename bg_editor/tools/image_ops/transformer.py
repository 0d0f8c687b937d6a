from __future__ import annotations

from typing import Optional

from bg_editor.llms.providers.gemini_client import GeminiImageClient
from bg_editor.session.state import ImageArtifact
from bg_editor.tools.image_ops import cartoonify, compose_layers, remove_bg


class RemoteImageTransformer:
    """
    The four remote operations bound to one explicitly constructed client.
    EditorSession depends on this interface only, so tests can pass a fake.
    Every method returns None on a soft failure.
    """

    def __init__(self, client: GeminiImageClient):
        self.client = client

    async def remove_background(self, subject: ImageArtifact) -> Optional[ImageArtifact]:
        return await remove_bg.remove_bg(self.client, subject)

    async def cartoonify(self, subject: ImageArtifact) -> Optional[ImageArtifact]:
        return await cartoonify.cartoonify(self.client, subject)

    async def composite_onto_image(
        self, subject: ImageArtifact, background: ImageArtifact
    ) -> Optional[ImageArtifact]:
        return await compose_layers.compose_onto_image(self.client, subject, background)

    async def composite_onto_color(self, subject: ImageArtifact, hex_color: str) -> Optional[ImageArtifact]:
        return await compose_layers.compose_onto_color(self.client, subject, hex_color)
