"""
Test doubles: a recording fake for the remote transformer, fake uploads,
and an httpx transport that serves preset backgrounds locally.
"""
import asyncio
from typing import Dict, List, Optional, Tuple

import httpx

from bg_editor.session.state import ImageArtifact

PRESETS = (
    "https://img.example/forest.jpg",
    "https://img.example/river.jpg",
)
PRESET_BYTES = {
    PRESETS[0]: b"forest-jpeg",
    PRESETS[1]: b"river-jpeg",
}


def artifact(tag: str, media_type: str = "image/png") -> ImageArtifact:
    return ImageArtifact(data=tag.encode(), media_type=media_type)


class FakeUpload:
    """Stand-in for fastapi.UploadFile."""

    def __init__(self, data: bytes, content_type: Optional[str] = "image/jpeg", filename: str = "photo.jpg",
                 fail: Optional[Exception] = None):
        self.data = data
        self.content_type = content_type
        self.filename = filename
        self.fail = fail

    async def read(self, size: int = -1) -> bytes:
        if self.fail is not None:
            raise self.fail
        return self.data


class FakeTransformer:
    """
    Records every call as (op, args) and returns canned results.
    `results[op]` may be an ImageArtifact, None (soft failure) or an exception.
    `gates[op]` (an asyncio.Event) holds the call until set.
    """

    def __init__(self):
        self.calls: List[Tuple[str, tuple]] = []
        self.results: Dict[str, object] = {
            "remove_background": artifact("B"),
            "cartoonify": artifact("C"),
            "composite_onto_image": artifact("F-image"),
            "composite_onto_color": artifact("F-color"),
        }
        self.gates: Dict[str, asyncio.Event] = {}

    async def _run(self, op: str, *args):
        self.calls.append((op, args))
        gate = self.gates.get(op)
        if gate is not None:
            await gate.wait()
        result = self.results[op]
        if isinstance(result, Exception):
            raise result
        return result

    async def remove_background(self, subject):
        return await self._run("remove_background", subject)

    async def cartoonify(self, subject):
        return await self._run("cartoonify", subject)

    async def composite_onto_image(self, subject, background):
        return await self._run("composite_onto_image", subject, background)

    async def composite_onto_color(self, subject, hex_color):
        return await self._run("composite_onto_color", subject, hex_color)

    def ops(self) -> List[str]:
        return [op for op, _ in self.calls]


def preset_transport(fetched: Optional[List[str]] = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if fetched is not None:
            fetched.append(url)
        if url in PRESET_BYTES:
            return httpx.Response(200, content=PRESET_BYTES[url], headers={"content-type": "image/jpeg"})
        return httpx.Response(404, content=b"not found")

    return httpx.MockTransport(handler)


