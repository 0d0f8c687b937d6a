from __future__ import annotations

"""
Tools package for the background editor.

- codec: upload / URL / base64 <-> ImageArtifact
- image_ops: the four remote transformations (remove_bg, cartoonify, compose onto image/color)
- exporters: packaging the final image as a download
"""

from bg_editor.tools import codec, exporters, image_ops

__all__ = [
    "codec",
    "exporters",
    "image_ops",
]
