from __future__ import annotations

from bg_editor.tools.image_ops import remove_bg, cartoonify, compose_layers, transformer

__all__ = [
    "remove_bg",
    "cartoonify",
    "compose_layers",
    "transformer",
]
