from __future__ import annotations

from bg_editor.tools.exporters import download

__all__ = [
    "download",
]
