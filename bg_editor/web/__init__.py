from __future__ import annotations

"""
HTTP surface: FastAPI app exposing the editor transitions, plus the runner.
"""

from bg_editor.web import schemas, server

__all__ = [
    "schemas",
    "server",
]
