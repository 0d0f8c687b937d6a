from __future__ import annotations

"""
Providers (Gemini)
"""

from bg_editor.llms.providers import gemini_client

__all__ = [
    "gemini_client",
]
