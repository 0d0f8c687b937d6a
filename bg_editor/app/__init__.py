from __future__ import annotations

"""
Application-level utilities:
- settings
- logging
- error definitions
"""

from bg_editor.app import errors, logging, settings

__all__ = [
    "errors",
    "logging",
    "settings",
]
