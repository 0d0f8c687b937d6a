from __future__ import annotations

"""
Small shared helpers: ID generation and hashing.
"""

from bg_editor.core import hashing, ids

__all__ = [
    "hashing",
    "ids",
]
