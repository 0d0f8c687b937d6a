from __future__ import annotations

"""
Session layer:
- session state model (images, background selection, loading/error)
- the editor state machine driving the remote calls
- in-memory registry of live sessions
"""

from bg_editor.session import editor, session_manager, state

__all__ = [
    "editor",
    "session_manager",
    "state",
]
