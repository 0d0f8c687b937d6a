from __future__ import annotations

"""
AI background editor:
- remote image transformations (Gemini image model)
- per-session orchestration of upload -> remove-bg -> [cartoonify] -> composite
- FastAPI web surface
"""

__version__ = "0.1.0"
