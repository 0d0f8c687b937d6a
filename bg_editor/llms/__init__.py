from __future__ import annotations

"""
Model access: prompt registry and provider clients.
"""

from bg_editor.llms import prompt_registry, providers

__all__ = [
    "prompt_registry",
    "providers",
]
