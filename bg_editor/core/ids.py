from __future__ import annotations
import secrets

def _tok(nbytes: int = 12) -> str:
    return secrets.token_urlsafe(nbytes)

def new_session_id() -> str:
    return f"sess_{_tok()}"

def new_request_id() -> str:
    return f"req_{_tok(8)}"
