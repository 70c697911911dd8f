"""
Request-scoped helpers: caller's API key, session id, and the session store.
"""

from __future__ import annotations

import uuid

from fastapi import Header
from typing import Optional

from cv_optimizer.services.session_store import SessionStore, session_store


class ClientCredential:
    """Key supplied by the browser for this request, if any."""

    def __init__(self, groq: str | None = None):
        self.groq = groq

    def pick(self, body_key: str | None = None) -> str | None:
        """Header key wins over a key sent in the request body."""
        return self.groq or (body_key or "").strip() or None


async def get_client_credential(
    x_groq_key: Optional[str] = Header(None, alias="X-Groq-Key"),
) -> ClientCredential:
    """FastAPI dependency that extracts the API key from request headers."""
    return ClientCredential(groq=(x_groq_key or "").strip() or None)


async def get_session_id(
    x_session_id: Optional[str] = Header(None, alias="X-Session-Id"),
) -> str | None:
    return (x_session_id or "").strip() or None


def new_session_id() -> str:
    return str(uuid.uuid4())


def get_session_store() -> SessionStore:
    return session_store
