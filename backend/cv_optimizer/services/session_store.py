"""
Session Store — per-session analysis result and live optimized CV.

In-memory only (lost on restart). One entry per session id; the result is
replaced wholesale by a new analysis and the CV text wholesale by an edit or
a regeneration. ``single_flight`` rejects a second analysis/regeneration for a
session while one is still outstanding.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

from cv_optimizer.config import settings
from cv_optimizer.exceptions import RequestInFlightError, SessionNotFoundError, StaleSessionError
from cv_optimizer.models.analysis_models import AnalysisResult

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    result: AnalysisResult
    optimized_cv: str
    touched_at: float = field(default_factory=time.monotonic)


class SessionStore:
    def __init__(self, ttl_seconds: float | None = None):
        self._ttl = settings.session_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries: dict[str, SessionEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    # ── Create / Read / Clear ───────────────────────────────────────────────

    def create(self, session_id: str, result: AnalysisResult) -> SessionEntry:
        """Store a fresh analysis, discarding anything the session held before."""
        self._evict_expired()
        entry = SessionEntry(result=result, optimized_cv=result.optimized_cv)
        self._entries[session_id] = entry
        logger.info(f"Session {session_id[:8]}: stored analysis (ats={result.ats_score} match={result.match_score})")
        return entry

    def get(self, session_id: str) -> SessionEntry:
        self._evict_expired()
        entry = self._entries.get(session_id)
        if entry is None:
            raise SessionNotFoundError("No analysis found for this session. Run an analysis first.")
        entry.touched_at = time.monotonic()
        return entry

    def get_cv(self, session_id: str) -> str:
        return self.get(session_id).optimized_cv

    def replace_cv(self, session_id: str, text: str, expected: SessionEntry | None = None) -> str:
        """Swap in new CV text. With ``expected``, only if that entry is still the current one."""
        entry = self.get(session_id)
        if expected is not None and entry is not expected:
            raise StaleSessionError("The session was re-analysed while this request was running; result discarded")
        entry.optimized_cv = text
        return text

    def clear(self, session_id: str) -> bool:
        """Drop the session's data. Returns False if there was nothing to drop."""
        if not self.is_busy(session_id):
            self._locks.pop(session_id, None)
        return self._entries.pop(session_id, None) is not None

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # ── Concurrency ─────────────────────────────────────────────────────────

    @asynccontextmanager
    async def single_flight(self, session_id: str) -> AsyncIterator[None]:
        """Hold the session's slot for one model round trip, or reject immediately."""
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        if lock.locked():
            raise RequestInFlightError("A request for this session is already in progress")
        await lock.acquire()
        try:
            yield
        finally:
            lock.release()
            # Sessions without data keep no lock (failed first analysis, cleared session)
            if session_id not in self._entries and self._locks.get(session_id) is lock:
                del self._locks[session_id]

    def is_busy(self, session_id: str) -> bool:
        lock = self._locks.get(session_id)
        return lock is not None and lock.locked()

    # ── Helpers ─────────────────────────────────────────────────────────────

    def _evict_expired(self) -> None:
        if self._ttl <= 0:
            return
        cutoff = time.monotonic() - self._ttl
        expired = [
            sid for sid, entry in self._entries.items()
            if entry.touched_at < cutoff and not self.is_busy(sid)
        ]
        for sid in expired:
            self._entries.pop(sid, None)
            self._locks.pop(sid, None)
        if expired:
            logger.info(f"Evicted {len(expired)} idle session(s)")


# Process-wide store, handed to routes through get_session_store()
session_store = SessionStore()
