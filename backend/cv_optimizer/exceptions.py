"""
Error taxonomy shared by services and routes.

Services raise these; routes translate them to HTTP responses using
``status_code``. Every failure is terminal for the action that triggered it.
"""

from __future__ import annotations


class CVOptimizerError(Exception):
    """Base class for all domain failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ── Model Client ─────────────────────────────────────────────────────────────


class AuthError(CVOptimizerError):
    """Credential missing, or rejected by the model provider."""

    status_code = 401


class UpstreamError(CVOptimizerError):
    """The model endpoint answered with a non-success response."""

    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class TransportError(CVOptimizerError):
    """Network failure or deadline expiry before a response arrived."""

    status_code = 504


# ── Response Decoding ────────────────────────────────────────────────────────


class DecodeError(CVOptimizerError):
    status_code = 502


class NoJsonFoundError(DecodeError):
    pass


class MalformedJsonError(DecodeError):
    pass


class SchemaMismatchError(DecodeError):
    """Parsed JSON lacks required fields or has wrongly-typed ones."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []


# ── Session / Features ───────────────────────────────────────────────────────


class SessionNotFoundError(CVOptimizerError):
    status_code = 404


class RequestInFlightError(CVOptimizerError):
    """Another analysis or regeneration is still running for this session."""

    status_code = 409


class UnsupportedFeatureError(CVOptimizerError):
    status_code = 501


class StaleSessionError(CVOptimizerError):
    """The session's analysis was replaced while a regeneration was running."""

    status_code = 409
