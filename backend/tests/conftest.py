import json
from types import SimpleNamespace

import pytest

from cv_optimizer.config import settings
from cv_optimizer.services import llm_service
from cv_optimizer.services.session_store import SessionStore

SAMPLE_RESULT = {
    "atsScore": 80,
    "matchScore": 70,
    "missingKeywords": ["Go", "Kubernetes"],
    "suggestions": ["Add metrics to your impact bullets"],
    "keywordDensity": {"Go": 5, "Python": 2.5},
    "optimizedCV": "Jane Doe\nBackend Engineer\n- Built payment APIs in Python",
}


def fake_response(content: str) -> SimpleNamespace:
    """Minimal stand-in for a LiteLLM ModelResponse."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=None,
    )


@pytest.fixture
def sample_json() -> str:
    return json.dumps(SAMPLE_RESULT)


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(ttl_seconds=0)


@pytest.fixture(autouse=True)
def no_server_key(monkeypatch):
    monkeypatch.setattr(settings, "groq_api_key", None)
    monkeypatch.setattr(settings, "credential_source", "auto")


@pytest.fixture
def fake_llm(monkeypatch):
    """Replace acompletion; returns the list of recorded call kwargs.

    Set ``calls.reply`` to a string (returned as content) or an exception (raised).
    """
    class _Calls(list):
        reply = ""

    calls = _Calls()

    async def _acompletion(**kwargs):
        calls.append(kwargs)
        if isinstance(calls.reply, BaseException):
            raise calls.reply
        return fake_response(calls.reply)

    monkeypatch.setattr(llm_service, "acompletion", _acompletion)
    return calls
