import asyncio

import litellm
import pytest

from conftest import fake_response

from cv_optimizer.config import settings
from cv_optimizer.exceptions import AuthError, TransportError, UpstreamError
from cv_optimizer.services import llm_service
from cv_optimizer.services.llm_service import complete, resolve_credential, validate_api_key


def test_complete_returns_first_choice_verbatim(fake_llm):
    fake_llm.reply = "  raw text with spaces  "
    out = asyncio.run(complete("hello", 1500, "gsk_test", prompt_name="cv_analysis"))

    assert out == "  raw text with spaces  "
    call = fake_llm[0]
    assert call["model"] == settings.llm_model
    assert call["messages"] == [{"role": "user", "content": "hello"}]
    assert call["max_tokens"] == 1500
    assert call["temperature"] == 0.7
    assert call["api_key"] == "gsk_test"
    assert call["num_retries"] == 0


@pytest.mark.parametrize("credential", [None, "", "   "])
def test_complete_without_credential_sends_nothing(fake_llm, credential):
    with pytest.raises(AuthError):
        asyncio.run(complete("hello", 10, credential))
    assert fake_llm == []


def test_complete_maps_provider_auth_failure(fake_llm):
    fake_llm.reply = litellm.AuthenticationError(message="Invalid API Key", llm_provider="groq", model="llama")
    with pytest.raises(AuthError):
        asyncio.run(complete("hello", 10, "gsk_bad"))


def test_complete_maps_connection_failure(fake_llm):
    fake_llm.reply = litellm.APIConnectionError(message="connection reset", llm_provider="groq", model="llama")
    with pytest.raises(TransportError):
        asyncio.run(complete("hello", 10, "gsk_test"))


def test_complete_maps_rate_limit_to_upstream(fake_llm):
    fake_llm.reply = litellm.RateLimitError(message="Rate limit reached", llm_provider="groq", model="llama")
    with pytest.raises(UpstreamError) as exc:
        asyncio.run(complete("hello", 10, "gsk_test"))
    assert exc.value.upstream_status == 429
    assert "Rate limit reached" in exc.value.message


def test_complete_passes_upstream_message_through(fake_llm):
    class ProviderError(Exception):
        status_code = 500

    fake_llm.reply = ProviderError("model is overloaded")
    with pytest.raises(UpstreamError) as exc:
        asyncio.run(complete("hello", 10, "gsk_test"))
    assert exc.value.message == "model is overloaded"
    assert exc.value.upstream_status == 500


def test_complete_deadline_is_transport_error(monkeypatch):
    async def _slow(**kwargs):
        await asyncio.sleep(5)

    monkeypatch.setattr(llm_service, "acompletion", _slow)
    monkeypatch.setattr(settings, "llm_timeout_seconds", 0.01)
    with pytest.raises(TransportError):
        asyncio.run(complete("hello", 10, "gsk_test"))


def test_concurrent_completions_do_not_block_each_other(monkeypatch):
    order = []

    async def _acompletion(**kwargs):
        prompt = kwargs["messages"][0]["content"]
        await asyncio.sleep(0.05 if prompt == "slow" else 0)
        order.append(prompt)
        return fake_response(prompt)

    monkeypatch.setattr(llm_service, "acompletion", _acompletion)

    async def _both():
        return await asyncio.gather(complete("slow", 5, "k"), complete("fast", 5, "k"))

    assert asyncio.run(_both()) == ["slow", "fast"]
    assert order == ["fast", "slow"]


# ── Credential resolution ────────────────────────────────────────────────────


def test_resolve_credential_auto_prefers_client(monkeypatch):
    monkeypatch.setattr(settings, "groq_api_key", "server-key")
    assert resolve_credential("client-key") == "client-key"
    assert resolve_credential(None) == "server-key"
    assert resolve_credential("   ") == "server-key"


def test_resolve_credential_client_only_ignores_server_key(monkeypatch):
    monkeypatch.setattr(settings, "groq_api_key", "server-key")
    with pytest.raises(AuthError):
        resolve_credential(None, source="client")
    assert resolve_credential("client-key", source="client") == "client-key"


def test_resolve_credential_server_only_ignores_client_key(monkeypatch):
    monkeypatch.setattr(settings, "groq_api_key", "server-key")
    assert resolve_credential("client-key", source="server") == "server-key"
    monkeypatch.setattr(settings, "groq_api_key", None)
    with pytest.raises(AuthError):
        resolve_credential("client-key", source="server")


def test_resolve_credential_nothing_configured():
    with pytest.raises(AuthError):
        resolve_credential(None)


# ── Key validation ───────────────────────────────────────────────────────────


def test_validate_api_key_success(fake_llm):
    fake_llm.reply = "pong"
    result = asyncio.run(validate_api_key("gsk_good"))
    assert result == {"valid": True, "model_used": settings.llm_probe_model, "error": None}
    assert fake_llm[0]["max_tokens"] == 5
    assert fake_llm[0]["model"] == settings.llm_probe_model


def test_validate_api_key_invalid(fake_llm):
    fake_llm.reply = litellm.AuthenticationError(message="Invalid API Key", llm_provider="groq", model="llama")
    result = asyncio.run(validate_api_key("gsk_bad"))
    assert result["valid"] is False
    assert result["error"] == "Invalid API key"


def test_validate_api_key_rate_limited(fake_llm):
    fake_llm.reply = RuntimeError("Error code: 429 - rate limit exceeded")
    result = asyncio.run(validate_api_key("gsk_busy"))
    assert result["valid"] is False
    assert "Rate limited" in result["error"]


@pytest.mark.parametrize("choices", [[], None])
def test_complete_without_choices_is_upstream_error(monkeypatch, choices):
    from types import SimpleNamespace

    async def _acompletion(**kwargs):
        return SimpleNamespace(choices=choices, usage=None)

    monkeypatch.setattr(llm_service, "acompletion", _acompletion)
    with pytest.raises(UpstreamError) as exc:
        asyncio.run(complete("hello", 10, "gsk_test"))
    assert exc.value.message == "Model returned no completion"


@pytest.mark.parametrize(
    "source, expected",
    [("client", False), ("server", True), ("auto", True)],
)
def test_has_server_key_follows_credential_source(monkeypatch, source, expected):
    monkeypatch.setattr(settings, "groq_api_key", "gsk_server")
    monkeypatch.setattr(settings, "credential_source", source)
    assert llm_service.has_server_key() is expected
