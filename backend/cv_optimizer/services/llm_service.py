"""
LLM Service — single-shot chat completions via LiteLLM.

Responsibilities:
  • Send one prompt to the configured model with a bearer credential and token budget
  • Map provider / network failures onto AuthError, UpstreamError, TransportError
  • Validate API keys by making a tiny completion call
  • Resolve which credential to use (browser-supplied vs server-held)

No retries and no streaming: every call is one independent round trip.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import litellm
from litellm import acompletion

from cv_optimizer.config import PROMPT_CONFIG, settings
from cv_optimizer.exceptions import AuthError, TransportError, UpstreamError

logger = logging.getLogger(__name__)

# Silence verbose LiteLLM logs
litellm.suppress_debug_info = True

# Tiny prompt used for key validation (cheap, fast)
_VALIDATION_PROMPT = "ping"


# ── Credential Resolution ────────────────────────────────────────────────────


def resolve_credential(client_key: str | None, source: str | None = None) -> str:
    """
    Pick the credential for a call according to ``settings.credential_source``.

      client: only the key supplied with the request
      server: only GROQ_API_KEY from the environment
      auto:   request key first, then the server key
    """
    source = source or settings.credential_source
    client_key = (client_key or "").strip() or None
    server_key = (settings.groq_api_key or "").strip() or None

    if source == "client":
        key = client_key
    elif source == "server":
        key = server_key
    else:
        key = client_key or server_key

    if not key:
        raise AuthError("API key is required")
    return key


def has_server_key() -> bool:
    """True when a server-held key is configured and the credential source may use it."""
    if settings.credential_source == "client":
        return False
    return bool((settings.groq_api_key or "").strip())


# ── Core Completion ──────────────────────────────────────────────────────────


async def complete(
    prompt: str,
    token_budget: int,
    credential: str | None,
    *,
    prompt_name: str | None = None,
) -> str:
    """
    Send ``prompt`` as a single user message and return the first choice's content.

    Raises:
        AuthError:      credential missing or rejected by the provider
        TransportError: connection failure or deadline expiry
        UpstreamError:  any other non-success response from the provider
    """
    if not credential or not credential.strip():
        raise AuthError("API key is required")

    config = PROMPT_CONFIG.get(prompt_name, {}) if prompt_name else {}
    temperature = config.get("temperature", 0.7)

    kwargs: dict[str, Any] = {
        "model": settings.llm_model,
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": token_budget,
        "temperature": temperature,
        "api_key": credential.strip(),
        "timeout": settings.llm_timeout_seconds,
        "num_retries": 0,
    }

    logger.info(
        f"LLM call: model={settings.llm_model} prompt={prompt_name or '-'} "
        f"chars={len(prompt)} tokens={token_budget}"
    )

    try:
        response = await asyncio.wait_for(acompletion(**kwargs), timeout=settings.llm_timeout_seconds)
    except asyncio.TimeoutError as e:
        logger.error(f"LLM call timed out after {settings.llm_timeout_seconds}s")
        raise TransportError(f"Model request timed out after {settings.llm_timeout_seconds:g}s") from e
    except litellm.AuthenticationError as e:
        logger.error(f"LLM auth error: {_error_message(e)}")
        raise AuthError("Invalid API key or the provider rejected it") from e
    except (litellm.Timeout, litellm.APIConnectionError) as e:
        logger.error(f"LLM transport error: {_error_message(e)}")
        raise TransportError(f"Could not reach the model provider: {_error_message(e)}") from e
    except Exception as e:
        status = getattr(e, "status_code", None)
        logger.error(f"LLM upstream error (status={status}): {_error_message(e)}")
        raise UpstreamError(_error_message(e) or "API request failed", upstream_status=status) from e

    choices = getattr(response, "choices", None) or []
    message = getattr(choices[0], "message", None) if choices else None
    if message is None:
        logger.error("LLM response carried no completion")
        raise UpstreamError("Model returned no completion")

    content = message.content or ""
    logger.info(f"LLM response: {len(content)} chars, usage={getattr(response, 'usage', None)}")
    return content


def _error_message(e: Exception) -> str:
    """Prefer the provider's own message over the exception's repr."""
    return str(getattr(e, "message", None) or e)


# ── Key Validation ───────────────────────────────────────────────────────────


async def validate_api_key(api_key: str) -> dict[str, Any]:
    """
    Validate an API key by making a tiny completion call with the probe model.

    Returns: {"valid": bool, "model_used": str, "error": str | None}
    """
    model_id = settings.llm_probe_model
    probe = PROMPT_CONFIG["key_probe"]

    try:
        response = await asyncio.wait_for(
            acompletion(
                model=model_id,
                messages=[{"role": "user", "content": _VALIDATION_PROMPT}],
                max_tokens=probe["max_tokens"],
                temperature=probe["temperature"],
                api_key=api_key,
                num_retries=0,
            ),
            timeout=settings.llm_timeout_seconds,
        )
        _ = response.choices[0].message.content
        return {"valid": True, "model_used": model_id, "error": None}
    except Exception as e:
        raw_error = str(e).lower()
        error_msg = "Invalid API key or API request failed"
        if isinstance(e, (asyncio.TimeoutError, litellm.Timeout)):
            error_msg = "Validation timed out. Try again."
        elif isinstance(e, litellm.AuthenticationError) or "401" in raw_error or "invalid api key" in raw_error:
            error_msg = "Invalid API key"
        elif "429" in raw_error or "rate limit" in raw_error or "rate_limit" in raw_error:
            error_msg = "Rate limited: key is valid but you've hit the free tier limit. Try again later."
        elif "404" in raw_error or "model_not_found" in raw_error or "does not exist" in raw_error:
            error_msg = "Probe model not available. The provider may have changed their API."

        logger.warning(f"Key validation failed: {error_msg}")
        return {"valid": False, "model_used": model_id, "error": error_msg}
