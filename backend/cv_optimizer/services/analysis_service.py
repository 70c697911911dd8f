"""
Analysis Service — the CV analysis and regeneration flows.

Responsibilities:
  • Build the analysis prompt, call the model, decode and store the result
  • Regenerate the optimized CV text for an existing session
  • Keep one request in flight per session and leave stored state untouched on failure
"""

from __future__ import annotations

import logging

from cv_optimizer.config import PROMPT_CONFIG
from cv_optimizer.exceptions import UpstreamError
from cv_optimizer.models.analysis_models import AnalysisResult
from cv_optimizer.prompts.cv_analysis import build_analysis_prompt
from cv_optimizer.prompts.cv_regeneration import build_regeneration_prompt
from cv_optimizer.services import llm_service
from cv_optimizer.services.jd_service import resolve_job_description
from cv_optimizer.services.response_decoder import decode
from cv_optimizer.services.session_store import SessionStore

logger = logging.getLogger(__name__)


# ── Public API ───────────────────────────────────────────────────────────────


async def analyze_cv(
    *,
    store: SessionStore,
    session_id: str,
    cv_text: str,
    experience_summary: str,
    job_description: str | None,
    job_url: str | None,
    credential: str,
) -> AnalysisResult:
    """Run one analysis and store it as the session's current result."""
    if not cv_text or not cv_text.strip():
        raise ValueError("CV file is empty or could not be read")
    if not experience_summary or not experience_summary.strip():
        raise ValueError("Experience summary is required")

    jd_text = await resolve_job_description(job_description, job_url)
    prompt = build_analysis_prompt(cv_text, experience_summary, jd_text)

    async with store.single_flight(session_id):
        raw = await llm_service.complete(
            prompt,
            PROMPT_CONFIG["cv_analysis"]["max_tokens"],
            credential,
            prompt_name="cv_analysis",
        )
        result = decode(raw)
        store.create(session_id, result)

    logger.info(f"Analysis complete: ats={result.ats_score} match={result.match_score} missing={len(result.missing_keywords)}")
    return result


async def regenerate_cv(
    *,
    store: SessionStore,
    session_id: str,
    credential: str,
    current_cv: str | None = None,
) -> str:
    """
    Rewrite the session's optimized CV. ``current_cv`` (user edits) takes
    precedence over the stored text. The stored text is only replaced on success.
    """
    entry = store.get(session_id)
    base_cv = current_cv if current_cv is not None else entry.optimized_cv
    if not base_cv.strip():
        raise ValueError("There is no CV text to regenerate")

    async with store.single_flight(session_id):
        new_cv = await llm_service.complete(
            build_regeneration_prompt(base_cv),
            PROMPT_CONFIG["cv_regeneration"]["max_tokens"],
            credential,
            prompt_name="cv_regeneration",
        )
        if not new_cv.strip():
            raise UpstreamError("Model returned an empty CV")
        store.replace_cv(session_id, new_cv, expected=entry)

    logger.info(f"Regenerated CV: {len(base_cv)} -> {len(new_cv)} chars")
    return new_cv
