"""
CV Analysis Prompt — scores a CV against a job description and rewrites it.

Used by analysis_service.py → llm_service.complete() → response_decoder.decode()
Temperature: 0.7 | Max tokens: 1500
"""

from __future__ import annotations

from cv_optimizer.config import settings
from cv_optimizer.utils.text_cleanup import truncate

PROMPT_TEMPLATE = """\
You are an expert resume writer.

Analyse the candidate's CV vs the Job Description and then produce an optimised, ATS-friendly CV.

Return STRICT JSON matching exactly this shape (no markdown, no extras):

{{
  "atsScore": <0-100>,
  "matchScore": <0-100>,
  "missingKeywords": [string],
  "suggestions": [string],
  "keywordDensity": {{ "keyword": percentNumber }},
  "optimizedCV": "<the full rewritten CV>"
}}

--- INPUTS (some truncated) ---

CV:
{cv_text}

Experience Summary:
{experience_summary}

Job Description:
{job_description}
"""


def build_analysis_prompt(
    cv_text: str | None,
    experience_summary: str | None,
    job_description: str | None,
) -> str:
    """Truncate the three inputs to their budgets and fill the template."""
    return PROMPT_TEMPLATE.format(
        cv_text=truncate(cv_text, settings.cv_char_budget),
        experience_summary=truncate(experience_summary, settings.experience_char_budget),
        job_description=truncate(job_description, settings.jd_char_budget),
    )
