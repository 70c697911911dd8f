"""
JD Service — resolve the job description text for an analysis.

Pasted text is the only supported source. Fetching a posting from its URL is
not available in this deployment and always fails with UnsupportedFeatureError.
"""

from __future__ import annotations

import logging
from typing import NoReturn

from cv_optimizer.exceptions import UnsupportedFeatureError

logger = logging.getLogger(__name__)

URL_FETCH_UNSUPPORTED = (
    "URL fetching not available in this deployment. "
    "Please copy and paste the job description."
)


async def fetch_job_description(url: str) -> NoReturn:
    """Fetch a job posting by URL. Always unsupported here."""
    logger.info(f"Rejected JD URL fetch for {url!r}")
    raise UnsupportedFeatureError(URL_FETCH_UNSUPPORTED)


async def resolve_job_description(text: str | None, url: str | None) -> str:
    """Return pasted JD text, falling back to the URL only when no text was given."""
    if text and text.strip():
        return text
    if url and url.strip():
        return await fetch_job_description(url.strip())
    raise ValueError("A job description is required")
