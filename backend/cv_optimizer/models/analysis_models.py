from pydantic import BaseModel, Field
from typing import Optional


# ── Analysis Result ─────────────────────────────────────────────────────────


class AnalysisResult(BaseModel):
    """Decoded model output for one CV-vs-JD analysis. camelCase on the wire."""

    ats_score: int = Field(alias="atsScore", ge=0, le=100)
    match_score: int = Field(alias="matchScore", ge=0, le=100)
    missing_keywords: list[str] = Field(alias="missingKeywords")
    suggestions: list[str]
    keyword_density: dict[str, float] = Field(alias="keywordDensity")  # keyword -> percent
    optimized_cv: str = Field(alias="optimizedCV")

    model_config = {"frozen": True, "populate_by_name": True}


def score_label(score: int) -> str:
    """Human-readable rating for a 0-100 score."""
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    return "Needs Improvement"


# ── Request Models ──────────────────────────────────────────────────────────


class RegenerateRequest(BaseModel):
    """Regenerate the session's optimized CV. ``current_cv`` carries user edits."""

    current_cv: Optional[str] = None
    api_key: Optional[str] = None


class CVUpdateRequest(BaseModel):
    """User edit of the optimized CV text."""

    optimized_cv: str


class ValidateKeyRequest(BaseModel):
    api_key: str


# ── Response Models ─────────────────────────────────────────────────────────


class AnalyzeResponse(BaseModel):
    session_id: str
    result: AnalysisResult


class RegenerateResponse(BaseModel):
    optimized_cv: str = Field(alias="optimizedCV")

    model_config = {"populate_by_name": True}


class SessionResultResponse(BaseModel):
    """Stored analysis plus the live (possibly edited) optimized CV."""

    session_id: str
    result: AnalysisResult
    optimized_cv: str = Field(alias="optimizedCV")
    ats_label: str
    match_label: str

    model_config = {"populate_by_name": True}


class ApiKeyStatus(BaseModel):
    has_api_key: bool = Field(alias="hasApiKey")
    message: str

    model_config = {"populate_by_name": True}


class ValidateKeyResponse(BaseModel):
    valid: bool
    model_used: str
    error: str | None = None
