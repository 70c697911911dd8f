from pydantic_settings import BaseSettings
from typing import Literal, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "CV Optimizer"
    log_level: str = "INFO"

    # CORS
    frontend_url: str = "http://localhost:3000"

    # LLM (server-held key is optional; the browser may send its own per request)
    groq_api_key: Optional[str] = None
    credential_source: Literal["client", "server", "auto"] = "auto"
    llm_model: str = "groq/llama-3.3-70b-versatile"
    llm_probe_model: str = "groq/llama-3.1-8b-instant"
    llm_timeout_seconds: float = 60.0

    # Prompt input budgets (characters)
    cv_char_budget: int = 6000
    experience_char_budget: int = 1000
    jd_char_budget: int = 3000

    # Uploads / sessions
    max_upload_bytes: int = 2 * 1024 * 1024
    session_ttl_seconds: int = 4 * 60 * 60

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()


# ── Prompt Configuration ────────────────────────────────────────────────────

PROMPT_CONFIG = {
    "cv_analysis": {"temperature": 0.7, "max_tokens": 1500},
    "cv_regeneration": {"temperature": 0.7, "max_tokens": 1800},
    "key_probe": {"temperature": 0, "max_tokens": 5},
}
