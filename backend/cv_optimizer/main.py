import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cv_optimizer.config import settings
from cv_optimizer.api import (
    analysis_routes,
    jd_routes,
    llm_routes,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="Score a CV against a job description and rewrite it for ATS screening",
)

# ── CORS ────────────────────────────────────────────────────────────────────

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Session-Id"],
)

# ── Routers ─────────────────────────────────────────────────────────────────

app.include_router(analysis_routes.router, prefix="/api", tags=["Analysis"])
app.include_router(llm_routes.router, prefix="/api", tags=["LLM"])
app.include_router(jd_routes.router, prefix="/api/jd", tags=["Job Description"])

# ── Health Check ────────────────────────────────────────────────────────────


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "app": settings.app_name, "version": "0.1.0"}
