from cv_optimizer.api import (
    analysis_routes,
    jd_routes,
    llm_routes,
)

__all__ = [
    "analysis_routes",
    "jd_routes",
    "llm_routes",
]
