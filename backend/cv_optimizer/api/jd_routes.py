from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from cv_optimizer.exceptions import UnsupportedFeatureError
from cv_optimizer.services.jd_service import URL_FETCH_UNSUPPORTED, fetch_job_description

router = APIRouter()


class JDUrlInput(BaseModel):
    url: str


@router.post("/fetch", responses={501: {"description": URL_FETCH_UNSUPPORTED}})
async def fetch_jd_from_url(req: JDUrlInput):
    """Fetch a job description from its posting URL. Always 501 in this deployment."""
    try:
        await fetch_job_description(req.url)
    except UnsupportedFeatureError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
