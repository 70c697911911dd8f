import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from fastapi.responses import PlainTextResponse
from typing import Optional

from cv_optimizer.config import settings
from cv_optimizer.exceptions import CVOptimizerError
from cv_optimizer.models.analysis_models import (
    AnalyzeResponse,
    CVUpdateRequest,
    RegenerateRequest,
    RegenerateResponse,
    SessionResultResponse,
    score_label,
)
from cv_optimizer.services.analysis_service import analyze_cv, regenerate_cv
from cv_optimizer.services.llm_service import resolve_credential
from cv_optimizer.services.session_store import SessionStore
from cv_optimizer.utils.dependencies import (
    ClientCredential,
    get_client_credential,
    get_session_id,
    get_session_store,
    new_session_id,
)
from cv_optimizer.utils.text_cleanup import read_upload_text

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(e: CVOptimizerError, headers: dict[str, str] | None = None) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message, headers=headers)


def _require_session(session_id: str | None) -> str:
    if not session_id:
        raise HTTPException(status_code=400, detail="Missing X-Session-Id header")
    return session_id


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_endpoint(
    response: Response,
    cv_file: UploadFile = File(...),
    experience_summary: str = Form(...),
    job_description: Optional[str] = Form(None),
    job_url: Optional[str] = Form(None),
    api_key: Optional[str] = Form(None),
    client: ClientCredential = Depends(get_client_credential),
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    """Analyse an uploaded CV against a job description and start a results session."""
    file_bytes = await cv_file.read()
    if len(file_bytes) > settings.max_upload_bytes:
        raise HTTPException(status_code=400, detail="File too large")

    session_id = session_id or new_session_id()
    # Echoed on failures too, so the client can keep using the generated id
    session_header = {"X-Session-Id": session_id}
    response.headers["X-Session-Id"] = session_id

    try:
        credential = resolve_credential(client.pick(api_key))
        result = await analyze_cv(
            store=store,
            session_id=session_id,
            cv_text=read_upload_text(file_bytes),
            experience_summary=experience_summary,
            job_description=job_description,
            job_url=job_url,
            credential=credential,
        )
    except CVOptimizerError as e:
        logger.warning(f"Analysis failed ({type(e).__name__}): {e.message}")
        raise _http_error(e, headers=session_header)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e), headers=session_header)

    return AnalyzeResponse(session_id=session_id, result=result)


@router.post("/regenerate-cv", response_model=RegenerateResponse)
async def regenerate_endpoint(
    req: RegenerateRequest,
    client: ClientCredential = Depends(get_client_credential),
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    """Rewrite the session's optimized CV. The previous text survives any failure."""
    session_id = _require_session(session_id)
    try:
        credential = resolve_credential(client.pick(req.api_key))
        new_cv = await regenerate_cv(
            store=store,
            session_id=session_id,
            credential=credential,
            current_cv=req.current_cv,
        )
    except CVOptimizerError as e:
        logger.warning(f"Regeneration failed ({type(e).__name__}): {e.message}")
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return RegenerateResponse(optimized_cv=new_cv)


# ── Session ──────────────────────────────────────────────────────────────────


@router.get("/session/result", response_model=SessionResultResponse)
async def get_session_result(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    """Return the stored analysis and the live optimized CV."""
    session_id = _require_session(session_id)
    try:
        entry = store.get(session_id)
    except CVOptimizerError as e:
        raise _http_error(e)

    return SessionResultResponse(
        session_id=session_id,
        result=entry.result,
        optimized_cv=entry.optimized_cv,
        ats_label=score_label(entry.result.ats_score),
        match_label=score_label(entry.result.match_score),
    )


@router.put("/session/cv", response_model=RegenerateResponse)
async def update_session_cv(
    req: CVUpdateRequest,
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    """Save the user's edits to the optimized CV."""
    session_id = _require_session(session_id)
    try:
        text = store.replace_cv(session_id, req.optimized_cv)
    except CVOptimizerError as e:
        raise _http_error(e)
    return RegenerateResponse(optimized_cv=text)


@router.get("/session/cv/download", response_class=PlainTextResponse)
async def download_session_cv(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    """Download the optimized CV as a plain-text attachment."""
    session_id = _require_session(session_id)
    try:
        text = store.get_cv(session_id)
    except CVOptimizerError as e:
        raise _http_error(e)

    return PlainTextResponse(
        content=text,
        headers={"Content-Disposition": 'attachment; filename="optimized-cv.txt"'},
    )


@router.delete("/session")
async def clear_session(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    """Discard the session's analysis and CV text."""
    session_id = _require_session(session_id)
    return {"cleared": store.clear(session_id)}
