from fastapi import APIRouter, HTTPException

from cv_optimizer.models.analysis_models import ApiKeyStatus, ValidateKeyRequest, ValidateKeyResponse
from cv_optimizer.services.llm_service import has_server_key, validate_api_key

router = APIRouter()


@router.get("/check-api-key", response_model=ApiKeyStatus)
async def check_api_key():
    """
    Report whether a server-held API key is configured.
    The key itself is never returned.
    """
    configured = has_server_key()
    return ApiKeyStatus(
        has_api_key=configured,
        message="API key is configured" if configured else "API key is not configured",
    )


@router.post("/validate-api-key", response_model=ValidateKeyResponse)
async def validate_key_endpoint(req: ValidateKeyRequest):
    """
    Test if an API key is usable.
    Makes a tiny completion call with the probe model.
    """
    if not req.api_key or not req.api_key.strip():
        raise HTTPException(status_code=400, detail="API key cannot be empty")

    result = await validate_api_key(req.api_key.strip())
    return ValidateKeyResponse(**result)
