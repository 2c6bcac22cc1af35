"""AI proxy endpoint: ``POST {action, payload}`` -> ``{success, data | error}``."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.ai_gateway import dispatch
from app.core.auth_middleware import AuthContext, require_session
from app.core.schemas_ai import AIProxyRequest

router = APIRouter(tags=["ai_gateway"])


@router.post("/ai-gateway")
async def ai_gateway(
    request: AIProxyRequest,
    auth: AuthContext = Depends(require_session),
) -> JSONResponse:
    """
    Run one AI action.

    Always answers with the envelope; 400 for bad requests, 500 for model or
    parse failures.
    """
    status_code, response = await dispatch(request.action, request.payload)
    return JSONResponse(content=response.model_dump(exclude_none=True), status_code=status_code)
