"""Token endpoint for the Assistant Cloud thread history."""

import logging
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from app.core.assistant_cloud import AssistantCloudError, sanitize_user_id
from app.core.errors import ErrorCode, RelayError

router = APIRouter(prefix="/api", tags=["assistant-cloud"])
logger = logging.getLogger(__name__)


@router.post("/assistant-ui-token", response_class=PlainTextResponse)
async def assistant_ui_token(request: Request):
    """Issues a bearer token for the caller's own workspace."""
    session = request.app.state.session_verifier.get_session(request)
    if session is None or not session.email:
        error = RelayError(ErrorCode.UNAUTHORIZED, "Authentication required", 401)
        return JSONResponse(status_code=401, content=error.to_envelope())

    # One workspace per user
    user_id = sanitize_user_id(session.email)
    workspace_id = user_id

    try:
        token = await request.app.state.assistant_cloud.create_token(
            user_id=user_id, workspace_id=workspace_id
        )
    except AssistantCloudError as e:
        logger.error(f"[Token Error] {e}")
        return PlainTextResponse("Failed to generate token", status_code=500)

    return PlainTextResponse(token)
