"""API endpoints for signing users in and out."""

import logging
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import RedirectResponse
from typing import Any, Dict, Optional

from app.core.auth.session_verifier import OAuthError
from app.models.auth import CredentialsSignInRequest, SignInResponse

router = APIRouter(prefix="/api/auth", tags=["authentication"])
logger = logging.getLogger(__name__)

ERROR_PAGE = "/auth/error"


def _error_redirect(error: str) -> RedirectResponse:
    return RedirectResponse(url=f"{ERROR_PAGE}?error={error}", status_code=302)


@router.get("/signin/google")
async def signin_google(request: Request):
    """Starts the Google OAuth flow"""
    verifier = request.app.state.session_verifier
    if not verifier.client_id or not verifier.client_secret:
        return _error_redirect("Configuration")

    redirect_uri = str(request.url_for("callback_google"))
    return RedirectResponse(
        url=verifier.authorization_url(request, redirect_uri), status_code=302
    )


@router.get("/callback/google", name="callback_google")
async def callback_google(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
):
    """Completes the Google OAuth flow and opens a session"""
    if error:
        logger.info(f"Google sign-in was not completed: {error}")
        return _error_redirect("AccessDenied" if error == "access_denied" else "OAuthCallback")
    if not code:
        return _error_redirect("OAuthCallback")

    verifier = request.app.state.session_verifier
    redirect_uri = str(request.url_for("callback_google"))
    try:
        session = await verifier.complete_oauth(request, code, state, redirect_uri)
    except OAuthError as e:
        logger.error(f"OAuth callback error: {e}")
        return _error_redirect("OAuthCallback")

    verifier.sign_in(request, session)
    return RedirectResponse(url="/", status_code=302)


@router.post("/callback/credentials", response_model=SignInResponse)
async def callback_credentials(request: Request, credentials: CredentialsSignInRequest):
    """Signs in with the fixed test account (development only)"""
    verifier = request.app.state.session_verifier
    if not verifier.test_account_enabled:
        raise HTTPException(status_code=404, detail="Not Found")

    session = verifier.verify_test_credentials(credentials.email, credentials.password)
    if session is None:
        logger.info(f"Test account sign-in rejected for {credentials.email}")
        raise HTTPException(status_code=401, detail="CredentialsSignin")

    verifier.sign_in(request, session)
    return SignInResponse(ok=True, user=session)


@router.post("/signout")
async def signout(request: Request) -> Dict[str, Any]:
    """Clears the session cookie"""
    request.app.state.session_verifier.sign_out(request)
    return {"ok": True, "url": "/login"}


@router.get("/session")
async def get_session(request: Request) -> Dict[str, Any]:
    """Returns the current session, or an empty object"""
    session = request.app.state.session_verifier.get_session(request)
    if session is None:
        return {}
    return {"user": session.model_dump(exclude_none=True)}
