"""Resolves the authenticated user of a request.

Sessions live in the signed cookie managed by Starlette's SessionMiddleware.
They are created by the Google OAuth2 flow or, in development only, by the
fixed test account.
"""

import hmac
import logging
from typing import Any, Dict, Optional

from fastapi import Request
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from google_auth_oauthlib.flow import Flow
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.models.auth import Session

logger = logging.getLogger(__name__)

SESSION_KEY = "user"
OAUTH_STATE_KEY = "oauth_state"
OAUTH_VERIFIER_KEY = "oauth_code_verifier"

# Matches the expiry of the signed session cookie.
SESSION_MAX_AGE_SECONDS = 30 * 24 * 60 * 60

GOOGLE_SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]

# Development-only account for automated testing.
TEST_ACCOUNT_EMAIL = "test@buddhabot.dev"
TEST_ACCOUNT_PASSWORD = "buddhabot-test-password"
TEST_ACCOUNT = Session(id="test-account", email=TEST_ACCOUNT_EMAIL, name="Test User")


class OAuthError(Exception):
    """Raised when the OAuth callback cannot be turned into a session."""


class SessionVerifier:
    """Reads, writes and establishes user sessions."""

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        test_account_enabled: bool = False,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.test_account_enabled = test_account_enabled

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionVerifier":
        return cls(
            client_id=settings.auth_google_id,
            client_secret=settings.auth_google_secret,
            test_account_enabled=settings.test_account_enabled,
        )

    # --- Session cookie ---

    def get_session(self, request: Request) -> Optional[Session]:
        """Returns the request's session, or None when there is none."""
        data = request.session.get(SESSION_KEY)
        if not data:
            return None

        try:
            return Session.model_validate(data)
        except ValidationError:
            logger.warning("Discarding malformed session payload")
            return None

    def sign_in(self, request: Request, session: Session):
        request.session.pop(OAUTH_STATE_KEY, None)
        request.session.pop(OAUTH_VERIFIER_KEY, None)
        request.session[SESSION_KEY] = session.model_dump(exclude_none=True)
        logger.info(f"Signed in {session.email}")

    def sign_out(self, request: Request):
        request.session.clear()

    # --- Google OAuth2 ---

    def _client_config(self) -> Dict[str, Any]:
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
            }
        }

    def _flow(self, redirect_uri: str, **kwargs) -> Flow:
        return Flow.from_client_config(
            self._client_config(),
            scopes=GOOGLE_SCOPES,
            redirect_uri=redirect_uri,
            **kwargs,
        )

    def authorization_url(self, request: Request, redirect_uri: str) -> str:
        """Builds the consent URL and remembers the state for the callback."""
        flow = self._flow(redirect_uri)
        auth_url, state = flow.authorization_url(prompt="select_account")
        request.session[OAUTH_STATE_KEY] = state
        if flow.code_verifier:
            request.session[OAUTH_VERIFIER_KEY] = flow.code_verifier
        return auth_url

    async def complete_oauth(
        self, request: Request, code: str, state: Optional[str], redirect_uri: str
    ) -> Session:
        """Exchanges the authorization code and verifies the returned ID token."""
        expected_state = request.session.get(OAUTH_STATE_KEY)
        if not expected_state or not state or not hmac.compare_digest(
            expected_state.encode(), state.encode()
        ):
            raise OAuthError("OAuth state mismatch")

        flow = self._flow(
            redirect_uri,
            state=expected_state,
            code_verifier=request.session.get(OAUTH_VERIFIER_KEY),
        )

        try:
            claims = await run_in_threadpool(self._exchange_code, flow, code)
        except Exception as e:
            raise OAuthError(f"Code exchange failed: {e}") from e

        if not claims.get("email"):
            raise OAuthError("ID token has no email claim")

        return Session(
            id=claims["sub"],
            email=claims["email"],
            name=claims.get("name"),
            image=claims.get("picture"),
        )

    def _exchange_code(self, flow: Flow, code: str) -> Dict[str, Any]:
        flow.fetch_token(code=code)
        return id_token.verify_oauth2_token(
            flow.credentials.id_token, google_requests.Request(), self.client_id
        )

    # --- Test account ---

    def verify_test_credentials(self, email: str, password: str) -> Optional[Session]:
        """Checks the fixed test credentials; always fails when the account is disabled."""
        if not self.test_account_enabled:
            return None

        email_ok = hmac.compare_digest(email.lower().encode(), TEST_ACCOUNT_EMAIL.encode())
        password_ok = hmac.compare_digest(password.encode(), TEST_ACCOUNT_PASSWORD.encode())
        if email_ok and password_ok:
            return TEST_ACCOUNT
        return None
