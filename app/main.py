"""Main FastAPI application entry point."""

from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from starlette.middleware.sessions import SessionMiddleware
from typing import Optional
import logging

from app.config import Settings, load_settings
from app.core.assistant_cloud import AssistantCloudClient
from app.core.auth.session_verifier import SESSION_MAX_AGE_SECONDS, SessionVerifier
from app.core.llm_client import ModelClient
from app.core.relay import ChatRelay
from app.middleware.route_guard import RouteGuardMiddleware

# Import routers individually to avoid circular imports
from app.api.chat import router as chat_router
from app.api.assistant_token import router as assistant_token_router
from app.api.auth import router as auth_router
from app.api.pages import router as pages_router

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "buddhabot_session"


def create_app(
    settings: Optional[Settings] = None,
    model_client: Optional[ModelClient] = None,
    assistant_cloud: Optional[AssistantCloudClient] = None,
) -> FastAPI:
    """Builds the application from validated settings.

    Settings are loaded and validated here, once, before any request is
    served. Collaborators can be passed in to replace the network clients.
    """
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level.upper())

    session_verifier = SessionVerifier.from_settings(settings)
    model_client = model_client or ModelClient(settings)
    assistant_cloud = assistant_cloud or AssistantCloudClient.from_settings(settings)

    if settings.test_account_enabled:
        logger.warning("Test account sign-in is enabled")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manages application startup and shutdown events."""
        logger.info(f"Starting BuddhaBot API (model={settings.hermes_model})")
        yield
        logger.info("Shutting down BuddhaBot API")
        await model_client.close()

    app = FastAPI(
        title="BuddhaBot API",
        description="Authenticated streaming chat relay",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.session_verifier = session_verifier
    app.state.assistant_cloud = assistant_cloud
    app.state.chat_relay = ChatRelay(
        session_verifier, model_client, mode=settings.buddhabot_mode
    )

    # The session middleware is added last so it wraps the guard.
    app.add_middleware(RouteGuardMiddleware, verifier=session_verifier)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.auth_secret or "",
        session_cookie=SESSION_COOKIE_NAME,
        max_age=SESSION_MAX_AGE_SECONDS,
        same_site="lax",
        https_only=settings.is_production,
    )

    app.include_router(chat_router)
    app.include_router(assistant_token_router)
    app.include_router(auth_router)
    app.include_router(pages_router)

    @app.get("/")
    async def root(request: Request):
        """Provides basic information about the running API and the signed-in user."""
        session = session_verifier.get_session(request)
        return {
            "message": "BuddhaBot API",
            "status": "running",
            "user": session.model_dump(exclude_none=True) if session else None,
            "features": {
                "test_account": settings.test_account_enabled,
                "mode": settings.buddhabot_mode,
            },
        }

    @app.get("/health")
    async def health_check():
        """Performs a health check of the API and its configuration."""
        return {
            "status": "healthy",
            "upstream_configured": bool(settings.nous_api_key),
            "assistant_cloud_configured": bool(settings.assistant_api_key),
        }

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:create_app", factory=True, host="0.0.0.0", port=8000)
