"""Client for Assistant Cloud, which stores conversation threads for the front-end."""

import re
import logging
from typing import Optional

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)

TOKEN_TIMEOUT = 10.0
_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


class AssistantCloudError(Exception):
    """Raised when a token cannot be issued."""


def sanitize_user_id(email: str) -> str:
    """Makes an email safe for use as a user or workspace id."""
    return _UNSAFE_ID_CHARS.sub("-", email)


class AssistantCloudClient:
    """Issues short-lived, user-scoped tokens for the Assistant Cloud API."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://backend.assistant-api.com",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "AssistantCloudClient":
        return cls(settings.assistant_api_key, settings.assistant_api_base_url)

    async def create_token(self, user_id: str, workspace_id: str) -> str:
        """Creates a bearer token scoped to one user's workspace."""
        if not self.api_key:
            raise AssistantCloudError("ASSISTANT_API_KEY is not set")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Aui-User-Id": user_id,
            "Aui-Workspace-Id": workspace_id,
        }
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                resp = await client.post(
                    f"{self.base_url}/v1/auth/tokens",
                    headers=headers,
                    timeout=TOKEN_TIMEOUT,
                )
                resp.raise_for_status()
                token = resp.json().get("token")
            except (httpx.HTTPError, ValueError) as e:
                raise AssistantCloudError(f"Token request failed: {e}") from e

        if not token:
            raise AssistantCloudError("Token response did not contain a token")
        return token
