"""Authenticated streaming relay between the chat front-end and the upstream model."""

import json
import logging
import uuid
from enum import Enum
from typing import Any, AsyncIterator, Optional

from fastapi import Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.responses import Response

from app.core import ui_stream
from app.core.auth.session_verifier import SessionVerifier
from app.core.errors import (
    ErrorCode,
    GENERIC_FAILURE_MESSAGE,
    RelayError,
    classify_upstream_error,
)
from app.core.llm_client import ModelClient
from app.core.prompts import get_system_prompt
from app.core.validator import validate_chat_payload

logger = logging.getLogger(__name__)


class RelayState(str, Enum):
    AUTHENTICATING = "authenticating"
    VALIDATING = "validating"
    PROMPTING = "prompting"
    DISPATCHING = "dispatching"
    STREAMING = "streaming"
    COMPLETE = "complete"
    FAILED = "failed"


def _delta_text(chunk: Any) -> Optional[str]:
    """Extracts the text delta of a chat completion chunk, if any."""
    if not chunk.choices:
        return None
    return chunk.choices[0].delta.content


class RelayInvocation:
    """State of one chat request. Never shared between requests."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        self.state = RelayState.AUTHENTICATING

    def advance(self, state: RelayState):
        logger.debug(f"[{self.request_id}] {self.state.value} -> {state.value}")
        self.state = state

    def fail(self, error: RelayError) -> Response:
        self.advance(RelayState.FAILED)
        return JSONResponse(
            status_code=error.status_code,
            content=error.to_envelope(self.request_id),
        )


class ChatRelay:
    """Authenticates, validates and forwards chat requests to the upstream model."""

    def __init__(self, verifier: SessionVerifier, model_client: ModelClient, mode: str = "panel"):
        self.verifier = verifier
        self.model_client = model_client
        self.mode = mode

    async def handle(self, request: Request) -> Response:
        """Runs one request through the relay and returns the HTTP response."""
        invocation = RelayInvocation(str(uuid.uuid4()))
        request_id = invocation.request_id
        logger.info(f"[{request_id}] Chat request received")

        try:
            # Authentication is checked before the body is read.
            session = self.verifier.get_session(request)
            if session is None:
                logger.info(f"[{request_id}] Unauthorized: No valid session")
                raise RelayError(ErrorCode.UNAUTHORIZED, "Authentication required", 401)
            logger.info(f"[{request_id}] User authenticated: {session.email}")

            invocation.advance(RelayState.VALIDATING)
            messages = validate_chat_payload(await self._read_body(request))
            logger.info(f"[{request_id}] Processing {len(messages)} message(s)")

            invocation.advance(RelayState.PROMPTING)
            system_prompt = get_system_prompt(self.mode)

            invocation.advance(RelayState.DISPATCHING)
            logger.info(
                f"[{request_id}] Dispatching to {self.model_client.model} "
                f"(mode={self.mode}, system prompt {len(system_prompt)} chars)"
            )
            try:
                stream = await self.model_client.open_stream(system_prompt, messages)
            except Exception as e:
                logger.error(f"[{request_id}] Upstream call failed: {e}")
                raise classify_upstream_error(e) from e

        except RelayError as e:
            logger.info(f"[{request_id}] Failed with {e.code.value} ({e.status_code})")
            return invocation.fail(e)
        except Exception as e:
            logger.error(f"[{request_id}] Unexpected error: {e}", exc_info=True)
            return invocation.fail(
                RelayError(ErrorCode.INTERNAL_ERROR, GENERIC_FAILURE_MESSAGE, 500)
            )

        invocation.advance(RelayState.STREAMING)
        logger.info(f"[{request_id}] Streaming response initiated")
        return StreamingResponse(
            self._relay_stream(invocation, stream),
            media_type=ui_stream.MEDIA_TYPE,
            headers=ui_stream.HEADERS,
        )

    async def _read_body(self, request: Request) -> Any:
        try:
            return await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RelayError(
                ErrorCode.VALIDATION_ERROR,
                "Invalid request format: body must be JSON",
                400,
            ) from e

    async def _relay_stream(self, invocation: RelayInvocation, stream) -> AsyncIterator[str]:
        """Translates upstream chunks into UI message parts, in arrival order."""
        request_id = invocation.request_id
        message = ui_stream.UIMessageStream()
        yield message.start()

        try:
            async for chunk in stream:
                delta = _delta_text(chunk)
                if delta:
                    yield message.text_delta(delta)
        except Exception as e:
            # Part of the reply is already on the wire; end it here.
            logger.error(f"[{request_id}] Upstream stream failed: {e}")
            invocation.advance(RelayState.FAILED)
            yield message.error(GENERIC_FAILURE_MESSAGE)
            return
        finally:
            await stream.close()

        invocation.advance(RelayState.COMPLETE)
        logger.info(f"[{request_id}] Stream complete")
        yield message.finish()
