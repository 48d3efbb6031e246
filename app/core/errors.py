"""Client-facing error taxonomy for the chat relay and upstream failure classification."""

from enum import Enum
from typing import Any, Dict, Optional, Tuple

import openai

from app.models.chat import ErrorDetail, ErrorEnvelope


class ErrorCode(str, Enum):
    UNAUTHORIZED = "unauthorized"
    VALIDATION_ERROR = "validation_error"
    UPSTREAM_ERROR = "upstream_error"
    INTERNAL_ERROR = "internal_error"


GENERIC_FAILURE_MESSAGE = "Unable to generate response. Please try again."

UPSTREAM_AUTH = (401, "AI service authentication failed")
UPSTREAM_RATE_LIMIT = (429, "Service temporarily busy. Please wait and try again.")
UPSTREAM_UNAVAILABLE = (503, "AI service temporarily unavailable")

# Lowercased substrings checked against the failure message, in order.
UPSTREAM_MARKERS = (
    (("api key", "unauthorized", "401"), UPSTREAM_AUTH),
    (("rate limit", "429"), UPSTREAM_RATE_LIMIT),
    (("network", "fetch", "503", "502"), UPSTREAM_UNAVAILABLE),
)


class RelayError(Exception):
    """A failure that is reported to the client as an error envelope."""

    def __init__(self, code: ErrorCode, message: str, status_code: int):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code

    def to_envelope(self, request_id: Optional[str] = None) -> Dict[str, Any]:
        envelope = ErrorEnvelope(
            error=ErrorDetail(
                code=self.code.value,
                message=self.message,
                status_code=self.status_code,
                request_id=request_id,
            )
        )
        return envelope.model_dump(by_alias=True, exclude_none=True)


class UpstreamConfigurationError(Exception):
    """Raised before dispatch when the upstream client cannot be configured."""


def _classify_by_type(exc: BaseException) -> Optional[Tuple[int, str]]:
    """Uses the structured error types and status codes the openai SDK exposes."""
    if isinstance(exc, openai.AuthenticationError):
        return UPSTREAM_AUTH
    if isinstance(exc, openai.RateLimitError):
        return UPSTREAM_RATE_LIMIT
    # APITimeoutError is a subclass of APIConnectionError
    if isinstance(exc, openai.APIConnectionError):
        return UPSTREAM_UNAVAILABLE
    if isinstance(exc, openai.APIStatusError):
        if exc.status_code == 401:
            return UPSTREAM_AUTH
        if exc.status_code == 429:
            return UPSTREAM_RATE_LIMIT
        if exc.status_code in (502, 503):
            return UPSTREAM_UNAVAILABLE
    return None


def _classify_by_message(exc: BaseException) -> Optional[Tuple[int, str]]:
    text = str(exc).lower()
    for markers, result in UPSTREAM_MARKERS:
        if any(marker in text for marker in markers):
            return result
    return None


def classify_upstream_error(exc: BaseException) -> RelayError:
    """Maps an upstream failure to the error the client sees.

    Structured SDK errors are classified first; anything else falls back to
    substring matching on the message. Unmatched failures are internal errors.
    """
    classified = _classify_by_type(exc) or _classify_by_message(exc)
    if classified is None:
        return RelayError(ErrorCode.INTERNAL_ERROR, GENERIC_FAILURE_MESSAGE, 500)

    status_code, message = classified
    return RelayError(ErrorCode.UPSTREAM_ERROR, message, status_code)
