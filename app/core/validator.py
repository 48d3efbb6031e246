"""Shape validation for incoming chat payloads."""

from typing import Any, List

from pydantic import ValidationError

from app.core.errors import ErrorCode, RelayError
from app.models.chat import ChatMessage

MIN_MESSAGES = 1
MAX_MESSAGES = 20


def validate_chat_payload(body: Any) -> List[ChatMessage]:
    """
    Returns the parsed messages of a chat request body, in order.
    The request is accepted or rejected as a whole.
    """
    if not isinstance(body, dict) or not isinstance(body.get("messages"), list):
        raise RelayError(
            ErrorCode.VALIDATION_ERROR,
            "Invalid request format: messages array required",
            400,
        )

    raw_messages = body["messages"]
    count = len(raw_messages)
    if count < MIN_MESSAGES or count > MAX_MESSAGES:
        raise RelayError(
            ErrorCode.VALIDATION_ERROR,
            f"Message count must be between {MIN_MESSAGES} and {MAX_MESSAGES} (received {count})",
            422,
        )

    try:
        return [ChatMessage.model_validate(message) for message in raw_messages]
    except ValidationError as e:
        raise RelayError(
            ErrorCode.VALIDATION_ERROR,
            f"Invalid request format: malformed message ({e.error_count()} error(s))",
            400,
        ) from e
