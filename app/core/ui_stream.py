"""Encoder for the UI message stream consumed by the chat front-end.

Each event is a server-sent `data:` line holding one JSON message part.
A successful stream ends with `data: [DONE]`.
"""

import json
import uuid
from typing import Any, Dict, Optional

MEDIA_TYPE = "text/event-stream"

HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
    "x-vercel-ai-ui-message-stream": "v1",
}

DONE = "data: [DONE]\n\n"


def encode_part(part: Dict[str, Any]) -> str:
    return f"data: {json.dumps(part, separators=(',', ':'))}\n\n"


class UIMessageStream:
    """Builds the part sequence for a single assistant message."""

    def __init__(self, message_id: Optional[str] = None):
        self.message_id = message_id or f"msg-{uuid.uuid4().hex}"
        self.text_id = uuid.uuid4().hex
        self._text_open = False

    def start(self) -> str:
        return encode_part({"type": "start", "messageId": self.message_id}) + encode_part(
            {"type": "start-step"}
        )

    def text_delta(self, delta: str) -> str:
        """Emits a text delta, opening the text part on first use."""
        out = ""
        if not self._text_open:
            self._text_open = True
            out += encode_part({"type": "text-start", "id": self.text_id})
        return out + encode_part({"type": "text-delta", "id": self.text_id, "delta": delta})

    def finish(self) -> str:
        out = ""
        if self._text_open:
            self._text_open = False
            out += encode_part({"type": "text-end", "id": self.text_id})
        out += encode_part({"type": "finish-step"})
        out += encode_part({"type": "finish"})
        return out + DONE

    def error(self, error_text: str) -> str:
        return encode_part({"type": "error", "errorText": error_text})
