"""Pydantic models for chat-related API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Literal, Optional, Union


class MessagePart(BaseModel):
    """A typed piece of message content (text, reasoning, file, ...)."""

    model_config = ConfigDict(extra="allow")

    type: str
    text: Optional[str] = None


class ChatMessage(BaseModel):
    """Data model for a single message in a chat history."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    role: Literal["user", "assistant", "system"]
    parts: List[MessagePart] = Field(default_factory=list)
    content: Optional[Union[str, List[MessagePart]]] = None

    def text_content(self) -> str:
        """Concatenates the text parts; other part types are not forwarded."""
        if isinstance(self.content, str):
            return self.content

        parts = self.parts or self.content or []
        return "".join(part.text or "" for part in parts if part.type == "text")

    def to_model_message(self) -> Dict[str, str]:
        """Converts to the {role, content} shape of chat completions."""
        return {"role": self.role, "content": self.text_content()}


class ErrorDetail(BaseModel):
    """Body of the error envelope returned on any relay failure."""

    model_config = ConfigDict(populate_by_name=True)

    code: Literal["unauthorized", "validation_error", "upstream_error", "internal_error"]
    message: str
    status_code: int = Field(alias="statusCode")
    request_id: Optional[str] = Field(default=None, alias="requestId")


class ErrorEnvelope(BaseModel):
    """Response model for failed chat requests."""

    error: ErrorDetail
