"""Client for the upstream OpenAI-compatible chat-completions API."""

from openai import AsyncOpenAI
from openai import AsyncStream
from openai.types.chat import ChatCompletionChunk
from app.config import Settings
from app.core.errors import UpstreamConfigurationError
from app.models.chat import ChatMessage
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

TEMPERATURE = 0.8
# Not part of the OpenAI schema; providers that don't know it ignore it.
REPETITION_PENALTY = 0.9


class ModelClient:
    """A client to stream chat completions from the Nous inference API."""

    def __init__(self, settings: Settings):
        """Creates the underlying AsyncOpenAI client when an API key is configured."""
        self.model = settings.hermes_model
        self.base_url = settings.nous_api_base_url
        self._client: Optional[AsyncOpenAI] = None
        if settings.nous_api_key:
            self._client = AsyncOpenAI(
                api_key=settings.nous_api_key, base_url=self.base_url
            )
        else:
            logger.warning("NOUS_API_KEY is not set; chat requests will fail")

    async def open_stream(
        self, system_prompt: str, messages: List[ChatMessage]
    ) -> AsyncStream[ChatCompletionChunk]:
        """Dispatches a streaming chat completion and returns the live chunk stream."""
        if self._client is None:
            raise UpstreamConfigurationError("Invalid API key: NOUS_API_KEY is not set")

        model_messages = [{"role": "system", "content": system_prompt}]
        model_messages.extend(message.to_model_message() for message in messages)

        return await self._client.chat.completions.create(
            model=self.model,
            messages=model_messages,
            temperature=TEMPERATURE,
            stream=True,
            extra_body={"repetition_penalty": REPETITION_PENALTY},
        )

    async def close(self):
        """Closes the HTTP connection pool."""
        if self._client is not None:
            await self._client.close()
