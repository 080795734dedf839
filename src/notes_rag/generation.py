from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from openai import AsyncOpenAI, AsyncStream, Stream
from openai.types.chat import ChatCompletion

from .errors import GenerationFailure
from .models import Prompt

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response available"


class GenerationClient(ABC):
    @abstractmethod
    async def generate(self, prompt: Prompt) -> str:
        """Return the model's answer, or NO_RESPONSE when it produced no text."""


def extract_text(response: object) -> str:
    """
    Pull the answer text out of a chat completion.

    Streams, raw bytes and anything that is not a ChatCompletion are
    rejected. A completion with no choices or no message content yields
    NO_RESPONSE.
    """
    if isinstance(response, (AsyncStream, Stream)):
        raise GenerationFailure("Model returned a stream; expected a complete response")
    if isinstance(response, (bytes, bytearray, memoryview)):
        raise GenerationFailure("Model returned binary data; expected a complete response")
    if not isinstance(response, ChatCompletion):
        raise GenerationFailure(
            f"Unable to process the model response of type {type(response).__name__}"
        )

    if not response.choices:
        logger.warning("Completion %s has no choices", response.id)
        return NO_RESPONSE

    content = response.choices[0].message.content
    if content is None:
        logger.warning("Completion %s has no text content", response.id)
        return NO_RESPONSE
    return content


class OpenAIGenerationClient(GenerationClient):
    def __init__(
        self,
        model: str,
        temperature: float = 0.2,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI()
        return self._client

    async def generate(self, prompt: Prompt) -> str:
        logger.info("Calling OpenAI model %s with %d messages", self.model, len(prompt))
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=prompt.as_openai_messages(),
                temperature=self.temperature,
                stream=False,
            )
        except Exception as exc:
            raise GenerationFailure(f"OpenAI request failed: {exc}") from exc

        return extract_text(response)


__all__ = ["GenerationClient", "OpenAIGenerationClient", "extract_text", "NO_RESPONSE"]
