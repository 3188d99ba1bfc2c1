"""Language model client for answer generation.

Single-prompt chat completion against OpenAI with the model and temperature
fixed by configuration.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from openai import AsyncOpenAI

from . import config

logger = logging.getLogger(__name__)


class LanguageModel(ABC):
    """Turns a prompt into generated text."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        raise NotImplementedError


class OpenAIChatModel(LanguageModel):

    def __init__(
        self,
        model: str = config.LLM_MODEL,
        temperature: float = config.LLM_TEMPERATURE,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.temperature = temperature
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not config.OPENAI_API_KEY:
                raise ValueError("OPENAI_API_KEY not found in app.config")
            self._client = AsyncOpenAI(api_key=config.OPENAI_API_KEY)
        return self._client

    async def complete(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        if not response.choices:
            return ""

        content = response.choices[0].message.content or ""
        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(f"[LLM] {self.model} usage: {usage.total_tokens} tokens")
        return content
