"""Text-generation backend used by the automatic strategy.

The backend takes one prompt and returns one blob of text. Responses are
streamed and fully drained before anything is parsed. No schema is
enforced here; callers must validate whatever comes back.
"""

import logging
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError

from pocketbook.core.exceptions import BackendUnavailableError

logger = logging.getLogger(__name__)


class TextGenerationBackend(Protocol):
    async def generate(self, prompt: str) -> str:
        """Return the model's full text response for prompt."""
        ...


class OpenAICompatibleBackend:
    """Chat-completions backend for any OpenAI-compatible server.

    Works against OpenAI itself or a local Ollama instance
    (base_url="http://localhost:11434/v1").
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        temperature: float = 0.1,
        client: AsyncOpenAI | None = None,
    ):
        """
        Args:
            base_url: API root of the server
            api_key: API key (any non-empty string for Ollama)
            model: Model name, e.g. "llama3.1:8b"
            temperature: Sampling temperature
            client: Pre-built client (tests)
        """
        self.model = model
        self.temperature = temperature
        # Timeouts are applied per call by the caller; no client retries.
        self.client = client or AsyncOpenAI(base_url=base_url, api_key=api_key, max_retries=0)

    async def generate(self, prompt: str) -> str:
        """Send prompt and drain the streamed reply into one string.

        Raises:
            BackendUnavailableError: On any client/transport error
        """
        parts: list[str] = []
        try:
            stream = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                stream=True,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    parts.append(content)
        except OpenAIError as e:
            logger.error(
                "Text-generation backend call failed",
                extra={"error_type": type(e).__name__, "model": self.model},
            )
            raise BackendUnavailableError(details={"error_type": type(e).__name__}) from e

        return "".join(parts)

    async def aclose(self) -> None:
        await self.client.close()
