import logging
from typing import Optional

from openai import AsyncOpenAI

from ragchat.core.errors import ConfigurationMissing

logger = logging.getLogger(__name__)


class OpenAICompatibleClient:
    """LLM client for any OpenAI-compatible chat completions API (Groq by default)."""

    def __init__(
        self,
        base_url: str = "https://api.groq.com/openai/v1",
        api_key: str = "",
        model: str = "llama-3.3-70b-versatile",
        max_tokens: int = 1024,
        temperature: float = 0.7,
        timeout: float = 60.0,
    ):
        """Initialize client.

        Args:
            base_url: API base URL.
            api_key: API key; checked on first use.
            model: Model name.
            max_tokens: Max response tokens.
            temperature: Sampling temperature.
            timeout: Request timeout in seconds.
        """
        self._base_url = base_url
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationMissing("GROQ_API_KEY")
            self._client = AsyncOpenAI(
                base_url=self._base_url,
                api_key=self._api_key,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    async def invoke(self, messages: list[dict]) -> str:
        """Generate a complete (non-streamed) reply.

        Args:
            messages: Role-tagged messages, system first.

        Returns:
            Generated text.
        """
        response = await self.client.chat.completions.create(
            model=self._model,
            messages=messages,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

        content = response.choices[0].message.content or ""
        logger.info(f"LLM reply: {len(content)} chars from {self._model}")
        return content
