"""Async Ollama chat client used by the narrator."""

import asyncio
import logging
from typing import Dict, List

import ollama

from turnloom.config import Settings

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429


class OllamaClient:
    """Thin async wrapper around ``ollama.AsyncClient``.

    Retries transient failures a few times with a linear delay. Rate-limit
    responses (HTTP 429) are raised immediately so the caller's quota tracker
    can back off instead.

    Example:
        >>> client = OllamaClient(model_name="mistral:7b")
        >>> scene = await client.generate("Describe a Paris café at dawn.", json_mode=False)
    """

    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_BASE_URL = "http://localhost:11434"
    DEFAULT_TIMEOUT = 30.0
    MAX_RETRIES = 3
    RETRY_DELAY = 0.5               # Seconds, multiplied by the attempt number

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        """
        Args:
            model_name: Model tag to chat with. Defaults to mistral:7b.
            base_url: Ollama server URL. Defaults to http://localhost:11434.
            timeout: Per-request timeout in seconds. Defaults to 30.
        """
        self.model_name = model_name or self.DEFAULT_MODEL
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._client = ollama.AsyncClient(host=self.base_url, timeout=self.timeout)
        logger.debug("OllamaClient ready: model=%s host=%s", self.model_name, self.base_url)

    @classmethod
    def from_settings(cls, settings: Settings) -> "OllamaClient":
        return cls(model_name=settings.narrator_model, base_url=settings.ollama_host, timeout=settings.llm_timeout)

    async def health_check(self) -> bool:
        """True if the server answers and the configured model (or a tag of it) is pulled."""
        try:
            listing = await self._client.list()
        except (ollama.ResponseError, ConnectionError, OSError) as e:
            logger.error("Ollama health check failed: %s", e)
            return False

        pulled = [m.model for m in listing["models"]]
        family = self.model_name.split(":")[0]
        if self.model_name in pulled or any(name.startswith(family) for name in pulled):
            return True
        logger.warning("Model %s is not pulled; available: %s", self.model_name, pulled)
        return False

    async def generate(self, prompt: str, system: str | None = None, json_mode: bool = True) -> str:
        """Single-turn chat; returns the raw assistant message.

        With ``json_mode`` the server is asked to constrain output to JSON, which
        the caller still has to parse.

        Raises:
            ollama.ResponseError: On a rate limit, or once retries are exhausted.
            ConnectionError / OSError: If the server stays unreachable.
        """
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await self._chat_with_retries(messages, "json" if json_mode else None)
        content = response["message"]["content"]
        logger.debug("Narrator response: %d chars", len(content))
        return content

    async def _chat_with_retries(self, messages: List[Dict[str, str]], fmt: str | None):
        for attempt in range(1, self.MAX_RETRIES + 1):
            try:
                return await self._client.chat(model=self.model_name, messages=messages, format=fmt)
            except ollama.ResponseError as e:
                if e.status_code == RATE_LIMIT_STATUS or attempt == self.MAX_RETRIES:
                    raise
                logger.warning("Chat attempt %d/%d failed: %s", attempt, self.MAX_RETRIES, e)
            except (ConnectionError, OSError) as e:
                if attempt == self.MAX_RETRIES:
                    raise
                logger.warning("Chat attempt %d/%d could not reach Ollama: %s", attempt, self.MAX_RETRIES, e)
            await asyncio.sleep(self.RETRY_DELAY * attempt)
