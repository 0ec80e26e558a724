"""Chat-completions client for the language model backend."""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from ticketbot.core.exceptions import MalformedModelOutputError, ModelUnavailableError
from ticketbot.metrics.router_metrics import model_request_duration_seconds

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT_SECONDS = 15.0


class OpenAIChatClient:
    """Minimal async client for an OpenAI-compatible chat completions API.

    Returns the raw text of the first choice. Transport errors, timeouts and
    non-2xx responses raise ``ModelUnavailableError``; a response without
    text content raises ``MalformedModelOutputError``.
    The timeout bounds the whole request, including a slowly sent body.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        temperature: float = 0.3,
        max_tokens: int = 500,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Any) -> "OpenAIChatClient":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            api_url=settings.OPENAI_API_URL,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client with connection pooling."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                transport=self._transport,
            )
        return self._client

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        """Send a chat completion request and return the answer text."""
        client = await self._get_client()
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                client.post(self.api_url, json=payload, headers=headers),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ModelUnavailableError(
                f"Model request timed out after {self.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise ModelUnavailableError(f"Model request failed: {e}") from e
        finally:
            model_request_duration_seconds.observe(time.perf_counter() - started)

        if response.is_error:
            raise ModelUnavailableError(
                f"Model API error: {response.status_code} {self._error_message(response)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise MalformedModelOutputError(
                f"Unexpected completion envelope: {type(e).__name__}"
            ) from e

        if not isinstance(content, str):
            raise MalformedModelOutputError("Completion content is not text")
        return content.strip()

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return str(response.json().get("error", {}).get("message", ""))
        except (ValueError, AttributeError):
            return response.reason_phrase
