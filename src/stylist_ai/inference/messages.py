"""Messages API 客户端：基于 httpx 的多模态模型调用。

Model client for Anthropic-style Messages APIs over httpx.

Errors are raised with their ``ErrorKind`` attached so the orchestrator's
retry predicate can tell throttling and outages from bad requests.
"""

from __future__ import annotations

import os
from contextlib import suppress
from typing import TYPE_CHECKING, Any

import httpx

from stylist_ai.errors import AIServiceError, ErrorKind, classify_http_status
from stylist_ai.inference.base import ModelClient

if TYPE_CHECKING:
    from collections.abc import Sequence

    from stylist_ai.types import ConversationMessage

_DEFAULT_BASE_URL = "https://api.anthropic.com"
_DEFAULT_TIMEOUT = 60.0
_DEFAULT_CONNECT_TIMEOUT = 10.0
_API_VERSION = "2023-06-01"


def _media_type(image_base64: str) -> str:
    # base64 of the 8-byte PNG signature
    return "image/png" if image_base64.startswith("iVBORw0KGg") else "image/jpeg"


class MessagesApiClient(ModelClient):
    """Messages API client.

    Example:
        >>> client = MessagesApiClient(model="claude-3-5-sonnet-20240620")
        >>> text = await client.send_message(history, system_prompt="You are a stylist")
        >>> await client.close()
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 1000,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize client.

        Args:
            model: Model identifier
            api_key: API key (defaults to ``STYLIST_MODEL_API_KEY``)
            base_url: API base URL (defaults to ``STYLIST_MODEL_BASE_URL``)
            max_tokens: Response token limit
            timeout: Request timeout in seconds
            client: Pre-built httpx client (not closed by ``close``)
        """
        self._model = model
        self._api_key = api_key or os.getenv("STYLIST_MODEL_API_KEY")
        self._base_url = base_url or os.getenv("STYLIST_MODEL_BASE_URL", _DEFAULT_BASE_URL)
        self._max_tokens = max_tokens

        self._timeout = timeout
        if self._timeout is None:
            env_timeout = os.getenv("STYLIST_MODEL_TIMEOUT_SECS")
            if env_timeout:
                with suppress(ValueError):
                    self._timeout = float(env_timeout)
        if self._timeout is None:
            self._timeout = _DEFAULT_TIMEOUT

        self._client = client
        self._owns_client = client is None

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout, connect=_DEFAULT_CONNECT_TIMEOUT),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "anthropic-version": _API_VERSION,
        }
        if self._api_key:
            headers["x-api-key"] = self._api_key
        return headers

    async def _create(self, messages: list[dict[str, Any]], system_prompt: str | None) -> str:
        payload: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": messages,
        }
        if system_prompt:
            payload["system"] = system_prompt

        try:
            response = await self._get_client().post(
                "/v1/messages", json=payload, headers=self._build_headers()
            )
        except httpx.TimeoutException as e:
            raise AIServiceError(
                "AI service request timed out", kind=ErrorKind.TIMEOUT
            ) from e
        except httpx.HTTPError as e:
            raise AIServiceError(
                "AI service is unreachable", kind=ErrorKind.NETWORK
            ) from e

        if response.status_code >= 400:
            raise AIServiceError(
                f"AI service returned HTTP {response.status_code}",
                kind=classify_http_status(response.status_code),
                details={"status_code": response.status_code},
            )

        try:
            body = response.json()
            return "".join(
                block.get("text", "")
                for block in body["content"]
                if block.get("type") == "text"
            )
        except (ValueError, KeyError, TypeError) as e:
            raise AIServiceError(
                "AI service returned an unexpected response body", kind=ErrorKind.PARSE
            ) from e

    async def send_message(
        self,
        history: Sequence[ConversationMessage],
        system_prompt: str | None = None,
    ) -> str:
        messages = [{"role": m.role, "content": m.content} for m in history]
        return await self._create(messages, system_prompt)

    async def send_message_with_image(
        self,
        image_base64: str,
        prompt: str,
        system_prompt: str | None = None,
    ) -> str:
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": _media_type(image_base64),
                            "data": image_base64,
                        },
                    },
                ],
            }
        ]
        return await self._create(messages, system_prompt)
