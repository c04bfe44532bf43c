"""
Ollama model service provider.
"""

import json
from typing import Any, AsyncIterator, Iterable

import httpx

from deskrag.exceptions import (
    EmptyEmbeddingError,
    MalformedResponseError,
    ModelServiceError,
    ServiceConnectionError,
    ServiceStatusError,
)
from deskrag.providers.base import ChatProvider
from deskrag.utils.logging import get_logger

logger = get_logger(__name__)


class OllamaProvider(ChatProvider):
    """
    Provider for a local Ollama server.

    Embeddings come from ``/api/embeddings``; chat responses are read
    from ``/api/chat`` as newline-delimited JSON.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._closed = False

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._closed:
            raise ServiceConnectionError(self.base_url, "provider is closed")
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def embed(self, text: str, *, model: str = "nomic-embed-text") -> list[float]:
        """Get an embedding from Ollama."""
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        url = self._url("/api/embeddings")
        logger.debug(f"Requesting embedding for text (first 100 chars): {text[:100]}...")

        try:
            response = await self._get_client().post(
                url,
                json={"model": model, "prompt": text}
            )
        except httpx.TransportError as e:
            raise ServiceConnectionError(url, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise ServiceStatusError(url, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Could not parse embedding response from {url}: {e}"
            ) from e

        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(embedding, list):
            raise MalformedResponseError(f"Embedding response from {url} has no 'embedding' list")
        if not embedding:
            raise EmptyEmbeddingError(model)

        try:
            vector = [float(value) for value in embedding]
        except (TypeError, ValueError) as e:
            raise MalformedResponseError(f"Embedding from {url} is not numeric: {e}") from e

        logger.debug(f"Received embedding of dimension {len(vector)}")
        return vector

    async def stream(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str = "llama3",
        **kwargs: Any
    ) -> AsyncIterator[str]:
        """Stream a chat completion from Ollama."""
        url = self._url("/api/chat")
        payload: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": True,
        }
        if kwargs:
            payload["options"] = kwargs

        logger.debug(f"Sending chat request to {url} with {len(messages)} message(s)")

        try:
            async with self._get_client().stream(
                "POST",
                url,
                json=payload,
                timeout=httpx.Timeout(self.timeout, read=None)  # Generation may pause between tokens
            ) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise ServiceStatusError(url, response.status_code, body)

                async for line in response.aiter_lines():
                    if not line.strip():
                        continue

                    try:
                        data = json.loads(line)
                    except json.JSONDecodeError as e:
                        raise MalformedResponseError(
                            f"error unmarshalling stream response: {e}. Line: {line}"
                        ) from e

                    if not isinstance(data, dict):
                        raise MalformedResponseError(f"Unexpected stream line: {line}")
                    if data.get("error"):
                        raise ModelServiceError(f"Model service error: {data['error']}")

                    message = data.get("message") or {}
                    if not isinstance(message, dict):
                        raise MalformedResponseError(f"Stream line has no message object: {line}")

                    content = message.get("content") or ""
                    if not isinstance(content, str):
                        raise MalformedResponseError(f"Stream message content is not text: {line}")
                    if content:
                        yield content

                    if data.get("done"):
                        return

                logger.warning("Chat stream ended without the service signaling 'done'")
        except httpx.TransportError as e:
            raise ServiceConnectionError(url, str(e) or type(e).__name__) from e

    async def health_check(self, models: Iterable[str] = ()) -> dict[str, Any]:
        """
        Check that Ollama answers and has the given models.

        Returns:
            Dictionary with 'healthy', 'service_running', 'missing_models', 'error'
        """
        result: dict[str, Any] = {
            "healthy": False,
            "service_running": False,
            "missing_models": [],
            "error": "",
        }

        url = self._url("/api/tags")
        try:
            response = await self._get_client().get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            result["error"] = f"Cannot connect to Ollama at {self.base_url}: {e}"
            return result
        except ServiceConnectionError as e:
            result["error"] = e.message
            return result
        except ValueError as e:
            result["error"] = f"Could not parse model list: {e}"
            return result

        result["service_running"] = True
        available = [
            entry.get("name") or entry.get("model") or ""
            for entry in data.get("models", [])
        ]
        missing = [m for m in models if not any(name.startswith(m) for name in available)]
        result["missing_models"] = missing

        if missing:
            result["error"] = (
                f"Models not found: {missing}. Available: {available}. "
                f"Pull them with: ollama pull <model>"
            )
        else:
            result["healthy"] = True

        return result

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it.

        The provider cannot be used afterwards.
        """
        self._closed = True
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
