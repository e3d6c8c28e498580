"""HTTP client for the external embedding service."""

import asyncio
import contextlib
import logging
from collections.abc import Sequence

import httpx

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_URL = "http://127.0.0.1:11434/api/embeddings"
DEFAULT_EMBEDDING_MODEL = "mxbai-embed-large"

# Retry policy: attempt n waits n * retry_delay seconds before the next one
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0

# Per-request timeout
DEFAULT_TIMEOUT = 60.0

# Max in-flight requests per file (0 = unbounded)
DEFAULT_MAX_CONCURRENCY = 8


class EmbeddingError(Exception):
    """Raised when the service fails to return an embedding after all retries."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class EmbeddingClient:
    """Requests embedding vectors, one prompt per request.

    Request body: {"model": <model>, "prompt": <text>}
    Response body: {"embedding": [<float>, ...]}

    Network errors, timeouts, non-2xx responses and malformed bodies are all
    retried. A vector is either returned as sent by the service or an
    EmbeddingError is raised; nothing is ever substituted.
    """

    def __init__(
        self,
        url: str = DEFAULT_EMBEDDING_URL,
        model: str = DEFAULT_EMBEDDING_MODEL,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            url: Embedding endpoint URL
            model: Model identifier sent with every request
            max_retries: Total attempts per prompt (>= 1)
            retry_delay: Base delay in seconds for the linear backoff
            timeout: Per-request timeout in seconds
            max_concurrency: Max concurrent requests in embed_many (0 = unbounded)
            transport: Optional httpx transport (used by tests)
        """
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        if max_concurrency < 0:
            raise ValueError(f"max_concurrency must be >= 0, got {max_concurrency}")

        self.url = url
        self.model = model
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self._transport = transport
        self._sleep = asyncio.sleep

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _request(self, client: httpx.AsyncClient, text: str) -> list[float]:
        """Send a single request and validate the response body."""
        response = await client.post(self.url, json={"model": self.model, "prompt": text})
        response.raise_for_status()

        data = response.json()
        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(embedding, list) or not all(
            isinstance(v, (int, float)) and not isinstance(v, bool) for v in embedding
        ):
            raise ValueError("Response does not contain a numeric 'embedding' list")
        return [float(v) for v in embedding]

    async def _embed_with_retry(
        self,
        client: httpx.AsyncClient,
        text: str,
        semaphore: asyncio.Semaphore | None = None,
    ) -> list[float]:
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                async with semaphore or contextlib.nullcontext():
                    return await self._request(client, text)
            except (httpx.HTTPError, ValueError) as e:
                last_error = e
                logger.warning(
                    "Embedding attempt %d/%d failed: %s", attempt, self.max_retries, e
                )
                if attempt < self.max_retries:
                    await self._sleep(attempt * self.retry_delay)

        raise EmbeddingError(
            f"Embedding failed after {self.max_retries} attempts "
            f"({len(text)} chars): {last_error}",
            attempts=self.max_retries,
        ) from last_error

    async def aembed(self, text: str) -> list[float]:
        """Embed a single text."""
        async with self._create_client() as client:
            return await self._embed_with_retry(client, text)

    async def aembed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Embed all texts concurrently and wait for every result.

        Results are returned in input order. If any text fails, the other
        pending requests are cancelled and the error is raised.
        """
        if not texts:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async with self._create_client() as client:
            tasks = [
                asyncio.create_task(self._embed_with_retry(client, text, semaphore))
                for text in texts
            ]
            try:
                return list(await asyncio.gather(*tasks))
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

    def embed(self, text: str) -> list[float]:
        """Blocking wrapper around aembed()."""
        return asyncio.run(self.aembed(text))

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """Blocking wrapper around aembed_many()."""
        return asyncio.run(self.aembed_many(texts))
