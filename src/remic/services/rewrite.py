"""Rewrite service boundary and provider selection.

A rewrite service turns the original dream text and a tone into rewritten
text. Implementations raise ``RewriteServiceError`` subclasses on failure;
the dream store converts those into ``RewriteFailed`` events.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_fixed

from ..config.settings import RemicConfig, config
from ..exceptions import (
    RateLimitedError,
    RewriteServiceError,
    ServiceResponseError,
    ServiceTransportError,
    UnauthorizedError,
)
from ..logging import get_logger
from ..models.dream import Tone

logger = get_logger(__name__)


class RewriteService(ABC):
    """Produces toned rewrites of dream text."""

    name = "rewrite"

    @abstractmethod
    async def rewrite(self, original_text: str, tone: Tone) -> str:
        """Rewrite ``original_text`` in the given tone."""
        pass


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (ServiceTransportError, RateLimitedError)):
        return True
    return isinstance(exc, ServiceResponseError) and (exc.status_code or 0) >= 500


class HttpRewriteService(RewriteService):
    """Shared JSON-over-HTTP plumbing with retries for rewrite providers."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        max_attempts: int | None = None,
        retry_wait: float | None = None,
        request_timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.max_attempts = max_attempts or config.rewrite_max_attempts
        self.retry_wait = config.rewrite_retry_wait if retry_wait is None else retry_wait
        self.request_timeout = request_timeout
        self.transport = transport

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"remic/{config.service_version}",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _post_json(self, path: str, payload: dict) -> dict:
        """POST ``payload`` to ``path`` and return the decoded JSON body, retrying transient failures."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_wait),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(f"Retrying {self.name} request (attempt {attempt.retry_state.attempt_number})")
                return await self._send(url, payload)

    async def _send(self, url: str, payload: dict) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self.request_timeout, transport=self.transport) as client:
                response = await client.post(url, headers=self._get_headers(), json=payload)
        except httpx.TransportError as e:
            logger.warning(f"{self.name} request to {url} failed: {e}")
            raise ServiceTransportError(f"Network error: {e}") from e

        if response.status_code in (401, 403):
            raise UnauthorizedError(f"{self.name} rejected the credentials (HTTP {response.status_code})")
        if response.status_code == 429:
            raise RateLimitedError(f"{self.name} is rate limiting requests")
        if not response.is_success:
            raise ServiceResponseError(
                f"{self.name} returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ServiceResponseError(f"{self.name} returned invalid JSON", response.status_code) from e
        if not isinstance(data, dict):
            raise ServiceResponseError(f"{self.name} returned an unexpected body", response.status_code)
        return data


class FallbackRewriteService(RewriteService):
    """Try each service in turn until one produces a rewrite."""

    name = "fallback"

    def __init__(self, services: Sequence[RewriteService]):
        if not services:
            raise ValueError("FallbackRewriteService needs at least one service")
        self.services = list(services)

    async def rewrite(self, original_text: str, tone: Tone) -> str:
        last_error: RewriteServiceError | None = None
        for service in self.services:
            try:
                return await service.rewrite(original_text, tone)
            except RewriteServiceError as e:
                logger.warning(f"{service.name} rewrite failed, trying next provider: {e}")
                last_error = e
        raise last_error


def build_rewrite_service(settings: RemicConfig | None = None) -> RewriteService:
    """Build the rewrite provider selected by configuration.

    ``auto`` chains the dream backend and the language model, in that order,
    keeping only those with credentials configured.

    Raises:
        RewriteServiceError: If the selected provider is not configured
    """
    from .backend import BackendRewriteService
    from .language_model import LanguageModelRewriteService

    settings = settings or config
    provider = settings.rewrite_provider

    if provider == "backend":
        return BackendRewriteService.from_config(settings)
    if provider == "llm":
        return LanguageModelRewriteService.from_config(settings)

    services: list[RewriteService] = []
    if settings.backend_configured:
        services.append(BackendRewriteService.from_config(settings))
    if settings.llm_configured:
        services.append(LanguageModelRewriteService.from_config(settings))
    if not services:
        raise RewriteServiceError(
            "No rewrite provider configured; set REMIC_BACKEND_TOKEN or REMIC_LLM_API_KEY"
        )
    if len(services) == 1:
        return services[0]
    return FallbackRewriteService(services)
