"""Dream backend rewrite provider.

Calls ``POST {backend_url}/ai/dream-rewrite`` with the dream text and the
backend's ``mood_type`` for the requested tone, and reads ``rewritten_text``
from the response.
"""

import httpx

from ..config.settings import RemicConfig
from ..exceptions import EmptyRewriteError
from ..models.dream import Tone
from .rewrite import HttpRewriteService


class BackendRewriteService(HttpRewriteService):
    """Rewrite dreams through the REMic backend API."""

    name = "backend"

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        model: str | None = None,
        **kwargs,
    ):
        super().__init__(base_url, token=token, **kwargs)
        self.model = model or None

    @classmethod
    def from_config(
        cls, settings: RemicConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> "BackendRewriteService":
        return cls(
            settings.backend_url,
            token=settings.backend_token or None,
            model=settings.backend_model or None,
            max_attempts=settings.rewrite_max_attempts,
            retry_wait=settings.rewrite_retry_wait,
            request_timeout=settings.rewrite_timeout,
            transport=transport,
        )

    async def rewrite(self, original_text: str, tone: Tone) -> str:
        payload = {"text": original_text, "mood_type": tone.mood_type}
        if self.model:
            payload["model"] = self.model

        data = await self._post_json("/ai/dream-rewrite", payload)

        rewritten = data.get("rewritten_text")
        if not isinstance(rewritten, str) or not rewritten.strip():
            raise EmptyRewriteError("Backend returned no rewritten text")
        return rewritten.strip()
