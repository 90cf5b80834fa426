"""Google Translate (gtx endpoint) client for short food names."""

from dataclasses import dataclass
from typing import Protocol

import httpx

DEFAULT_TRANSLATE_URL = "https://translate.googleapis.com/translate_a/single"


class TranslateClient(Protocol):
    """Interface for translating short text between two languages."""

    async def translate(self, text: str, source: str, target: str) -> str:
        """Return ``text`` translated from ``source`` to ``target``."""


@dataclass
class HttpxTranslateClient(TranslateClient):
    """HTTPX-backed client for the unauthenticated gtx translate endpoint."""

    http_client: httpx.AsyncClient
    base_url: str = DEFAULT_TRANSLATE_URL
    timeout_seconds: float = 2.0

    @classmethod
    def create(
        cls, base_url: str = DEFAULT_TRANSLATE_URL, timeout_seconds: float = 2.0
    ) -> "HttpxTranslateClient":
        """Create a translate client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(),
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )

    async def translate(self, text: str, source: str, target: str) -> str:
        """Translate text; raises on HTTP errors or an unexpected payload."""
        response = await self.http_client.get(
            self.base_url,
            params={"client": "gtx", "sl": source, "tl": target, "dt": "t", "q": text},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        payload = response.json()
        segments = payload[0] if isinstance(payload, list) and payload else None
        if not isinstance(segments, list):
            raise ValueError("Unexpected translate payload")
        translated = "".join(
            str(segment[0])
            for segment in segments
            if isinstance(segment, list) and segment and segment[0]
        )
        if not translated:
            raise ValueError("Empty translation")
        return translated

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
