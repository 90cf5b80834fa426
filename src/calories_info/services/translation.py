"""Best-effort translation of queries and result names."""

import logging
import unicodedata
from dataclasses import dataclass

import httpx

from calories_info.adapters.translate_client import TranslateClient

_logger = logging.getLogger(__name__)


def has_non_latin_letters(text: str) -> bool:
    """Return True when any letter in ``text`` is outside the Latin script."""
    return any(
        char.isalpha() and not unicodedata.name(char, "").startswith("LATIN")
        for char in text
    )


@dataclass
class TranslationService:
    """Translate between the user's language and the external source's.

    Every failure returns the input unchanged.
    """

    client: TranslateClient | None
    user_language: str = "ru"
    external_language: str = "en"

    async def to_external(self, text: str) -> str:
        """Translate a query written in a non-Latin script."""
        if not text.strip() or not has_non_latin_letters(text):
            return text
        translated = await self._translate(
            text, self.user_language, self.external_language
        )
        return translated.lower()

    async def from_external(self, text: str) -> str:
        """Translate a plain-ASCII external name back to the user's language."""
        if not text.strip() or not text.isascii():
            return text
        return await self._translate(text, self.external_language, self.user_language)

    async def _translate(self, text: str, source: str, target: str) -> str:
        if self.client is None:
            return text
        try:
            return await self.client.translate(text, source, target)
        except (httpx.HTTPError, ValueError, TypeError, IndexError) as exc:
            _logger.warning(
                "Translation failed",
                extra={"source_lang": source, "target_lang": target, "error": str(exc)},
            )
            return text
