# promptiq/llm_client.py
from __future__ import annotations

import logging
from typing import Protocol

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from .errors import EmptyGeneration, GenerationFailed, ProviderQuotaExceeded

logger = logging.getLogger(__name__)

# provider errors that mean "out of quota / rate limited" rather than "broken request"
_QUOTA_ERRORS = (
    google_exceptions.ResourceExhausted,
    google_exceptions.TooManyRequests,
)


class LLMClient(Protocol):
    def generate(self, system_instruction: str, user_text: str) -> str:
        ...


class GeminiClient:
    """
    Thin adapter over google-generativeai.

    Every provider failure leaves this class as one of our own errors:
    ProviderQuotaExceeded for 429 / resource-exhausted, GenerationFailed for
    anything else. Callers never look at the provider's message text.
    """

    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash") -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._ready = False

    def init(self) -> None:
        if not self.api_key:
            logger.warning("GEMINI_API_KEY not set; generation requests will fail")
            return
        genai.configure(api_key=self.api_key)
        self._ready = True
        logger.info("gemini client ready", extra={"model": self.model_name})

    def close(self) -> None:
        self._ready = False

    def generate(self, system_instruction: str, user_text: str) -> str:
        if not self._ready:
            raise GenerationFailed("Gemini API key not configured")

        model = genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=system_instruction,
        )
        try:
            response = model.generate_content(user_text)
        except _QUOTA_ERRORS as e:
            logger.warning("gemini quota/rate limit hit: %s", e)
            raise ProviderQuotaExceeded() from e
        except google_exceptions.GoogleAPICallError as e:
            code = getattr(e, "code", None)
            if code == 429:
                raise ProviderQuotaExceeded() from e
            raise GenerationFailed(f"Gemini request failed: {e.message or e}") from e
        except Exception as e:
            # transport / auth / SDK errors outside the api_core hierarchy
            logger.exception("gemini call failed")
            raise GenerationFailed(f"Gemini request failed: {e}") from e

        try:
            return response.text
        except ValueError as e:
            # no text part: blocked by safety filters or an empty candidate list
            raise EmptyGeneration(f"Gemini returned no text: {e}") from e
