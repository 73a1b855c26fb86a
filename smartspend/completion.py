"""Text-completion service backed by the Gemini API."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from google import genai
from google.genai import types

from .config import AppConfig
from .errors import CompletionUnavailable
from .logging import get_logger

logger = get_logger("smartspend.completion")


class CompletionService(Protocol):
    def complete(
        self,
        system_instruction: str,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        ...


class GeminiCompletionService:
    """Single-shot JSON completions from Gemini with a bounded request time."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        timeout_seconds: float = 30.0,
        client: Any = None,
    ):
        self.model = model
        self.timeout_seconds = timeout_seconds
        if client is None:
            if not api_key:
                raise CompletionUnavailable("Missing api.gemini_api_key in .streamlit/secrets.toml")
            client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
            )
        self._client = client

    def complete(
        self,
        system_instruction: str,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        try:
            result = self._client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=temperature,
                    max_output_tokens=max_tokens,
                    response_mime_type="application/json",
                ),
            )
        except Exception as e:
            raise CompletionUnavailable(f"Gemini API error: {str(e)}") from e

        text = getattr(result, "text", None)
        if not text:
            raise CompletionUnavailable("No response from Gemini API")
        return text


def create_completion_service(config: AppConfig) -> Optional[GeminiCompletionService]:
    """Create a Gemini service, or None when no API key is configured."""
    if not config.gemini_api_key:
        logger.info("Gemini API key not configured; budget advice will use the local fallback")
        return None
    return GeminiCompletionService(
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        timeout_seconds=config.request_timeout_seconds,
    )
