"""Client wrapper for interacting with Google Gemini models."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable

import google.generativeai as genai
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError

from app.core.config import GeminiSettings


_TEXT_FALLBACKS: tuple[str, ...] = (
    "gemini-1.5-pro",
    "gemini-1.5-flash",
    "gemini-pro",
)
_VISION_FALLBACKS: tuple[str, ...] = (
    "gemini-1.5-flash",
    "gemini-pro-vision",
)

logger = logging.getLogger(__name__)


class GeminiModelError(RuntimeError):
    """Raised when Gemini cannot fulfill a request."""


class GeminiClient:
    """Provide text generation and image transcription helpers."""

    def __init__(self, settings: GeminiSettings) -> None:
        self._settings = settings
        genai.configure(api_key=settings.api_key)

    async def generate_text(self, prompt: str, *, max_output_tokens: int = 1000) -> str:
        """Produce a free-form text response using the configured model."""

        def _invoke() -> str:
            text = self._invoke_with_models(
                models=self._text_model_candidates(),
                env_var="GEMINI_MODEL_NAME",
                error_prefix="Gemini text generate_content failed",
                call=lambda model: model.generate_content(
                    prompt,
                    generation_config={"max_output_tokens": max_output_tokens},
                ).text,
            )
            return text or ""

        return await asyncio.to_thread(_invoke)

    async def read_image_text(
        self,
        *,
        prompt: str,
        image_base64: str,
        mime_type: str = "image/png",
        max_output_tokens: int = 2000,
    ) -> str:
        """Send an inline base64 image with instructions to the vision model."""

        def _invoke() -> str:
            text = self._invoke_with_models(
                models=self._vision_model_candidates(),
                env_var="GEMINI_VISION_MODEL_NAME",
                error_prefix="Gemini vision generate_content failed",
                call=lambda model: model.generate_content(
                    [
                        {"mime_type": mime_type, "data": image_base64},
                        prompt,
                    ],
                    generation_config={"max_output_tokens": max_output_tokens},
                ).text,
            )
            return text or ""

        return await asyncio.to_thread(_invoke)

    def _invoke_with_models(
        self,
        *,
        models: Iterable[str],
        env_var: str,
        error_prefix: str,
        call: Callable[[genai.GenerativeModel], Any],
    ) -> Any:
        """Try the configured model followed by fallbacks when available."""

        model_sequence = list(models)
        last_not_found: NotFound | None = None
        for index, model_name in enumerate(model_sequence):
            generative_model = genai.GenerativeModel(model_name)
            try:
                return call(generative_model)
            except NotFound as exc:
                last_not_found = exc
                logger.warning(
                    "Gemini model '%s' not found (attempt %d/%d); trying fallback.",
                    model_name,
                    index + 1,
                    len(model_sequence),
                )
                continue
            except (GoogleAPIError, GoogleAuthError) as exc:
                raise GeminiModelError(f"{error_prefix}: {exc}") from exc
            except ValueError as exc:  # pragma: no cover - blocked or empty reply
                raise GeminiModelError(f"{error_prefix}: {exc}") from exc

        if last_not_found is not None:
            primary = model_sequence[0] if model_sequence else "unknown"
            raise GeminiModelError(
                f"Gemini model '{primary}' is not available. "
                f"Update {env_var} to a supported value."
            ) from last_not_found

        raise GeminiModelError(f"{error_prefix}: Unknown error invoking Gemini.")

    def _text_model_candidates(self) -> list[str]:
        return self._collect_candidates(self._settings.model_name, _TEXT_FALLBACKS)

    def _vision_model_candidates(self) -> list[str]:
        return self._collect_candidates(
            self._settings.vision_model_name, _VISION_FALLBACKS
        )

    @staticmethod
    def _collect_candidates(
        configured: str | None,
        fallbacks: tuple[str, ...],
    ) -> list[str]:
        """Return distinct model names prioritizing the configured value."""
        seen: set[str] = set()
        candidates: list[str] = []
        for name in (configured, *fallbacks):
            if not name:
                continue
            cleaned = name.strip()
            if not cleaned or cleaned in seen:
                continue
            seen.add(cleaned)
            candidates.append(cleaned)
        return candidates


__all__ = ["GeminiClient", "GeminiModelError"]
