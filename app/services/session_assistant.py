"""Service that turns session notes and images into structured help via Gemini."""

from __future__ import annotations

import json
import logging
import re
from textwrap import dedent
from typing import Any, Optional

from pydantic import TypeAdapter

from app.clients import GeminiClient
from app.clients.gemini import GeminiModelError
from app.schemas.assistant import (
    InsightReport,
    PreviousInsight,
    SessionSummary,
    TodoSuggestion,
)
from app.services.errors import ProviderError

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```json|```")
_TODO_LIST = TypeAdapter(list[TodoSuggestion])

_TODO_TOKENS = 1000
_TRANSCRIBE_TOKENS = 2000
_INSIGHT_TOKENS = 2500

_TRANSCRIBE_PROMPT = (
    "Please extract and transcribe all text visible in this image. If there are "
    "handwritten notes, transcribe them as accurately as possible. Return only the "
    "transcribed text without any additional commentary."
)


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers the model sometimes wraps JSON in."""
    return _CODE_FENCE.sub("", text).strip()


def _parse_json_reply(text: str) -> Any:
    return json.loads(strip_code_fences(text))


class SessionAssistantService:
    """Generate action items, transcriptions, and insights for journal sessions."""

    def __init__(self, gemini_client: GeminiClient) -> None:
        self._gemini = gemini_client

    async def generate_todos(
        self, *, session_type: str, session_date: str, session_notes: str
    ) -> list[TodoSuggestion]:
        prompt = _build_todo_prompt(session_type, session_date, session_notes)
        try:
            reply = await self._gemini.generate_text(
                prompt, max_output_tokens=_TODO_TOKENS
            )
            return _TODO_LIST.validate_python(_parse_json_reply(reply))
        except (GeminiModelError, ValueError) as exc:
            logger.error("Error generating todos: %s", exc)
            raise ProviderError(
                "Failed to generate action items", code="TODO_GENERATION_ERROR"
            ) from exc

    async def extract_text(self, *, image_b64: str, mime_type: str) -> str:
        try:
            return await self._gemini.read_image_text(
                prompt=_TRANSCRIBE_PROMPT,
                image_base64=image_b64,
                mime_type=mime_type,
                max_output_tokens=_TRANSCRIBE_TOKENS,
            )
        except GeminiModelError as exc:
            logger.error("Error extracting text: %s", exc)
            raise ProviderError(
                "Failed to extract text from image", code="TEXT_EXTRACTION_ERROR"
            ) from exc

    async def generate_insights(
        self,
        *,
        sessions: list[SessionSummary],
        previous_insight: Optional[PreviousInsight] = None,
    ) -> InsightReport:
        prompt = _build_insight_prompt(sessions, previous_insight)
        try:
            reply = await self._gemini.generate_text(
                prompt, max_output_tokens=_INSIGHT_TOKENS
            )
            return InsightReport.model_validate(_parse_json_reply(reply))
        except (GeminiModelError, ValueError) as exc:
            # json.JSONDecodeError and ValidationError are both ValueErrors.
            logger.error("Error generating insights: %s", exc)
            raise ProviderError(
                "Failed to generate insights", code="INSIGHT_GENERATION_ERROR"
            ) from exc


def _build_todo_prompt(session_type: str, session_date: str, session_notes: str) -> str:
    return dedent(
        f"""\
        Based on this {session_type} session from {session_date}, generate 3-5 specific, actionable to-do items that would help with personal growth and accountability.

        Session notes:
        """
    ) + session_notes + dedent(
        """

        Return ONLY a JSON array of objects with this structure (no markdown, no preamble):
        [
          {
            "title": "specific action item",
            "description": "why this matters and how to do it",
            "priority": "high|medium|low",
            "dueDate": "YYYY-MM-DD"
          }
        ]"""
    )


def _build_insight_prompt(
    sessions: list[SessionSummary], previous_insight: Optional[PreviousInsight]
) -> str:
    summaries = "\n\n---\n\n".join(
        f"{session.type} session on {session.date}:\n{session.notes}"
        for session in sessions
    )

    comparison = ""
    if previous_insight is not None:
        comparison = (
            f"\n\nPREVIOUS INSIGHTS (from {previous_insight.session_count} sessions):\n"
            f"- Themes: {', '.join(previous_insight.themes)}\n"
            f"- Key patterns identified: {previous_insight.patterns[:200]}...\n\n"
            "Please note any CHANGES, PROGRESS, or NEW PATTERNS since the last report."
        )

    progress_field = (
        ',\n  "progressSinceLast": "A paragraph comparing progress and changes '
        'since the last insights report"'
        if previous_insight is not None
        else ""
    )

    return (
        f"Analyze these {len(sessions)} personal growth sessions and provide insights. "
        "When referencing specific sessions, use the session type (e.g., \"In your "
        "Therapy Session on Jan 5...\" or \"Your Breathwork sessions show...\") rather "
        "than session numbers. Return ONLY valid JSON with no markdown formatting:\n\n"
        f"{summaries}\n{comparison}\n\n"
        "Return a JSON object with this exact structure:\n"
        "{\n"
        '  "themes": ["theme1", "theme2", "theme3"],\n'
        '  "growthAreas": "A paragraph describing areas where growth is evident",\n'
        '  "patterns": "A paragraph describing recurring patterns or emotional trends",\n'
        '  "breakthroughs": "A paragraph highlighting key moments of clarity or insight",\n'
        '  "recommendations": "A paragraph with specific, actionable next steps"'
        f"{progress_field}\n"
        "}"
    )


__all__ = ["SessionAssistantService", "strip_code_fences"]
