"""Public schema exports."""

from .assistant import (
    InsightReport,
    InsightRequest,
    InsightResponse,
    PreviousInsight,
    SessionSummary,
    TextExtractionRequest,
    TextExtractionResponse,
    TodoGenerationRequest,
    TodoGenerationResponse,
    TodoSuggestion,
)
from .calendar import CalendarActionRequest, CreatedEvent, TodoItem

__all__ = [
    "CalendarActionRequest",
    "CreatedEvent",
    "InsightReport",
    "InsightRequest",
    "InsightResponse",
    "PreviousInsight",
    "SessionSummary",
    "TextExtractionRequest",
    "TextExtractionResponse",
    "TodoGenerationRequest",
    "TodoGenerationResponse",
    "TodoItem",
    "TodoSuggestion",
]
