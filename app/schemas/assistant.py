"""Request and response models for the session assistant endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TodoGenerationRequest(_WireModel):
    session_type: str = Field(..., alias="sessionType")
    session_date: str = Field(..., alias="sessionDate")
    session_notes: str = Field(..., alias="sessionNotes")


class TodoSuggestion(_WireModel):
    """A single action item proposed by the model."""

    title: str
    description: str = ""
    priority: str = "medium"
    due_date: str = Field(..., alias="dueDate", description="YYYY-MM-DD")


class TodoGenerationResponse(_WireModel):
    todos: list[TodoSuggestion]


class TextExtractionRequest(_WireModel):
    image: str = Field(..., min_length=1, description="Base64-encoded image bytes.")
    mime_type: str = Field(..., alias="mimeType")


class TextExtractionResponse(_WireModel):
    text: str


class SessionSummary(_WireModel):
    type: str
    date: str
    notes: str = ""


class PreviousInsight(_WireModel):
    """The last insights report, used to ask the model for progress."""

    session_count: Optional[int] = Field(None, alias="sessionCount")
    themes: list[str] = Field(default_factory=list)
    patterns: str = ""


class InsightRequest(_WireModel):
    sessions: list[SessionSummary] = Field(..., min_length=1)
    previous_insight: Optional[PreviousInsight] = Field(None, alias="previousInsight")


class InsightReport(_WireModel):
    themes: list[str] = Field(default_factory=list)
    growth_areas: str = Field("", alias="growthAreas")
    patterns: str = ""
    breakthroughs: str = ""
    recommendations: str = ""
    progress_since_last: Optional[str] = Field(None, alias="progressSinceLast")


class InsightResponse(_WireModel):
    insights: InsightReport


__all__ = [
    "InsightReport",
    "InsightRequest",
    "InsightResponse",
    "PreviousInsight",
    "SessionSummary",
    "TextExtractionRequest",
    "TextExtractionResponse",
    "TodoGenerationRequest",
    "TodoGenerationResponse",
    "TodoSuggestion",
]
