"""
Pydantic models for the calendar sync endpoint.

Field names follow the front-end's camelCase wire format through aliases.
"""

from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TodoItem(_WireModel):
    """An action item as stored by the front-end."""

    id: Optional[Union[str, int]] = Field(
        None, description="Front-end identifier echoed back in create results."
    )
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: Optional[str] = Field(None, description="high, medium, or low.")
    due_date: date = Field(..., alias="dueDate")


class CalendarActionRequest(_WireModel):
    """Body of ``POST /api/google-calendar``."""

    user_id: Optional[str] = Field(None, alias="userId")
    action: Optional[str] = None
    todos: Optional[list[TodoItem]] = None
    session_type: Optional[str] = Field(None, alias="sessionType")
    google_event_id: Optional[str] = Field(None, alias="googleEventId")
    todo: Optional[TodoItem] = None


class CreatedEvent(_WireModel):
    todo_id: Optional[Union[str, int]] = Field(None, alias="todoId")
    google_event_id: str = Field(..., alias="googleEventId")
    html_link: Optional[str] = Field(None, alias="htmlLink")


__all__ = ["CalendarActionRequest", "CreatedEvent", "TodoItem"]
