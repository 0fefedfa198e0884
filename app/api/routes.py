"""
FastAPI routes for the Virgil backend.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from app.clients.google_auth import OAuthTokenExchangeError
from app.dependencies import (
    get_app_settings,
    get_calendar_sync_service,
    get_google_oauth_client,
    get_google_token_service,
    get_session_assistant_service,
)
from app.schemas import (
    CalendarActionRequest,
    InsightRequest,
    InsightResponse,
    TextExtractionRequest,
    TextExtractionResponse,
    TodoGenerationRequest,
    TodoGenerationResponse,
)
from app.services.errors import InvalidInputError

router = APIRouter()
logger = logging.getLogger(__name__)

_OUTCOME_PARAM = "google_calendar"


def _outcome_url(settings: Any, outcome: str) -> str:
    """Front-end URL carrying the OAuth outcome flag (connected/denied/error)."""
    base = httpx.URL(str(settings.frontend_base_url))
    return str(base.copy_merge_params({_OUTCOME_PARAM: outcome}))


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/google-auth")
async def start_google_oauth_flow(
    oauth_client: Annotated[Any, Depends(get_google_oauth_client)],
    user_id: str | None = Query(
        default=None,
        alias="userId",
        description="User identifier echoed back through the OAuth state.",
    ),
) -> RedirectResponse:
    """Send the browser to Google's consent screen for calendar access."""
    if not user_id:
        raise InvalidInputError("Missing userId parameter")

    authorization_url = oauth_client.build_authorization_url(state=user_id)
    return RedirectResponse(url=authorization_url, status_code=HTTPStatus.FOUND)


@router.get("/google-callback")
async def handle_google_oauth_callback(
    oauth_client: Annotated[Any, Depends(get_google_oauth_client)],
    token_service: Annotated[Any, Depends(get_google_token_service)],
    settings: Annotated[Any, Depends(get_app_settings)],
    code: str | None = Query(default=None, description="Authorization code."),
    state: str | None = Query(default=None, description="User identifier."),
    error: str | None = Query(default=None, description="Set when consent is denied."),
) -> RedirectResponse:
    """Exchange the authorization code, store tokens, and return to the front-end."""
    if error:
        logger.info("Google consent denied: %s", error)
        return RedirectResponse(
            url=_outcome_url(settings, "denied"), status_code=HTTPStatus.FOUND
        )

    if not code or not state:
        raise InvalidInputError("Missing code or userId")

    try:
        grant = await oauth_client.exchange_authorization_code(code)
        token_service.connect(user_id=state, grant=grant)
    except OAuthTokenExchangeError as exc:
        logger.error("Google OAuth token exchange failed for user %s: %s", state, exc)
        return RedirectResponse(
            url=_outcome_url(settings, "error"), status_code=HTTPStatus.FOUND
        )
    except Exception:
        logger.exception("Google OAuth callback error for user %s", state)
        return RedirectResponse(
            url=_outcome_url(settings, "error"), status_code=HTTPStatus.FOUND
        )

    return RedirectResponse(
        url=_outcome_url(settings, "connected"), status_code=HTTPStatus.FOUND
    )


@router.post("/google-calendar", status_code=HTTPStatus.OK)
async def google_calendar(
    payload: CalendarActionRequest,
    service: Annotated[Any, Depends(get_calendar_sync_service)],
) -> dict:
    """Create, update, delete, or check calendar events for action items."""
    return await service.handle(payload)


@router.post("/generate-todos", response_model=TodoGenerationResponse)
async def generate_todos(
    payload: TodoGenerationRequest,
    assistant: Annotated[Any, Depends(get_session_assistant_service)],
) -> TodoGenerationResponse:
    todos = await assistant.generate_todos(
        session_type=payload.session_type,
        session_date=payload.session_date,
        session_notes=payload.session_notes,
    )
    return TodoGenerationResponse(todos=todos)


@router.post("/extract-text", response_model=TextExtractionResponse)
async def extract_text(
    payload: TextExtractionRequest,
    assistant: Annotated[Any, Depends(get_session_assistant_service)],
) -> TextExtractionResponse:
    """Transcribe printed or handwritten notes from an uploaded image."""
    text = await assistant.extract_text(
        image_b64=payload.image, mime_type=payload.mime_type
    )
    return TextExtractionResponse(text=text)


@router.post(
    "/generate-insights",
    response_model=InsightResponse,
    response_model_exclude_none=True,
)
async def generate_insights(
    payload: InsightRequest,
    assistant: Annotated[Any, Depends(get_session_assistant_service)],
) -> InsightResponse:
    """Summarize recent sessions into themes, patterns, and recommendations."""
    insights = await assistant.generate_insights(
        sessions=payload.sessions,
        previous_insight=payload.previous_insight,
    )
    return InsightResponse(insights=insights)
