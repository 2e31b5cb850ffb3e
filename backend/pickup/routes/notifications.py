"""WhatsApp notification routes.

Provides endpoints for:
- Sending a single message (person or group) through Green API
- Sending game reminders (group or broadcast)
- Viewing send history (log)
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session, select

from pickup.database import get_session
from pickup.errors import (
    DispatchError,
    NoRecipientsError,
    NotFoundError,
    PersistenceError,
    PickupError,
    SelectionError,
)
from pickup.models.notification_log import NotificationLog
from pickup.services.greenapi_service import GreenApiCredentials, GreenApiService
from pickup.services.reminder_dispatch import dispatch_reminders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["notifications"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class WhatsAppMessageRequest(BaseModel):
    """
    Body of the single-message endpoint. Field names follow the web client.

    All fields are optional. GreenApiService validates them and the route
    answers any rejection with 500 {error}.
    """

    model_config = ConfigDict(populate_by_name=True)

    phone: Optional[str] = None
    group_chat_id: Optional[str] = Field(default=None, alias="groupChatId")
    message: Optional[str] = None
    type: Optional[str] = None
    id_instance: Optional[str] = Field(default=None, alias="idInstance")
    api_token: Optional[str] = Field(default=None, alias="apiToken")


class ReminderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: Optional[str] = Field(default=None, alias="gameId")
    group_chat_id: Optional[str] = Field(default=None, alias="groupChatId")
    id_instance: Optional[str] = Field(default=None, alias="idInstance")
    api_token: Optional[str] = Field(default=None, alias="apiToken")


class ReminderResponse(BaseModel):
    mode: str  # group|broadcast
    sent: int
    message: str
    warnings: List[str]


class NotificationLogResponse(BaseModel):
    """Single notification log entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    target: str
    message: str
    type: str
    status: str
    gateway_response: Optional[Dict[str, Any]] = None
    sent_at: datetime


# ---------------------------------------------------------------------------
# Single message endpoint
# ---------------------------------------------------------------------------


@router.options("/notifications/whatsapp")
def whatsapp_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/notifications/whatsapp")
def send_whatsapp_notification(
    body: WhatsAppMessageRequest,
    session: Session = Depends(get_session),
):
    """Send one message to a phone or a group. Any failure answers 500 {error}."""
    service = GreenApiService(session)
    try:
        outcome = service.send(
            body.message or "",
            phone=body.phone,
            group_chat_id=body.group_chat_id,
            message_type=body.type or "",
            credentials=GreenApiCredentials(
                id_instance=body.id_instance or "",
                api_token=body.api_token or "",
            ),
        )
    except PickupError as e:
        logger.error(f"Error in whatsapp notification endpoint: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)}, headers=CORS_HEADERS)

    content = {"success": True, "messageId": outcome.message_id}
    if outcome.warning:
        content["warning"] = outcome.warning
    return JSONResponse(status_code=200, content=content, headers=CORS_HEADERS)


# ---------------------------------------------------------------------------
# Game reminders
# ---------------------------------------------------------------------------


@router.post("/reminders", response_model=ReminderResponse)
def send_game_reminders(
    body: ReminderRequest,
    session: Session = Depends(get_session),
):
    """Remind a WhatsApp group, or every user with a phone, about a game."""
    try:
        result = dispatch_reminders(
            session,
            body.game_id,
            group_destination=body.group_chat_id,
            credentials=GreenApiCredentials(
                id_instance=body.id_instance or "",
                api_token=body.api_token or "",
            ),
        )
    except SelectionError as e:
        raise HTTPException(400, str(e)) from e
    except NotFoundError as e:
        raise HTTPException(404, "Game not found") from e
    except NoRecipientsError as e:
        logger.warning(f"Reminder for game {body.game_id} not sent: {e}")
        raise HTTPException(409, str(e)) from e
    except DispatchError as e:
        raise HTTPException(502, str(e)) from e
    except PersistenceError as e:
        raise HTTPException(500, "Error sending reminders. Try again.") from e

    return ReminderResponse(
        mode=result.mode,
        sent=result.sent,
        message=result.message,
        warnings=result.warnings,
    )


# ---------------------------------------------------------------------------
# Log endpoint
# ---------------------------------------------------------------------------


@router.get("/notifications/log", response_model=List[NotificationLogResponse])
def get_notification_log(
    limit: int = Query(default=100, le=500),
    message_type: Optional[str] = Query(default=None, alias="type"),
    session: Session = Depends(get_session),
):
    """View notification send history, newest first."""
    query = select(NotificationLog)
    if message_type:
        query = query.where(NotificationLog.type == message_type)
    query = query.order_by(NotificationLog.sent_at.desc(), NotificationLog.id.desc()).limit(limit)  # type: ignore

    return session.exec(query).all()
