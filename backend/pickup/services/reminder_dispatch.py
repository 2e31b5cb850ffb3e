"""
Game reminder dispatch.

An admin picks one upcoming dated game and sends a reminder either to a
single WhatsApp group or to every profile with a phone number, never both.
Everything the flow needs (game id, group, credentials) is passed in; the
outcome is returned as a DispatchResult.

Broadcasts are not atomic: if Green API fails part-way, the recipients
already messaged stay messaged and the rest are skipped.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlmodel import Session

from pickup.errors import (
    CredentialsMissingError,
    DispatchError,
    GatewayError,
    NoRecipientsError,
    NotFoundError,
    SelectionError,
)
from pickup.models.game_schedule import GameSchedule
from pickup.services import schedule_store
from pickup.services.greenapi_service import (
    GreenApiCredentials,
    GreenApiService,
    SendOutcome,
    get_contact_chat_ids,
)
from pickup.services.notification_templates import (
    DEFAULT_NOTIFICATION_TEMPLATES,
    render_template,
)
from pickup.utils.game_time import format_reminder_date

logger = logging.getLogger(__name__)

MODE_GROUP = "group"
MODE_BROADCAST = "broadcast"


@dataclass
class DispatchResult:
    mode: str  # group|broadcast
    sent: int
    message: str  # Short summary for the admin
    warnings: List[str] = field(default_factory=list)


def list_reminder_candidates(session: Session, today: Optional[date] = None) -> List[GameSchedule]:
    """Games a reminder can be sent for: dated, from today on, earliest first."""
    return schedule_store.list_upcoming_dated(session, today or date.today())


def build_reminder_message(game: GameSchedule) -> str:
    return render_template(
        DEFAULT_NOTIFICATION_TEMPLATES["game_reminder"],
        title=game.title,
        date=format_reminder_date(game.game_date),
        time=game.game_time,
        location=game.location,
    )


def dispatch_reminders(
    session: Session,
    game_id: Optional[str],
    group_destination: Optional[str] = None,
    credentials: Optional[GreenApiCredentials] = None,
    gateway: Optional[GreenApiService] = None,
    today: Optional[date] = None,
) -> DispatchResult:
    """
    Send the reminder for one game.

    Raises:
        SelectionError: no game_id given
        NotFoundError: game_id is not among the reminder candidates
        NoRecipientsError: broadcast mode and nobody has a usable phone
        DispatchError: Green API (or its credentials) failed
        PersistenceError: the database could not be read
    """
    if not game_id or not str(game_id).strip():
        raise SelectionError("Select a game to send reminders for")

    candidates = list_reminder_candidates(session, today)
    game = next((g for g in candidates if g.id == game_id), None)
    if game is None:
        raise NotFoundError(f"Game {game_id} not found")

    message = build_reminder_message(game)
    gateway = gateway or GreenApiService(session)
    group = (group_destination or "").strip()

    if group:
        outcomes = _send(
            lambda: [
                gateway.send(
                    message,
                    group_chat_id=group,
                    message_type="game_reminder",
                    credentials=credentials,
                )
            ]
        )
        return DispatchResult(
            mode=MODE_GROUP,
            sent=len(outcomes),
            message="Reminder sent to group",
            warnings=_warnings(outcomes),
        )

    contacts = schedule_store.list_contacts_with_phone(session)
    if not contacts:
        raise NoRecipientsError("No registered users with a phone number")

    chat_ids = get_contact_chat_ids(contacts)
    if not chat_ids:
        raise NoRecipientsError("No valid phone numbers found")

    outcomes = _send(
        lambda: gateway.send_bulk(
            chat_ids,
            message,
            message_type="game_reminder",
            credentials=credentials,
        )
    )
    return DispatchResult(
        mode=MODE_BROADCAST,
        sent=len(outcomes),
        message=f"{len(outcomes)} reminders sent",
        warnings=_warnings(outcomes),
    )


def _send(do_send) -> List[SendOutcome]:
    try:
        return do_send()
    except (GatewayError, CredentialsMissingError) as e:
        logger.error(f"Error sending reminders: {e}")
        raise DispatchError("Error sending reminders. Try again.") from e


def _warnings(outcomes: List[SendOutcome]) -> List[str]:
    return [o.warning for o in outcomes if o.warning]
