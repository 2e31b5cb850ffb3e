"""Green API WhatsApp service wrapper.

Thin wrapper around the Green API REST endpoint for sending WhatsApp messages.
Handles single sends, bulk sends, chat id formatting and the notification log.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from pickup.errors import CredentialsMissingError, GatewayError, ValidationError
from pickup.models.notification_log import NOTIFICATION_TYPES, NotificationLog

logger = logging.getLogger(__name__)

DEFAULT_GREEN_API_URL = "https://api.green-api.com"
PERSONAL_CHAT_SUFFIX = "@c.us"
GROUP_TARGET_PREFIX = "GROUP:"


def format_chat_id(phone: str) -> str:
    """
    Turn a phone number into a Green API personal chat id.

    Accepts:
      - 5511999999999
      - +55 (11) 99999-9999
      - 5511999999999@c.us  (already a chat id, domain kept)

    Returns:
      - "5511999999999@c.us"

    Raises:
      - ValidationError if there are no digits to send to
    """
    if not phone or not phone.strip():
        raise ValidationError("Phone number is empty")

    local, _, domain = phone.strip().partition("@")
    digits = re.sub(r"[^\d]", "", local)
    if not digits:
        raise ValidationError(f"Cannot parse phone number: '{phone}'")

    if domain:
        return f"{digits}@{domain}"
    return f"{digits}{PERSONAL_CHAT_SUFFIX}"


def get_contact_chat_ids(contacts: Iterable) -> List[str]:
    """
    Chat ids for every contact with a usable phone number.

    One entry per contact, in order. Blank numbers and numbers without
    digits (e.g. "N/A") are skipped.
    """
    chat_ids = []
    for contact in contacts:
        phone = (contact.phone or "").strip()
        if not phone:
            continue
        try:
            chat_id = format_chat_id(phone)
        except ValidationError:
            logger.warning(f"Skipping invalid phone number on profile {contact.id}: '{phone}'")
            continue
        chat_ids.append(chat_id)
    return chat_ids


@dataclass
class GreenApiCredentials:
    id_instance: str = ""
    api_token: str = ""


def resolve_credentials(override: Optional[GreenApiCredentials] = None) -> GreenApiCredentials:
    """
    Per-call credentials win over GREEN_API_ID_INSTANCE / GREEN_API_ACCESS_TOKEN.

    Each value falls back on its own, so an override may carry just one of them.
    """
    override = override or GreenApiCredentials()
    id_instance = (override.id_instance or "").strip() or os.getenv("GREEN_API_ID_INSTANCE", "").strip()
    api_token = (override.api_token or "").strip() or os.getenv("GREEN_API_ACCESS_TOKEN", "").strip()

    if not id_instance or not api_token:
        raise CredentialsMissingError("Green API credentials not configured")
    return GreenApiCredentials(id_instance=id_instance, api_token=api_token)


@dataclass
class SendOutcome:
    """Result of one accepted message. warning is set when the log write failed."""

    message_id: Optional[str]
    chat_id: str
    logged: bool = True
    warning: Optional[str] = None


class GreenApiService:
    """
    Wrapper around the Green API sendMessage endpoint.

    Reads from environment variables:
      - GREEN_API_URL (default https://api.green-api.com)
      - GREEN_API_TIMEOUT (seconds, default 15)
      - GREEN_API_ID_INSTANCE / GREEN_API_ACCESS_TOKEN (default credentials)

    Every accepted message is written to notification_logs through `db`.
    """

    def __init__(
        self,
        db: Session,
        base_url: Optional[str] = None,
        http: Optional[requests.Session] = None,
    ):
        self.db = db
        self.base_url = (base_url or os.getenv("GREEN_API_URL", DEFAULT_GREEN_API_URL)).rstrip("/")
        self.timeout = float(os.getenv("GREEN_API_TIMEOUT", "15"))
        self.http = http or requests.Session()

    def send(
        self,
        message: str,
        *,
        phone: Optional[str] = None,
        group_chat_id: Optional[str] = None,
        message_type: str = "game_reminder",
        credentials: Optional[GreenApiCredentials] = None,
    ) -> SendOutcome:
        """
        Send one WhatsApp message to a person or a group.

        Args:
            message: Message text
            phone: Recipient phone or personal chat id (normalised)
            group_chat_id: Group chat id, e.g. "120363...@g.us" (sent as-is)
            message_type: booking|system_open|game_reminder
            credentials: Optional per-call override of the default credentials

        Raises:
            ValidationError: not exactly one destination, unknown message_type
                or empty message
            CredentialsMissingError: no credentials resolved
            GatewayError: Green API unreachable or answered non-2xx
        """
        phone = (phone or "").strip()
        group_chat_id = (group_chat_id or "").strip()
        if bool(phone) == bool(group_chat_id):
            raise ValidationError("Either phone or groupChatId must be provided")
        if message_type not in NOTIFICATION_TYPES:
            raise ValidationError(
                f"Invalid type '{message_type}'. Must be one of: {', '.join(NOTIFICATION_TYPES)}"
            )
        if not (message or "").strip():
            raise ValidationError("message is required")

        creds = resolve_credentials(credentials)

        if group_chat_id:
            chat_id = group_chat_id
            target = f"{GROUP_TARGET_PREFIX}{group_chat_id}"
            description = f"group {group_chat_id}"
        else:
            chat_id = format_chat_id(phone)
            target = chat_id
            description = chat_id

        logger.info(f"Sending {message_type} notification to {description}")
        result = self._post_message(creds, chat_id, message)
        message_id = result.get("idMessage")
        logger.info(f"WhatsApp message sent to {description}: idMessage={message_id}")

        warning = self._log(target, message, message_type, result)
        return SendOutcome(
            message_id=message_id,
            chat_id=chat_id,
            logged=warning is None,
            warning=warning,
        )

    def send_bulk(
        self,
        phones: List[str],
        message: str,
        message_type: str = "game_reminder",
        credentials: Optional[GreenApiCredentials] = None,
    ) -> List[SendOutcome]:
        """
        Send the same message to several phones, one request each.

        Stops at the first failure and raises it; messages already sent stay sent.
        """
        outcomes = []
        for phone in phones:
            outcomes.append(
                self.send(
                    message,
                    phone=phone,
                    message_type=message_type,
                    credentials=credentials,
                )
            )
        return outcomes

    def _post_message(self, creds: GreenApiCredentials, chat_id: str, message: str) -> Dict[str, Any]:
        url = f"{self.base_url}/waInstance{creds.id_instance}/sendMessage/{creds.api_token}"
        try:
            response = self.http.post(
                url,
                json={"chatId": chat_id, "message": message},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Green API request to {chat_id} failed: {e}")
            raise GatewayError(f"Green API request failed: {e}", status_code=None, body=str(e)) from e

        if not response.ok:
            logger.error(f"Green API error: {response.status_code} - {response.text}")
            raise GatewayError(
                f"Green API request failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Green API returned non-JSON body: {response.text}")
            raise GatewayError(
                "Green API returned an unreadable response",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def _log(self, target: str, message: str, message_type: str, result: Dict[str, Any]) -> Optional[str]:
        """Write the log row. Returns a warning instead of raising on failure."""
        try:
            self.db.add(
                NotificationLog(
                    target=target,
                    message=message,
                    type=message_type,
                    status="sent",
                    gateway_response=result,
                )
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error logging notification to {target}: {e}")
            return f"Message to {target} was sent but could not be logged"
        return None
