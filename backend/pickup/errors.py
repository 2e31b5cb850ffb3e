"""Exceptions raised by the service layer.

Routers translate these into HTTP responses; services never raise
HTTPException themselves.
"""

from typing import Optional


class PickupError(Exception):
    """Base exception for schedule and notification errors"""
    pass


class ValidationError(PickupError):
    """A required schedule field is missing"""
    pass


class NotFoundError(PickupError):
    """Referenced record does not exist"""
    pass


class PersistenceError(PickupError):
    """The database rejected the operation or could not be reached"""
    pass


class SelectionError(PickupError):
    """No game was selected for a reminder"""
    pass


class CredentialsMissingError(PickupError):
    """Neither per-call nor default Green API credentials are set"""
    pass


class GatewayError(PickupError):
    """Green API answered with a non-success status (or was unreachable)."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NoRecipientsError(PickupError):
    """Broadcast had nobody to send to. Reported as a warning, not a failure."""
    pass


class DispatchError(PickupError):
    """Sending reminders failed part-way or entirely"""
    pass
