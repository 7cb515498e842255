"""Failure taxonomy shared by the realtime layer and the HTTP routes.

``message`` is what the client sees in an ``error`` event; keep it free of
internal detail.
"""

from __future__ import annotations


class RealtimeError(Exception):
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationFailure(RealtimeError):
    default_message = "Invalid authentication token"


class AuthorizationFailure(RealtimeError):
    default_message = "Not allowed to access this meeting"


class NotFound(RealtimeError):
    default_message = "Meeting not found"


class DependencyUnavailable(RealtimeError):
    default_message = "Service temporarily unavailable"
