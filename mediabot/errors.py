"""Error taxonomy shared by both command flows.

Every error is terminal for the current request; command handlers turn
them into a short chat reply.
"""

from __future__ import annotations


class MediaBotError(Exception):
    """Base class for all mediabot errors."""


class MissingInputError(MediaBotError):
    """Required user input (image, prompt, URL) is absent."""


class InvalidOptionError(MediaBotError):
    """User supplied an option outside the accepted set."""


class UpstreamTimeoutError(MediaBotError):
    """A remote wait (OTP mail, job status) exceeded its budget."""


class UpstreamFailureError(MediaBotError):
    """Remote service reported failure or returned an unusable payload."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TransportFailureError(MediaBotError):
    """Remote host unreachable or erroring after the documented fallback."""
