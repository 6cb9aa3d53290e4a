"""SDK error types."""

from __future__ import annotations


class AgentdexError(RuntimeError):
    """Base SDK error."""


class InputError(AgentdexError):
    """Bad or missing user input (keys, flags, prompts)."""


class MissingKeyError(InputError):
    """No secret key was supplied by flag, environment or key file."""


class InvalidKeyFormatError(InputError):
    """Secret key is neither an nsec nor 64 hex characters."""


class MalformedKeyFileError(InputError):
    """Key file could not be read or lacks sk_hex/nsec."""


class DirectoryError(AgentdexError):
    """Base error for directory backend calls."""


class DirectoryUnreachableError(DirectoryError):
    """Directory backend could not be reached."""


class DirectoryRequestError(DirectoryError):
    """Directory backend returned an error response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: object | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DirectoryDisabledError(DirectoryRequestError):
    """Directory backend signalled that the operation is disabled (HTTP 503)."""


class PaymentTimeoutError(AgentdexError):
    """Invoice was not paid before the poll window closed."""


class RelayError(AgentdexError):
    """A single relay failed to accept an event."""


class RelayRejectedError(RelayError):
    """Relay answered OK=false."""


class WalletConnectError(AgentdexError):
    """Nostr Wallet Connect payment failed."""
