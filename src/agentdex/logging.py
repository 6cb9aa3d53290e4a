"""Logging setup for the agentdex CLI and SDK.

All loggers live under the ``agentdex`` namespace. Records pass through a
formatter that masks secret keys and credentials before they are written.
"""

import logging
import re

_root_logger = logging.getLogger("agentdex")

_SENSITIVE_FIELDS = (
    "nsec",
    "sk_hex",
    "secret",
    "token",
    "authorization",
    "api_key",
)

_SENSITIVE_PATTERNS = [
    (re.compile(r"nsec1[02-9ac-hj-np-z]{20,}"), "nsec1[REDACTED]"),
    (re.compile(r"nostr\+?walletconnect://\S+"), "nostr+walletconnect://[REDACTED]"),
    (re.compile(r"(?i)(bearer\s+)\S+"), r"\1[REDACTED]"),
    (re.compile(r"(?i)([?&](?:secret|token|api_key)=)([^&\s]+)"), r"\1[REDACTED]"),
]


def redact(value: str) -> str:
    redacted = value
    for pattern, replacement in _SENSITIVE_PATTERNS:
        redacted = pattern.sub(replacement, redacted)
    for field in _SENSITIVE_FIELDS:
        redacted = re.sub(
            rf"(?i)(\b{field}\s*[=:]\s*)([^,\s]+)",
            r"\1[REDACTED]",
            redacted,
        )
    return redacted


class RedactingFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return redact(super().format(record))


def configure_logging(
    level: int = logging.WARNING,
    handler: logging.Handler | None = None,
    format_string: str = "%(levelname)s %(name)s: %(message)s",
) -> None:
    """Attach a single redacting handler to the ``agentdex`` logger.

    Calling this again replaces the previously installed handler.
    """
    if handler is None:
        handler = logging.StreamHandler()
    handler.setFormatter(RedactingFormatter(format_string))

    for existing in list(_root_logger.handlers):
        if getattr(existing, "_agentdex_handler", False):
            _root_logger.removeHandler(existing)
    handler._agentdex_handler = True  # type: ignore[attr-defined]

    _root_logger.addHandler(handler)
    _root_logger.setLevel(level)
