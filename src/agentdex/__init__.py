"""agentdex SDK public surface."""

from agentdex.client import AgentdexClient
from agentdex.errors import (
    AgentdexError,
    DirectoryDisabledError,
    DirectoryError,
    DirectoryRequestError,
    DirectoryUnreachableError,
    InputError,
    InvalidKeyFormatError,
    MalformedKeyFileError,
    MissingKeyError,
    PaymentTimeoutError,
    RelayError,
    RelayRejectedError,
    WalletConnectError,
)
from agentdex.nostr.events import (
    AgentProfile,
    PortfolioItem,
    SignedRecord,
    build_metadata_record,
    build_note_record,
    build_profile_record,
    verify_record,
)
from agentdex.nostr.keys import SigningKey, encode_npub, normalize_public_id, parse_secret_key
from agentdex.nostr.relays import DEFAULT_RELAYS, publish, publish_to_relays
from agentdex.nwc import PaymentResult, auto_pay
from agentdex.payments import Paid, TimedOut, await_payment
from agentdex.schemas import (
    AgentSummary,
    NameCheckResult,
    PaymentRequired,
    PaymentStatus,
    PendingPayment,
    SearchFilter,
    Submitted,
    VerifyResult,
)

__all__ = [
    "AgentdexClient",
    "AgentdexError",
    "InputError",
    "MissingKeyError",
    "InvalidKeyFormatError",
    "MalformedKeyFileError",
    "DirectoryError",
    "DirectoryUnreachableError",
    "DirectoryRequestError",
    "DirectoryDisabledError",
    "PaymentTimeoutError",
    "RelayError",
    "RelayRejectedError",
    "WalletConnectError",
    "AgentProfile",
    "PortfolioItem",
    "SignedRecord",
    "build_profile_record",
    "build_note_record",
    "build_metadata_record",
    "verify_record",
    "SigningKey",
    "parse_secret_key",
    "encode_npub",
    "normalize_public_id",
    "DEFAULT_RELAYS",
    "publish",
    "publish_to_relays",
    "PaymentResult",
    "auto_pay",
    "Paid",
    "TimedOut",
    "await_payment",
    "AgentSummary",
    "NameCheckResult",
    "PaymentRequired",
    "PaymentStatus",
    "PendingPayment",
    "SearchFilter",
    "Submitted",
    "VerifyResult",
]
