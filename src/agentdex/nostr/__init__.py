from agentdex.nostr.events import (
    KIND_AGENT_PROFILE,
    KIND_METADATA,
    KIND_NOTE,
    AgentProfile,
    PortfolioItem,
    SignedRecord,
    build_metadata_record,
    build_note_record,
    build_profile_record,
    verify_record,
)
from agentdex.nostr.keys import (
    SigningKey,
    decode_npub,
    encode_npub,
    normalize_public_id,
    parse_secret_key,
)
from agentdex.nostr.relays import DEFAULT_RELAYS, publish, publish_to_relays, resolve_relays

__all__ = [
    "KIND_AGENT_PROFILE",
    "KIND_METADATA",
    "KIND_NOTE",
    "AgentProfile",
    "PortfolioItem",
    "SignedRecord",
    "build_metadata_record",
    "build_note_record",
    "build_profile_record",
    "verify_record",
    "SigningKey",
    "decode_npub",
    "encode_npub",
    "normalize_public_id",
    "parse_secret_key",
    "DEFAULT_RELAYS",
    "publish",
    "publish_to_relays",
    "resolve_relays",
]
