"""Signed Nostr event builders for agentdex records."""

from __future__ import annotations

import hashlib
import json
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from coincurve import PublicKeyXOnly

from agentdex.nostr.keys import SigningKey

KIND_METADATA = 0
KIND_NOTE = 1
KIND_AGENT_PROFILE = 31339

PROFILE_DISCRIMINATOR = ("d", "agentdex-profile")
NOTE_TOPIC = ("t", "agentdex")


@dataclass(frozen=True)
class PortfolioItem:
    url: str
    name: str | None = None
    description: str | None = None


@dataclass
class AgentProfile:
    name: str | None = None
    description: str | None = None
    capabilities: list[str] = field(default_factory=list)
    framework: str | None = None
    model: str | None = None
    website: str | None = None
    avatar: str | None = None
    lightning: str | None = None
    human: str | None = None
    owner: str | None = None
    status: str | None = None
    messaging_policy: str | None = None
    messaging_min_trust: int | None = None
    messaging_fee: int | None = None
    portfolio: list[PortfolioItem] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    experience: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SignedRecord:
    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: tuple[tuple[str, ...], ...]
    content: str
    sig: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
            "sig": self.sig,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "SignedRecord":
        return cls(
            id=str(payload["id"]),
            pubkey=str(payload["pubkey"]),
            created_at=int(payload["created_at"]),
            kind=int(payload["kind"]),
            tags=tuple(tuple(str(item) for item in tag) for tag in payload.get("tags", [])),
            content=str(payload.get("content", "")),
            sig=str(payload["sig"]),
        )


def _text(value: Any) -> list[tuple[str, ...]]:
    if value is None or value == "":
        return []
    return [(str(value),)]


def _each(values: Iterable[str] | None) -> list[tuple[str, ...]]:
    return [(str(value),) for value in values or () if value]


def _integer(value: int | None) -> list[tuple[str, ...]]:
    if value is None:
        return []
    return [(str(int(value)),)]


def _status(value: str | None) -> list[tuple[str, ...]]:
    if value is None:
        return []
    return [(value or "active",)]


def _portfolio(items: Iterable[PortfolioItem] | None) -> list[tuple[str, ...]]:
    out = []
    for item in items or ():
        values = [item.url]
        if item.name:
            values.append(item.name)
        if item.description:
            values.append(item.description)
        out.append(tuple(values))
    return out


# (profile attribute, tag name, values extractor); order is the wire order.
PROFILE_TAG_RULES: tuple[tuple[str, str, Callable[[Any], list[tuple[str, ...]]]], ...] = (
    ("name", "name", _text),
    ("description", "description", _text),
    ("capabilities", "capability", _each),
    ("framework", "framework", _text),
    ("model", "model", _text),
    ("website", "website", _text),
    ("avatar", "avatar", _text),
    ("human", "human", _text),
    ("owner", "owner", _text),
    ("status", "status", _status),
    ("messaging_policy", "messaging_policy", _text),
    ("messaging_min_trust", "messaging_min_trust", _integer),
    ("messaging_fee", "messaging_fee", _integer),
    ("portfolio", "portfolio", _portfolio),
    ("skills", "skill", _each),
    ("experience", "experience", _each),
)


def profile_tags(profile: AgentProfile) -> list[tuple[str, ...]]:
    tags = [PROFILE_DISCRIMINATOR]
    for attribute, tag_name, extract in PROFILE_TAG_RULES:
        for values in extract(getattr(profile, attribute)):
            tags.append((tag_name, *values))
    return tags


def compute_event_id(
    *,
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Iterable[Iterable[str]],
    content: str,
) -> str:
    serialized = json.dumps(
        [0, pubkey, created_at, kind, [list(tag) for tag in tags], content],
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def sign_record(
    key: SigningKey,
    *,
    kind: int,
    tags: Iterable[Iterable[str]],
    content: str,
    created_at: int | None = None,
) -> SignedRecord:
    frozen_tags = tuple(tuple(str(item) for item in tag) for tag in tags)
    timestamp = int(time.time()) if created_at is None else int(created_at)
    pubkey = key.public_key_hex
    event_id = compute_event_id(
        pubkey=pubkey,
        created_at=timestamp,
        kind=kind,
        tags=frozen_tags,
        content=content,
    )
    signature = key.sign(bytes.fromhex(event_id))
    return SignedRecord(
        id=event_id,
        pubkey=pubkey,
        created_at=timestamp,
        kind=kind,
        tags=frozen_tags,
        content=content,
        sig=signature.hex(),
    )


def verify_record(record: SignedRecord) -> bool:
    expected_id = compute_event_id(
        pubkey=record.pubkey,
        created_at=record.created_at,
        kind=record.kind,
        tags=record.tags,
        content=record.content,
    )
    if expected_id != record.id:
        return False
    try:
        public_key = PublicKeyXOnly(bytes.fromhex(record.pubkey))
        return bool(public_key.verify(bytes.fromhex(record.sig), bytes.fromhex(record.id)))
    except ValueError:
        return False


def build_profile_record(
    key: SigningKey,
    profile: AgentProfile,
    *,
    created_at: int | None = None,
) -> SignedRecord:
    """Build the kind 31339 agent profile record.

    Only populated profile fields produce tags; absent fields never emit an
    empty placeholder. ``lightning`` is carried by the metadata record.
    """
    return sign_record(
        key,
        kind=KIND_AGENT_PROFILE,
        tags=profile_tags(profile),
        content="",
        created_at=created_at,
    )


def build_note_record(
    key: SigningKey,
    content: str,
    *,
    created_at: int | None = None,
) -> SignedRecord:
    return sign_record(
        key,
        kind=KIND_NOTE,
        tags=[NOTE_TOPIC],
        content=content,
        created_at=created_at,
    )


def build_metadata_record(
    key: SigningKey,
    *,
    name: str,
    about: str | None = None,
    nip05: str | None = None,
    picture: str | None = None,
    lud16: str | None = None,
    owner_pubkey: str | None = None,
    bot: bool = False,
    extra: dict | None = None,
    created_at: int | None = None,
) -> SignedRecord:
    """Build a kind 0 metadata record.

    ``extra`` holds fields of a previously published metadata record; explicit
    arguments win over it.
    """
    metadata: dict[str, Any] = dict(extra or {})
    metadata["name"] = name
    for field_name, value in (
        ("about", about),
        ("nip05", nip05),
        ("picture", picture),
        ("lud16", lud16),
    ):
        if value:
            metadata[field_name] = value

    tags: list[tuple[str, ...]] = []
    if bot:
        tags.append(("bot",))
    if owner_pubkey:
        tags.append(("p", owner_pubkey, "", "owner"))

    return sign_record(
        key,
        kind=KIND_METADATA,
        tags=tags,
        content=json.dumps(metadata, separators=(",", ":"), ensure_ascii=False),
        created_at=created_at,
    )
