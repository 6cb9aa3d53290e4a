from __future__ import annotations

import asyncio

from agentdex.errors import RelayRejectedError
from agentdex.nostr import relays as relays_module
from agentdex.nostr.events import KIND_METADATA, build_metadata_record, build_note_record
from agentdex.nostr.keys import parse_secret_key
from agentdex.nostr.relays import (
    DEFAULT_RELAYS,
    fetch_latest,
    publish,
    resolve_relays,
)

KEY = parse_secret_key("22" * 32)


def test_resolve_relays_appends_to_defaults() -> None:
    relays = resolve_relays(["wss://extra.example"], ["wss://nos.lol", "wss://cli.example"])
    assert relays == [*DEFAULT_RELAYS, "wss://extra.example", "wss://cli.example"]


def test_resolve_relays_without_extras_is_defaults() -> None:
    assert resolve_relays() == list(DEFAULT_RELAYS)
    assert resolve_relays(None, []) == list(DEFAULT_RELAYS)


def test_publish_returns_only_succeeding_relays(monkeypatch) -> None:
    failing = {"wss://down.example", "wss://reject.example"}
    attempted: list[str] = []

    async def fake_publish_one(relay, record, timeout):  # noqa: ANN001
        attempted.append(relay)
        if relay == "wss://reject.example":
            raise RelayRejectedError("blocked: spam")
        if relay in failing:
            raise OSError("connection refused")
        return relay

    monkeypatch.setattr(relays_module, "_publish_one", fake_publish_one)

    targets = ["wss://a.example", "wss://down.example", "wss://b.example", "wss://reject.example"]
    published = publish(build_note_record(KEY, "hi"), targets, timeout=1.0)

    assert sorted(published) == ["wss://a.example", "wss://b.example"]
    assert sorted(attempted) == sorted(targets)


def test_publish_all_failing_returns_empty_list(monkeypatch) -> None:
    async def fake_publish_one(relay, record, timeout):  # noqa: ANN001
        raise OSError("unreachable")

    monkeypatch.setattr(relays_module, "_publish_one", fake_publish_one)

    assert publish(build_note_record(KEY, "hi"), list(DEFAULT_RELAYS), timeout=1.0) == []


def test_slow_relay_times_out_without_blocking_others(monkeypatch) -> None:
    async def fake_publish_one(relay, record, timeout):  # noqa: ANN001
        if relay == "wss://slow.example":
            await asyncio.sleep(5)
        return relay

    monkeypatch.setattr(relays_module, "_publish_one", fake_publish_one)

    published = publish(
        build_note_record(KEY, "hi"),
        ["wss://slow.example", "wss://fast.example"],
        timeout=0.05,
    )
    assert published == ["wss://fast.example"]


def test_publish_with_no_relays_is_empty() -> None:
    assert publish(build_note_record(KEY, "hi"), [], timeout=1.0) == []


def test_fetch_latest_picks_newest_valid_event(monkeypatch) -> None:
    older = build_metadata_record(KEY, name="old", created_at=100)
    newer = build_metadata_record(KEY, name="new", created_at=200)
    forged = build_metadata_record(KEY, name="forged", created_at=300)
    forged_dict = forged.to_dict()
    forged_dict["content"] = '{"name":"evil"}'

    async def fake_query_one(relay, subscription, timeout):  # noqa: ANN001
        assert subscription["kinds"] == [KIND_METADATA]
        assert subscription["authors"] == [KEY.public_key_hex]
        if relay == "wss://a.example":
            return [older, relays_module.SignedRecord.from_dict(forged_dict)]
        if relay == "wss://b.example":
            return [newer]
        raise OSError("down")

    monkeypatch.setattr(relays_module, "_query_one", fake_query_one)

    latest = fetch_latest(
        ["wss://a.example", "wss://b.example", "wss://c.example"],
        kind=KIND_METADATA,
        author=KEY.public_key_hex,
        timeout=1.0,
    )
    assert latest == newer


def test_fetch_latest_returns_none_when_nothing_found(monkeypatch) -> None:
    async def fake_query_one(relay, subscription, timeout):  # noqa: ANN001
        return []

    monkeypatch.setattr(relays_module, "_query_one", fake_query_one)

    assert fetch_latest(["wss://a.example"], kind=KIND_METADATA, author=KEY.public_key_hex) is None
