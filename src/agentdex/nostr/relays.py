"""Relay fan-out: publish signed records and query the latest event."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Iterable, Sequence

import websockets

from agentdex.errors import RelayError, RelayRejectedError
from agentdex.nostr.events import SignedRecord, verify_record

DEFAULT_RELAYS: tuple[str, ...] = ("wss://nos.lol", "wss://relay.damus.io")
DEFAULT_PUBLISH_TIMEOUT = 10.0
DEFAULT_QUERY_TIMEOUT = 5.0

logger = logging.getLogger("agentdex.relays")


def resolve_relays(*groups: Iterable[str] | None) -> list[str]:
    """Default relays first, then each group in order, de-duplicated."""
    relays: list[str] = []
    for group in (DEFAULT_RELAYS, *groups):
        for relay in group or ():
            candidate = relay.strip()
            if candidate and candidate not in relays:
                relays.append(candidate)
    return relays


async def _publish_one(relay: str, record: SignedRecord, timeout: float) -> str:
    message = json.dumps(["EVENT", record.to_dict()], ensure_ascii=False)
    async with websockets.connect(relay, open_timeout=timeout, close_timeout=2) as ws:
        await ws.send(message)
        while True:
            raw = await ws.recv()
            try:
                reply = json.loads(raw)
            except (TypeError, ValueError):
                continue
            if not isinstance(reply, list) or not reply:
                continue
            if reply[0] == "OK" and len(reply) >= 3 and reply[1] == record.id:
                if reply[2] is True:
                    return relay
                reason = reply[3] if len(reply) > 3 else "rejected"
                raise RelayRejectedError(f"{relay} rejected event: {reason}")
            if reply[0] == "NOTICE" and len(reply) > 1:
                logger.debug("notice from %s: %s", relay, reply[1])


async def _publish_with_timeout(relay: str, record: SignedRecord, timeout: float) -> str:
    try:
        return await asyncio.wait_for(_publish_one(relay, record, timeout), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise RelayError(f"{relay} timed out after {timeout:g}s") from exc


async def publish_to_relays(
    record: SignedRecord,
    relays: Sequence[str],
    timeout: float = DEFAULT_PUBLISH_TIMEOUT,
) -> list[str]:
    """Publish ``record`` to every relay concurrently.

    Returns the relays that acknowledged the event, in input order. Individual
    relay failures are logged and dropped; this never raises for them.
    """
    targets = list(dict.fromkeys(relay for relay in relays if relay))
    if not targets:
        return []

    results = await asyncio.gather(
        *(_publish_with_timeout(relay, record, timeout) for relay in targets),
        return_exceptions=True,
    )

    published: list[str] = []
    for relay, result in zip(targets, results):
        if isinstance(result, BaseException):
            logger.warning("publish to %s failed: %s", relay, result)
            continue
        published.append(relay)
    return published


def publish(
    record: SignedRecord,
    relays: Sequence[str],
    timeout: float = DEFAULT_PUBLISH_TIMEOUT,
) -> list[str]:
    return asyncio.run(publish_to_relays(record, relays, timeout))


async def _query_one(relay: str, subscription: dict, timeout: float) -> list[SignedRecord]:
    sub_id = uuid.uuid4().hex[:16]
    events: list[SignedRecord] = []
    async with websockets.connect(relay, open_timeout=timeout, close_timeout=2) as ws:
        await ws.send(json.dumps(["REQ", sub_id, subscription]))
        while True:
            reply = json.loads(await ws.recv())
            if not isinstance(reply, list) or len(reply) < 2 or reply[1] != sub_id:
                continue
            if reply[0] == "EOSE":
                break
            if reply[0] == "CLOSED":
                break
            if reply[0] == "EVENT" and len(reply) >= 3:
                try:
                    events.append(SignedRecord.from_dict(reply[2]))
                except (KeyError, TypeError, ValueError):
                    continue
        await ws.send(json.dumps(["CLOSE", sub_id]))
    return events


async def fetch_latest_event(
    relays: Sequence[str],
    *,
    kind: int,
    author: str,
    timeout: float = DEFAULT_QUERY_TIMEOUT,
) -> SignedRecord | None:
    """Newest valid event of ``kind`` by ``author`` across relays, or None."""
    subscription = {"kinds": [kind], "authors": [author], "limit": 1}
    targets = list(dict.fromkeys(relays))
    results = await asyncio.gather(
        *(asyncio.wait_for(_query_one(relay, subscription, timeout), timeout) for relay in targets),
        return_exceptions=True,
    )

    newest: SignedRecord | None = None
    for relay, result in zip(targets, results):
        if isinstance(result, BaseException):
            logger.warning("query to %s failed: %s", relay, result)
            continue
        for event in result:
            if event.kind != kind or event.pubkey != author or not verify_record(event):
                continue
            if newest is None or event.created_at > newest.created_at:
                newest = event
    return newest


def fetch_latest(
    relays: Sequence[str],
    *,
    kind: int,
    author: str,
    timeout: float = DEFAULT_QUERY_TIMEOUT,
) -> SignedRecord | None:
    return asyncio.run(fetch_latest_event(relays, kind=kind, author=author, timeout=timeout))
