"""Nostr Wallet Connect (NIP-47) invoice payment.

Only ``pay_invoice`` is implemented. Requests are kind 23194 events encrypted
with NIP-04 to the wallet service; the wallet answers with a kind 23195 event
that references the request id in an ``e`` tag.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import os
import re
import uuid
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

import websockets
from coincurve import PublicKey, PublicKeyXOnly
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from agentdex.errors import InvalidKeyFormatError, WalletConnectError
from agentdex.nostr.events import SignedRecord, sign_record, verify_record
from agentdex.nostr.keys import SigningKey

KIND_NWC_REQUEST = 23194
KIND_NWC_RESPONSE = 23195
WALLET_CONNECT_SCHEMES = ("nostr+walletconnect", "nostrwalletconnect")
DEFAULT_PAY_TIMEOUT = 60.0

_HEX_PUBKEY_RE = re.compile(r"^[0-9a-f]{64}$")

logger = logging.getLogger("agentdex.nwc")


@dataclass(frozen=True)
class WalletConnectURI:
    wallet_pubkey: str
    relays: tuple[str, ...]
    secret: SigningKey
    lud16: str | None = None


@dataclass(frozen=True)
class PaymentResult:
    preimage: str
    paid: bool = True


def parse_wallet_connect_uri(uri: str) -> WalletConnectURI:
    parts = urlsplit(uri.strip())
    if parts.scheme not in WALLET_CONNECT_SCHEMES:
        raise WalletConnectError("invalid wallet connect URI: unsupported scheme")
    wallet_pubkey = (parts.netloc or parts.path.lstrip("/")).lower()
    if not _HEX_PUBKEY_RE.match(wallet_pubkey):
        raise WalletConnectError("invalid wallet connect URI: wallet pubkey must be 64 hex chars")
    try:
        PublicKeyXOnly(bytes.fromhex(wallet_pubkey))
    except ValueError as exc:
        raise WalletConnectError("invalid wallet connect URI: wallet pubkey is not a valid key") from exc

    query = parse_qs(parts.query)
    relays = tuple(relay for relay in query.get("relay", []) if relay)
    if not relays:
        raise WalletConnectError("invalid wallet connect URI: missing relay")
    secrets = query.get("secret", [])
    if not secrets:
        raise WalletConnectError("invalid wallet connect URI: missing secret")
    try:
        secret = SigningKey(bytes.fromhex(secrets[0]))
    except (ValueError, InvalidKeyFormatError) as exc:
        raise WalletConnectError("invalid wallet connect URI: malformed secret") from exc

    lud16 = query.get("lud16", [None])[0]
    return WalletConnectURI(wallet_pubkey=wallet_pubkey, relays=relays, secret=secret, lud16=lud16)


def _shared_secret(key: SigningKey, peer_pubkey_hex: str) -> bytes:
    peer = PublicKey(b"\x02" + bytes.fromhex(peer_pubkey_hex))
    return peer.multiply(key.secret).format(compressed=True)[1:]


def nip04_encrypt(key: SigningKey, peer_pubkey_hex: str, plaintext: str) -> str:
    iv = os.urandom(16)
    padder = padding.PKCS7(128).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(_shared_secret(key, peer_pubkey_hex)), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return (
        base64.b64encode(ciphertext).decode("ascii")
        + "?iv="
        + base64.b64encode(iv).decode("ascii")
    )


def nip04_decrypt(key: SigningKey, peer_pubkey_hex: str, content: str) -> str:
    try:
        ciphertext_b64, iv_b64 = content.split("?iv=", 1)
        ciphertext = base64.b64decode(ciphertext_b64)
        iv = base64.b64decode(iv_b64)
        decryptor = Cipher(
            algorithms.AES(_shared_secret(key, peer_pubkey_hex)), modes.CBC(iv)
        ).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(128).unpadder()
        return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
    except Exception as exc:
        raise WalletConnectError("could not decrypt wallet response") from exc


def build_pay_request(connection: WalletConnectURI, invoice: str) -> SignedRecord:
    payload = json.dumps({"method": "pay_invoice", "params": {"invoice": invoice}})
    return sign_record(
        connection.secret,
        kind=KIND_NWC_REQUEST,
        tags=[("p", connection.wallet_pubkey)],
        content=nip04_encrypt(connection.secret, connection.wallet_pubkey, payload),
    )


def parse_pay_response(connection: WalletConnectURI, event: SignedRecord) -> PaymentResult:
    plaintext = nip04_decrypt(connection.secret, connection.wallet_pubkey, event.content)
    try:
        body = json.loads(plaintext)
    except ValueError as exc:
        raise WalletConnectError("wallet response is not JSON") from exc
    if not isinstance(body, dict):
        raise WalletConnectError("wallet response is not an object")

    error = body.get("error")
    if error:
        if isinstance(error, dict):
            code = error.get("code") or "ERROR"
            message = error.get("message") or "payment failed"
            raise WalletConnectError(f"{code}: {message}")
        raise WalletConnectError(str(error))

    result = body.get("result") or {}
    preimage = result.get("preimage") if isinstance(result, dict) else None
    if not isinstance(preimage, str) or not preimage:
        raise WalletConnectError("wallet response missing preimage")
    return PaymentResult(preimage=preimage)


def _references(event: SignedRecord, request_id: str) -> bool:
    return any(len(tag) >= 2 and tag[0] == "e" and tag[1] == request_id for tag in event.tags)


async def _exchange(connection: WalletConnectURI, request: SignedRecord, relay: str) -> SignedRecord:
    sub_id = uuid.uuid4().hex[:16]
    subscription = {
        "kinds": [KIND_NWC_RESPONSE],
        "authors": [connection.wallet_pubkey],
        "#e": [request.id],
    }
    async with websockets.connect(relay, close_timeout=2) as ws:
        await ws.send(json.dumps(["REQ", sub_id, subscription]))
        await ws.send(json.dumps(["EVENT", request.to_dict()]))
        while True:
            reply = json.loads(await ws.recv())
            if not isinstance(reply, list) or not reply:
                continue
            if reply[0] == "OK" and len(reply) >= 3 and reply[1] == request.id and reply[2] is False:
                reason = reply[3] if len(reply) > 3 else "rejected"
                raise WalletConnectError(f"relay rejected payment request: {reason}")
            if reply[0] != "EVENT" or len(reply) < 3 or reply[1] != sub_id:
                continue
            try:
                event = SignedRecord.from_dict(reply[2])
            except (KeyError, TypeError, ValueError):
                continue
            if (
                event.kind == KIND_NWC_RESPONSE
                and event.pubkey == connection.wallet_pubkey
                and _references(event, request.id)
                and verify_record(event)
            ):
                return event


async def pay_invoice_async(
    nwc_uri: str,
    invoice: str,
    timeout: float = DEFAULT_PAY_TIMEOUT,
) -> PaymentResult:
    connection = parse_wallet_connect_uri(nwc_uri)
    try:
        request = build_pay_request(connection, invoice)
    except ValueError as exc:
        raise WalletConnectError(f"could not build payment request: {exc}") from exc
    relay = connection.relays[0]
    logger.debug("sending pay_invoice request %s via %s", request.id, relay)
    try:
        response = await asyncio.wait_for(_exchange(connection, request, relay), timeout=timeout)
    except WalletConnectError:
        raise
    except asyncio.TimeoutError as exc:
        raise WalletConnectError(f"no wallet response within {timeout:g}s") from exc
    except Exception as exc:
        raise WalletConnectError(f"wallet relay error: {exc}") from exc
    return parse_pay_response(connection, response)


def auto_pay(nwc_uri: str, invoice: str, timeout: float = DEFAULT_PAY_TIMEOUT) -> PaymentResult:
    """Pay ``invoice`` through the wallet behind ``nwc_uri``.

    Raises WalletConnectError on any failure; callers fall back to manual payment.
    """
    return asyncio.run(pay_invoice_async(nwc_uri, invoice, timeout))
