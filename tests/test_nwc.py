from __future__ import annotations

import asyncio
import json

import pytest

from agentdex import nwc
from agentdex.errors import WalletConnectError
from agentdex.nostr.events import sign_record, verify_record
from agentdex.nostr.keys import parse_secret_key
from agentdex.nwc import (
    KIND_NWC_REQUEST,
    KIND_NWC_RESPONSE,
    auto_pay,
    build_pay_request,
    nip04_decrypt,
    nip04_encrypt,
    parse_pay_response,
    parse_wallet_connect_uri,
)

CLIENT_SECRET = "11" * 32
WALLET = parse_secret_key("22" * 32)
OFF_CURVE_PUBKEY = "00" * 32


def _uri(**overrides: str) -> str:
    params = {"relay": "wss://relay.example.com", "secret": CLIENT_SECRET}
    params.update(overrides)
    query = "&".join(f"{key}={value}" for key, value in params.items() if value)
    return f"nostr+walletconnect://{WALLET.public_key_hex}?{query}"


def _wallet_reply(connection, request_id: str, body: dict):
    content = nip04_encrypt(WALLET, connection.secret.public_key_hex, json.dumps(body))
    return sign_record(
        WALLET,
        kind=KIND_NWC_RESPONSE,
        tags=[("e", request_id), ("p", connection.secret.public_key_hex)],
        content=content,
    )


def test_parse_wallet_connect_uri() -> None:
    connection = parse_wallet_connect_uri(_uri(lud16="bot@getalby.com"))

    assert connection.wallet_pubkey == WALLET.public_key_hex
    assert connection.relays == ("wss://relay.example.com",)
    assert connection.secret.secret_hex == CLIENT_SECRET
    assert connection.lud16 == "bot@getalby.com"


@pytest.mark.parametrize(
    ("uri", "message"),
    [
        ("https://example.com?relay=wss://r&secret=" + CLIENT_SECRET, "unsupported scheme"),
        ("nostr+walletconnect://abc?relay=wss://r&secret=" + CLIENT_SECRET, "64 hex"),
        (f"nostr+walletconnect://{WALLET.public_key_hex}?secret={CLIENT_SECRET}", "missing relay"),
        (f"nostr+walletconnect://{WALLET.public_key_hex}?relay=wss://r", "missing secret"),
        (f"nostr+walletconnect://{WALLET.public_key_hex}?relay=wss://r&secret=zz", "malformed secret"),
        (
            f"nostr+walletconnect://{OFF_CURVE_PUBKEY}?relay=wss://r&secret={CLIENT_SECRET}",
            "not a valid key",
        ),
    ],
)
def test_parse_wallet_connect_uri_rejects_bad_input(uri: str, message: str) -> None:
    with pytest.raises(WalletConnectError, match=message):
        parse_wallet_connect_uri(uri)


def test_nip04_shared_secret_is_symmetric() -> None:
    alice = parse_secret_key("33" * 32)
    bob = parse_secret_key("44" * 32)

    ciphertext = nip04_encrypt(alice, bob.public_key_hex, "pay me")

    assert "?iv=" in ciphertext
    assert nip04_decrypt(bob, alice.public_key_hex, ciphertext) == "pay me"


def test_nip04_decrypt_rejects_malformed_content() -> None:
    alice = parse_secret_key("33" * 32)
    bob = parse_secret_key("44" * 32)

    with pytest.raises(WalletConnectError, match="could not decrypt"):
        nip04_decrypt(bob, alice.public_key_hex, "no-iv-here")


def test_build_pay_request_is_signed_and_encrypted() -> None:
    connection = parse_wallet_connect_uri(_uri())

    request = build_pay_request(connection, "lnbc1invoice")

    assert request.kind == KIND_NWC_REQUEST
    assert request.pubkey == connection.secret.public_key_hex
    assert request.tags == (("p", WALLET.public_key_hex),)
    assert "lnbc1invoice" not in request.content
    assert verify_record(request)
    plaintext = nip04_decrypt(WALLET, connection.secret.public_key_hex, request.content)
    assert json.loads(plaintext) == {"method": "pay_invoice", "params": {"invoice": "lnbc1invoice"}}


def test_parse_pay_response_returns_preimage() -> None:
    connection = parse_wallet_connect_uri(_uri())
    reply = _wallet_reply(
        connection,
        "req-1",
        {"result_type": "pay_invoice", "result": {"preimage": "ff" * 32}},
    )

    result = parse_pay_response(connection, reply)

    assert result.paid is True
    assert result.preimage == "ff" * 32


def test_parse_pay_response_surfaces_wallet_error() -> None:
    connection = parse_wallet_connect_uri(_uri())
    reply = _wallet_reply(
        connection,
        "req-1",
        {
            "result_type": "pay_invoice",
            "error": {"code": "INSUFFICIENT_BALANCE", "message": "not enough sats"},
        },
    )

    with pytest.raises(WalletConnectError, match="INSUFFICIENT_BALANCE: not enough sats"):
        parse_pay_response(connection, reply)


def test_parse_pay_response_requires_preimage() -> None:
    connection = parse_wallet_connect_uri(_uri())
    reply = _wallet_reply(connection, "req-1", {"result_type": "pay_invoice", "result": {}})

    with pytest.raises(WalletConnectError, match="missing preimage"):
        parse_pay_response(connection, reply)


class _WalletRelay:
    """In-memory relay that answers a pay_invoice request with scripted frames."""

    def __init__(self, frames) -> None:  # noqa: ANN001
        self.sent: list = []
        self._frames = frames
        self._served = 0

    async def __aenter__(self) -> "_WalletRelay":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False

    async def send(self, message: str) -> None:
        self.sent.append(json.loads(message))

    async def recv(self) -> str:
        sub_id = next(frame[1] for frame in self.sent if frame[0] == "REQ")
        request = next(frame[1] for frame in self.sent if frame[0] == "EVENT")
        frames = self._frames(sub_id, request)
        if self._served >= len(frames):
            await asyncio.sleep(3600)
        frame = frames[self._served]
        self._served += 1
        return json.dumps(frame)


def _install_relay(monkeypatch, frames) -> list:
    relays: list = []

    def fake_connect(url: str, **kwargs) -> _WalletRelay:  # noqa: ARG001
        relay = _WalletRelay(frames)
        relays.append((url, relay))
        return relay

    monkeypatch.setattr(nwc.websockets, "connect", fake_connect)
    return relays


def _reply_frame(sub_id: str, request: dict, body: dict, *, signer=WALLET) -> list:  # noqa: ANN001
    client_pubkey = request["pubkey"]
    content = nip04_encrypt(signer, client_pubkey, json.dumps(body))
    event = sign_record(
        signer,
        kind=KIND_NWC_RESPONSE,
        tags=[("e", request["id"]), ("p", client_pubkey)],
        content=content,
    )
    return ["EVENT", sub_id, event.to_dict()]


def test_auto_pay_exchanges_request_and_response_over_relay(monkeypatch) -> None:
    impostor = parse_secret_key("66" * 32)
    relays = _install_relay(
        monkeypatch,
        lambda sub_id, request: [
            ["NOTICE", "hello"],
            ["OK", request["id"], True, ""],
            _reply_frame(sub_id, request, {"result": {"preimage": "bad"}}, signer=impostor),
            _reply_frame(sub_id, request, {"result": {"preimage": "ab" * 32}}),
        ],
    )

    result = auto_pay(_uri(), "lnbc1invoice", timeout=5.0)

    assert result.preimage == "ab" * 32
    url, relay = relays[0]
    assert url == "wss://relay.example.com"
    req = next(frame for frame in relay.sent if frame[0] == "REQ")
    assert req[2]["kinds"] == [KIND_NWC_RESPONSE]
    assert req[2]["authors"] == [WALLET.public_key_hex]
    event = next(frame[1] for frame in relay.sent if frame[0] == "EVENT")
    assert event["kind"] == KIND_NWC_REQUEST
    assert req[2]["#e"] == [event["id"]]


def test_auto_pay_reports_relay_rejection(monkeypatch) -> None:
    _install_relay(
        monkeypatch,
        lambda sub_id, request: [["OK", request["id"], False, "blocked: rate limited"]],
    )

    with pytest.raises(WalletConnectError, match="relay rejected payment request: blocked"):
        auto_pay(_uri(), "lnbc1invoice", timeout=5.0)


def test_auto_pay_times_out_without_wallet_response(monkeypatch) -> None:
    _install_relay(monkeypatch, lambda sub_id, request: [["EOSE", sub_id]])

    with pytest.raises(WalletConnectError, match="no wallet response within 0.05s"):
        auto_pay(_uri(), "lnbc1invoice", timeout=0.05)


def test_auto_pay_wraps_connection_errors(monkeypatch) -> None:
    def refused(url: str, **kwargs):  # noqa: ARG001
        raise OSError("connection refused")

    monkeypatch.setattr(nwc.websockets, "connect", refused)

    with pytest.raises(WalletConnectError, match="wallet relay error: connection refused"):
        auto_pay(_uri(), "lnbc1invoice", timeout=5.0)


def test_auto_pay_rejects_off_curve_wallet_key() -> None:
    uri = f"nostr+walletconnect://{OFF_CURVE_PUBKEY}?relay=wss://r.example&secret={CLIENT_SECRET}"

    with pytest.raises(WalletConnectError):
        auto_pay(uri, "lnbc1...")
