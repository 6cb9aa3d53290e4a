"""secp256k1 signing keys and NIP-19 encodings.

Accepted secret key forms:
- nsec1<bech32> (NIP-19)
- 64 hex characters (case-insensitive)

Public identifiers are BIP-340 x-only keys, rendered as 64 lowercase hex
characters or as npub1<bech32>.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from bech32 import bech32_decode, bech32_encode, convertbits
from coincurve import PrivateKey

from agentdex.errors import InvalidKeyFormatError

_HEX_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")

NSEC_HRP = "nsec"
NPUB_HRP = "npub"


def _encode_bech32(hrp: str, payload: bytes) -> str:
    data = convertbits(list(payload), 8, 5, True)
    return bech32_encode(hrp, data)


def _decode_bech32(expected_hrp: str, value: str) -> bytes:
    hrp, data = bech32_decode(value.strip().lower())
    if hrp != expected_hrp or data is None:
        raise InvalidKeyFormatError(f"invalid {expected_hrp}")
    decoded = convertbits(data, 5, 8, False)
    if decoded is None or len(decoded) != 32:
        raise InvalidKeyFormatError(f"invalid {expected_hrp}: expected 32-byte payload")
    return bytes(decoded)


def encode_npub(public_key_hex: str) -> str:
    return _encode_bech32(NPUB_HRP, bytes.fromhex(public_key_hex))


def decode_npub(npub: str) -> str:
    return _decode_bech32(NPUB_HRP, npub).hex()


def normalize_public_id(value: str) -> str:
    """Return the hex public key for an npub or hex identifier."""
    candidate = value.strip()
    if candidate.lower().startswith(NPUB_HRP):
        return decode_npub(candidate)
    if _HEX_KEY_RE.match(candidate):
        return candidate.lower()
    raise InvalidKeyFormatError("invalid public id. Provide npub or 64-char hex.")


@dataclass(frozen=True)
class SigningKey:
    secret: bytes

    def __post_init__(self) -> None:
        if len(self.secret) != 32:
            raise InvalidKeyFormatError("secret key must be 32 bytes")
        try:
            PrivateKey(self.secret)
        except ValueError as exc:
            raise InvalidKeyFormatError("secret key is out of range for secp256k1") from exc

    def __repr__(self) -> str:
        return f"SigningKey(npub={self.npub!r})"

    @classmethod
    def generate(cls) -> "SigningKey":
        return cls(PrivateKey().secret)

    @property
    def secret_hex(self) -> str:
        return self.secret.hex()

    @property
    def nsec(self) -> str:
        return _encode_bech32(NSEC_HRP, self.secret)

    @property
    def public_key_hex(self) -> str:
        compressed = PrivateKey(self.secret).public_key.format(compressed=True)
        return compressed[1:].hex()

    @property
    def npub(self) -> str:
        return encode_npub(self.public_key_hex)

    def sign(self, digest: bytes) -> bytes:
        """BIP-340 Schnorr signature over a 32-byte digest."""
        if len(digest) != 32:
            raise ValueError("digest must be 32 bytes")
        return PrivateKey(self.secret).sign_schnorr(digest, os.urandom(32))


def parse_secret_key(value: str) -> SigningKey:
    candidate = value.strip()
    if candidate.lower().startswith(NSEC_HRP):
        return SigningKey(_decode_bech32(NSEC_HRP, candidate))
    if _HEX_KEY_RE.match(candidate):
        return SigningKey(bytes.fromhex(candidate))
    raise InvalidKeyFormatError("invalid key format. Provide nsec or 64-char hex.")
