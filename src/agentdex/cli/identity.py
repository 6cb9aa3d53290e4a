"""Secret key resolution and key files for the agentdex CLI."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping

from agentdex.errors import MalformedKeyFileError, MissingKeyError
from agentdex.nostr.keys import SigningKey, parse_secret_key

SECRET_KEY_ENV_VAR = "NOSTR_NSEC"
DEFAULT_KEY_FILE = Path.home() / ".agentdex" / "keys" / "nostr.json"


def _chmod_owner_only(path: Path) -> None:
    if os.name != "posix":
        return
    path.chmod(0o600)


def load_key_file(path: str | Path) -> SigningKey:
    key_path = Path(path)
    try:
        payload = json.loads(key_path.read_text(encoding="utf-8"))
    except Exception as exc:
        raise MalformedKeyFileError(f"invalid key file: {key_path}") from exc

    if not isinstance(payload, dict):
        raise MalformedKeyFileError("key file must contain sk_hex or nsec")
    sk_hex = payload.get("sk_hex")
    if isinstance(sk_hex, str) and sk_hex.strip():
        return parse_secret_key(sk_hex)
    nsec = payload.get("nsec")
    if isinstance(nsec, str) and nsec.strip():
        return parse_secret_key(nsec)
    raise MalformedKeyFileError("key file must contain sk_hex or nsec")


def resolve_signing_key(
    *,
    nsec: str | None = None,
    key_file: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    env_var: str = SECRET_KEY_ENV_VAR,
) -> SigningKey:
    """Resolve the signing key: --nsec, then the environment, then a key file."""
    environ = os.environ if env is None else env
    raw = (nsec or "").strip() or (environ.get(env_var) or "").strip()
    if raw:
        return parse_secret_key(raw)
    if key_file:
        return load_key_file(key_file)
    raise MissingKeyError(f"no key provided. Use --nsec, --key-file, or set {env_var}.")


def write_key_file(path: str | Path, key: SigningKey, *, overwrite: bool = False) -> Path:
    key_path = Path(path)
    if key_path.exists() and not overwrite:
        raise FileExistsError(f"key file already exists: {key_path}")
    key_path.parent.mkdir(parents=True, exist_ok=True)

    serialized = {
        "nsec": key.nsec,
        "npub": key.npub,
        "sk_hex": key.secret_hex,
        "pk_hex": key.public_key_hex,
    }
    key_path.write_text(json.dumps(serialized, indent=2) + "\n", encoding="utf-8")
    _chmod_owner_only(key_path)
    return key_path
