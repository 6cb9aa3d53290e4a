"""Configuration helpers for the agentdex CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from agentdex.client import DEFAULT_BASE_URL
from agentdex.nostr.relays import DEFAULT_PUBLISH_TIMEOUT
from agentdex.payments import DEFAULT_PAYMENT_TIMEOUT, DEFAULT_POLL_INTERVAL

DEFAULT_CONFIG_PATH = Path.home() / ".agentdex" / "config.toml"
BASE_URL_ENV_VAR = "AGENTDEX_URL"
API_KEY_ENV_VAR = "AGENTDEX_API_KEY"
NWC_URI_ENV_VAR = "NWC_URL"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = None
    nwc_uri: str | None = None
    key_file: str | None = None
    relays: tuple[str, ...] = ()
    relay_timeout_seconds: float = DEFAULT_PUBLISH_TIMEOUT
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL
    payment_timeout_seconds: float = DEFAULT_PAYMENT_TIMEOUT
    request_timeout_seconds: float = 10.0


class ConfigError(ValueError):
    """Raised when CLI config is invalid."""


def _load_toml(path: Path) -> dict[str, Any]:
    raw = path.read_text(encoding="utf-8")

    try:  # Python 3.11+
        import tomllib  # type: ignore[attr-defined]
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    except ModuleNotFoundError:
        try:
            import tomli
        except ModuleNotFoundError as exc:
            raise ConfigError("toml parser unavailable; install tomli for Python < 3.11") from exc
        try:
            return tomli.loads(raw)
        except tomli.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc


def _to_positive_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a positive number")
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be a positive number") from exc
    if parsed <= 0:
        raise ConfigError(f"{field_name} must be a positive number")
    return parsed


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def _env_override(env: Mapping[str, str], name: str, fallback: str | None) -> str | None:
    raw = env.get(name)
    if raw is None:
        return fallback
    return raw.strip() or fallback


def load_cli_config(
    path: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> CLIConfig:
    environ = os.environ if env is None else env
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if config_path.exists():
        parsed = _load_toml(config_path)
    else:
        parsed = {}

    section = parsed.get("cli")
    if isinstance(section, dict):
        source = section
    elif section is None:
        source = parsed
    else:
        raise ConfigError("[cli] must be a table")

    configured_base_url = str(source.get("base_url", DEFAULT_BASE_URL)).strip()
    base_url = _env_override(environ, BASE_URL_ENV_VAR, configured_base_url)
    if not base_url:
        raise ConfigError("base_url must not be empty")
    if not base_url.startswith(("http://", "https://")):
        raise ConfigError("base_url must start with http:// or https://")

    api_key = _env_override(environ, API_KEY_ENV_VAR, _optional_str(source.get("api_key")))
    nwc_uri = _env_override(environ, NWC_URI_ENV_VAR, _optional_str(source.get("nwc_uri")))
    key_file = _optional_str(source.get("key_file"))

    raw_relays = source.get("relays", [])
    if not isinstance(raw_relays, list) or not all(isinstance(item, str) for item in raw_relays):
        raise ConfigError("relays must be a list of strings")
    relays = tuple(item.strip() for item in raw_relays if item.strip())
    for relay in relays:
        if not relay.startswith(("ws://", "wss://")):
            raise ConfigError(f"relay must start with ws:// or wss://: {relay}")

    return CLIConfig(
        base_url=base_url,
        api_key=api_key,
        nwc_uri=nwc_uri,
        key_file=key_file,
        relays=relays,
        relay_timeout_seconds=_to_positive_float(
            source.get("relay_timeout_seconds", DEFAULT_PUBLISH_TIMEOUT),
            "relay_timeout_seconds",
        ),
        poll_interval_seconds=_to_positive_float(
            source.get("poll_interval_seconds", DEFAULT_POLL_INTERVAL),
            "poll_interval_seconds",
        ),
        payment_timeout_seconds=_to_positive_float(
            source.get("payment_timeout_seconds", DEFAULT_PAYMENT_TIMEOUT),
            "payment_timeout_seconds",
        ),
        request_timeout_seconds=_to_positive_float(
            source.get("request_timeout_seconds", 10.0),
            "request_timeout_seconds",
        ),
    )
