from __future__ import annotations

from pathlib import Path

import pytest

from agentdex.cli.config import ConfigError, load_cli_config
from agentdex.client import DEFAULT_BASE_URL


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    cfg = load_cli_config(tmp_path / "absent.toml", env={})

    assert cfg.base_url == DEFAULT_BASE_URL
    assert cfg.api_key is None
    assert cfg.nwc_uri is None
    assert cfg.relays == ()
    assert cfg.poll_interval_seconds == 3.0
    assert cfg.payment_timeout_seconds == 900.0


def test_reads_cli_table(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "\n".join(
            [
                "[cli]",
                'base_url = "http://localhost:3000"',
                'api_key = "adx_file"',
                'key_file = "~/keys/agent.json"',
                'relays = ["wss://relay.one", " wss://relay.two "]',
                "poll_interval_seconds = 1.5",
                "payment_timeout_seconds = 60",
            ]
        ),
        encoding="utf-8",
    )

    cfg = load_cli_config(path, env={})

    assert cfg.base_url == "http://localhost:3000"
    assert cfg.api_key == "adx_file"
    assert cfg.key_file == "~/keys/agent.json"
    assert cfg.relays == ("wss://relay.one", "wss://relay.two")
    assert cfg.poll_interval_seconds == 1.5
    assert cfg.payment_timeout_seconds == 60.0


def test_environment_overrides_file(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('base_url = "http://localhost:3000"\napi_key = "adx_file"\n', encoding="utf-8")

    cfg = load_cli_config(
        path,
        env={
            "AGENTDEX_URL": "https://staging.agentdex.id",
            "AGENTDEX_API_KEY": "adx_env",
            "NWC_URL": "nostr+walletconnect://wallet",
        },
    )

    assert cfg.base_url == "https://staging.agentdex.id"
    assert cfg.api_key == "adx_env"
    assert cfg.nwc_uri == "nostr+walletconnect://wallet"


def test_blank_environment_value_is_ignored(tmp_path: Path) -> None:
    cfg = load_cli_config(tmp_path / "absent.toml", env={"AGENTDEX_URL": "   "})
    assert cfg.base_url == DEFAULT_BASE_URL


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ('base_url = "ftp://example.com"', "base_url"),
        ('relays = "wss://relay.one"', "relays must be a list"),
        ('relays = ["https://relay.one"]', "relay must start with"),
        ("poll_interval_seconds = 0", "poll_interval_seconds"),
        ("payment_timeout_seconds = true", "payment_timeout_seconds"),
        ('cli = "nope"', r"\[cli\] must be a table"),
        ("base_url = ", "invalid TOML"),
    ],
)
def test_invalid_config_is_rejected(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "config.toml"
    path.write_text(content + "\n", encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_cli_config(path, env={})
