"""Command-line interface for agentdex."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path
from typing import Callable, Sequence
from urllib.parse import urlsplit

import qrcode

from agentdex.cli.config import CLIConfig, ConfigError, load_cli_config
from agentdex.cli.identity import DEFAULT_KEY_FILE, resolve_signing_key, write_key_file
from agentdex.client import AgentdexClient
from agentdex.errors import (
    DirectoryDisabledError,
    DirectoryError,
    InputError,
    PaymentTimeoutError,
    WalletConnectError,
)
from agentdex.logging import configure_logging, redact
from agentdex.nostr.events import (
    KIND_METADATA,
    AgentProfile,
    SignedRecord,
    build_metadata_record,
    build_note_record,
    build_profile_record,
)
from agentdex.nostr.keys import SigningKey, normalize_public_id
from agentdex.nostr.relays import fetch_latest, publish, resolve_relays
from agentdex.nwc import auto_pay
from agentdex.payments import Paid, TimedOut, await_payment
from agentdex.schemas import PaymentRequired, PaymentStatus, PendingPayment, SearchFilter

EXIT_SUCCESS = 0
EXIT_ERROR = 1

logger = logging.getLogger("agentdex.cli")


def _sdk_version() -> str:
    try:
        return pkg_version("agentdex")
    except PackageNotFoundError:
        return "0.0.0+local"


def _add_key_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--nsec", default=None, help="Nostr secret key (nsec or hex)")
    parser.add_argument("--key-file", default=None, help="Path to JSON key file")


def _add_relay_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--relay",
        action="append",
        default=[],
        help="Additional relay (repeatable); defaults are always used",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agentdex", description="CLI for the agentdex AI agent directory")
    parser.add_argument(
        "--version",
        action="version",
        version=f"agentdex {_sdk_version()}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to CLI config TOML (default: ~/.agentdex/config.toml)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr")

    sub = parser.add_subparsers(dest="command", required=True)

    version = sub.add_parser("version", help="Show CLI version")
    version.add_argument("--json", action="store_true")

    register = sub.add_parser("register", help="Register your agent on agentdex")
    _add_key_arguments(register)
    register.add_argument("--name", default=None, help="Agent name (prompted when omitted)")
    register.add_argument("--description", default=None, help="Agent description")
    register.add_argument("--capabilities", default=None, help="Comma-separated capabilities")
    register.add_argument("--framework", default=None, help="Framework (e.g., langchain, openclaw)")
    register.add_argument("--model", default=None, help="Model (e.g., claude-3.5-sonnet)")
    register.add_argument("--website", default=None, help="Website URL")
    register.add_argument("--lightning", default=None, help="Lightning address (lud16)")
    register.add_argument("--owner-x", default=None, help="Owner X/Twitter handle (e.g., @username)")
    register.add_argument("--nwc", default=None, help="Nostr Wallet Connect URI for auto-pay")
    register.add_argument("--api-key", default=None, help="Agentdex API key")
    _add_relay_argument(register)
    register.add_argument("--json", action="store_true", help="Output JSON")

    claim = sub.add_parser("claim", help="Claim a NIP-05 name (name@agentdex.id)")
    claim.add_argument("name", help="Name to claim (names are lowercase; input is lowercased)")
    _add_key_arguments(claim)
    claim.add_argument("--nwc", default=None, help="Nostr Wallet Connect URI for auto-pay")
    claim.add_argument("--api-key", default=None, help="Agentdex API key")
    claim.add_argument(
        "--skip-kind0",
        action="store_true",
        help="Skip publishing the kind 0 profile to relays",
    )
    _add_relay_argument(claim)
    claim.add_argument("--json", action="store_true", help="Output JSON")

    verify = sub.add_parser("verify", help="Check if an agent is registered on agentdex")
    verify.add_argument("public_id", metavar="npub", help="npub or hex public key")
    verify.add_argument("--json", action="store_true", help="Output JSON")

    search = sub.add_parser("search", help="Search the agentdex directory")
    search.add_argument("query", nargs="?", default=None)
    search.add_argument("--capability", default=None, help="Filter by capability")
    search.add_argument("--framework", default=None, help="Filter by framework")
    search.add_argument("--status", default=None, help="Filter by status")
    search.add_argument("--min-trust", type=float, default=None, help="Minimum trust score")
    search.add_argument("--limit", type=int, default=10, help="Max results")
    search.add_argument("--json", action="store_true", help="Output JSON")

    whoami = sub.add_parser("whoami", help="Show your agent profile")
    _add_key_arguments(whoami)
    whoami.add_argument("--json", action="store_true", help="Output JSON")

    publish_cmd = sub.add_parser("publish", help="Publish a note tagged #agentdex")
    publish_cmd.add_argument("message")
    _add_key_arguments(publish_cmd)
    _add_relay_argument(publish_cmd)
    publish_cmd.add_argument("--json", action="store_true", help="Output JSON")

    keygen = sub.add_parser("keygen", help="Generate a Nostr keypair and save it to a key file")
    keygen.add_argument(
        "--output",
        default=None,
        help="Key file path (default: ~/.agentdex/keys/nostr.json)",
    )
    keygen.add_argument("--force", action="store_true", help="Overwrite an existing key file")
    keygen.add_argument("--json", action="store_true", help="Output JSON")

    check_name = sub.add_parser("check-name", help="Check whether a NIP-05 name is available")
    check_name.add_argument("name")
    check_name.add_argument("--json", action="store_true", help="Output JSON")

    payment_status = sub.add_parser(
        "payment-status",
        help="Check a pending registration or claim payment once",
    )
    payment_status.add_argument("payment_hash")
    payment_status.add_argument(
        "--claim",
        action="store_true",
        help="Check a name claim payment instead of a registration payment",
    )
    payment_status.add_argument("--api-key", default=None, help="Agentdex API key")
    payment_status.add_argument("--json", action="store_true", help="Output JSON")

    return parser


def _print_error(stderr, prefix: str, message: str, *, code: int) -> int:
    single_line = " ".join(message.split())
    print(f"{prefix}: {redact(single_line)}", file=stderr)
    return code


def _build_client(config: CLIConfig, *, api_key: str | None = None) -> AgentdexClient:
    return AgentdexClient(
        base_url=config.base_url,
        api_key=api_key or config.api_key,
        timeout=config.request_timeout_seconds,
    )


def _resolve_key(args, config: CLIConfig) -> SigningKey:
    key_file = args.key_file or config.key_file
    if not key_file and DEFAULT_KEY_FILE.exists():
        key_file = DEFAULT_KEY_FILE
    return resolve_signing_key(nsec=args.nsec, key_file=key_file)


def _relays(args, config: CLIConfig) -> list[str]:
    return resolve_relays(config.relays, getattr(args, "relay", None))


def _nip05_domain(config: CLIConfig) -> str:
    return urlsplit(config.base_url).hostname or "agentdex.id"


def _split_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _format_relays(published: Sequence[str]) -> str:
    return ", ".join(published) if published else "none"


def _prompt(message: str) -> str:
    try:
        return input(message).strip()
    except EOFError as exc:
        raise InputError("--name is required when stdin is not interactive") from exc


def _prompt_profile(args) -> dict:
    name = ""
    while not name:
        name = _prompt("Agent name: ")
    description = _prompt("Description (optional): ")
    capabilities = _prompt("Capabilities (comma-separated): ")
    framework = _prompt("Framework (optional): ")
    return {
        "name": name,
        "description": description or args.description,
        "capabilities": _split_csv(capabilities) or _split_csv(args.capabilities),
        "framework": framework or args.framework,
    }


def _render_invoice(invoice: str, out) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(invoice.upper())
    qr.make(fit=True)
    qr.print_ascii(out=out, invert=True)
    print(f"bolt11: {invoice}", file=out)
    print("", file=out)


def _settle_payment(
    *,
    payment: PendingPayment,
    label: str,
    status_check: Callable[[str], PaymentStatus],
    config: CLIConfig,
    nwc_uri: str | None,
    info,
    stderr,
) -> Paid | None:
    """Present or auto-pay the invoice, then poll until paid or timed out.

    Returns None when the user interrupts the poll and raises
    PaymentTimeoutError when the invoice is never paid.
    """
    amount = f"{payment.amount_sats:,}" if payment.amount_sats is not None else "?"
    print(f"{label}: {amount} sats", file=info)

    if nwc_uri:
        print("paying invoice via wallet connect...", file=info)
        try:
            result = auto_pay(nwc_uri, payment.invoice)
        except WalletConnectError as exc:
            print(f"warning: wallet connect payment failed: {redact(str(exc))}", file=stderr)
            print("pay manually:", file=info)
            _render_invoice(payment.invoice, info)
        else:
            logger.debug("wallet connect preimage: %s", result.preimage)
            print("invoice paid", file=info)
    else:
        _render_invoice(payment.invoice, info)

    print("waiting for payment...", file=info)
    try:
        outcome = await_payment(
            status_check,
            payment.payment_hash,
            poll_interval=config.poll_interval_seconds,
            timeout=config.payment_timeout_seconds,
            sleep=time.sleep,
            clock=time.monotonic,
        )
    except KeyboardInterrupt:
        _print_error(
            stderr,
            "payment error",
            (
                f"cancelled while waiting for payment {payment.payment_hash}. "
                f"Check later with `agentdex payment-status {payment.payment_hash}`"
            ),
            code=EXIT_ERROR,
        )
        return None
    if isinstance(outcome, TimedOut):
        minutes = config.payment_timeout_seconds / 60
        raise PaymentTimeoutError(f"payment timeout ({minutes:g} min). Invoice expired.")
    return outcome


def _existing_metadata(key: SigningKey, relays: Sequence[str], config: CLIConfig) -> dict:
    latest = fetch_latest(
        relays,
        kind=KIND_METADATA,
        author=key.public_key_hex,
        timeout=min(5.0, config.relay_timeout_seconds),
    )
    if latest is None:
        return {}
    try:
        content = json.loads(latest.content)
    except ValueError:
        return {}
    return content if isinstance(content, dict) else {}


def _publish_metadata(
    key: SigningKey,
    relays: Sequence[str],
    config: CLIConfig,
    *,
    name: str,
    nip05: str | None = None,
    lud16: str | None = None,
    merge_existing: bool = False,
) -> tuple[SignedRecord, list[str]]:
    extra = _existing_metadata(key, relays, config) if merge_existing else {}
    record = build_metadata_record(
        key,
        name=str(extra.get("name") or name) if merge_existing else name,
        nip05=nip05,
        lud16=lud16,
        extra=extra,
    )
    return record, publish(record, relays, config.relay_timeout_seconds)


def _run_version(*, config: CLIConfig, as_json: bool, stdout) -> int:
    payload = {
        "cli": "agentdex",
        "version": _sdk_version(),
        "base_url": config.base_url,
    }
    if as_json:
        print(json.dumps(payload, sort_keys=True), file=stdout)
        return EXIT_SUCCESS
    print(f"agentdex {payload['version']}", file=stdout)
    print(f"directory: {payload['base_url']}", file=stdout)
    return EXIT_SUCCESS


def _run_register(*, args, config: CLIConfig, stdout, stderr) -> int:
    try:
        key = _resolve_key(args, config)
    except InputError as exc:
        return _print_error(stderr, "key error", str(exc), code=EXIT_ERROR)

    fields = {
        "name": args.name,
        "description": args.description,
        "capabilities": _split_csv(args.capabilities),
        "framework": args.framework,
    }
    if not fields["name"]:
        try:
            fields = _prompt_profile(args)
        except InputError as exc:
            return _print_error(stderr, "input error", str(exc), code=EXIT_ERROR)

    profile = AgentProfile(
        name=fields["name"],
        description=fields["description"] or None,
        capabilities=fields["capabilities"],
        framework=fields["framework"] or None,
        model=args.model,
        website=args.website,
        lightning=args.lightning,
        owner=args.owner_x,
        status="active",
    )
    record = build_profile_record(key, profile)
    client = _build_client(config, api_key=args.api_key)
    info = stderr if args.json else stdout

    try:
        result = client.register(record)
    except DirectoryDisabledError:
        return _print_error(
            stderr,
            "directory error",
            "registration is currently disabled",
            code=EXIT_ERROR,
        )
    except DirectoryError as exc:
        return _print_error(stderr, "directory error", f"registration failed: {exc}", code=EXIT_ERROR)

    tier = "free tier"
    if isinstance(result, PaymentRequired):
        try:
            outcome = _settle_payment(
                payment=result.payment,
                label="registration fee",
                status_check=client.register_status,
                config=config,
                nwc_uri=args.nwc or config.nwc_uri,
                info=info,
                stderr=stderr,
            )
        except PaymentTimeoutError as exc:
            return _print_error(stderr, "payment error", str(exc), code=EXIT_ERROR)
        except DirectoryError as exc:
            return _print_error(stderr, "directory error", f"payment check failed: {exc}", code=EXIT_ERROR)
        if outcome is None:
            return EXIT_ERROR
        tier = "paid"

    relays = _relays(args, config)
    published = publish(record, relays, config.relay_timeout_seconds)

    metadata_relays: list[str] | None = None
    if profile.lightning:
        _, metadata_relays = _publish_metadata(
            key,
            relays,
            config,
            name=profile.name or "",
            lud16=profile.lightning,
            merge_existing=True,
        )
        if not metadata_relays:
            print("warning: lightning address metadata was not accepted by any relay", file=stderr)

    if args.json:
        output = {**result.data, "relays": published, "npub": key.npub, "event_id": record.id}
        if metadata_relays is not None:
            output["metadata_relays"] = metadata_relays
        print(json.dumps(output, indent=2, sort_keys=True), file=stdout)
        return EXIT_SUCCESS

    print(f"registered on agentdex ({tier})", file=stdout)
    print(f"npub: {key.npub}", file=stdout)
    print(f"name: {profile.name}", file=stdout)
    print(f"published to: {_format_relays(published)}", file=stdout)
    print(
        f"next: run `agentdex claim <name>` to get <name>@{_nip05_domain(config)}",
        file=stdout,
    )
    return EXIT_SUCCESS


def _run_claim(*, args, config: CLIConfig, stdout, stderr) -> int:
    requested = args.name.strip()
    name = requested.lower()
    if not name:
        return _print_error(stderr, "input error", "name must not be empty", code=EXIT_ERROR)

    try:
        key = _resolve_key(args, config)
    except InputError as exc:
        return _print_error(stderr, "key error", str(exc), code=EXIT_ERROR)

    domain = _nip05_domain(config)
    record = build_profile_record(key, AgentProfile(name=name, status="active"))
    client = _build_client(config, api_key=args.api_key)
    info = stderr if args.json else stdout

    if requested != name:
        print(f"note: names are lowercase, claiming \"{name}\" for \"{requested}\"", file=info)
    print(f"claiming {name}@{domain}...", file=info)
    try:
        result = client.claim(name, record)
    except DirectoryDisabledError:
        return _print_error(stderr, "directory error", "name claims are currently disabled", code=EXIT_ERROR)
    except DirectoryError as exc:
        return _print_error(stderr, "directory error", f"claim failed: {exc}", code=EXIT_ERROR)

    final_status: PaymentStatus | None = None
    if isinstance(result, PaymentRequired):
        try:
            outcome = _settle_payment(
                payment=result.payment,
                label=f"claim fee for {name}@{domain}",
                status_check=client.claim_status,
                config=config,
                nwc_uri=args.nwc or config.nwc_uri,
                info=info,
                stderr=stderr,
            )
        except PaymentTimeoutError as exc:
            return _print_error(stderr, "payment error", str(exc), code=EXIT_ERROR)
        except DirectoryError as exc:
            return _print_error(stderr, "directory error", f"payment check failed: {exc}", code=EXIT_ERROR)
        if outcome is None:
            return EXIT_ERROR
        final_status = outcome.status
    elif not result.data.get("claimed"):
        reason = result.data.get("error") or result.data.get("message") or "name was not claimed"
        return _print_error(stderr, "directory error", f"claim failed: {reason}", code=EXIT_ERROR)

    agent = result.data.get("agent") if isinstance(result.data.get("agent"), dict) else {}
    nip05 = (
        (final_status.nip05 if final_status else None)
        or result.data.get("nip05")
        or f"{name}@{domain}"
    )
    print(f"{nip05} is now active", file=info)

    metadata_relays: list[str] | None = None
    if args.skip_kind0:
        print("warning: skipped kind 0 publish. For NIP-05 to show on Nostr clients:", file=stderr)
        print(f'  publish kind 0 with: "nip05": "{nip05}"', file=stderr)
    else:
        _, metadata_relays = _publish_metadata(
            key,
            _relays(args, config),
            config,
            name=str(agent.get("name") or name),
            nip05=nip05,
        )
        if metadata_relays:
            print(f"kind 0 published to: {_format_relays(metadata_relays)}", file=info)
        else:
            print("warning: kind 0 publish failed. Publish manually:", file=stderr)
            print(f'  kind 0 content: {{"name":"...","nip05":"{nip05}"}}', file=stderr)

    if args.json:
        output = {**result.data, "nip05": nip05}
        if metadata_relays is not None:
            output["relays"] = metadata_relays
        print(json.dumps(output, indent=2, sort_keys=True), file=stdout)
    return EXIT_SUCCESS


def _print_verify_result(result, stdout) -> None:
    capabilities = ", ".join(result.capabilities) or "none"
    nostr_flag = "yes" if result.has_nostr else "no"
    agentdex_flag = "yes" if result.has_agentdex else "no"
    print(f"name: {result.name}", file=stdout)
    print(f"trust_score: {result.trust_score}", file=stdout)
    print(f"capabilities: {capabilities}", file=stdout)
    print(f"nostr: {nostr_flag}  agentdex: {agentdex_flag}", file=stdout)


def _run_verify(*, args, config: CLIConfig, stdout, stderr) -> int:
    public_id = args.public_id.strip()
    try:
        normalize_public_id(public_id)
    except InputError as exc:
        return _print_error(stderr, "input error", str(exc), code=EXIT_ERROR)

    client = _build_client(config)
    try:
        result = client.verify(public_id)
    except DirectoryError as exc:
        return _print_error(stderr, "directory error", f"verify failed: {exc}", code=EXIT_ERROR)

    if args.json:
        print(json.dumps(result.model_dump(by_alias=True), indent=2, sort_keys=True), file=stdout)
        return EXIT_SUCCESS

    if not result.registered:
        print("not registered on agentdex", file=stdout)
        return EXIT_SUCCESS
    print("registered on agentdex", file=stdout)
    _print_verify_result(result, stdout)
    return EXIT_SUCCESS


def _run_search(*, args, config: CLIConfig, stdout, stderr) -> int:
    if args.limit is not None and args.limit < 1:
        return _print_error(stderr, "input error", "--limit must be >= 1", code=EXIT_ERROR)

    search_filter = SearchFilter(
        query=args.query,
        capability=args.capability,
        framework=args.framework,
        status=args.status,
        limit=args.limit,
    )
    client = _build_client(config)
    try:
        agents = client.search(search_filter)
    except DirectoryError as exc:
        return _print_error(stderr, "directory error", f"search failed: {exc}", code=EXIT_ERROR)

    if args.min_trust is not None:
        agents = [agent for agent in agents if (agent.trust_score or 0) >= args.min_trust]

    if args.json:
        payload = [agent.model_dump(by_alias=True) for agent in agents]
        print(json.dumps(payload, indent=2, sort_keys=True), file=stdout)
        return EXIT_SUCCESS

    if not agents:
        print("no agents found", file=stdout)
        return EXIT_SUCCESS

    for agent in agents:
        trust = f" [{agent.trust_score}]" if agent.trust_score else ""
        npub = f" {agent.npub[:20]}..." if agent.npub else ""
        print(f"{agent.name}{trust}{npub}", file=stdout)
        if agent.description:
            print(f"  {agent.description[:80]}", file=stdout)
        if agent.capabilities:
            print(f"  {', '.join(agent.capabilities)}", file=stdout)
        print("", file=stdout)
    print(f"{len(agents)} agents found", file=stdout)
    return EXIT_SUCCESS


def _run_whoami(*, args, config: CLIConfig, stdout, stderr) -> int:
    try:
        key = _resolve_key(args, config)
    except InputError as exc:
        return _print_error(stderr, "key error", str(exc), code=EXIT_ERROR)

    client = _build_client(config)
    try:
        result = client.verify(key.npub)
    except DirectoryError as exc:
        return _print_error(stderr, "directory error", f"lookup failed: {exc}", code=EXIT_ERROR)

    if args.json:
        payload = {**result.model_dump(by_alias=True), "npub": key.npub, "pubkey": key.public_key_hex}
        print(json.dumps(payload, indent=2, sort_keys=True), file=stdout)
        return EXIT_SUCCESS

    if not result.registered:
        print("not registered on agentdex yet", file=stdout)
        print(f"npub: {key.npub}", file=stdout)
        print("run: agentdex register", file=stdout)
        return EXIT_SUCCESS

    print(f"npub: {key.npub}", file=stdout)
    _print_verify_result(result, stdout)
    return EXIT_SUCCESS


def _run_publish(*, args, config: CLIConfig, stdout, stderr) -> int:
    if not args.message.strip():
        return _print_error(stderr, "input error", "message must not be empty", code=EXIT_ERROR)
    try:
        key = _resolve_key(args, config)
    except InputError as exc:
        return _print_error(stderr, "key error", str(exc), code=EXIT_ERROR)

    record = build_note_record(key, args.message)
    published = publish(record, _relays(args, config), config.relay_timeout_seconds)

    if args.json:
        payload = {"event_id": record.id, "relays": published}
        print(json.dumps(payload, indent=2, sort_keys=True), file=stdout)
        return EXIT_SUCCESS
    print(f"published to: {_format_relays(published)}", file=stdout)
    print(f"event_id: {record.id}", file=stdout)
    return EXIT_SUCCESS


def _run_keygen(*, args, stdout, stderr) -> int:
    output = args.output or str(DEFAULT_KEY_FILE)
    key = SigningKey.generate()
    try:
        key_path = write_key_file(output, key, overwrite=args.force)
    except FileExistsError as exc:
        return _print_error(
            stderr,
            "key error",
            f"{exc}. Use --force to overwrite.",
            code=EXIT_ERROR,
        )
    except OSError as exc:
        return _print_error(stderr, "key error", f"cannot write key file: {exc}", code=EXIT_ERROR)

    payload = {"npub": key.npub, "pubkey": key.public_key_hex, "key_file": str(key_path)}
    if args.json:
        print(json.dumps(payload, sort_keys=True), file=stdout)
        return EXIT_SUCCESS
    print(f"npub: {payload['npub']}", file=stdout)
    print(f"key_file: {payload['key_file']}", file=stdout)
    if Path(key_path) != DEFAULT_KEY_FILE:
        print(f"use it with: --key-file {key_path}", file=stdout)
    return EXIT_SUCCESS


def _run_check_name(*, args, config: CLIConfig, stdout, stderr) -> int:
    client = _build_client(config)
    try:
        result = client.check_name(args.name.strip().lower())
    except DirectoryError as exc:
        return _print_error(stderr, "directory error", f"name check failed: {exc}", code=EXIT_ERROR)

    if args.json:
        print(json.dumps(result.model_dump(), sort_keys=True), file=stdout)
        return EXIT_SUCCESS
    domain = _nip05_domain(config)
    state = "available" if result.available else "taken"
    print(f"{args.name}@{domain}: {state}", file=stdout)
    if result.suggestions:
        print(f"suggestions: {', '.join(result.suggestions)}", file=stdout)
    return EXIT_SUCCESS


def _run_payment_status(*, args, config: CLIConfig, stdout, stderr) -> int:
    client = _build_client(config, api_key=args.api_key)
    status_check = client.claim_status if args.claim else client.register_status
    try:
        status = status_check(args.payment_hash)
    except DirectoryError as exc:
        return _print_error(stderr, "directory error", f"payment check failed: {exc}", code=EXIT_ERROR)

    if args.json:
        print(json.dumps(status.model_dump(), sort_keys=True), file=stdout)
        return EXIT_SUCCESS
    print(f"payment_hash: {args.payment_hash}", file=stdout)
    print(f"status: {status.status}", file=stdout)
    print(f"paid: {str(status.paid).lower()}", file=stdout)
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None, *, stdout=sys.stdout, stderr=sys.stderr) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        logging.DEBUG if args.verbose else logging.WARNING,
        handler=logging.StreamHandler(stderr),
    )

    try:
        config = load_cli_config(args.config)
    except ConfigError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_ERROR)

    if args.command == "version":
        return _run_version(config=config, as_json=args.json, stdout=stdout)

    if args.command == "register":
        return _run_register(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "claim":
        return _run_claim(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "verify":
        return _run_verify(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "search":
        return _run_search(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "whoami":
        return _run_whoami(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "publish":
        return _run_publish(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "keygen":
        return _run_keygen(args=args, stdout=stdout, stderr=stderr)

    if args.command == "check-name":
        return _run_check_name(args=args, config=config, stdout=stdout, stderr=stderr)

    if args.command == "payment-status":
        return _run_payment_status(args=args, config=config, stdout=stdout, stderr=stderr)

    print("unknown command", file=stderr)
    return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
