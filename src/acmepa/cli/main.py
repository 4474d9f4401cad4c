"""ACMEPA command-line entry point.

Usage::

    acmepa -c /etc/acmepa/config.yaml --validate-only
    acmepa -c config.yaml check example.com '*.example.com'
    acmepa -c config.yaml challenges example.com --account 42
    acmepa -c config.yaml challenges example.com --account 42 --revalidation
    python -m acmepa -c config.yaml check example.com
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from acmepa.core.types import IdentifierType
from acmepa.errors import PolicyError
from acmepa.models.identifier import Identifier


def _get_version() -> str:
    from acmepa import __version__

    return __version__


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acmepa",
        description="ACMEPA: certificate issuance policy authority",
    )
    parser.add_argument(
        "-c",
        "--config",
        required=True,
        metavar="PATH",
        help="Path to the configuration file (YAML or JSON).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable debug output (full tracebacks, verbose logging).",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Validate the configuration and policy files and exit.",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # check
    check_parser = subparsers.add_parser(
        "check",
        help="Report whether the CA would issue for each name",
    )
    check_parser.add_argument("names", nargs="+", metavar="NAME")

    # challenges
    chall_parser = subparsers.add_parser(
        "challenges",
        help="Show the challenges offered for a name",
    )
    chall_parser.add_argument("name", metavar="NAME")
    chall_parser.add_argument("--account", type=int, required=True, help="Account ID")
    chall_parser.add_argument(
        "--revalidation",
        action="store_true",
        default=False,
        help="Treat the request as a revalidation.",
    )

    return parser


def _print_error(message: str) -> None:
    """Print a user-facing error to stderr."""
    print(f"acmepa: error: {message}", file=sys.stderr)  # noqa: T201


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.  Parses arguments, loads config, runs a command."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # -- resolve config path ---
    config_path = Path(args.config)
    if not config_path.is_file():
        _print_error(f"configuration file not found: {config_path}")
        sys.exit(1)

    # -- bootstrap logging early (basic stderr until config is loaded) ---
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    # -- load & validate config ---
    try:
        from acmepa.config import ConfigValidationError, PAConfig

        config = PAConfig(config_file=str(config_path))
    except ConfigValidationError as exc:
        _print_error(str(exc))
        sys.exit(1)
    except Exception as exc:
        if args.debug:
            raise
        _print_error(f"failed to load configuration: {exc}")
        sys.exit(1)

    # -- replace bootstrap logging with structured logging ---
    from acmepa.logging import configure_logging

    configure_logging(config.settings.logging)

    # -- build the authority (loads policy files) ---
    try:
        from acmepa.factory import create_authority

        pa = create_authority(config.settings)
    except Exception as exc:
        if args.debug:
            raise
        _print_error(f"failed to load policy: {exc}")
        sys.exit(1)

    if args.validate_only or args.command is None:
        _print_settings_summary(config, pa)
        sys.exit(0)

    if args.command == "check":
        sys.exit(_run_check(pa, args.names))
    elif args.command == "challenges":
        sys.exit(_run_challenges(pa, args.name, args.account, args.revalidation))


def _run_check(pa, names: list[str]) -> int:
    """Print one decision per name; return 1 if any was refused."""
    refused = 0
    for name in names:
        ident = Identifier(type=IdentifierType.DNS, value=name.lower())
        try:
            pa.willing_to_issue_wildcard(ident)
        except PolicyError as exc:
            refused += 1
            print(f"{name}: refused ({exc.reason.name.lower()}): {exc.detail}")  # noqa: T201
        else:
            print(f"{name}: ok")  # noqa: T201
    return 1 if refused else 0


def _run_challenges(pa, name: str, account_id: int, revalidation: bool) -> int:  # noqa: FBT001
    ident = Identifier(type=IdentifierType.DNS, value=name.lower())
    try:
        challenges, combinations = pa.challenges_for(ident, account_id, revalidation)
    except PolicyError as exc:
        _print_error(exc.detail)
        return 1
    for idx, chall in enumerate(challenges):
        print(f"{idx}: {chall.type.value}")  # noqa: T201
    print(f"combinations: {combinations}")  # noqa: T201
    return 0


def _print_settings_summary(config, pa) -> None:
    """Print a short summary of the loaded configuration."""
    policy = config.settings.policy
    hostnames = pa.hostname_policy
    lines = [
        f"config:               {config.data.get('_source', '?')}",
        f"hostname policy:      {policy.hostname_policy_file or '(none)'}",
        f"challenges whitelist: {policy.challenges_whitelist_file or '(none)'}",
        f"max name length:      {policy.max_dns_identifier_length}",
        f"max labels:           {policy.max_labels}",
        "enabled challenges:   "
        + (", ".join(sorted(t for t, on in pa.enabled_challenges.items() if on)) or "none"),
    ]
    if hostnames is not None:
        lines.append(
            f"blacklist entries:    {len(hostnames.blacklist)} "
            f"(exact {len(hostnames.exact_blacklist)})",
        )
    for line in lines:
        print(line)  # noqa: T201
