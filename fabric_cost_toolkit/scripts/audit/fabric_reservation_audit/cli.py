"""
Main entry point for the Fabric reservation audit CLI.
Runs preflight, collection, classification and reporting in order.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from typing import Optional

from fabric_cost_toolkit.common.az_cli import AzCliRunner
from fabric_cost_toolkit.common.credential_utils import (
    load_environment,
    print_install_guidance,
    print_login_guidance,
)

from .backends import AzCliBackend, ManagementBackend
from .classification import AuditResult, classify
from .collection import collect_capacities
from .config import AuditConfig, build_config
from .constants import (
    BACKEND_REST,
    BACKENDS,
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_PRECONDITION_FAILED,
    SECTION_WIDTH,
)
from .exceptions import AuditPreconditionError, AzureCliNotFoundError, NotAuthenticatedError
from .preflight import run_preflight
from .reporting import print_report
from .reservations import ReservationLookup, resolve_reservations
from .rest_backend import AzureRestBackend
from .subscriptions import resolve_subscriptions


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Cross-reference Microsoft Fabric capacities with their reservations and "
            "report pay-as-you-go capacities and unattached reservations. Read-only."
        )
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        help="Data source: 'cli' runs az commands, 'rest' calls Azure Resource Manager "
        "with the az login token (default: cli, or FABRIC_AUDIT_BACKEND).",
    )
    parser.add_argument(
        "--subscription",
        action="append",
        metavar="ID_OR_NAME",
        help="Only scan this subscription. Repeat to scan several.",
    )
    parser.add_argument(
        "--dedupe",
        action="store_true",
        help="Count a capacity once even if several subscriptions report it.",
    )
    parser.add_argument(
        "--skip-reservations",
        action="store_true",
        help="Do not read reservation orders (no billing permissions needed).",
    )
    parser.add_argument(
        "--timeout",
        metavar="SECONDS",
        help="Timeout for each az command or API request (default: 120).",
    )
    parser.add_argument(
        "--resource-type",
        help="Reserved resource type that marks a Fabric reservation order (default: MicrosoftFabric).",
    )
    parser.add_argument(
        "--brand",
        help="Display-name text that marks a Fabric reservation order (default: Fabric).",
    )
    parser.add_argument("--env-file", help="Settings file to load (default: ~/.env).")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def create_backend(config: AuditConfig) -> ManagementBackend:
    """Build the backend selected in the configuration."""
    cli_backend = AzCliBackend(AzCliRunner(timeout=config.timeout))
    if config.backend == BACKEND_REST:
        return AzureRestBackend(timeout=config.timeout, identity_backend=cli_backend)
    return cli_backend


def run_audit(backend: ManagementBackend, config: AuditConfig) -> AuditResult:
    """
    Run the full audit and print the report.

    Raises:
        AuditPreconditionError: If the CLI, login or subscriptions are unavailable
    """
    run_preflight(backend)
    subscriptions = resolve_subscriptions(backend, config.subscriptions)

    print()
    collection = collect_capacities(backend, subscriptions, dedupe=config.dedupe)
    if not collection.capacities:
        print("✅ No Fabric capacities found in the scanned subscriptions")

    print()
    if config.skip_reservations:
        print("ℹ️  Reservation check disabled with --skip-reservations")
        lookup = ReservationLookup.skipped_because("disabled with --skip-reservations")
    else:
        lookup = resolve_reservations(backend, config.resource_type, config.brand)

    result = classify(collection.capacities, lookup, collection.failed_subscriptions)
    print_report(result)
    return result


def _print_header() -> None:
    print("Azure Fabric Capacity Reservation Audit")
    print("=" * SECTION_WIDTH)
    print(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * SECTION_WIDTH)


def main(argv: Optional[list[str]] = None) -> int:
    """Run the audit; returns the process exit code."""
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(message)s",
    )
    load_environment(args.env_file)
    _print_header()

    try:
        config = build_config(args)
        run_audit(create_backend(config), config)
    except AuditPreconditionError as exc:
        print(f"❌ {exc}")
        if isinstance(exc, AzureCliNotFoundError):
            print_install_guidance()
        elif isinstance(exc, NotAuthenticatedError):
            print_login_guidance()
        return EXIT_PRECONDITION_FAILED
    except KeyboardInterrupt:
        print("\n❌ Audit interrupted")
        return EXIT_INTERRUPTED
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
