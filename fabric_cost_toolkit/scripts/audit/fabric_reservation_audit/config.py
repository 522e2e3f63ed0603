"""
Configuration for the Fabric reservation audit.

Settings come from built-in defaults, then environment variables (optionally
loaded from a .env file), then command-line flags.
"""

from __future__ import annotations

import argparse
import math
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from fabric_cost_toolkit.common.az_cli import DEFAULT_TIMEOUT_SECONDS

from .constants import BACKEND_CLI, BACKENDS, DEFAULT_BRAND, DEFAULT_RESERVED_RESOURCE_TYPE
from .exceptions import ConfigurationError

ENV_BACKEND = "FABRIC_AUDIT_BACKEND"
ENV_RESOURCE_TYPE = "FABRIC_AUDIT_RESOURCE_TYPE"
ENV_BRAND = "FABRIC_AUDIT_BRAND"
ENV_TIMEOUT = "FABRIC_AUDIT_TIMEOUT"


@dataclass(frozen=True)
class AuditConfig:
    """Resolved settings for one audit run."""

    backend: str = BACKEND_CLI
    resource_type: str = DEFAULT_RESERVED_RESOURCE_TYPE
    brand: str = DEFAULT_BRAND
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    subscriptions: tuple = field(default_factory=tuple)
    dedupe: bool = False
    skip_reservations: bool = False


def parse_timeout(raw: str, source: str) -> float:
    """Parse a positive number of seconds."""
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{source} must be a number of seconds, got {raw!r}") from exc
    if not math.isfinite(value):
        raise ConfigurationError(f"{source} must be a finite number of seconds, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{source} must be greater than zero, got {raw!r}")
    return value


def _resolve_timeout(cli_value: Optional[str], environ: Mapping[str, str]) -> float:
    if cli_value is not None:
        return parse_timeout(str(cli_value), "--timeout")
    env_value = environ.get(ENV_TIMEOUT)
    if env_value:
        return parse_timeout(env_value, ENV_TIMEOUT)
    return DEFAULT_TIMEOUT_SECONDS


def build_config(
    args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None
) -> AuditConfig:
    """
    Merge command-line arguments over environment settings.

    Raises:
        ConfigurationError: If a value is invalid
    """
    environ = os.environ if environ is None else environ

    backend = (args.backend or environ.get(ENV_BACKEND) or BACKEND_CLI).lower()
    if backend not in BACKENDS:
        raise ConfigurationError(
            f"Unknown backend {backend!r}; expected one of: {', '.join(BACKENDS)}"
        )

    return AuditConfig(
        backend=backend,
        resource_type=args.resource_type or environ.get(ENV_RESOURCE_TYPE) or DEFAULT_RESERVED_RESOURCE_TYPE,
        brand=args.brand or environ.get(ENV_BRAND) or DEFAULT_BRAND,
        timeout=_resolve_timeout(args.timeout, environ),
        subscriptions=tuple(args.subscription or ()),
        dedupe=bool(args.dedupe),
        skip_reservations=bool(args.skip_reservations),
    )
