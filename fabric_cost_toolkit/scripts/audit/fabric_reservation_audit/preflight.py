"""
Environment preflight for the Fabric reservation audit.
Confirms the Azure CLI is installed and signed in before anything else runs.
"""

from __future__ import annotations

import shutil
from typing import Callable, Iterable, Optional

from fabric_cost_toolkit.common.az_cli import ensure_az_on_path

from .backends import ManagementBackend
from .exceptions import AzureCliNotFoundError, ManagementCommandError, NotAuthenticatedError
from .models import Identity


def ensure_azure_cli(
    search_dirs: Optional[Iterable[str]] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> str:
    """
    Locate az, extending PATH from the well-known install directories if needed.

    Raises:
        AzureCliNotFoundError: If az cannot be found anywhere
    """
    executable = ensure_az_on_path(search_dirs=search_dirs, which=which)
    if executable is None:
        raise AzureCliNotFoundError()
    return executable


def ensure_logged_in(backend: ManagementBackend) -> Identity:
    """
    Return the signed-in identity. A failed identity check is fatal and not retried.

    Raises:
        NotAuthenticatedError: If the identity check fails
    """
    try:
        return backend.show_identity()
    except ManagementCommandError as exc:
        raise NotAuthenticatedError(exc.detail) from exc


def run_preflight(backend: ManagementBackend, **locate_kwargs) -> Identity:
    """Run both checks and print the account the audit will use."""
    print("🔍 Checking Azure CLI installation and login...")
    executable = ensure_azure_cli(**locate_kwargs)
    print(f"✅ Azure CLI found: {executable}")

    identity = ensure_logged_in(backend)
    user = identity.user_name or "unknown user"
    print(f"✅ Signed in as {user}")
    print(f"   Active subscription: {identity.subscription_name} ({identity.subscription_id})")
    print(f"   Tenant: {identity.tenant_id}")
    return identity
