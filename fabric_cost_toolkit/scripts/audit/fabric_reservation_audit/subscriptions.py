"""
Subscription resolution for the Fabric reservation audit.
Decides which subscriptions get scanned for capacities.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .backends import ManagementBackend
from .exceptions import ManagementCommandError, NoSubscriptionsError
from .models import Subscription


def is_tenant_level_account(subscriptions: Sequence[Subscription]) -> bool:
    """
    True when the account is signed in at tenant level only.

    The CLI then reports a single pseudo-subscription whose id is the tenant id.
    """
    return len(subscriptions) == 1 and subscriptions[0].is_tenant_root


def exclude_tenant_roots(subscriptions: Iterable[Subscription]) -> tuple[Subscription, ...]:
    """Drop tenant-root pseudo-entries, keeping real subscriptions in order."""
    return tuple(sub for sub in subscriptions if not sub.is_tenant_root)


def select_subscriptions(
    subscriptions: Sequence[Subscription], requested: Sequence[str]
) -> tuple[Subscription, ...]:
    """Keep subscriptions whose id or display name was requested (case-insensitive)."""
    # casefolded value -> text as typed
    wanted = {}
    for value in requested:
        if value.strip():
            wanted.setdefault(value.strip().casefold(), value.strip())
    selected = tuple(
        sub
        for sub in subscriptions
        if sub.subscription_id.casefold() in wanted or sub.display_name.casefold() in wanted
    )
    known = {sub.subscription_id.casefold() for sub in selected}
    known.update(sub.display_name.casefold() for sub in selected)
    for folded, original in wanted.items():
        if folded not in known:
            print(f"⚠️  Requested subscription not found or not enabled: {original}")
    return selected


def _list(backend: ManagementBackend, all_tenants: bool) -> tuple[Subscription, ...]:
    try:
        return backend.list_subscriptions(all_tenants=all_tenants)
    except ManagementCommandError as exc:
        raise NoSubscriptionsError(exc.detail) from exc


def resolve_subscriptions(
    backend: ManagementBackend, requested: Optional[Sequence[str]] = None
) -> tuple[Subscription, ...]:
    """
    Return the ordered subscriptions to scan.

    Raises:
        NoSubscriptionsError: If nothing is left to scan
    """
    print("🔍 Resolving subscriptions...")
    subscriptions = _list(backend, all_tenants=False)

    if is_tenant_level_account(subscriptions):
        print("⚠️  Account is signed in at tenant level; listing subscriptions in all tenants...")
        subscriptions = exclude_tenant_roots(_list(backend, all_tenants=True))

    subscriptions = tuple(sub for sub in subscriptions if sub.is_enabled)
    if not subscriptions:
        raise NoSubscriptionsError()

    if requested:
        subscriptions = select_subscriptions(subscriptions, requested)
        if not subscriptions:
            raise NoSubscriptionsError("none of the requested subscriptions are available")

    print(f"✅ {len(subscriptions)} subscription(s) to scan")
    for sub in subscriptions:
        print(f"   • {sub.display_name} ({sub.subscription_id})")
    return subscriptions
