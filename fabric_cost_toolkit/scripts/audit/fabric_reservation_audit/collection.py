"""
Capacity collection across subscriptions.

Each subscription produces an immutable batch; the batches are concatenated
once the loop ends. A subscription that cannot be scanned contributes an empty
batch and is recorded as failed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import chain
from typing import Iterable, Sequence

from .backends import ManagementBackend
from .exceptions import ManagementCommandError
from .models import Capacity, Subscription


@dataclass(frozen=True)
class CollectionResult:
    """All capacities found, plus the subscriptions that could not be scanned."""

    capacities: tuple
    failed_subscriptions: tuple = field(default_factory=tuple)
    duplicates_removed: int = 0


def deduplicate_capacities(capacities: Iterable[Capacity]) -> tuple[Capacity, ...]:
    """Remove repeated capacities by resource path, keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for capacity in capacities:
        if capacity.key in seen:
            continue
        seen.add(capacity.key)
        unique.append(capacity)
    return tuple(unique)


def collect_subscription_capacities(
    backend: ManagementBackend, subscription: Subscription
) -> tuple[tuple[Capacity, ...], bool]:
    """
    Scan one subscription.

    Returns:
        tuple: (capacities, succeeded)
    """
    print(f"🔍 Scanning subscription: {subscription.display_name} ({subscription.subscription_id})")
    try:
        backend.set_subscription(subscription)
    except ManagementCommandError as exc:
        print(f"   ⚠️  Could not switch to this subscription, skipping: {exc.detail}")
        return (), False

    try:
        capacities = backend.list_capacities(subscription)
    except ManagementCommandError as exc:
        print(f"   ⚠️  Could not list capacities, treating as none: {exc.detail}")
        return (), False

    if not capacities:
        print("   ✅ No Fabric capacities found")
        return (), True

    print(f"   📍 Found {len(capacities)} Fabric capacity(ies)")
    return tuple(capacities), True


def collect_capacities(
    backend: ManagementBackend, subscriptions: Sequence[Subscription], dedupe: bool = False
) -> CollectionResult:
    """Scan every subscription in order and fold the batches into one collection."""
    batches = []
    failed = []
    for subscription in subscriptions:
        batch, succeeded = collect_subscription_capacities(backend, subscription)
        batches.append(batch)
        if not succeeded:
            failed.append(subscription)

    capacities = tuple(chain.from_iterable(batches))
    duplicates_removed = 0
    if dedupe:
        unique = deduplicate_capacities(capacities)
        duplicates_removed = len(capacities) - len(unique)
        capacities = unique
        if duplicates_removed:
            print(f"ℹ️  Removed {duplicates_removed} duplicate capacity record(s)")

    return CollectionResult(
        capacities=capacities,
        failed_subscriptions=tuple(failed),
        duplicates_removed=duplicates_removed,
    )
