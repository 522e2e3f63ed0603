"""
Reservation lookup for the Fabric reservation audit.

Reservation orders are billing-scoped, so they are listed once for the whole
run. Failing to list them turns the reservation cross-reference off; failing
to expand a single order skips that order only.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .backends import ManagementBackend
from .constants import DEFAULT_BRAND, DEFAULT_RESERVED_RESOURCE_TYPE
from .exceptions import ManagementCommandError
from .models import ReservationOrder


@dataclass(frozen=True)
class ReservationLookup:
    """Fabric reservation orders and their line items, or why they are missing."""

    skipped: bool = False
    skip_reason: str = ""
    orders: tuple = field(default_factory=tuple)
    line_items: tuple = field(default_factory=tuple)
    failed_orders: tuple = field(default_factory=tuple)

    @classmethod
    def skipped_because(cls, reason: str) -> ReservationLookup:
        return cls(skipped=True, skip_reason=reason)


def is_target_order(
    order: ReservationOrder,
    resource_type: str = DEFAULT_RESERVED_RESOURCE_TYPE,
    brand: str = DEFAULT_BRAND,
) -> bool:
    """Match on the reserved resource type, or on the brand anywhere in the display name."""
    if resource_type and order.reserved_resource_type.casefold() == resource_type.casefold():
        return True
    return bool(brand) and brand.casefold() in order.display_name.casefold()


def resolve_reservations(
    backend: ManagementBackend,
    resource_type: str = DEFAULT_RESERVED_RESOURCE_TYPE,
    brand: str = DEFAULT_BRAND,
) -> ReservationLookup:
    """List Fabric reservation orders and expand each into its line items."""
    print("🔍 Listing reservation orders...")
    try:
        orders = backend.list_reservation_orders()
    except ManagementCommandError as exc:
        print("⚠️  Could not list reservation orders; skipping the reservation cross-reference.")
        print(f"   Reason: {exc.detail}")
        print("   Reading reservations needs the Reservations Reader role or billing read access.")
        return ReservationLookup.skipped_because(exc.detail)

    matching = [order for order in orders if is_target_order(order, resource_type, brand)]
    print(f"   Found {len(orders)} reservation order(s), {len(matching)} for Fabric")

    expanded = []
    line_items = []
    failed = []
    for order in matching:
        label = order.display_name or order.order_key
        try:
            items = backend.list_reservations(order)
        except ManagementCommandError as exc:
            print(f"   ⚠️  Could not list reservations in order {label}, skipping: {exc.detail}")
            failed.append(order)
            continue
        expanded.append(replace(order, line_items=tuple(items)))
        line_items.extend(items)
        print(f"   📍 {label}: {len(items)} reservation(s)")

    return ReservationLookup(
        orders=tuple(expanded),
        line_items=tuple(line_items),
        failed_orders=tuple(failed),
    )
