"""
Cross-reference of capacities and reservations.

Capacities are split on their own reservation field only. Reservation line
items are split on whether any reserved capacity points at them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .models import Capacity, ReservationLineItem, normalize_id
from .reservations import ReservationLookup


@dataclass(frozen=True)
class CapacityPartition:
    with_reservation: tuple = field(default_factory=tuple)
    without_reservation: tuple = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return len(self.with_reservation) + len(self.without_reservation)


@dataclass(frozen=True)
class ReservationPartition:
    used: tuple = field(default_factory=tuple)
    unused: tuple = field(default_factory=tuple)
    skipped: bool = False
    skip_reason: str = ""


@dataclass(frozen=True)
class AuditResult:
    """Everything the report needs."""

    capacities: CapacityPartition
    reservations: ReservationPartition
    dangling_references: tuple = field(default_factory=tuple)
    failed_subscriptions: tuple = field(default_factory=tuple)
    failed_orders: tuple = field(default_factory=tuple)


def partition_capacities(capacities: Iterable[Capacity]) -> CapacityPartition:
    """Split capacities by whether their reservation field is set; order is preserved."""
    with_reservation = []
    without_reservation = []
    for capacity in capacities:
        if capacity.has_reservation:
            with_reservation.append(capacity)
        else:
            without_reservation.append(capacity)
    return CapacityPartition(tuple(with_reservation), tuple(without_reservation))


def used_reservation_ids(capacities: Iterable[Capacity]) -> frozenset:
    """Normalized reservation ids referenced by the given capacities."""
    return frozenset(normalize_id(c.reservation_id) for c in capacities if c.has_reservation)


def partition_reservations(
    line_items: Sequence[ReservationLineItem], reserved_capacities: Iterable[Capacity]
) -> ReservationPartition:
    """Split line items into used and unused; unused is exactly line_items minus the used ids."""
    used_ids = used_reservation_ids(reserved_capacities)
    used = []
    unused = []
    for item in line_items:
        if item.key in used_ids:
            used.append(item)
        else:
            unused.append(item)
    return ReservationPartition(used=tuple(used), unused=tuple(unused))


def find_dangling_references(
    reserved_capacities: Iterable[Capacity], line_items: Sequence[ReservationLineItem]
) -> tuple[Capacity, ...]:
    """Reserved capacities whose reservation id matches none of the retrieved line items."""
    known = {item.key for item in line_items}
    return tuple(c for c in reserved_capacities if normalize_id(c.reservation_id) not in known)


def classify(
    capacities: Sequence[Capacity],
    lookup: ReservationLookup,
    failed_subscriptions: Sequence = (),
) -> AuditResult:
    """Build the audit result from collected capacities and the reservation lookup."""
    capacity_partition = partition_capacities(capacities)

    if lookup.skipped:
        return AuditResult(
            capacities=capacity_partition,
            reservations=ReservationPartition(skipped=True, skip_reason=lookup.skip_reason),
            failed_subscriptions=tuple(failed_subscriptions),
        )

    return AuditResult(
        capacities=capacity_partition,
        reservations=partition_reservations(lookup.line_items, capacity_partition.with_reservation),
        # an unreadable order may hold the missing reservation
        dangling_references=(
            ()
            if lookup.failed_orders
            else find_dangling_references(capacity_partition.with_reservation, lookup.line_items)
        ),
        failed_subscriptions=tuple(failed_subscriptions),
        failed_orders=lookup.failed_orders,
    )
