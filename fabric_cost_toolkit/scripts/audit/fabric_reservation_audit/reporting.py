"""
Console report for the Fabric reservation audit.
Three tables in fixed order followed by a summary.
"""

from __future__ import annotations

from typing import Optional, Sequence

from fabric_cost_toolkit.common.format_utils import (
    format_date,
    format_quantity,
    format_table,
)

from .classification import AuditResult, ReservationPartition
from .constants import SECTION_WIDTH

CAPACITY_HEADERS = ("Name", "Subscription", "Resource Group", "Region", "SKU", "State")


def short_id(resource_id: Optional[str]) -> str:
    """Last element of an ARM id, which is what people recognise in the portal."""
    if not resource_id:
        return ""
    return resource_id.rstrip("/").rsplit("/", 1)[-1]


def print_section_header(title: str) -> None:
    print()
    print("=" * SECTION_WIDTH)
    print(title)
    print("=" * SECTION_WIDTH)


def _capacity_row(capacity) -> list:
    return [
        capacity.name,
        capacity.subscription_id,
        capacity.resource_group,
        capacity.location,
        capacity.sku_name,
        capacity.state,
    ]


def print_capacities_with_reservation(capacities: Sequence, dangling: Sequence = ()) -> None:
    """Section 1: capacities that carry a reservation id."""
    print_section_header("✅ FABRIC CAPACITIES WITH A RESERVATION")
    if not capacities:
        print("No Fabric capacities with an attached reservation found.")
    else:
        rows = [[*_capacity_row(c), short_id(c.reservation_id)] for c in capacities]
        print(format_table([*CAPACITY_HEADERS, "Reservation"], rows))
    print(f"\nCapacities with a reservation: {len(capacities)}")

    if dangling:
        print(
            f"⚠️  {len(dangling)} capacity(ies) reference a reservation that is not among "
            "the retrieved Fabric reservations:"
        )
        for capacity in dangling:
            print(f"   • {capacity.name} → {capacity.reservation_id}")


def print_unused_reservations(partition: ReservationPartition, failed_orders: Sequence = ()) -> None:
    """Section 2: reservation line items no capacity points at."""
    print_section_header("💰 FABRIC RESERVATIONS WITHOUT A CAPACITY")
    if partition.skipped:
        print("⚠️  Reservation check skipped: reservation orders could not be read.")
        if partition.skip_reason:
            print(f"   Reason: {partition.skip_reason}")
        return

    total = len(partition.used) + len(partition.unused)
    if not partition.unused:
        if total:
            print(f"✅ All {total} Fabric reservation(s) are attached to a capacity.")
        else:
            print("No Fabric reservations found.")
    else:
        rows = [
            [
                short_id(item.reservation_id),
                short_id(item.order_id),
                item.display_name,
                item.sku_name,
                format_quantity(item.quantity),
                item.provisioning_state,
                format_date(item.expiry),
            ]
            for item in partition.unused
        ]
        headers = ["Reservation", "Order", "Display Name", "SKU", "Quantity", "State", "Expires"]
        print(format_table(headers, rows))
    print(f"\nReservations without a capacity: {len(partition.unused)}")

    if failed_orders:
        print(f"⚠️  {len(failed_orders)} reservation order(s) could not be expanded and are not included:")
        for order in failed_orders:
            print(f"   • {order.display_name or order.order_key}")


def print_capacities_without_reservation(capacities: Sequence) -> None:
    """Section 3: capacities billed pay-as-you-go."""
    print_section_header("⚠️  FABRIC CAPACITIES WITHOUT A RESERVATION (PAY-AS-YOU-GO)")
    if not capacities:
        print("No Fabric capacities without a reservation found.")
    else:
        print(format_table(CAPACITY_HEADERS, [_capacity_row(c) for c in capacities]))
    print(f"\nCapacities without a reservation: {len(capacities)}")


def print_summary(result: AuditResult) -> None:
    """Totals plus a closing advisory."""
    capacities = result.capacities
    print_section_header("📊 SUMMARY")
    print(f"Total Fabric capacities: {capacities.total}")
    print(f"  With a reservation:    {len(capacities.with_reservation)}")
    print(f"  Without a reservation: {len(capacities.without_reservation)}")

    reservations = result.reservations
    if reservations.skipped:
        print("Reservations: check skipped")
    else:
        total = len(reservations.used) + len(reservations.unused)
        print(f"Fabric reservations: {total}")
        print(f"  Attached to a capacity: {len(reservations.used)}")
        print(f"  Not attached:           {len(reservations.unused)}")

    if result.failed_subscriptions:
        print(f"⚠️  Subscriptions that could not be scanned: {len(result.failed_subscriptions)}")

    print()
    if capacities.without_reservation:
        print(
            f"💡 {len(capacities.without_reservation)} capacity(ies) run at pay-as-you-go rates. "
            "A reservation could lower their cost significantly."
        )
    else:
        print("✅ No pay-as-you-go Fabric capacities found. Nothing to optimize.")


def print_report(result: AuditResult) -> None:
    """Print all report sections in order."""
    print_capacities_with_reservation(
        result.capacities.with_reservation, result.dangling_references
    )
    print_unused_reservations(result.reservations, result.failed_orders)
    print_capacities_without_reservation(result.capacities.without_reservation)
    print_summary(result)
