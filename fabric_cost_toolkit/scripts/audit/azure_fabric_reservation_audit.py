#!/usr/bin/env python3
"""
Azure Fabric Capacity Reservation Audit Script
Lists Fabric capacities across subscriptions and cross-references them with
reservations to identify:
- Capacities billed pay-as-you-go (no reservation attached)
- Reservations not attached to any capacity (paid for but unused)

This script imports from the fabric_reservation_audit package.
"""

from fabric_cost_toolkit.scripts.audit.fabric_reservation_audit import main

if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(main())
