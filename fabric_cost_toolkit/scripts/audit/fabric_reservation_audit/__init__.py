"""
Fabric Reservation Audit Package.
Cross-references Microsoft Fabric capacities with Azure reservations.
"""

from .backends import AzCliBackend, ManagementBackend
from .classification import (
    AuditResult,
    classify,
    partition_capacities,
    partition_reservations,
)
from .cli import main, run_audit
from .collection import collect_capacities, deduplicate_capacities
from .models import Capacity, Identity, ReservationLineItem, ReservationOrder, Subscription
from .reservations import ReservationLookup, is_target_order, resolve_reservations
from .subscriptions import is_tenant_level_account, resolve_subscriptions

__all__ = [
    "AuditResult",
    "AzCliBackend",
    "Capacity",
    "Identity",
    "ManagementBackend",
    "ReservationLineItem",
    "ReservationLookup",
    "ReservationOrder",
    "Subscription",
    "classify",
    "collect_capacities",
    "deduplicate_capacities",
    "is_target_order",
    "is_tenant_level_account",
    "main",
    "partition_capacities",
    "partition_reservations",
    "resolve_reservations",
    "resolve_subscriptions",
    "run_audit",
]
