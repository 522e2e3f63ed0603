"""
Record types for the Fabric reservation audit.

Every record is built fresh from a management API payload and never mutated.
Payload readers accept both the flattened shape printed by the Azure CLI and
the nested `properties` shape returned by the REST API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .constants import SUBSCRIPTION_STATE_ENABLED


def normalize_id(resource_id: Optional[str]) -> str:
    """Canonical form of an ARM identifier for comparisons (ARM ids are case-insensitive)."""
    if not resource_id:
        return ""
    return resource_id.strip().rstrip("/").casefold()


def parse_resource_id_segment(resource_id: Optional[str], segment: str) -> Optional[str]:
    """
    Return the path element that follows `segment` in an ARM resource id.

    Examples:
        >>> parse_resource_id_segment("/subscriptions/abc/resourceGroups/rg1/providers/x", "subscriptions")
        'abc'
        >>> parse_resource_id_segment("/providers/x", "resourceGroups") is None
        True
    """
    if not resource_id:
        return None
    parts = [part for part in resource_id.split("/") if part]
    wanted = segment.casefold()
    for index, part in enumerate(parts[:-1]):
        if part.casefold() == wanted:
            return parts[index + 1]
    return None


def _lookup(payload: dict, *keys: str, default: Any = None) -> Any:
    """Read the first non-empty key from the payload or its `properties` block."""
    properties = payload.get("properties") or {}
    for key in keys:
        for source in (payload, properties):
            value = source.get(key)
            if value not in (None, ""):
                return value
    return default


def _sku_name(payload: dict) -> str:
    sku = payload.get("sku")
    if isinstance(sku, dict):
        return sku.get("name") or ""
    if isinstance(sku, str):
        return sku
    return ""


@dataclass(frozen=True)
class Identity:
    """The signed-in Azure CLI account."""

    subscription_id: str
    tenant_id: str
    subscription_name: str
    user_name: str = ""

    @classmethod
    def from_payload(cls, payload: dict) -> Identity:
        user = payload.get("user") or {}
        return cls(
            subscription_id=payload.get("id", ""),
            tenant_id=payload.get("tenantId", ""),
            subscription_name=payload.get("name", ""),
            user_name=user.get("name", ""),
        )


@dataclass(frozen=True)
class Subscription:
    """An Azure subscription visible to the signed-in account."""

    subscription_id: str
    tenant_id: str
    display_name: str
    state: str = SUBSCRIPTION_STATE_ENABLED

    @property
    def is_tenant_root(self) -> bool:
        """True for tenant-level pseudo entries whose id is the tenant id."""
        return normalize_id(self.subscription_id) == normalize_id(self.tenant_id)

    @property
    def is_enabled(self) -> bool:
        return self.state.casefold() == SUBSCRIPTION_STATE_ENABLED.casefold()

    @classmethod
    def from_payload(cls, payload: dict) -> Subscription:
        subscription_id = payload.get("subscriptionId") or payload.get("id", "")
        if "/" in subscription_id:
            subscription_id = parse_resource_id_segment(subscription_id, "subscriptions") or ""
        return cls(
            subscription_id=subscription_id,
            tenant_id=payload.get("tenantId", ""),
            display_name=payload.get("name") or payload.get("displayName", ""),
            state=payload.get("state") or SUBSCRIPTION_STATE_ENABLED,
        )


@dataclass(frozen=True)
class Capacity:
    """A Fabric capacity and the reservation it is attached to, if any."""

    resource_id: str
    name: str
    location: str
    resource_group: str
    subscription_id: str
    sku_name: str
    state: str
    reservation_id: Optional[str] = None

    @property
    def has_reservation(self) -> bool:
        return bool(self.reservation_id)

    @property
    def key(self) -> str:
        """Identity used for deduplication."""
        return normalize_id(self.resource_id)

    @classmethod
    def from_payload(cls, payload: dict, subscription_id: Optional[str] = None) -> Capacity:
        """
        Build a capacity from an API payload.

        The subscription and resource group are taken from the resource path;
        `subscription_id` is only used when the path does not carry one.
        """
        resource_id = payload.get("id", "")
        return cls(
            resource_id=resource_id,
            name=payload.get("name", ""),
            location=payload.get("location", ""),
            resource_group=(
                payload.get("resourceGroup")
                or parse_resource_id_segment(resource_id, "resourceGroups")
                or ""
            ),
            subscription_id=(
                parse_resource_id_segment(resource_id, "subscriptions") or subscription_id or ""
            ),
            sku_name=_sku_name(payload),
            state=_lookup(payload, "state", "provisioningState", default=""),
            reservation_id=_lookup(payload, "reservationId", "reservationID"),
        )


@dataclass(frozen=True)
class ReservationLineItem:
    """A single reservation inside a reservation order."""

    reservation_id: str
    order_id: str
    provisioning_state: str
    quantity: Optional[float]
    sku_name: str
    display_name: str = ""
    expiry: Optional[str] = None

    @property
    def key(self) -> str:
        return normalize_id(self.reservation_id)

    @classmethod
    def from_payload(cls, payload: dict, order_id: Optional[str] = None) -> ReservationLineItem:
        reservation_id = payload.get("id", "")
        quantity = _lookup(payload, "quantity")
        return cls(
            reservation_id=reservation_id,
            order_id=order_id or parse_resource_id_segment(reservation_id, "reservationOrders") or "",
            provisioning_state=_lookup(payload, "provisioningState", default=""),
            quantity=float(quantity) if quantity is not None else None,
            sku_name=_sku_name(payload),
            display_name=_lookup(payload, "displayName", default=""),
            expiry=_lookup(payload, "expiryDateTime", "expiryDate"),
        )


@dataclass(frozen=True)
class ReservationOrder:
    """A reservation purchase; line items are filled in after expansion."""

    order_id: str
    name: str
    display_name: str
    reserved_resource_type: str
    expiry: Optional[str] = None
    term: str = ""
    line_items: tuple = field(default_factory=tuple)

    @property
    def order_key(self) -> str:
        """The bare order GUID expected by `az reservations reservation list`."""
        return self.name or parse_resource_id_segment(self.order_id, "reservationOrders") or ""

    @classmethod
    def from_payload(cls, payload: dict) -> ReservationOrder:
        order_id = payload.get("id", "")
        return cls(
            order_id=order_id,
            name=payload.get("name") or parse_resource_id_segment(order_id, "reservationOrders") or "",
            display_name=_lookup(payload, "displayName", default=""),
            reserved_resource_type=_lookup(payload, "reservedResourceType", default=""),
            expiry=_lookup(payload, "expiryDateTime", "expiryDate"),
            term=_lookup(payload, "term", default=""),
        )
