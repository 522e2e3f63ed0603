"""
Management backends for the Fabric reservation audit.

A backend exposes the six read-only operations the audit needs. The default
implementation drives the Azure CLI; `rest_backend.AzureRestBackend` talks to
Azure Resource Manager directly. Both raise ManagementCommandError for a
failed call and never retry.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Optional

from fabric_cost_toolkit.common.az_cli import AzCliRunner

from .exceptions import ManagementCommandError
from .models import Capacity, Identity, ReservationLineItem, ReservationOrder, Subscription


def as_item_list(payload: Any) -> list[dict]:
    """Normalize a list response that may be a bare list or an ARM `{"value": [...]}` page."""
    if payload is None:
        return []
    if isinstance(payload, dict):
        payload = payload.get("value", [])
    return [item for item in payload if isinstance(item, dict)]


class ManagementBackend(ABC):
    """Read-only view of subscriptions, capacities and reservations."""

    @abstractmethod
    def show_identity(self) -> Identity:
        """Return the signed-in account."""

    @abstractmethod
    def list_subscriptions(self, all_tenants: bool = False) -> tuple[Subscription, ...]:
        """List subscriptions visible to the account, optionally across every tenant."""

    @abstractmethod
    def set_subscription(self, subscription: Subscription) -> None:
        """Make `subscription` the active context for subscription-scoped calls."""

    @abstractmethod
    def list_capacities(self, subscription: Subscription) -> tuple[Capacity, ...]:
        """List Fabric capacities in the active subscription."""

    @abstractmethod
    def list_reservation_orders(self) -> tuple[ReservationOrder, ...]:
        """List every reservation order the account can read."""

    @abstractmethod
    def list_reservations(self, order: ReservationOrder) -> tuple[ReservationLineItem, ...]:
        """List the reservation line items of one order."""


class AzCliBackend(ManagementBackend):
    """Backend that shells out to the Azure CLI with JSON output."""

    def __init__(self, runner: Optional[AzCliRunner] = None):
        self.runner = runner or AzCliRunner()

    def _run(self, operation: str, args: list[str]) -> str:
        result = self.runner.run([*args, "--only-show-errors", "--output", "json"])
        if not result.ok:
            raise ManagementCommandError(operation, result.error_text)
        return result.stdout

    def _run_json(self, operation: str, args: list[str]) -> Any:
        text = self._run(operation, args).strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ManagementCommandError(operation, f"unparseable output ({exc})") from exc

    def show_identity(self) -> Identity:
        payload = self._run_json("az account show", ["account", "show"])
        if not isinstance(payload, dict):
            raise ManagementCommandError("az account show", "empty response")
        return Identity.from_payload(payload)

    def list_subscriptions(self, all_tenants: bool = False) -> tuple[Subscription, ...]:
        args = ["account", "list", "--query", "[?state=='Enabled']"]
        if all_tenants:
            args.insert(2, "--all")
        payload = self._run_json("az account list", args)
        return tuple(Subscription.from_payload(item) for item in as_item_list(payload))

    def set_subscription(self, subscription: Subscription) -> None:
        self._run(
            "az account set",
            ["account", "set", "--subscription", subscription.subscription_id],
        )

    def list_capacities(self, subscription: Subscription) -> tuple[Capacity, ...]:
        payload = self._run_json("az fabric capacity list", ["fabric", "capacity", "list"])
        return tuple(
            Capacity.from_payload(item, subscription.subscription_id)
            for item in as_item_list(payload)
        )

    def list_reservation_orders(self) -> tuple[ReservationOrder, ...]:
        payload = self._run_json(
            "az reservations reservation-order list",
            ["reservations", "reservation-order", "list"],
        )
        return tuple(ReservationOrder.from_payload(item) for item in as_item_list(payload))

    def list_reservations(self, order: ReservationOrder) -> tuple[ReservationLineItem, ...]:
        payload = self._run_json(
            "az reservations reservation list",
            ["reservations", "reservation", "list", "--reservation-order-id", order.order_key],
        )
        return tuple(
            ReservationLineItem.from_payload(item, order.order_id) for item in as_item_list(payload)
        )
