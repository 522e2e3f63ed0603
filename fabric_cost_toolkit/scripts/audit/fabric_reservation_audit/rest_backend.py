"""
Azure Resource Manager REST backend.

Calls the management API with `requests`, using bearer tokens from the
existing Azure CLI session (`AzureCliCredential`). The identity check still
goes through the CLI.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Iterator, Optional

import requests
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import AzureCliCredential

from .backends import AzCliBackend, ManagementBackend, as_item_list
from .constants import (
    ARM_ENDPOINT,
    ARM_SCOPE,
    CAPACITY_RESOURCE_TYPE,
    FABRIC_API_VERSION,
    RESERVATIONS_API_VERSION,
    SUBSCRIPTIONS_API_VERSION,
)
from .exceptions import ManagementCommandError
from .models import Capacity, Identity, ReservationLineItem, ReservationOrder, Subscription

TOKEN_REFRESH_MARGIN_SECONDS = 60
HTTP_ERROR_THRESHOLD = 400


class AzureRestBackend(ManagementBackend):
    """Backend that issues GET requests against https://management.azure.com."""

    def __init__(
        self,
        credential=None,
        session: Optional[requests.Session] = None,
        timeout: float = 60,
        identity_backend: Optional[ManagementBackend] = None,
    ) -> None:
        self.credential = credential or AzureCliCredential(
            process_timeout=max(1, math.ceil(timeout)), additionally_allowed_tenants=["*"]
        )
        self.session = session or requests.Session()
        self.timeout = timeout
        self.identity_backend = identity_backend or AzCliBackend()
        self._tokens: dict[str, tuple[str, float]] = {}

    def _get_token(self, tenant_id: Optional[str] = None) -> str:
        cache_key = tenant_id or ""
        cached = self._tokens.get(cache_key)
        now = time.time()
        if cached and now < cached[1] - TOKEN_REFRESH_MARGIN_SECONDS:
            return cached[0]
        try:
            if tenant_id:
                access_token = self.credential.get_token(ARM_SCOPE, tenant_id=tenant_id)
            else:
                access_token = self.credential.get_token(ARM_SCOPE)
        except ClientAuthenticationError as exc:
            raise ManagementCommandError("token request", str(exc)) from exc
        self._tokens[cache_key] = (access_token.token, float(access_token.expires_on))
        return access_token.token

    def _get(self, url: str, params: Optional[dict], tenant_id: Optional[str] = None) -> Any:
        headers = {"Authorization": f"Bearer {self._get_token(tenant_id)}"}
        logging.debug("GET %s", url)
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ManagementCommandError(f"GET {url}", str(exc)) from exc
        if response.status_code >= HTTP_ERROR_THRESHOLD:
            raise ManagementCommandError(
                f"GET {url}", f"HTTP {response.status_code}: {response.text[:200]}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ManagementCommandError(f"GET {url}", f"unparseable output ({exc})") from exc

    def paged_get(
        self, path: str, api_version: str, tenant_id: Optional[str] = None
    ) -> Iterator[dict]:
        """Yield every item of a list endpoint, following nextLink."""
        next_url: Optional[str] = f"{ARM_ENDPOINT}{path}"
        params: Optional[dict] = {"api-version": api_version}
        while next_url:
            payload = self._get(next_url, params, tenant_id)
            yield from as_item_list(payload)
            next_url = payload.get("nextLink") if isinstance(payload, dict) else None
            # nextLink already carries the query string
            params = None

    def show_identity(self) -> Identity:
        return self.identity_backend.show_identity()

    def _list_tenant_ids(self) -> list[str]:
        return [
            item["tenantId"]
            for item in self.paged_get("/tenants", SUBSCRIPTIONS_API_VERSION)
            if item.get("tenantId")
        ]

    def list_subscriptions(self, all_tenants: bool = False) -> tuple[Subscription, ...]:
        tenants: list[Optional[str]] = [None]
        if all_tenants:
            tenants = list(self._list_tenant_ids()) or [None]

        subscriptions = []
        for tenant_id in tenants:
            try:
                items = list(self.paged_get("/subscriptions", SUBSCRIPTIONS_API_VERSION, tenant_id))
            except ManagementCommandError as exc:
                if tenant_id is None:
                    raise
                logging.warning("Skipping tenant %s: %s", tenant_id, exc)
                continue
            subscriptions.extend(Subscription.from_payload(item) for item in items)
        return tuple(sub for sub in subscriptions if sub.is_enabled)

    def set_subscription(self, subscription: Subscription) -> None:
        # Every request names its subscription explicitly
        logging.debug("Active subscription: %s", subscription.subscription_id)

    def list_capacities(self, subscription: Subscription) -> tuple[Capacity, ...]:
        path = f"/subscriptions/{subscription.subscription_id}/providers/{CAPACITY_RESOURCE_TYPE}"
        return tuple(
            Capacity.from_payload(item, subscription.subscription_id)
            for item in self.paged_get(path, FABRIC_API_VERSION, subscription.tenant_id or None)
        )

    def list_reservation_orders(self) -> tuple[ReservationOrder, ...]:
        return tuple(
            ReservationOrder.from_payload(item)
            for item in self.paged_get(
                "/providers/Microsoft.Capacity/reservationOrders", RESERVATIONS_API_VERSION
            )
        )

    def list_reservations(self, order: ReservationOrder) -> tuple[ReservationLineItem, ...]:
        path = f"/providers/Microsoft.Capacity/reservationOrders/{order.order_key}/reservations"
        return tuple(
            ReservationLineItem.from_payload(item, order.order_id)
            for item in self.paged_get(path, RESERVATIONS_API_VERSION)
        )
