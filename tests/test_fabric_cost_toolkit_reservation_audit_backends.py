"""Tests for fabric_reservation_audit/backends.py (Azure CLI backend)"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from fabric_cost_toolkit.common.az_cli import AzCommandResult
from fabric_cost_toolkit.scripts.audit.fabric_reservation_audit.backends import (
    AzCliBackend,
    as_item_list,
)
from fabric_cost_toolkit.scripts.audit.fabric_reservation_audit.exceptions import (
    ManagementCommandError,
)
from tests.assertions import assert_equal
from tests.conftest_test_values import TEST_TENANT_ID
from tests.fabric_audit_test_utils import capacity_id, make_order, make_subscription

JSON_SUFFIX = ["--only-show-errors", "--output", "json"]


def _ok(payload):
    return AzCommandResult(args=(), returncode=0, stdout=json.dumps(payload), stderr="")


def _failed(stderr="ERROR: boom"):
    return AzCommandResult(args=(), returncode=1, stdout="", stderr=stderr)


def _backend(*results):
    runner = MagicMock()
    runner.run.side_effect = list(results)
    return AzCliBackend(runner), runner


def test_as_item_list_shapes():
    """Bare lists, value pages and None are all accepted."""
    assert_equal(as_item_list(None), [])
    assert_equal(as_item_list([{"a": 1}, "junk"]), [{"a": 1}])
    assert_equal(as_item_list({"value": [{"b": 2}]}), [{"b": 2}])


def test_show_identity():
    """az account show is parsed into an Identity."""
    backend, runner = _backend(
        _ok({"id": "sub-1", "tenantId": TEST_TENANT_ID, "name": "Prod", "user": {"name": "me"}})
    )

    identity = backend.show_identity()

    runner.run.assert_called_once_with(["account", "show", *JSON_SUFFIX])
    assert_equal(identity.subscription_id, "sub-1")
    assert_equal(identity.user_name, "me")


def test_show_identity_failure():
    """A failed identity call raises with the stderr detail."""
    backend, _ = _backend(_failed("ERROR: Please run 'az login' to setup account."))

    with pytest.raises(ManagementCommandError) as exc_info:
        backend.show_identity()

    assert "az login" in exc_info.value.detail


def test_show_identity_empty_output():
    """Empty output from account show is an error, not an identity."""
    backend, _ = _backend(AzCommandResult(args=(), returncode=0, stdout="  ", stderr=""))

    with pytest.raises(ManagementCommandError):
        backend.show_identity()


def test_list_subscriptions_default_and_all_tenants():
    """The all-tenants listing adds --all."""
    payload = [{"id": "sub-1", "tenantId": TEST_TENANT_ID, "name": "Prod", "state": "Enabled"}]
    backend, runner = _backend(_ok(payload), _ok(payload))

    default = backend.list_subscriptions()
    everywhere = backend.list_subscriptions(all_tenants=True)

    first_args = runner.run.call_args_list[0].args[0]
    second_args = runner.run.call_args_list[1].args[0]
    assert "--all" not in first_args
    assert_equal(second_args[:3], ["account", "list", "--all"])
    assert "[?state=='Enabled']" in second_args
    assert_equal(default[0].subscription_id, "sub-1")
    assert_equal(len(everywhere), 1)


def test_set_subscription():
    """az account set is called with the subscription id."""
    backend, runner = _backend(AzCommandResult(args=(), returncode=0, stdout="", stderr=""))

    backend.set_subscription(make_subscription("sub-9"))

    runner.run.assert_called_once_with(["account", "set", "--subscription", "sub-9", *JSON_SUFFIX])


def test_set_subscription_failure():
    """A failed context switch raises."""
    backend, _ = _backend(_failed("ERROR: The subscription of 'sub-9' doesn't exist"))

    with pytest.raises(ManagementCommandError) as exc_info:
        backend.set_subscription(make_subscription("sub-9"))

    assert_equal(exc_info.value.operation, "az account set")


def test_list_capacities():
    """Capacities are parsed and tagged with their subscription."""
    payload = [
        {"id": capacity_id("sub-1", "cap1"), "name": "cap1", "sku": {"name": "F8"}, "state": "Active"}
    ]
    backend, runner = _backend(_ok(payload))

    capacities = backend.list_capacities(make_subscription("sub-1"))

    runner.run.assert_called_once_with(["fabric", "capacity", "list", *JSON_SUFFIX])
    assert_equal(len(capacities), 1)
    assert_equal(capacities[0].subscription_id, "sub-1")
    assert_equal(capacities[0].sku_name, "F8")


def test_list_capacities_empty_output():
    """Empty output means no capacities."""
    backend, _ = _backend(AzCommandResult(args=(), returncode=0, stdout="", stderr=""))
    assert_equal(backend.list_capacities(make_subscription("sub-1")), ())


def test_list_capacities_unparseable_output():
    """Garbage output raises a recoverable error."""
    backend, _ = _backend(AzCommandResult(args=(), returncode=0, stdout="not json", stderr=""))

    with pytest.raises(ManagementCommandError) as exc_info:
        backend.list_capacities(make_subscription("sub-1"))

    assert "unparseable" in exc_info.value.detail


def test_list_reservation_orders_and_reservations():
    """Orders are listed once and expanded by order GUID."""
    orders_payload = [
        {
            "id": "/providers/microsoft.capacity/reservationOrders/O1",
            "name": "O1",
            "displayName": "Fabric reservation",
        }
    ]
    items_payload = [
        {
            "id": "/providers/microsoft.capacity/reservationOrders/O1/reservations/R1",
            "sku": {"name": "Fabric_Capacity_CU_Hour"},
            "properties": {"quantity": 2, "provisioningState": "Succeeded"},
        }
    ]
    backend, runner = _backend(_ok(orders_payload), _ok(items_payload))

    orders = backend.list_reservation_orders()
    items = backend.list_reservations(make_order("O1"))

    assert_equal(orders[0].order_key, "O1")
    assert_equal(
        runner.run.call_args_list[1].args[0],
        ["reservations", "reservation", "list", "--reservation-order-id", "O1", *JSON_SUFFIX],
    )
    assert_equal(items[0].order_id, make_order("O1").order_id)
    assert_equal(items[0].quantity, 2.0)


def test_list_reservation_orders_failure():
    """Permission failures surface as ManagementCommandError."""
    backend, _ = _backend(_failed("ERROR: (AuthorizationFailed) no access"))

    with pytest.raises(ManagementCommandError) as exc_info:
        backend.list_reservation_orders()

    assert "AuthorizationFailed" in str(exc_info.value)
