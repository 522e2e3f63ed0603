"""Shared pytest fixtures for test files."""

from __future__ import annotations

import pytest

from tests.fabric_audit_test_utils import FakeBackend, build_two_subscription_backend

PREFLIGHT_MODULE = "fabric_cost_toolkit.scripts.audit.fabric_reservation_audit.preflight"


@pytest.fixture(autouse=True)
def isolated_env_file(tmp_path, monkeypatch):
    """Point .env loading at an empty temp file so a developer's ~/.env never leaks in."""
    env_file = tmp_path / ".env"
    env_file.write_text("")
    monkeypatch.setenv("FABRIC_AUDIT_ENV_FILE", str(env_file))
    for name in (
        "FABRIC_AUDIT_BACKEND",
        "FABRIC_AUDIT_RESOURCE_TYPE",
        "FABRIC_AUDIT_BRAND",
        "FABRIC_AUDIT_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    yield str(env_file)


@pytest.fixture(name="az_on_path")
def fixture_az_on_path(monkeypatch):
    """Pretend az is installed at /usr/bin/az."""
    monkeypatch.setattr(f"{PREFLIGHT_MODULE}.ensure_az_on_path", lambda **_: "/usr/bin/az")
    return "/usr/bin/az"


@pytest.fixture(name="fake_backend")
def fixture_fake_backend():
    """An empty scripted backend."""
    return FakeBackend()


@pytest.fixture(name="scenario_backend")
def fixture_scenario_backend():
    """Two subscriptions, one reserved capacity, one order with R1 and R2."""
    return build_two_subscription_backend()
