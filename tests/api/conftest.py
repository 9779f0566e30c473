"""Shared fixtures for API tests: actor claims headers."""

import pytest


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Actor-Role": "admin"}


@pytest.fixture
def jkt_headers() -> dict[str, str]:
    """Claims of a manager assigned to branch jkt."""
    return {"X-Actor-Role": "manager", "X-Actor-Branch": "jkt"}


@pytest.fixture
def sby_headers() -> dict[str, str]:
    """Claims of a manager assigned to branch sby."""
    return {"X-Actor-Role": "manager", "X-Actor-Branch": "sby"}
