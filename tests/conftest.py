"""Pytest configuration and shared fixtures.

Raw payload fixtures mirror what the forum service returns:
camelCase keys with a nested ``author`` object.
"""

from typing import Any

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (fake forum service)"
    )


# =============================================================================
# Payload Fixtures
# =============================================================================


@pytest.fixture
def raw_comment() -> dict[str, Any]:
    """Provide a raw comment as returned by the forum service."""
    return {
        "id": 501,
        "threadId": 101,
        "content": "Try the Lego sorting exercise.",
        "authorId": 7,
        "author": {"id": 7, "username": "bob", "email": "bob@example.com", "role": "Teacher"},
        "createdAt": "2025-03-01T10:30:00.000Z",
        "updatedAt": "2025-03-01T10:30:00.000Z",
    }


@pytest.fixture
def raw_thread(raw_comment: dict[str, Any]) -> dict[str, Any]:
    """Provide a raw thread with one comment."""
    return {
        "id": 101,
        "title": "Array methods",
        "content": "How do you teach map and filter?",
        "attachment": None,
        "authorId": 5,
        "author": {"id": 5, "username": "alice", "email": "alice@example.com", "role": "Student"},
        "createdAt": "2025-03-01T10:00:00.000Z",
        "updatedAt": "2025-03-01T10:30:00.000Z",
        "comments": [raw_comment],
    }
