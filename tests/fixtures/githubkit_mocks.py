"""Helpers for standing in for githubkit models, responses and errors."""

from datetime import datetime
from typing import Any
from unittest.mock import MagicMock

from githubkit.exception import RequestFailed


async def async_iter(items):
    """Convert a list to an async iterator for mocking paginate."""
    for item in items:
        yield item


def as_model(data: dict[str, Any]) -> MagicMock:
    """MagicMock that behaves like a githubkit model."""
    mock = MagicMock()
    mock.model_dump.return_value = data
    return mock


def as_response(data: dict[str, Any]) -> MagicMock:
    response = MagicMock()
    response.parsed_data.model_dump.return_value = data
    return response


def quota_response(remaining: int, limit: int, reset_at: datetime) -> MagicMock:
    """GET /rate_limit response for the core pool."""
    core = {"limit": limit, "remaining": remaining, "reset": int(reset_at.timestamp())}
    return as_response({"resources": {"core": core}})


def request_failed(status_code: int, headers: dict[str, str] | None = None) -> RequestFailed:
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.headers = headers or {}
    return RequestFailed(mock_response)
