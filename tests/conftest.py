"""
Shared fixtures for the pushbullet_cli test suite.

Provides stand-ins for the HTTP layer: a scripted API that replays a fixed
list of response bodies, and a small in-memory remote that serves pushes
the way the real listing endpoint does (modified_after, active, cursor).
"""

import json
import logging
from typing import Any, Optional

import pytest

from pushbullet_cli.api.classifier import Response
from pushbullet_cli.utils.logging import ROOT_LOGGER

# Every collection key the real API returns on a listing call
ALL_COLLECTIONS = (
    "accounts",
    "blocks",
    "channels",
    "chats",
    "clients",
    "contacts",
    "devices",
    "grants",
    "pushes",
    "profiles",
    "subscriptions",
    "texts",
)


def build_push(iden: str, modified: float, **fields: Any) -> dict[str, Any]:
    push = {
        "iden": iden,
        "type": "note",
        "active": True,
        "created": modified,
        "modified": modified,
        "title": f"Push {iden}",
    }
    push.update(fields)
    return push


def build_device(iden: str, nickname: Optional[str], **fields: Any) -> dict[str, Any]:
    device = {
        "iden": iden,
        "nickname": nickname,
        "type": "android",
        "kind": "android",
        "active": True,
        "created": 1000.0,
        "modified": 1000.0,
    }
    device.update(fields)
    return device


def empty_listing(cursor: Optional[str] = None) -> dict[str, Any]:
    payload: dict[str, Any] = {key: [] for key in ALL_COLLECTIONS}
    if cursor:
        payload["cursor"] = cursor
    return payload


class ScriptedAPI:
    """Replays queued bodies in order and records every request."""

    def __init__(self, pages: list[Any]):
        self.pages = list(pages)
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> Response:
        self.calls.append((method, endpoint, dict(params or {})))
        page = self.pages.pop(0)
        if isinstance(page, Response):
            return page
        body = page if isinstance(page, str) else json.dumps(page)
        return Response(body=body, endpoint=endpoint)


class FakeRemote:
    """In-memory pushes endpoint honouring modified_after, active and cursor."""

    def __init__(self, pushes: list[dict[str, Any]], page_size: int = 2):
        self.pushes = pushes
        self.page_size = page_size
        self.calls: list[dict[str, Any]] = []

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> Response:
        params = dict(params or {})
        self.calls.append(params)

        after = float(params.get("modified_after", 0))
        matching = [
            push
            for push in self.pushes
            if push["modified"] > after
            and (params.get("active") != "true" or push.get("active", True))
        ]
        matching.sort(key=lambda p: p["modified"], reverse=True)

        start = int(params.get("cursor") or 0)
        payload: dict[str, Any] = {endpoint: matching[start : start + self.page_size]}
        if start + self.page_size < len(matching):
            payload["cursor"] = str(start + self.page_size)
        return Response(body=json.dumps(payload), endpoint=endpoint)


@pytest.fixture
def make_push():
    """Factory for push objects as the API returns them."""
    return build_push


@pytest.fixture
def make_device():
    """Factory for device objects as the API returns them."""
    return build_device


@pytest.fixture
def make_empty_listing():
    """Factory for the all-collections-empty listing payload."""
    return empty_listing


@pytest.fixture
def scripted_api():
    """Factory for an API that replays the given bodies."""
    return ScriptedAPI


@pytest.fixture
def fake_remote():
    """Factory for an in-memory pushes endpoint."""
    return FakeRemote


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep real credentials and config directories out of every test."""
    monkeypatch.delenv("PB_API_KEY", raising=False)
    monkeypatch.delenv("PUSHBULLET_CONFIG_FILE", raising=False)
    monkeypatch.delenv("PUSHBULLET_LOG_FILE", raising=False)
    monkeypatch.delenv("PUSHBULLET_DEBUG", raising=False)
    monkeypatch.delenv("PUSHBULLET_LOG_LEVEL", raising=False)
    monkeypatch.setenv("PUSHBULLET_CONFIG_DIR", str(tmp_path / "config"))


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers setup_logging attached so they never outlive a test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.disabled = False
