"""
pushbullet_cli.api - Pushbullet API access

HTTP transport, response classification and cursor pagination.
"""

from pushbullet_cli.api.classifier import (
    TRANSPORT_OK,
    Classification,
    Outcome,
    classify,
    raise_for_classification,
)
from pushbullet_cli.api.client import DEFAULT_API_URL, PushbulletAPI
from pushbullet_cli.api.fetcher import PaginatedFetcher

__all__ = [
    "DEFAULT_API_URL",
    "TRANSPORT_OK",
    "Classification",
    "Outcome",
    "PaginatedFetcher",
    "PushbulletAPI",
    "classify",
    "raise_for_classification",
]
