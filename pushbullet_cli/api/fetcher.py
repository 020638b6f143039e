"""
Cursor-following fetcher for Pushbullet listing endpoints.

Listing endpoints return one page at a time together with an opaque cursor.
The fetcher keeps requesting pages until the classifier says to stop, then
hands back the whole collection in server order.
"""

import logging
from typing import Any, Optional

from pushbullet_cli.api.classifier import (
    CURSOR_KEY,
    Outcome,
    classify,
    raise_for_classification,
)
from pushbullet_cli.api.client import PushbulletAPI
from pushbullet_cli.models import Item

logger = logging.getLogger(__name__)


def collection_name(endpoint: str) -> str:
    """Return the payload key holding an endpoint's items ("v2/pushes" -> "pushes")."""
    return endpoint.strip("/").rsplit("/", 1)[-1]


# Type tag for items that carry neither "type" nor "kind"
DEFAULT_ITEM_TYPES = {
    "pushes": "push",
    "devices": "device",
    "chats": "chat",
    "contacts": "contact",
    "subscriptions": "subscription",
    "channels": "channel",
    "texts": "text",
}


class PaginatedFetcher:
    """
    Turns a paged listing endpoint into one Collection.

    Usage:
        fetcher = PaginatedFetcher(api)
        devices = fetcher.fetch_all("devices", {"active": "true"})
        pushes = fetcher.fetch_all("pushes", {"modified_after": 1000})
    """

    def __init__(self, api: PushbulletAPI):
        self.api = api

    def fetch_all(
        self,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        cursor: Optional[str] = None,
        collection: Optional[str] = None,
    ) -> list[Item]:
        """
        Fetch every page of a listing endpoint.

        Args:
            endpoint: Endpoint path (e.g. "pushes", "devices", "chats")
            params: Query parameters sent unchanged with every request
            cursor: Optional cursor to start from instead of the first page
            collection: Payload key holding the items (defaults to the
                        endpoint's last path segment)

        Returns:
            All items across pages, in server order

        Raises:
            PushbulletError: As soon as any page is classified as a failure;
                             items from earlier pages are discarded
        """
        key = collection or collection_name(endpoint)
        default_type = DEFAULT_ITEM_TYPES.get(key, key)
        items: list[Item] = []
        page = 0

        while True:
            request_params = dict(params or {})
            if cursor:
                request_params[CURSOR_KEY] = cursor

            page += 1
            response = self.api.request("GET", endpoint, params=request_params)
            classification = classify(response.body, response.status, endpoint)
            raise_for_classification(classification)

            payload = classification.payload or {}
            for entry in payload.get(key) or []:
                try:
                    items.append(
                        Item.from_api_response(entry, default_type=default_type)
                    )
                except ValueError as e:
                    logger.warning(f"Skipping unparseable {default_type}: {e}")

            logger.debug(
                f"Page {page} of {endpoint}: {classification.rule}, "
                f"{len(items)} items so far"
            )

            if classification.outcome is not Outcome.CONTINUE:
                break
            cursor = classification.cursor

        logger.info(f"Fetched {len(items)} {key} in {page} page(s)")
        return items
