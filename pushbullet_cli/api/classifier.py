"""
Response classification for Pushbullet API payloads.

The API has no structured error envelope that reliably separates failures
from successes, so every response body is matched against known sentinel
shapes. The checks live in RULES, an ordered list evaluated top to bottom;
the first rule whose predicate matches decides the outcome. A response that
passes every rule is a success, and pagination continues only when it
carries a cursor.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pushbullet_cli.errors import (
    AuthFailure,
    ObjectNotFound,
    TransportFailure,
    UnknownTarget,
    UnrecognizedResponse,
)

# Low-level transport status meaning "the HTTP exchange completed"
TRANSPORT_OK = 0

# Key carrying the continuation token in listing responses
CURSOR_KEY = "cursor"

# Key present on every object the API creates or returns
CREATED_MARKER = "created"

# Endpoints whose successful responses carry a different marker
SUCCESS_MARKERS = {
    "upload-request": "upload_url",
}

# Sentinels for a rejected device or channel reference
TARGET_SENTINELS = (
    "The param 'device_iden' has an invalid value",
    "The param 'channel_tag' has an invalid value",
    "invalid_device",
    "invalid_channel",
)

# Sentinels for a missing or rejected access token
AUTH_SENTINELS = (
    "invalid_access_token",
    "Access token is missing or invalid",
)

# Sentinels for a referenced object that does not exist
NOT_FOUND_SENTINELS = (
    '"not_found"',
    "The resource could not be found",
)

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """What the fetcher should do with a page."""

    CONTINUE = "continue"
    STOP_NORMAL = "stop_normal"
    ABORT_AUTH = "abort_auth"
    ABORT_TARGET = "abort_target"
    ABORT_NOT_FOUND = "abort_not_found"
    ABORT_UNKNOWN = "abort_unknown"

    @property
    def is_abort(self) -> bool:
        return self.name.startswith("ABORT_")


@dataclass
class Response:
    """
    One raw response as seen by the classifier.

    Attributes:
        body: Response body text (empty on transport failure)
        status: Low-level transport status, TRANSPORT_OK on success
        endpoint: Endpoint path the response belongs to (e.g. "pushes")
        payload: Parsed JSON body, or None if the body is not JSON
    """

    body: str
    status: int = TRANSPORT_OK
    endpoint: str = ""
    payload: Any = field(default=None, init=False)

    def __post_init__(self) -> None:
        try:
            self.payload = json.loads(self.body) if self.body else None
        except ValueError:
            self.payload = None

    @property
    def envelope_text(self) -> str:
        """
        Text that error sentinels are matched against.

        For JSON objects this is every top-level field except the item
        collections, so user content inside pushes never looks like an error.
        """
        if not isinstance(self.payload, dict):
            return self.body
        envelope = {
            key: value
            for key, value in self.payload.items()
            if not isinstance(value, list)
        }
        return json.dumps(envelope)


@dataclass
class Classification:
    """
    Result of classifying one response.

    Attributes:
        outcome: Decision for the fetcher
        rule: Name of the rule that decided (for diagnostics)
        cursor: Continuation token when outcome is CONTINUE
        payload: Parsed JSON body (None if not JSON)
        body: Raw body text
        status: Transport status of the call
    """

    outcome: Outcome
    rule: str
    cursor: Optional[str] = None
    payload: Any = None
    body: str = ""
    status: int = TRANSPORT_OK


def _transport_failed(response: Response) -> bool:
    return response.status != TRANSPORT_OK


def _contains_any(sentinels: tuple[str, ...]) -> Callable[[Response], bool]:
    def predicate(response: Response) -> bool:
        text = response.envelope_text
        return any(sentinel in text for sentinel in sentinels)

    return predicate


def _collections(payload: dict[str, Any]) -> list[list[Any]]:
    return [value for value in payload.values() if isinstance(value, list)]


def _is_empty_listing(payload: Any) -> bool:
    """True for a dict whose only content is empty lists (plus any cursor)."""
    if not isinstance(payload, dict):
        return False
    lists = _collections(payload)
    if not lists or any(lists):
        return False
    other_keys = set(payload) - {
        key for key, value in payload.items() if isinstance(value, list)
    }
    return other_keys <= {CURSOR_KEY}


def _empty_without_cursor(response: Response) -> bool:
    payload = response.payload
    return _is_empty_listing(payload) and not payload.get(CURSOR_KEY)


def _empty_with_cursor(response: Response) -> bool:
    payload = response.payload
    return _is_empty_listing(payload) and bool(payload.get(CURSOR_KEY))


def _empty_object(response: Response) -> bool:
    return response.payload == {}


def _has_success_marker(payload: Any, endpoint: str) -> bool:
    if not isinstance(payload, dict):
        return False
    marker = SUCCESS_MARKERS.get(endpoint.rsplit("/", 1)[-1])
    if marker and marker in payload:
        return True
    if CREATED_MARKER in payload:
        return True
    return any(
        isinstance(entry, dict) and CREATED_MARKER in entry
        for collection in _collections(payload)
        for entry in collection
    )


def _unrecognized(response: Response) -> bool:
    return not _has_success_marker(response.payload, response.endpoint)


# Ordered (name, predicate, outcome) rules; first match wins
RULES: list[tuple[str, Callable[[Response], bool], Outcome]] = [
    ("transport_failure", _transport_failed, Outcome.ABORT_UNKNOWN),
    ("invalid_target", _contains_any(TARGET_SENTINELS), Outcome.ABORT_TARGET),
    ("invalid_access_token", _contains_any(AUTH_SENTINELS), Outcome.ABORT_AUTH),
    ("not_found", _contains_any(NOT_FOUND_SENTINELS), Outcome.ABORT_NOT_FOUND),
    ("empty_listing", _empty_without_cursor, Outcome.STOP_NORMAL),
    # A cursor pointing at an empty tail ends pagination too
    ("empty_listing_with_cursor", _empty_with_cursor, Outcome.STOP_NORMAL),
    ("empty_object", _empty_object, Outcome.STOP_NORMAL),
    ("unrecognized", _unrecognized, Outcome.ABORT_UNKNOWN),
]


def classify(
    body: str, status: int = TRANSPORT_OK, endpoint: str = ""
) -> Classification:
    """
    Classify one response body.

    Args:
        body: Raw response body text
        status: Low-level transport status of the call (TRANSPORT_OK on success)
        endpoint: Endpoint path, used to pick endpoint-specific success markers

    Returns:
        Classification with the outcome and, for CONTINUE, the next cursor

    Example:
        >>> classify('{"pushes": [], "cursor": "abc"}').outcome
        <Outcome.STOP_NORMAL: 'stop_normal'>
    """
    response = Response(body=body, status=status, endpoint=endpoint)

    for name, predicate, outcome in RULES:
        if predicate(response):
            logger.debug(
                f"Response from '{endpoint}' matched rule {name}: {outcome.value}"
            )
            return Classification(
                outcome=outcome,
                rule=name,
                payload=response.payload,
                body=body,
                status=status,
            )

    cursor = response.payload.get(CURSOR_KEY) or None
    return Classification(
        outcome=Outcome.CONTINUE if cursor else Outcome.STOP_NORMAL,
        rule="success",
        cursor=cursor,
        payload=response.payload,
        body=body,
        status=status,
    )


def raise_for_classification(classification: Classification) -> None:
    """
    Raise the error matching an abort outcome; do nothing otherwise.

    Raises:
        TransportFailure: The HTTP exchange itself failed
        AuthFailure: Token missing or rejected
        UnknownTarget: Device or channel reference rejected
        ObjectNotFound: Referenced object absent
        UnrecognizedResponse: Payload matched no known shape
    """
    outcome = classification.outcome
    body = classification.body

    if not outcome.is_abort:
        return
    if outcome is Outcome.ABORT_UNKNOWN and classification.status != TRANSPORT_OK:
        raise TransportFailure(
            f"Request failed with transport status {classification.status}",
            status=classification.status,
        )
    if outcome is Outcome.ABORT_AUTH:
        raise AuthFailure("Access token is missing or invalid.", payload=body)
    if outcome is Outcome.ABORT_TARGET:
        raise UnknownTarget("You specified an unknown device or channel.", payload=body)
    if outcome is Outcome.ABORT_NOT_FOUND:
        raise ObjectNotFound("The requested resource could not be found.", payload=body)
    if outcome is Outcome.ABORT_UNKNOWN:
        raise UnrecognizedResponse(
            f"Error submitting the request. The response was: {body}", payload=body
        )
