"""
Pushbullet API wrapper.

Provides a thin interface to the Pushbullet v2 REST API for:
- Issuing authenticated GET/POST/DELETE requests
- Classifying every response before handing its payload back
- Creating pushes, deleting pushes and uploading files
- Sending SMS through a phone linked to the account

Network failures are reported as low-level transport statuses instead of
exceptions so that the response classifier is the single place deciding
whether a call failed.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Any, Optional

import requests
from requests.exceptions import RequestException

from pushbullet_cli import __version__
from pushbullet_cli.api.classifier import (
    TRANSPORT_OK,
    Response,
    classify,
    raise_for_classification,
)
from pushbullet_cli.errors import AuthFailure, MalformedInput, TransportFailure

DEFAULT_API_URL = "https://api.pushbullet.com/v2"

# HTTP timeout configuration
DEFAULT_TIMEOUT = 30.0  # seconds

# Low-level transport statuses (curl-compatible codes)
TRANSPORT_ERROR = 1
TRANSPORT_CONNECTION_ERROR = 7
TRANSPORT_TIMEOUT = 28

USER_AGENT = f"pushbullet-cli/{__version__}"

logger = logging.getLogger(__name__)


def transport_status(error: RequestException) -> int:
    """Map a requests exception to a low-level transport status."""
    # ConnectTimeout is both; report it as a timeout
    if isinstance(error, requests.Timeout):
        return TRANSPORT_TIMEOUT
    if isinstance(error, requests.ConnectionError):
        return TRANSPORT_CONNECTION_ERROR
    return TRANSPORT_ERROR


class PushbulletAPI:
    """
    Pushbullet REST API wrapper.

    Attributes:
        api_key: Access token sent in the Access-Token header
        base_url: API root URL
        timeout: Per-request timeout in seconds

    Usage:
        api = PushbulletAPI(api_key)

        # Raw exchange, classified by the caller
        response = api.request("GET", "devices", params={"active": "true"})

        # Classified exchange returning the parsed payload
        me = api.call("GET", "users/me")

        # Send a note to every device
        api.create_push({"type": "note", "title": "Hi", "body": "there"})
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the API wrapper.

        Args:
            api_key: Pushbullet access token
            base_url: API root URL (default https://api.pushbullet.com/v2)
            timeout: Request timeout in seconds (default 30)

        Raises:
            AuthFailure: If no API key is given
        """
        if not api_key:
            raise AuthFailure(
                "No API key configured. Set PB_API_KEY in the environment "
                "or in the configuration file."
            )
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        """Get or create the authenticated HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(
                {"Access-Token": self.api_key, "User-Agent": USER_AGENT}
            )
        return self._session

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> Response:
        """
        Perform one HTTP exchange.

        Never raises for network problems: the returned Response carries a
        non-zero transport status instead.

        Args:
            method: HTTP method (GET, POST or DELETE)
            endpoint: Endpoint path relative to the API root (e.g. "pushes")
            params: Query parameters, URL-encoded as given
            json_body: JSON request body for mutating calls

        Returns:
            Response with the body text and transport status
        """
        logger.debug(f"{method} {endpoint} params={params}")

        try:
            http_response = self.session.request(
                method,
                self._url(endpoint),
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
        except RequestException as e:
            status = transport_status(e)
            logger.warning(
                f"{method} {endpoint} failed (transport status {status}): {e}"
            )
            return Response(body="", status=status, endpoint=endpoint)

        logger.debug(f"{method} {endpoint} -> HTTP {http_response.status_code}")
        return Response(body=http_response.text, status=TRANSPORT_OK, endpoint=endpoint)

    def call(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Perform one classified exchange and return its payload.

        Raises:
            PushbulletError: The subclass matching the classified failure
        """
        response = self.request(method, endpoint, params=params, json_body=json_body)
        classification = classify(response.body, response.status, endpoint)
        raise_for_classification(classification)
        return classification.payload or {}

    def get_user(self) -> dict[str, Any]:
        """Return the account the access token belongs to."""
        return self.call("GET", "users/me")

    def create_push(self, push: dict[str, Any]) -> dict[str, Any]:
        """
        Create a push.

        Args:
            push: Push object (type, title, body, url, file fields and at most
                  one of device_iden, email, channel_tag)

        Returns:
            The created push as returned by the server
        """
        created = self.call("POST", "pushes", json_body=push)
        logger.info(f"Created {push.get('type')} push {created.get('iden')}")
        return created

    def delete_push(self, iden: str) -> None:
        """Delete a single push."""
        self.call("DELETE", f"pushes/{iden}")
        logger.info(f"Deleted push {iden}")

    def delete_all_pushes(self) -> None:
        """Delete every push on the account."""
        self.call("DELETE", "pushes")
        logger.info("Deleted all pushes")

    def upload_file(self, path: Path) -> dict[str, Any]:
        """
        Upload a file so it can be attached to a file push.

        Args:
            path: Regular file to upload

        Returns:
            Dictionary with file_name, file_type and file_url

        Raises:
            MalformedInput: If path is not a regular file
            TransportFailure: If the upload itself fails
        """
        if not path.is_file():
            raise MalformedInput(f"Not a regular file: {path}")

        file_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        upload = self.call(
            "POST",
            "upload-request",
            json_body={"file_name": path.name, "file_type": file_type},
        )

        logger.debug(f"Uploading {path} to {upload['upload_url']}")
        try:
            with open(path, "rb") as fh:
                http_response = requests.post(
                    upload["upload_url"],
                    data=upload.get("data") or {},
                    files={"file": fh},
                    headers={"User-Agent": USER_AGENT},
                    timeout=self.timeout,
                )
            http_response.raise_for_status()
        except RequestException as e:
            raise TransportFailure(
                f"File upload failed: {e}", status=transport_status(e)
            ) from e

        return {
            "file_name": upload.get("file_name", path.name),
            "file_type": upload.get("file_type", file_type),
            "file_url": upload["file_url"],
        }

    def send_sms(self, device_iden: str, number: str, message: str) -> dict[str, Any]:
        """
        Send an SMS through an SMS-capable device.

        Args:
            device_iden: Identifier of the phone that sends the message
            number: Recipient phone number
            message: Message text
        """
        body = {
            "data": {
                "target_device_iden": device_iden,
                "addresses": [number],
                "message": message,
            }
        }
        result = self.call("POST", "texts", json_body=body)
        logger.info(f"Queued SMS to {number} via {device_iden}")
        return result
