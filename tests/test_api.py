"""
Unit tests for the Pushbullet API wrapper.

The HTTP session is replaced with a MagicMock so no network access happens.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from pushbullet_cli.api.client import (
    TRANSPORT_CONNECTION_ERROR,
    TRANSPORT_ERROR,
    TRANSPORT_TIMEOUT,
    USER_AGENT,
    PushbulletAPI,
    transport_status,
)
from pushbullet_cli.errors import (
    AuthFailure,
    MalformedInput,
    ObjectNotFound,
    TransportFailure,
)


def http_response(payload, status_code=200):
    response = MagicMock()
    response.text = payload if isinstance(payload, str) else json.dumps(payload)
    response.status_code = status_code
    return response


@pytest.fixture
def api():
    """PushbulletAPI with a mocked session."""
    client = PushbulletAPI("o.test-token", base_url="https://api.test/v2/")
    client._session = MagicMock()
    return client


class TestInit:
    """Tests for PushbulletAPI construction."""

    def test_requires_api_key(self):
        with pytest.raises(AuthFailure, match="No API key"):
            PushbulletAPI("")

    def test_session_headers(self):
        """Test that the lazily built session carries the token."""
        client = PushbulletAPI("o.token")

        session = client.session

        assert session.headers["Access-Token"] == "o.token"
        assert session.headers["User-Agent"] == USER_AGENT
        assert client.session is session

    def test_base_url_trailing_slash(self, api):
        assert api._url("/pushes") == "https://api.test/v2/pushes"


class TestRequest:
    """Tests for the raw exchange."""

    def test_success(self, api):
        api._session.request.return_value = http_response({"devices": []})

        response = api.request("GET", "devices", params={"active": "true"})

        assert response.status == 0
        assert response.payload == {"devices": []}
        assert response.endpoint == "devices"
        api._session.request.assert_called_once_with(
            "GET",
            "https://api.test/v2/devices",
            params={"active": "true"},
            json=None,
            timeout=api.timeout,
        )

    def test_http_error_status_is_still_a_completed_exchange(self, api):
        """Test that a 401 body is passed on for the classifier to judge."""
        api._session.request.return_value = http_response(
            {"error_code": "invalid_access_token"}, status_code=401
        )

        response = api.request("GET", "users/me")

        assert response.status == 0
        assert "invalid_access_token" in response.body

    @pytest.mark.parametrize(
        "exc,status",
        [
            (requests.Timeout("slow"), TRANSPORT_TIMEOUT),
            (requests.ConnectionError("refused"), TRANSPORT_CONNECTION_ERROR),
            (requests.RequestException("other"), TRANSPORT_ERROR),
        ],
    )
    def test_network_failures_become_statuses(self, api, exc, status):
        """Test that requests exceptions map to transport statuses."""
        api._session.request.side_effect = exc

        response = api.request("GET", "pushes")

        assert response.status == status
        assert response.body == ""


class TestCall:
    """Tests for the classified exchange and helpers."""

    def test_call_returns_payload(self, api):
        api._session.request.return_value = http_response(
            {"iden": "u1", "email": "me@example.com", "created": 1.0}
        )

        assert api.get_user()["email"] == "me@example.com"

    def test_call_raises_classified_error(self, api):
        api._session.request.return_value = http_response(
            {
                "error": {
                    "code": "not_found",
                    "message": "The resource could not be found.",
                }
            },
            status_code=404,
        )

        with pytest.raises(ObjectNotFound):
            api.delete_push("missing")

    def test_call_raises_transport_failure(self, api):
        api._session.request.side_effect = requests.Timeout("slow")

        with pytest.raises(TransportFailure) as exc_info:
            api.get_user()
        assert exc_info.value.status == TRANSPORT_TIMEOUT

    def test_create_push(self, api):
        api._session.request.return_value = http_response(
            {"iden": "p1", "type": "note", "created": 1.0}
        )

        created = api.create_push({"type": "note", "title": "t"})

        assert created["iden"] == "p1"
        _args, kwargs = api._session.request.call_args
        assert kwargs["json"] == {"type": "note", "title": "t"}

    def test_delete_push(self, api):
        api._session.request.return_value = http_response({})

        api.delete_push("p1")

        args, _kwargs = api._session.request.call_args
        assert args == ("DELETE", "https://api.test/v2/pushes/p1")

    def test_delete_all_pushes(self, api):
        api._session.request.return_value = http_response({})

        api.delete_all_pushes()

        args, _kwargs = api._session.request.call_args
        assert args == ("DELETE", "https://api.test/v2/pushes")

    def test_send_sms(self, api):
        api._session.request.return_value = http_response(
            {"iden": "t1", "created": 1.0, "data": {}}
        )

        api.send_sms("phone1", "+15551234", "hello")

        _args, kwargs = api._session.request.call_args
        assert kwargs["json"] == {
            "data": {
                "target_device_iden": "phone1",
                "addresses": ["+15551234"],
                "message": "hello",
            }
        }


class TestUploadFile:
    """Tests for the two-step file upload."""

    UPLOAD_REQUEST = {
        "file_name": "notes.txt",
        "file_type": "text/plain",
        "upload_url": "https://upload.test/abc",
        "file_url": "https://files.test/abc/notes.txt",
        "data": {"key": "value"},
    }

    def test_upload(self, api, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        api._session.request.return_value = http_response(self.UPLOAD_REQUEST)

        with patch("pushbullet_cli.api.client.requests.post") as mock_post:
            mock_post.return_value = MagicMock()
            result = api.upload_file(path)

        assert result == {
            "file_name": "notes.txt",
            "file_type": "text/plain",
            "file_url": "https://files.test/abc/notes.txt",
        }
        _args, kwargs = api._session.request.call_args
        assert kwargs["json"] == {"file_name": "notes.txt", "file_type": "text/plain"}
        post_args, post_kwargs = mock_post.call_args
        assert post_args == ("https://upload.test/abc",)
        assert post_kwargs["data"] == {"key": "value"}
        assert "file" in post_kwargs["files"]

    def test_upload_rejects_directory(self, api, tmp_path):
        with pytest.raises(MalformedInput, match="Not a regular file"):
            api.upload_file(tmp_path)
        api._session.request.assert_not_called()

    def test_upload_http_error(self, api, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        api._session.request.return_value = http_response(self.UPLOAD_REQUEST)

        with patch("pushbullet_cli.api.client.requests.post") as mock_post:
            mock_post.return_value.raise_for_status.side_effect = requests.HTTPError(
                "403"
            )
            with pytest.raises(TransportFailure) as exc_info:
                api.upload_file(path)

        assert exc_info.value.status == TRANSPORT_ERROR

    def test_upload_connection_error(self, api, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        api._session.request.return_value = http_response(self.UPLOAD_REQUEST)

        with patch("pushbullet_cli.api.client.requests.post") as mock_post:
            mock_post.side_effect = requests.ConnectionError("refused")
            with pytest.raises(TransportFailure) as exc_info:
                api.upload_file(path)

        assert exc_info.value.status == TRANSPORT_CONNECTION_ERROR

    @pytest.mark.parametrize(
        "exc,status",
        [
            (requests.Timeout("slow"), TRANSPORT_TIMEOUT),
            (requests.ConnectTimeout("slow connect"), TRANSPORT_TIMEOUT),
            (requests.RequestException("other"), TRANSPORT_ERROR),
        ],
    )
    def test_upload_failures_use_request_statuses(self, api, tmp_path, exc, status):
        """Test that upload failures map to the same statuses as request()."""
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        api._session.request.return_value = http_response(self.UPLOAD_REQUEST)

        with patch("pushbullet_cli.api.client.requests.post") as mock_post:
            mock_post.side_effect = exc
            with pytest.raises(TransportFailure) as exc_info:
                api.upload_file(path)

        assert exc_info.value.status == status


class TestTransportStatus:
    """Tests for mapping requests exceptions to transport statuses."""

    @pytest.mark.parametrize(
        "exc,status",
        [
            (requests.ReadTimeout("read"), TRANSPORT_TIMEOUT),
            (requests.ConnectTimeout("connect"), TRANSPORT_TIMEOUT),
            (requests.ConnectionError("refused"), TRANSPORT_CONNECTION_ERROR),
            (requests.HTTPError("500"), TRANSPORT_ERROR),
            (requests.TooManyRedirects("loop"), TRANSPORT_ERROR),
        ],
    )
    def test_mapping(self, exc, status):
        assert transport_status(exc) == status
