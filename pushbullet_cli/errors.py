"""
Error taxonomy for pushbullet_cli.

Every failure the client can surface is a subclass of PushbulletError and
carries the process exit code the CLI uses when the error ends a command.
"""

from typing import Any, Optional

# Process exit codes, one per failure kind
EXIT_MALFORMED_INPUT = 2
EXIT_TRANSPORT_FAILURE = 3
EXIT_AUTH_FAILURE = 4
EXIT_UNKNOWN_TARGET = 5
EXIT_OBJECT_NOT_FOUND = 6
EXIT_AMBIGUOUS_QUERY = 7
EXIT_NO_SUCH_DEVICE = 8
EXIT_UNRECOGNIZED_RESPONSE = 9


class PushbulletError(Exception):
    """Base class for all client failures."""

    exit_code = 1

    def __init__(self, message: str, payload: Optional[str] = None):
        super().__init__(message)
        self.payload = payload


class TransportFailure(PushbulletError):
    """Raised when the HTTP call itself failed (network or socket level)."""

    exit_code = EXIT_TRANSPORT_FAILURE

    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.status = status


class AuthFailure(PushbulletError):
    """Raised when the access token is missing or rejected."""

    exit_code = EXIT_AUTH_FAILURE


class UnknownTarget(PushbulletError):
    """Raised when the server rejects a device or channel reference."""

    exit_code = EXIT_UNKNOWN_TARGET


class ObjectNotFound(PushbulletError):
    """Raised when a referenced push or object does not exist."""

    exit_code = EXIT_OBJECT_NOT_FOUND


class MalformedInput(PushbulletError):
    """Raised for invalid user input such as a non-numeric count."""

    exit_code = EXIT_MALFORMED_INPUT


class UnrecognizedResponse(PushbulletError):
    """Raised when a response matches no known success or error shape."""

    exit_code = EXIT_UNRECOGNIZED_RESPONSE


class ResolutionError(PushbulletError):
    """Base class for device resolution failures."""

    def __init__(
        self, message: str, query: str, candidates: Optional[list[Any]] = None
    ):
        super().__init__(message)
        self.query = query
        self.candidates = candidates or []


class NoSuchDevice(ResolutionError):
    """Raised when a query matches no active device."""

    exit_code = EXIT_NO_SUCH_DEVICE


class AmbiguousQuery(ResolutionError):
    """Raised when a query matches more than one active device."""

    exit_code = EXIT_AMBIGUOUS_QUERY


__all__ = [
    "PushbulletError",
    "TransportFailure",
    "AuthFailure",
    "UnknownTarget",
    "ObjectNotFound",
    "MalformedInput",
    "UnrecognizedResponse",
    "ResolutionError",
    "NoSuchDevice",
    "AmbiguousQuery",
]
