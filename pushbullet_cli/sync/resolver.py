"""
Push target resolution.

Maps the short string a user types ("office", "bob@example.com", "all") to
exactly one push target. Device matching is a case-insensitive substring
match on nicknames of active devices, and it refuses to guess: a query that
matches several devices fails and lists them.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pushbullet_cli.errors import AmbiguousQuery, NoSuchDevice
from pushbullet_cli.models import Item

# Target kinds
TARGET_ALL = "all"
TARGET_DEVICE = "device"
TARGET_EMAIL = "email"
TARGET_CHANNEL = "channel"

# Query that addresses every device on the account
BROADCAST_QUERY = "all"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedTarget:
    """
    A single push target.

    Attributes:
        kind: One of "all", "device", "email" or "channel"
        iden: Device identifier, email address or channel tag (None for "all")
        name: Display name for messages
    """

    kind: str
    iden: Optional[str]
    name: str

    def push_fields(self) -> dict[str, str]:
        """Return the push body fields that address this target."""
        if self.kind == TARGET_DEVICE:
            return {"device_iden": self.iden or ""}
        if self.kind == TARGET_EMAIL:
            return {"email": self.iden or ""}
        if self.kind == TARGET_CHANNEL:
            return {"channel_tag": self.iden or ""}
        return {}


def is_email_target(query: str) -> bool:
    """An '@' marks a contact/email target, never a device query."""
    return "@" in query


def find_candidates(devices: list[Item], query: str) -> list[Item]:
    """Return active devices whose nickname contains query, ignoring case."""
    needle = query.lower()
    return [
        device
        for device in devices
        if device.active and device.nickname and needle in device.nickname.lower()
    ]


def resolve_device(devices: list[Item], query: str) -> ResolvedTarget:
    """
    Resolve a query to exactly one device, or to an email target.

    Args:
        devices: Device collection (inactive devices are ignored)
        query: User-supplied device name fragment or email address

    Returns:
        ResolvedTarget of kind "device" or "email"

    Raises:
        NoSuchDevice: No active device matches
        AmbiguousQuery: More than one active device matches
    """
    if is_email_target(query):
        return ResolvedTarget(kind=TARGET_EMAIL, iden=query, name=query)

    candidates = find_candidates(devices, query)

    if not candidates:
        raise NoSuchDevice(f"No such device: {query}", query=query)

    if len(candidates) > 1:
        names = ", ".join(f"'{c.nickname}'" for c in candidates)
        raise AmbiguousQuery(
            f"'{query}' matches {len(candidates)} devices ({names}). "
            "Use a more specific name.",
            query=query,
            candidates=candidates,
        )

    device = candidates[0]
    logger.debug(f"Resolved '{query}' to device {device.iden} ({device.nickname})")
    return ResolvedTarget(
        kind=TARGET_DEVICE, iden=device.iden, name=device.nickname or device.iden
    )


def resolve_push_target(devices: list[Item], query: str) -> ResolvedTarget:
    """
    Resolve a push target the way the push command addresses it.

    "all" addresses every device. Anything that is neither an email nor a
    device name is taken to be a channel tag; the server rejects unknown tags.

    Raises:
        AmbiguousQuery: More than one active device matches
    """
    if query.lower() == BROADCAST_QUERY:
        return ResolvedTarget(kind=TARGET_ALL, iden=None, name="all devices")

    try:
        return resolve_device(devices, query)
    except NoSuchDevice:
        logger.debug(f"'{query}' is not a device; treating it as a channel tag")
        return ResolvedTarget(kind=TARGET_CHANNEL, iden=query, name=f"channel {query}")
