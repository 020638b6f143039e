"""
Item data model for Pushbullet records.

Pushes, devices and chats all come back from the API as JSON objects that
share a handful of fields (iden, active, created, modified). Item exposes
those fields directly and keeps the full object in ``raw`` so fields the
client does not interpret survive untouched.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Item:
    """
    A single push, device or chat record.

    Attributes:
        iden: Server-assigned identifier
        type: Type tag (note/link/file for pushes, device type or kind otherwise)
        title: Push title, device nickname or chat partner name
        modified: Last modification time as a Unix timestamp
        created: Creation time as a Unix timestamp
        active: False once the record has been deleted on the server
        raw: The complete object as returned by the API

    Usage:
        item = Item.from_api_response(push_json, default_type="push")
        if item.active and item.url:
            print(item.url)
    """

    iden: str
    type: str
    title: Optional[str] = None
    modified: Optional[float] = None
    created: Optional[float] = None
    active: bool = True
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api_response(
        cls, data: dict[str, Any], default_type: Optional[str] = None
    ) -> "Item":
        """
        Create an Item from an API object.

        Args:
            data: Dictionary from the Pushbullet API
            default_type: Type to use when the object has neither ``type``
                          nor ``kind`` (chats, for instance)

        Returns:
            Item populated from the object

        Raises:
            ValueError: If the object has no identifier or no type can be derived
        """
        iden = data.get("iden")
        if not iden:
            raise ValueError(f"Object has no iden: {data!r}")

        item_type = data.get("type") or data.get("kind") or default_type
        if not item_type:
            raise ValueError(f"Object {iden} has no type")

        with_ = data.get("with") or {}
        title = data.get("title") or data.get("nickname") or with_.get("name")

        return cls(
            iden=iden,
            type=item_type,
            title=title,
            modified=_as_timestamp(data.get("modified")),
            created=_as_timestamp(data.get("created")),
            active=bool(data.get("active", True)),
            raw=dict(data),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Return a raw field, including ones the model does not interpret."""
        return self.raw.get(key, default)

    @property
    def nickname(self) -> Optional[str]:
        return self.raw.get("nickname")

    @property
    def body(self) -> Optional[str]:
        return self.raw.get("body")

    @property
    def url(self) -> Optional[str]:
        return self.raw.get("url")

    @property
    def file_name(self) -> Optional[str]:
        return self.raw.get("file_name")

    @property
    def file_url(self) -> Optional[str]:
        return self.raw.get("file_url")

    @property
    def email(self) -> Optional[str]:
        with_ = self.raw.get("with") or {}
        return with_.get("email") or self.raw.get("email")

    @property
    def display_name(self) -> str:
        """Human-readable name, falling back to the identifier."""
        return self.title or self.email or self.iden


def _as_timestamp(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
