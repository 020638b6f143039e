"""
Unit tests for push target resolution.
"""

import pytest

from pushbullet_cli.errors import AmbiguousQuery, NoSuchDevice
from pushbullet_cli.models import Item
from pushbullet_cli.sync.resolver import (
    TARGET_ALL,
    TARGET_CHANNEL,
    TARGET_DEVICE,
    TARGET_EMAIL,
    ResolvedTarget,
    find_candidates,
    is_email_target,
    resolve_device,
    resolve_push_target,
)


@pytest.fixture
def devices(make_device):
    """The device collection from the documented examples."""
    raw = [
        make_device("d1", "Office PC"),
        make_device("d2", "Home Office"),
        make_device("d3", "Laptop"),
        make_device("d4", "Old Phone", active=False),
        make_device("d5", None),
    ]
    return [Item.from_api_response(d, default_type="device") for d in raw]


class TestResolveDevice:
    """Tests for resolve_device."""

    def test_unique_match(self, devices):
        """Test that 'laptop' resolves to the Laptop device."""
        target = resolve_device(devices, "laptop")

        assert target == ResolvedTarget(kind=TARGET_DEVICE, iden="d3", name="Laptop")

    def test_ambiguous_match(self, devices):
        """Test that 'office' matches two devices and refuses to pick one."""
        with pytest.raises(AmbiguousQuery) as exc_info:
            resolve_device(devices, "office")

        error = exc_info.value
        assert error.query == "office"
        assert sorted(c.iden for c in error.candidates) == ["d1", "d2"]
        assert "'Office PC'" in str(error)
        assert "'Home Office'" in str(error)

    def test_inactive_device_is_ignored(self, devices):
        """Test that 'phone' only matches an inactive device and fails."""
        with pytest.raises(NoSuchDevice) as exc_info:
            resolve_device(devices, "phone")
        assert exc_info.value.query == "phone"

    def test_email_target(self, devices):
        """Test that anything with '@' is an email target."""
        target = resolve_device(devices, "a@b.com")

        assert target.kind == TARGET_EMAIL
        assert target.iden == "a@b.com"

    def test_email_target_without_devices(self):
        """Test that email resolution never looks at the device list."""
        assert resolve_device([], "bob@example.com").kind == TARGET_EMAIL

    def test_exact_name_that_is_also_a_substring_is_ambiguous(self, make_device):
        """Test that an exact nickname does not win over other substring matches."""
        devices = [
            Item.from_api_response(make_device("d1", "Pixel")),
            Item.from_api_response(make_device("d2", "Pixel Tablet")),
        ]
        with pytest.raises(AmbiguousQuery):
            resolve_device(devices, "pixel")


class TestFindCandidates:
    """Tests for the substring matcher."""

    def test_case_insensitive(self, devices):
        assert [d.iden for d in find_candidates(devices, "LAP")] == ["d3"]

    def test_devices_without_nickname_never_match(self, devices):
        assert "d5" not in [d.iden for d in find_candidates(devices, "")]


class TestResolvePushTarget:
    """Tests for resolve_push_target."""

    def test_all(self, devices):
        target = resolve_push_target(devices, "ALL")

        assert target.kind == TARGET_ALL
        assert target.push_fields() == {}

    def test_device(self, devices):
        target = resolve_push_target(devices, "laptop")
        assert target.push_fields() == {"device_iden": "d3"}

    def test_email(self, devices):
        target = resolve_push_target(devices, "a@b.com")
        assert target.push_fields() == {"email": "a@b.com"}

    def test_unknown_name_becomes_channel(self, devices):
        """Test that a non-device name is sent as a channel tag."""
        target = resolve_push_target(devices, "mychannel")

        assert target.kind == TARGET_CHANNEL
        assert target.push_fields() == {"channel_tag": "mychannel"}

    def test_ambiguous_still_fails(self, devices):
        with pytest.raises(AmbiguousQuery):
            resolve_push_target(devices, "office")


class TestIsEmailTarget:
    def test_at_sign(self):
        assert is_email_target("x@y")
        assert not is_email_target("office")
