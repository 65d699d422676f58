# Tests for runway.targets.roblox and adapter creation

from pathlib import Path

import pytest

from runway.config.schema import CloudCredentials, TargetConfig
from runway.exceptions import ConfigError, UnsupportedAssetError
from runway.sync.state import AssetRecord
from runway.targets import create_adapter, uses_durable_state
from runway.targets.base import Asset, PlanOnlyAdapter
from runway.targets.local import LocalAdapter
from runway.targets.roblox import AssetKind, Creator, RobloxAdapter, asset_kind_for


class FakeClient:
    """Records calls in place of RobloxCloudClient."""

    def __init__(self):
        self.created = []
        self.mapped = []
        self.closed = False

    def create_asset(self, **kwargs):
        self.created.append(kwargs)
        return "op-1"

    def wait_for_asset(self, operation_id):
        return "500"

    def get_texture_id(self, asset_id):
        self.mapped.append(asset_id)
        return "501"

    def close(self):
        self.closed = True


def make_asset(identity: str) -> Asset:
    return Asset(identity=identity, path=Path(identity), contents=b"bytes", fingerprint="f" * 64)


class TestAssetKind:
    """Tests for asset_kind_for."""

    @pytest.mark.parametrize(
        "identity,kind",
        [
            ("a/b.png", AssetKind.DECAL_PNG),
            ("b.JPEG", AssetKind.DECAL_JPEG),
            ("c.ogg", AssetKind.AUDIO_OGG),
            ("d.mp3", AssetKind.AUDIO_MP3),
            ("e.fbx", AssetKind.MODEL_FBX),
        ],
    )
    def test_known_extensions(self, identity, kind):
        assert asset_kind_for(identity) == kind

    def test_unsupported(self):
        with pytest.raises(UnsupportedAssetError, match=".txt"):
            asset_kind_for("notes.txt")

    def test_types(self):
        assert AssetKind.AUDIO_OGG.asset_type == "Audio"
        assert AssetKind.DECAL_TGA.is_decal
        assert AssetKind.MODEL_FBX.asset_type == "Model"
        assert AssetKind.DECAL_PNG.content_type == "image/png"


class TestCreator:
    """Tests for Creator."""

    def test_user(self):
        assert Creator(user_id="1").to_payload() == {"userId": "1"}

    def test_group(self):
        assert Creator(group_id="2").to_payload() == {"groupId": "2"}

    def test_requires_exactly_one(self):
        with pytest.raises(ConfigError):
            Creator()
        with pytest.raises(ConfigError):
            Creator(user_id="1", group_id="2")


class TestRobloxAdapter:
    """Tests for RobloxAdapter with a fake client."""

    def test_decal_is_mapped_to_image(self):
        client = FakeClient()
        adapter = RobloxAdapter(client, Creator(group_id="7"))

        record = adapter.sync_one(make_asset("assets/logo.png"), None)

        assert record.id == "501"
        assert record.hash == "f" * 64
        assert client.mapped == ["500"]
        assert client.created[0]["asset_type"] == "Decal"
        assert client.created[0]["creator"] == {"groupId": "7"}
        assert client.created[0]["display_name"] == "logo.png"

    def test_audio_keeps_asset_id(self):
        client = FakeClient()
        record = RobloxAdapter(client, Creator(user_id="1")).sync_one(make_asset("music.ogg"), None)
        assert record.id == "500"
        assert client.mapped == []

    def test_unsupported_file_makes_no_request(self):
        client = FakeClient()
        with pytest.raises(UnsupportedAssetError):
            RobloxAdapter(client, Creator(user_id="1")).sync_one(make_asset("notes.txt"), None)
        assert client.created == []

    def test_never_stale_and_close(self):
        client = FakeClient()
        adapter = RobloxAdapter(client, Creator(user_id="1"))
        assert adapter.is_stale(AssetRecord(hash="h", id="1")) is False
        adapter.close()
        assert client.closed


class TestCreateAdapter:
    """Tests for create_adapter."""

    def test_local(self, temp_dir):
        target = TargetConfig(type="local", cache_dir=".cache")
        adapter = create_adapter(target, temp_dir)
        assert isinstance(adapter, LocalAdapter)
        assert adapter.cache_dir == temp_dir / ".cache"
        assert not uses_durable_state(target)

    def test_roblox_requires_api_key(self, temp_dir, cloud_target):
        with pytest.raises(ConfigError, match="API key"):
            create_adapter(cloud_target, temp_dir, CloudCredentials(group_id="4242"))

    def test_roblox(self, temp_dir, cloud_target):
        adapter = create_adapter(cloud_target, temp_dir, CloudCredentials(api_key="k", group_id="4242"))
        try:
            assert isinstance(adapter, RobloxAdapter)
            assert adapter.creator == Creator(group_id="4242")
            assert adapter.key == "production"
        finally:
            adapter.close()
        assert uses_durable_state(cloud_target)

    def test_plan_only(self, temp_dir, cloud_target):
        adapter = create_adapter(cloud_target, temp_dir, plan_only=True)
        assert isinstance(adapter, PlanOnlyAdapter)
