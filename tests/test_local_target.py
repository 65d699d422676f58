# Tests for runway.targets.local
# Content-addressed cache copies

from pathlib import Path

from runway.sync.state import AssetRecord
from runway.targets.base import Asset
from runway.targets.local import LocalAdapter
from runway.utils.hashing import content_hash


def make_asset(identity: str, contents: bytes) -> Asset:
    return Asset(identity=identity, path=Path(identity), contents=contents, fingerprint=content_hash(contents))


class TestLocalAdapter:
    """Tests for LocalAdapter."""

    def test_writes_content_addressed_copy(self, temp_dir):
        adapter = LocalAdapter(temp_dir / ".runway")
        asset = make_asset("assets/Logo.PNG", b"logo")

        record = adapter.sync_one(asset, None)

        expected = temp_dir / ".runway" / f"{asset.fingerprint}.png"
        assert expected.read_bytes() == b"logo"
        assert record.id == expected.name
        assert record.hash == asset.fingerprint
        assert record.local_path == str(expected.resolve())
        assert record.synced_at

    def test_identical_content_shares_file(self, temp_dir):
        adapter = LocalAdapter(temp_dir / ".runway")
        first = adapter.sync_one(make_asset("a.png", b"same"), None)
        second = adapter.sync_one(make_asset("b/c.png", b"same"), None)
        assert first.id == second.id
        assert len(list((temp_dir / ".runway").iterdir())) == 1

    def test_is_stale_when_copy_missing(self, temp_dir):
        adapter = LocalAdapter(temp_dir / ".runway")
        record = adapter.sync_one(make_asset("a.png", b"data"), None)
        assert adapter.is_stale(record) is False

        Path(record.local_path).unlink()
        assert adapter.is_stale(record) is True

    def test_is_stale_without_local_path(self, temp_dir):
        adapter = LocalAdapter(temp_dir / ".runway")
        assert adapter.is_stale(AssetRecord(hash="h", id="x.png")) is True

    def test_asset_name_and_suffix(self):
        asset = make_asset("assets/ui/Button.JPG", b"x")
        assert asset.name == "Button.JPG"
        assert asset.suffix == ".jpg"
