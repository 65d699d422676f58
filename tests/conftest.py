# Runway Test Fixtures
# Pytest fixtures for Runway tests

import tempfile
import threading
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Optional

import pytest
import yaml

from runway.config.schema import TargetConfig
from runway.sync.state import AssetRecord
from runway.targets.base import Asset
from runway.utils.platform import STUDIO_CONTENT_ENV


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep credentials and config overrides from the environment out of tests."""
    for name in ("RUNWAY_CONFIG", "RUNWAY_API_KEY", "RUNWAY_USER_ID", "RUNWAY_GROUP_ID"):
        monkeypatch.delenv(name, raising=False)
    # No Studio links outside the tests that ask for them
    monkeypatch.setenv(STUDIO_CONTENT_ENV, "")


def write_file(root: Path, relative: str, content: bytes | str) -> Path:
    """Create a file below root, with parent directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        content = content.encode("utf-8")
    path.write_bytes(content)
    return path


@pytest.fixture
def sample_config() -> dict:
    """Create sample configuration dict."""
    return {
        "name": "test-game",
        "targets": [
            {"type": "local"},
            {"type": "roblox", "key": "production", "group_id": "4242"},
        ],
        "inputs": [{"glob": "assets/**/*.png"}],
        "exclude": [],
        "codegen": [
            {
                "format": "luau",
                "path": "src/assets.luau",
                "strip_prefix": "assets/",
                "strip_extension": True,
            },
            {"format": "json", "path": "src/assets.json"},
        ],
    }


@pytest.fixture
def project(temp_dir: Path, sample_config: dict) -> Path:
    """Create a project with a config file and three images."""
    root = temp_dir / "project"
    root.mkdir()

    with open(root / "runway.yaml", "w", encoding="utf-8") as f:
        yaml.safe_dump(sample_config, f, sort_keys=False)

    write_file(root, "assets/logo.png", b"logo-bytes")
    write_file(root, "assets/ui/button.png", b"button-bytes")
    write_file(root, "assets/ui/icons/close.png", b"close-bytes")
    write_file(root, "assets/notes.txt", b"not an input")

    return root


@pytest.fixture
def local_target() -> TargetConfig:
    """Local target configuration."""
    return TargetConfig(type="local")


@pytest.fixture
def cloud_target() -> TargetConfig:
    """Roblox target configuration."""
    return TargetConfig(type="roblox", key="production", group_id="4242", concurrency=1)


class FakeAdapter:
    """Adapter that records calls and hands out sequential IDs."""

    def __init__(
        self,
        key: str = "fake",
        fail: Optional[Callable[[Asset], Optional[Exception]]] = None,
        stale: bool = False,
    ):
        self.key = key
        self.fail = fail
        self.stale = stale
        self.calls: list[str] = []
        self.closed = False
        self._lock = threading.Lock()
        self._next_id = 1000

    def sync_one(self, asset: Asset, prior: Optional[AssetRecord]) -> AssetRecord:
        with self._lock:
            self.calls.append(asset.identity)
            self._next_id += 1
            asset_id = str(self._next_id)

        if self.fail is not None:
            error = self.fail(asset)
            if error is not None:
                raise error

        return AssetRecord(hash=asset.fingerprint, id=asset_id, synced_at="2026-01-01T00:00:00+00:00")

    def is_stale(self, record: AssetRecord) -> bool:
        return self.stale

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    """Adapter that succeeds for every asset."""
    return FakeAdapter()
