# Runway Local Target
# Content-addressed copies in a machine-local cache directory

import logging
from pathlib import Path
from typing import Optional

from runway.sync.state import AssetRecord, utc_now
from runway.targets.base import Asset
from runway.utils.paths import atomic_write, ensure_dir

logger = logging.getLogger(__name__)


class LocalAdapter:
    """
    Copies asset bytes into a cache directory.

    Files are named after their fingerprint, so identical content under
    different paths shares one cached file.
    """

    def __init__(self, cache_dir: Path, *, key: str = "local"):
        """
        Initialize local adapter.

        Args:
            cache_dir: Directory receiving cached copies.
            key: Target key, used in log messages.
        """
        self.cache_dir = cache_dir
        self.key = key

    def cache_filename(self, asset: Asset) -> str:
        """Deterministic cache filename for an asset's content."""
        return f"{asset.fingerprint}{asset.suffix}"

    def sync_one(self, asset: Asset, prior: Optional[AssetRecord]) -> AssetRecord:
        """
        Write the asset into the cache.

        Raises:
            OSError: If the cache directory or file cannot be written.
        """
        filename = self.cache_filename(asset)
        cached_path = self.cache_dir / filename

        logger.debug(f"Syncing {asset.identity}")

        if cached_path.is_file():
            logger.debug(f"{asset.identity}: {filename} already cached")
        else:
            ensure_dir(self.cache_dir)
            atomic_write(cached_path, asset.contents)
            logger.info(f"Copied {asset.identity} to {filename}")

        return AssetRecord(
            hash=asset.fingerprint,
            id=filename,
            local_path=str(cached_path.resolve()),
            synced_at=utc_now(),
        )

    def is_stale(self, record: AssetRecord) -> bool:
        """A local record is stale when its cached copy no longer exists."""
        if record.local_path is None:
            return True
        return not Path(record.local_path).is_file()

    def close(self) -> None:
        """Nothing to release."""
