# Runway Target Adapters
# Capability contract shared by every sync target

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

from runway.exceptions import AdapterError
from runway.sync.state import AssetRecord


@dataclass
class Asset:
    """An asset read for dispatch: identity, source file, bytes and their fingerprint."""

    identity: str
    path: Path
    contents: bytes = field(repr=False)
    fingerprint: str

    @property
    def name(self) -> str:
        """Last path component of the identity."""
        return self.identity.rsplit("/", 1)[-1]

    @property
    def suffix(self) -> str:
        """Lower-case file extension including the dot."""
        return Path(self.identity).suffix.lower()


class TargetAdapter(Protocol):
    """
    Produces or updates a durable identifier for a changed asset.

    Implementations must be safe to call concurrently for distinct identities.
    """

    key: str

    def sync_one(self, asset: Asset, prior: Optional[AssetRecord]) -> AssetRecord:
        """Sync one asset and return its new record."""
        ...

    def is_stale(self, record: AssetRecord) -> bool:
        """Check whether an unchanged asset's synced artifact went missing."""
        ...

    def close(self) -> None:
        """Release any held resources."""
        ...


class PlanOnlyAdapter:
    """Stands in for a cloud target when only planning; refuses to sync."""

    def __init__(self, key: str):
        self.key = key

    def sync_one(self, asset: Asset, prior: Optional[AssetRecord]) -> AssetRecord:
        raise AdapterError(f"Target '{self.key}' was opened for planning only")

    def is_stale(self, record: AssetRecord) -> bool:
        return False

    def close(self) -> None:
        pass
