# Runway Change Detection
# Classifies resolved assets against stored records

from collections.abc import Callable, Collection, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from runway.sync.state import AssetRecord, RecordSet


class ChangeKind(str, Enum):
    """Classification of one asset in a sync plan."""

    UNCHANGED = "unchanged"
    NEW = "new"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass
class PlanEntry:
    """One asset's classification and the reason for it."""

    identity: str
    kind: ChangeKind
    reason: str = ""
    fingerprint: Optional[str] = None

    @property
    def needs_sync(self) -> bool:
        """Check if this entry must be dispatched to the target."""
        return self.kind in (ChangeKind.NEW, ChangeKind.MODIFIED)


@dataclass
class SyncPlan:
    """Ordered classification of every resolved asset plus removed records."""

    entries: list[PlanEntry] = field(default_factory=list)

    @property
    def to_dispatch(self) -> list[PlanEntry]:
        """Entries that need an adapter call, in plan order."""
        return [entry for entry in self.entries if entry.needs_sync]

    @property
    def removed(self) -> list[PlanEntry]:
        """Entries for stored assets that are no longer resolved."""
        return [entry for entry in self.entries if entry.kind == ChangeKind.REMOVED]

    def get(self, identity: str) -> Optional[PlanEntry]:
        """Get the entry for an identity."""
        for entry in self.entries:
            if entry.identity == identity:
                return entry
        return None

    def counts(self) -> dict[ChangeKind, int]:
        """Number of entries per kind."""
        counts = {kind: 0 for kind in ChangeKind}
        for entry in self.entries:
            counts[entry.kind] += 1
        return counts


def classify(
    identity: str,
    fingerprint: str,
    record: Optional[AssetRecord],
    *,
    force: bool = False,
    interrupted: bool = False,
    is_stale: Optional[Callable[[AssetRecord], bool]] = None,
) -> PlanEntry:
    """
    Classify a single resolved asset.

    Args:
        identity: Asset identity.
        fingerprint: Fingerprint of the current file bytes.
        record: Stored record for this target, if any.
        force: Re-sync regardless of the stored fingerprint.
        interrupted: A previous dispatch of this asset never recorded its outcome.
        is_stale: Target check for records whose synced artifact went missing.

    Returns:
        PlanEntry describing what to do.
    """
    if record is None or record.id is None:
        reason = "Forced" if force else "New asset"
        return PlanEntry(identity, ChangeKind.NEW, reason, fingerprint)

    if force:
        return PlanEntry(identity, ChangeKind.MODIFIED, "Forced", fingerprint)

    if record.hash != fingerprint:
        return PlanEntry(identity, ChangeKind.MODIFIED, "Content changed", fingerprint)

    if interrupted:
        return PlanEntry(identity, ChangeKind.MODIFIED, "Previous upload was interrupted", fingerprint)

    if is_stale is not None and is_stale(record):
        return PlanEntry(identity, ChangeKind.MODIFIED, "Synced copy is missing", fingerprint)

    return PlanEntry(identity, ChangeKind.UNCHANGED, "Content identical", fingerprint)


def plan(
    resolved: Iterable[tuple[str, str]],
    records: RecordSet,
    *,
    force: bool = False,
    interrupted: Collection[str] = (),
    is_stale: Optional[Callable[[AssetRecord], bool]] = None,
) -> SyncPlan:
    """
    Build the sync plan for one pass.

    Args:
        resolved: Ordered (identity, fingerprint) pairs from the resolver.
        records: Stored records of the active target.
        force: Classify every resolved asset as New or Modified.
        interrupted: Identities with an unfinished dispatch from an earlier pass.
        is_stale: Target check for records whose synced artifact went missing.

    Returns:
        SyncPlan in resolver order, followed by removed records in sorted order.
    """
    result = SyncPlan()
    seen: set[str] = set()

    for identity, fingerprint in resolved:
        if identity in seen:
            continue
        seen.add(identity)

        result.entries.append(
            classify(
                identity,
                fingerprint,
                records.get(identity),
                force=force,
                interrupted=identity in interrupted,
                is_stale=is_stale,
            )
        )

    for identity in records.identities():
        if identity not in seen:
            record = records.get(identity)
            result.entries.append(
                PlanEntry(
                    identity,
                    ChangeKind.REMOVED,
                    "No longer matched by any input",
                    record.hash if record else None,
                )
            )

    return result
