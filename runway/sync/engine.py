# Runway Sync Engine
# Runs one incremental sync pass against a single target

import logging
import threading
import time
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from runway.config.schema import TargetConfig
from runway.exceptions import AdapterError
from runway.sync.diff import ChangeKind, SyncPlan, plan
from runway.sync.inputs import InputFile
from runway.sync.state import AssetRecord, PendingUpload, RecordSet, StateStore, utc_now
from runway.targets import uses_durable_state
from runway.targets.base import Asset, TargetAdapter
from runway.utils.hashing import read_and_hash

logger = logging.getLogger(__name__)

DEFAULT_HASH_WORKERS = 8


class SyncStatus(str, Enum):
    """Outcome of a sync pass."""

    SUCCESS = "success"
    PARTIAL = "partial"
    CANCELLED = "cancelled"
    ABORTED = "aborted"

    @property
    def exit_code(self) -> int:
        """Process exit status for this outcome."""
        return {
            SyncStatus.SUCCESS: 0,
            SyncStatus.PARTIAL: 1,
            SyncStatus.CANCELLED: 1,
            SyncStatus.ABORTED: 2,
        }[self]


@dataclass
class AssetFailure:
    """A per-asset error collected during a pass."""

    identity: str
    error_type: str
    message: str

    @classmethod
    def from_exception(cls, identity: str, error: BaseException) -> "AssetFailure":
        """Create from a caught exception."""
        return cls(identity=identity, error_type=type(error).__name__, message=str(error))

    def __str__(self) -> str:
        return f"{self.identity}: {self.message} ({self.error_type})"


@dataclass
class SyncReport:
    """Result of one sync pass."""

    target: str
    plan: SyncPlan = field(default_factory=SyncPlan)
    records: RecordSet = field(default_factory=RecordSet)
    synced: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    cancelled: list[str] = field(default_factory=list)
    failures: list[AssetFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    aborted: bool = False
    fatal_error: Optional[str] = None
    elapsed: float = 0.0

    @property
    def status(self) -> SyncStatus:
        """Overall outcome."""
        if self.aborted:
            return SyncStatus.ABORTED
        if self.failures:
            return SyncStatus.PARTIAL
        if self.cancelled:
            return SyncStatus.CANCELLED
        return SyncStatus.SUCCESS

    @property
    def exit_code(self) -> int:
        """Process exit status."""
        return self.status.exit_code

    @property
    def success(self) -> bool:
        """Check if every resolved asset is in sync."""
        return self.status == SyncStatus.SUCCESS

    def add_failure(self, identity: str, error: BaseException) -> None:
        """Record a per-asset failure."""
        self.failures.append(AssetFailure.from_exception(identity, error))
        if identity not in self.failed:
            self.failed.append(identity)


@dataclass
class PreparedPass:
    """Everything known about a pass before dispatch."""

    records: RecordSet
    pending: dict[str, PendingUpload]
    assets: dict[str, Asset]
    plan: SyncPlan
    failures: list[AssetFailure] = field(default_factory=list)


class SyncEngine:
    """
    Incremental sync engine for one target.

    A pass hashes every input, classifies it against the stored records,
    dispatches only new and modified assets to the adapter, and persists the
    updated records once the dispatch phase is over.
    """

    def __init__(
        self,
        target: TargetConfig,
        adapter: TargetAdapter,
        record_store: StateStore,
        local_store: Optional[StateStore] = None,
        *,
        max_workers: Optional[int] = None,
        hash_workers: int = DEFAULT_HASH_WORKERS,
    ):
        """
        Initialize sync engine.

        Args:
            target: Active target configuration.
            adapter: Adapter for the active target.
            record_store: Store holding the target's records.
            local_store: Store for in-progress markers of cloud targets.
            max_workers: Maximum simultaneous adapter calls (default: target concurrency).
            hash_workers: Threads used to read and hash inputs.
        """
        self.target = target
        self.key = target.key or target.type.value
        self.adapter = adapter
        self.record_store = record_store
        self.local_store = local_store
        self.max_workers = max(1, max_workers or target.concurrency)
        self.hash_workers = max(1, hash_workers)
        self.track_pending = local_store is not None and uses_durable_state(target)

    def _read_input(self, item: InputFile) -> Asset:
        contents, fingerprint = read_and_hash(item.path)
        return Asset(identity=item.identity, path=item.path, contents=contents, fingerprint=fingerprint)

    def _hash_inputs(self, inputs: Sequence[InputFile]) -> tuple[dict[str, Asset], list[AssetFailure]]:
        """Read and fingerprint every input, keeping resolver order."""
        assets: dict[str, Asset] = {}
        failures: list[AssetFailure] = []

        if not inputs:
            return assets, failures

        with ThreadPoolExecutor(max_workers=self.hash_workers) as executor:
            futures = [(item, executor.submit(self._read_input, item)) for item in inputs]
            for item, future in futures:
                try:
                    assets[item.identity] = future.result()
                except OSError as e:
                    logger.error(f"Could not read {item.identity}: {e}")
                    failures.append(AssetFailure.from_exception(item.identity, e))

        return assets, failures

    def prepare(self, inputs: Sequence[InputFile], *, force: bool = False) -> PreparedPass:
        """
        Load state, hash inputs and build the plan without dispatching.

        Args:
            inputs: Resolved inputs in resolver order.
            force: Classify every resolved asset as New or Modified.

        Returns:
            PreparedPass for the current inputs.
        """
        records = self.record_store.load(self.key)
        pending = self.local_store.load_pending(self.key) if self.track_pending and self.local_store else {}

        assets, failures = self._hash_inputs(inputs)
        unreadable = {failure.identity for failure in failures}

        sync_plan = plan(
            [(asset.identity, asset.fingerprint) for asset in assets.values()],
            records,
            force=force,
            interrupted=pending.keys(),
            is_stale=self.adapter.is_stale,
        )
        # An unreadable file is still an input, not a removed one
        sync_plan.entries = [
            entry
            for entry in sync_plan.entries
            if not (entry.kind == ChangeKind.REMOVED and entry.identity in unreadable)
        ]

        for identity in sorted(pending):
            entry = sync_plan.get(identity)
            if entry is not None and entry.needs_sync:
                logger.warning(f"Upload of {identity} to '{self.key}' was interrupted; syncing again")

        return PreparedPass(records=records, pending=pending, assets=assets, plan=sync_plan, failures=failures)

    def _sync_one(
        self,
        asset: Asset,
        prior: Optional[AssetRecord],
        halt: threading.Event,
        cancel: Optional[threading.Event],
    ) -> Optional[AssetRecord]:
        """Worker: dispatch one asset unless the pass is stopping."""
        if halt.is_set() or (cancel is not None and cancel.is_set()):
            return None
        logger.debug(f"Syncing {asset.identity}")
        return self.adapter.sync_one(asset, prior)

    def run(
        self,
        inputs: Sequence[InputFile],
        *,
        force: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> SyncReport:
        """
        Run one sync pass.

        Args:
            inputs: Resolved inputs in resolver order.
            force: Re-sync every resolved asset.
            cancel: Event that stops new dispatches when set.

        Returns:
            SyncReport describing the pass.
        """
        started = time.perf_counter()
        report = SyncReport(target=self.key)

        prepared = self.prepare(inputs, force=force)
        records = prepared.records
        report.plan = prepared.plan
        report.records = records
        report.warnings.extend(self.record_store.warnings)
        if self.local_store is not None and self.local_store is not self.record_store:
            report.warnings.extend(self.local_store.warnings)

        for failure in prepared.failures:
            report.failures.append(failure)
            report.failed.append(failure.identity)

        for entry in prepared.plan.entries:
            if entry.kind == ChangeKind.UNCHANGED:
                report.unchanged.append(entry.identity)
            elif entry.kind == ChangeKind.REMOVED:
                report.removed.append(entry.identity)

        to_dispatch = prepared.plan.to_dispatch
        logger.debug(
            f"Target '{self.key}': {len(to_dispatch)} to sync, {len(report.unchanged)} unchanged, "
            f"{len(report.removed)} removed"
        )

        if self.track_pending and to_dispatch:
            markers = dict(prepared.pending)
            for entry in to_dispatch:
                markers[entry.identity] = PendingUpload(hash=entry.fingerprint or "", started_at=utc_now())
            self.local_store.persist_pending(self.key, markers)  # type: ignore[union-attr]

        try:
            if to_dispatch:
                self._dispatch(prepared, report, cancel)
        finally:
            self.record_store.persist(self.key, records)
            if self.track_pending and (to_dispatch or prepared.pending):
                self.local_store.persist_pending(self.key, {})  # type: ignore[union-attr]

        report.synced.sort()
        report.cancelled.sort()
        report.elapsed = time.perf_counter() - started
        logger.info(
            f"Target '{self.key}': synced {len(report.synced)}, unchanged {len(report.unchanged)}, "
            f"failed {len(report.failed)} in {report.elapsed:.2f}s"
        )
        return report

    def _dispatch(self, prepared: PreparedPass, report: SyncReport, cancel: Optional[threading.Event]) -> None:
        """Dispatch changed assets concurrently; the calling thread owns the record set."""
        records = prepared.records
        halt = threading.Event()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures: dict[Future, str] = {}
            for entry in prepared.plan.to_dispatch:
                asset = prepared.assets[entry.identity]
                future = executor.submit(self._sync_one, asset, records.get(entry.identity), halt, cancel)
                futures[future] = entry.identity

            try:
                for future in as_completed(futures):
                    self._collect(future, futures[future], records, report)

                    if report.aborted and not halt.is_set():
                        _stop(futures, halt)
                    elif cancel is not None and cancel.is_set() and not halt.is_set():
                        logger.info("Sync cancelled; finishing uploads in progress")
                        _stop(futures, halt)
            except KeyboardInterrupt:
                logger.info("Interrupted; finishing uploads in progress")
                _stop(futures, halt)
                raise

    def _collect(self, future: Future, identity: str, records: RecordSet, report: SyncReport) -> None:
        """Record the outcome of one finished dispatch."""
        if future.cancelled():
            report.cancelled.append(identity)
            return

        try:
            record = future.result()
        except (OSError, AdapterError) as e:
            report.add_failure(identity, e)
            if getattr(e, "fatal", False):
                logger.error(f"Aborting sync to '{self.key}': {e}")
                if not report.aborted:
                    report.aborted = True
                    report.fatal_error = str(e)
            else:
                logger.error(f"Failed to sync {identity}: {e}")
            return

        if record is None:
            report.cancelled.append(identity)
            return

        records.upsert(identity, record)
        report.synced.append(identity)


def _stop(futures: dict[Future, str], halt: threading.Event) -> None:
    """Stop starting new dispatches; running ones finish."""
    halt.set()
    for future in futures:
        future.cancel()
