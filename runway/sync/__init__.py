# Runway Sync Module
# Change detection, state, the sync engine and watch mode

from runway.sync.diff import ChangeKind, PlanEntry, SyncPlan, classify, plan
from runway.sync.inputs import InputFile, asset_identity, resolve_inputs
from runway.sync.state import AssetRecord, PendingUpload, RecordSet, StateStore, open_stores

__all__ = [
    # State
    "AssetRecord",
    "PendingUpload",
    "RecordSet",
    "StateStore",
    "open_stores",
    # Diff
    "ChangeKind",
    "PlanEntry",
    "SyncPlan",
    "classify",
    "plan",
    # Inputs
    "InputFile",
    "asset_identity",
    "resolve_inputs",
    # Engine
    "AssetFailure",
    "SyncEngine",
    "SyncReport",
    "SyncStatus",
    # Session
    "SessionResult",
    "SyncOptions",
    "SyncSession",
    "run_codegen",
    "run_sync",
]


def __getattr__(name: str):
    """Lazy import; the engine depends on the target adapters, which depend on state."""
    if name in ("AssetFailure", "SyncEngine", "SyncReport", "SyncStatus"):
        from runway.sync import engine

        return getattr(engine, name)
    if name in ("SessionResult", "SyncOptions", "SyncSession", "run_codegen", "run_sync"):
        from runway.sync import session

        return getattr(session, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
