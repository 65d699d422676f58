# Runway Sync Session
# Drives a full pass: resolve inputs, sync one target, regenerate code

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from runway.codegen import CodegenFailure, build_mapping, generate_all
from runway.config.schema import CloudCredentials, ProjectConfig, TargetConfig, TargetType
from runway.sync.engine import PreparedPass, SyncEngine, SyncReport
from runway.sync.inputs import InputFile, resolve_inputs
from runway.sync.state import RecordSet, StateStore, open_stores
from runway.targets import TargetAdapter, create_adapter, uses_durable_state
from runway.targets.studio import link_content_folders

logger = logging.getLogger(__name__)


@dataclass
class SyncOptions:
    """Per-invocation settings of a sync."""

    target: str
    force: bool = False
    concurrency: Optional[int] = None
    credentials: Optional[CloudCredentials] = None


@dataclass
class SessionResult:
    """Outcome of a sync pass plus the codegen that followed it."""

    report: SyncReport
    codegen_failures: list[CodegenFailure] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        """Process exit status; codegen failures count as per-asset failures."""
        code = self.report.exit_code
        if code == 0 and self.codegen_failures:
            return 1
        return code


def record_store_for(config: ProjectConfig, target: TargetConfig) -> tuple[StateStore, StateStore]:
    """
    Pick the stores of a target.

    Returns:
        Tuple of (store holding the target's records, local store).
    """
    durable, local = open_stores(config.root)
    return (durable if uses_durable_state(target) else local), local


def resolve_project_inputs(config: ProjectConfig) -> list[InputFile]:
    """Resolve the configured input globs."""
    inputs = resolve_inputs(config.root, config.globs, config.exclude, config.cache_dirs)
    logger.debug(f"Found {len(inputs)} assets")
    return inputs


def link_studio_content(config: ProjectConfig, target: TargetConfig) -> list[Path]:
    """
    Link a local target's cache into Roblox Studio's content folders.

    A failed link is logged; the sync itself does not depend on it.

    Returns:
        Links created.
    """
    if target.type != TargetType.LOCAL:
        return []
    try:
        return link_content_folders(config.root / target.cache_dir, config.content_name)
    except OSError as e:
        logger.warning(f"Could not link Studio content folder: {e}")
        return []


def run_codegen(
    config: ProjectConfig,
    target: TargetConfig,
    records: RecordSet,
    identities: Optional[list[str]] = None,
) -> list[CodegenFailure]:
    """
    Regenerate every configured output from a record set.

    Args:
        config: Project configuration.
        target: Target whose identifiers are written.
        records: Records of that target.
        identities: Restrict outputs to these identities.

    Returns:
        List of failed outputs.
    """
    if not config.codegen:
        return []
    mapping = build_mapping(records, config.id_template_for(target), identities)
    return generate_all(config.codegen, mapping, config.root)


class SyncSession:
    """
    Runs passes for one project and target.

    Holds the adapter across passes, so watch mode reuses one HTTP client.
    """

    def __init__(
        self,
        config: ProjectConfig,
        options: SyncOptions,
        adapter: Optional[TargetAdapter] = None,
    ):
        """
        Initialize sync session.

        Args:
            config: Project configuration.
            options: Invocation settings.
            adapter: Adapter to use instead of one built from the target config.

        Raises:
            ConfigError: If the target is unknown or lacks credentials.
        """
        self.config = config
        self.options = options
        self.target = config.get_target(options.target)
        self.adapter = adapter or create_adapter(self.target, config.root, options.credentials)
        record_store, local_store = record_store_for(config, self.target)
        self._linked = False
        self.engine = SyncEngine(
            self.target,
            self.adapter,
            record_store,
            local_store,
            max_workers=options.concurrency,
        )

    def plan(self) -> PreparedPass:
        """Hash inputs and classify them without dispatching."""
        return self.engine.prepare(resolve_project_inputs(self.config), force=self.options.force)

    def run(self, cancel: Optional[threading.Event] = None) -> SessionResult:
        """Run one pass, then regenerate code for the resolved assets."""
        started = time.perf_counter()
        logger.info(f"Starting sync for target '{self.engine.key}'")

        if not self._linked:
            link_studio_content(self.config, self.target)
            self._linked = True

        inputs = resolve_project_inputs(self.config)
        report = self.engine.run(inputs, force=self.options.force, cancel=cancel)

        result = SessionResult(report=report)
        if not report.aborted:
            result.codegen_failures = run_codegen(
                self.config,
                self.target,
                report.records,
                [item.identity for item in inputs],
            )

        logger.info(f"Sync finished in {time.perf_counter() - started:.2f}s")
        return result

    def close(self) -> None:
        """Release the adapter."""
        self.adapter.close()

    def __enter__(self) -> "SyncSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def run_sync(
    config: ProjectConfig,
    options: SyncOptions,
    *,
    adapter: Optional[TargetAdapter] = None,
    cancel: Optional[threading.Event] = None,
) -> SessionResult:
    """
    Run a single sync pass with codegen.

    Raises:
        ConfigError: If the target is unknown or misconfigured.
    """
    with SyncSession(config, options, adapter) as session:
        return session.run(cancel)


def plan_sync(config: ProjectConfig, options: SyncOptions) -> PreparedPass:
    """Classify every input against stored state without syncing or credentials."""
    target = config.get_target(options.target)
    adapter = create_adapter(target, config.root, plan_only=True)
    with SyncSession(config, options, adapter) as session:
        return session.plan()


def regenerate(config: ProjectConfig, target_key: str) -> list[CodegenFailure]:
    """
    Regenerate outputs from stored state without syncing.

    Only identities still matched by the inputs are written.
    """
    target = config.get_target(target_key)
    record_store, _ = record_store_for(config, target)
    records = record_store.load(target.key or target.type.value)
    inputs = resolve_project_inputs(config)
    return run_codegen(config, target, records, [item.identity for item in inputs])


def prune(config: ProjectConfig, target_key: str, *, dry_run: bool = False) -> list[str]:
    """
    Drop records of assets no longer matched by any input.

    Returns:
        Sorted list of pruned identities.
    """
    target = config.get_target(target_key)
    key = target.key or target.type.value
    record_store, _ = record_store_for(config, target)
    records = record_store.load(key)
    inputs = resolve_project_inputs(config)

    removed = records.prune(item.identity for item in inputs)
    if removed and not dry_run:
        record_store.persist(key, records)
        logger.info(f"Pruned {len(removed)} records from target '{key}'")
    return removed
