# Runway Watch Mode
# Debounced re-sync driven by file system events

import logging
import os
import queue
import threading
import time
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from runway.exceptions import ConfigError
from runway.sync.inputs import is_ignored
from runway.utils.paths import get_relative_path, matches_any_pattern, non_pattern_prefix

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE = 0.5
POLL_INTERVAL = 0.1


class WatchState(str, Enum):
    """States of the watch loop."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    SYNCING = "syncing"
    STOPPED = "stopped"


class WatchOrchestrator:
    """
    Turns a stream of change notifications into sync passes.

    Notifications restart a quiet-period timer; once it expires a single pass
    runs. Notifications that arrive while a pass runs are kept and produce
    exactly one follow-up pass.
    """

    def __init__(
        self,
        run_pass: Callable[[threading.Event], Any],
        *,
        debounce: float = DEFAULT_DEBOUNCE,
        initial_sync: bool = True,
        poll_interval: float = POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize watch orchestrator.

        Args:
            run_pass: Runs one sync pass; receives the cancel event.
            debounce: Quiet period in seconds before a pass starts.
            initial_sync: Run a pass before waiting for notifications.
            poll_interval: Longest wait before re-checking cancellation.
            clock: Monotonic time source.
        """
        self.run_pass = run_pass
        self.debounce = debounce
        self.initial_sync = initial_sync
        self.poll_interval = poll_interval
        self._clock = clock
        self._events: queue.Queue[str] = queue.Queue()
        self.state = WatchState.IDLE
        self.passes = 0

    def notify(self, path: str = "") -> None:
        """Report a change. Safe to call from any thread."""
        self._events.put(path)

    def _next_event(self, timeout: float) -> Optional[str]:
        try:
            return self._events.get(timeout=timeout)
        except queue.Empty:
            return None

    def _debounce(self, first: str, cancel: threading.Event) -> set[str]:
        """Collect notifications until the quiet period passes without one."""
        self.state = WatchState.DEBOUNCING
        changed = {first}
        deadline = self._clock() + self.debounce

        while not cancel.is_set():
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            path = self._next_event(min(remaining, self.poll_interval))
            if path is not None:
                changed.add(path)
                deadline = self._clock() + self.debounce

        return changed

    def _sync(self, cancel: threading.Event, changed: set[str]) -> None:
        self.state = WatchState.SYNCING
        self.passes += 1

        if changed:
            names = ", ".join(sorted(path for path in changed if path)) or "files"
            logger.info(f"Change detected in {names}")

        try:
            self.run_pass(cancel)
        except ConfigError:
            raise
        except Exception:
            logger.exception("Sync pass failed; still watching")

    def run(self, cancel: threading.Event) -> None:
        """Loop until ``cancel`` is set."""
        try:
            if self.initial_sync and not cancel.is_set():
                self._sync(cancel, set())

            while not cancel.is_set():
                self.state = WatchState.IDLE
                first = self._next_event(self.poll_interval)
                if first is None:
                    continue

                changed = self._debounce(first, cancel)
                if cancel.is_set():
                    break

                self._sync(cancel, changed)
        finally:
            self.state = WatchState.STOPPED


class InputEventHandler(FileSystemEventHandler):
    """
    Forwards file events that affect configured inputs.

    Directory events, Runway's own files and paths outside every input glob
    are ignored.
    """

    def __init__(
        self,
        root: Path,
        globs: list[str],
        exclude: list[str],
        notify: Callable[[str], None],
        cache_dirs: Iterable[str] = (),
    ):
        super().__init__()
        self.root = root.resolve()
        self.globs = globs
        self.exclude = exclude
        self.notify = notify
        self.cache_dirs = list(cache_dirs)

    def identity_for(self, path: str | bytes) -> Optional[str]:
        """Identity of an event path if it belongs to the inputs."""
        relative = get_relative_path(Path(os.fsdecode(path)), self.root)
        if relative is None:
            relative = get_relative_path(Path(os.fsdecode(path)).resolve(), self.root)
        if relative is None:
            return None

        identity = relative.as_posix()
        if is_ignored(identity, self.cache_dirs):
            return None
        if not matches_any_pattern(identity, self.globs) or matches_any_pattern(identity, self.exclude):
            return None
        return identity

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed", "closed_no_write"):
            return

        paths = [event.src_path]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            paths.append(dest_path)

        for path in paths:
            identity = self.identity_for(path)
            if identity is not None:
                logger.debug(f"{event.event_type}: {identity}")
                self.notify(identity)


def watch_roots(root: Path, globs: list[str]) -> list[Path]:
    """
    Directories to observe: the non-pattern prefix of each glob.

    Missing prefixes fall back to the project root; nested ones are dropped.
    """
    root = root.resolve()
    candidates: set[Path] = set()

    for pattern in globs:
        base = root / non_pattern_prefix(pattern)
        while base != root and not base.is_dir():
            base = base.parent
        candidates.add(base)

    return sorted(path for path in candidates if not any(other in path.parents for other in candidates))


def watch_project(
    root: Path,
    globs: list[str],
    exclude: list[str],
    run_pass: Callable[[threading.Event], Any],
    *,
    cache_dirs: Iterable[str] = (),
    debounce: float = DEFAULT_DEBOUNCE,
    cancel: Optional[threading.Event] = None,
) -> None:
    """
    Sync once, then re-sync whenever inputs change, until interrupted.

    Args:
        root: Project root.
        globs: Input globs.
        exclude: Excluded patterns.
        run_pass: Runs one sync pass; receives the cancel event.
        cache_dirs: Cache directories of local targets, whose writes are ignored.
        debounce: Quiet period in seconds.
        cancel: Event that ends watch mode when set.
    """
    cancel = cancel or threading.Event()
    orchestrator = WatchOrchestrator(run_pass, debounce=debounce, initial_sync=True)
    handler = InputEventHandler(root, globs, exclude, orchestrator.notify, cache_dirs)

    observer = Observer()
    for directory in watch_roots(root, globs):
        logger.debug(f"Watching {directory}")
        observer.schedule(handler, str(directory), recursive=True)
    observer.start()

    logger.info("Watching for changes (press Ctrl-C to stop)")
    try:
        orchestrator.run(cancel)
    except KeyboardInterrupt:
        logger.info("Stopping watch mode")
        cancel.set()
    finally:
        observer.stop()
        observer.join(timeout=5.0)
