# Tests for runway.sync.watch
# Debounce loop and file event filtering

import threading

import pytest
from watchdog.events import DirCreatedEvent, FileCreatedEvent, FileModifiedEvent, FileMovedEvent

from runway.exceptions import ConfigError
from runway.sync.watch import InputEventHandler, WatchOrchestrator, WatchState, watch_project, watch_roots


def make_orchestrator(run_pass, **kwargs) -> WatchOrchestrator:
    kwargs.setdefault("debounce", 0.05)
    kwargs.setdefault("poll_interval", 0.01)
    return WatchOrchestrator(run_pass, **kwargs)


class TestWatchOrchestrator:
    """Tests for the debounce state machine."""

    def test_initial_sync(self):
        cancel = threading.Event()
        orchestrator = make_orchestrator(lambda event: cancel.set())

        orchestrator.run(cancel)

        assert orchestrator.passes == 1
        assert orchestrator.state == WatchState.STOPPED

    def test_burst_of_changes_runs_one_pass(self):
        cancel = threading.Event()
        orchestrator = make_orchestrator(lambda event: cancel.set(), initial_sync=False)
        for index in range(5):
            orchestrator.notify(f"assets/{index}.png")

        orchestrator.run(cancel)

        assert orchestrator.passes == 1

    def test_changes_during_pass_run_one_more_pass(self):
        cancel = threading.Event()
        calls = []

        def run_pass(event):
            calls.append(len(calls))
            if len(calls) == 1:
                for index in range(3):
                    orchestrator.notify(f"assets/{index}.png")
            else:
                cancel.set()

        orchestrator = make_orchestrator(run_pass, initial_sync=False)
        orchestrator.notify("assets/first.png")
        orchestrator.run(cancel)

        assert orchestrator.passes == 2

    def test_pass_receives_cancel_event(self):
        cancel = threading.Event()
        received = []

        def run_pass(event):
            received.append(event)
            cancel.set()

        make_orchestrator(run_pass).run(cancel)
        assert received == [cancel]

    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()
        orchestrator = make_orchestrator(lambda event: None)
        orchestrator.notify("a.png")

        orchestrator.run(cancel)

        assert orchestrator.passes == 0

    def test_config_error_stops_watching(self):
        def run_pass(event):
            raise ConfigError("bad config")

        orchestrator = make_orchestrator(run_pass)
        with pytest.raises(ConfigError):
            orchestrator.run(threading.Event())
        assert orchestrator.state == WatchState.STOPPED

    def test_failed_pass_keeps_watching(self):
        cancel = threading.Event()

        def run_pass(event):
            if orchestrator.passes == 1:
                orchestrator.notify("a.png")
                raise RuntimeError("boom")
            cancel.set()

        orchestrator = make_orchestrator(run_pass)
        orchestrator.run(cancel)

        assert orchestrator.passes == 2


class TestInputEventHandler:
    """Tests for event filtering."""

    @pytest.fixture
    def seen(self) -> list:
        return []

    @pytest.fixture
    def handler(self, project, seen):
        return InputEventHandler(project, ["assets/**/*.png"], ["**/icons/**"], seen.append)

    def test_matching_file(self, handler, project, seen):
        handler.dispatch(FileModifiedEvent(str(project / "assets" / "logo.png")))
        assert seen == ["assets/logo.png"]

    def test_non_matching_and_excluded(self, handler, project, seen):
        handler.dispatch(FileModifiedEvent(str(project / "assets" / "notes.txt")))
        handler.dispatch(FileCreatedEvent(str(project / "assets" / "ui" / "icons" / "new.png")))
        assert seen == []

    def test_directories_ignored(self, handler, project, seen):
        handler.dispatch(DirCreatedEvent(str(project / "assets" / "new.png")))
        assert seen == []

    def test_own_files_ignored(self, handler, project, seen):
        handler.dispatch(FileModifiedEvent(str(project / ".runway" / "abc.png")))
        handler.dispatch(FileModifiedEvent(str(project / "runway.lock.yaml")))
        assert seen == []

    def test_custom_cache_dir_ignored(self, project, seen):
        handler = InputEventHandler(project, ["**/*.png"], [], seen.append, ["cache"])
        handler.dispatch(FileCreatedEvent(str(project / "cache" / "abc.png")))
        handler.dispatch(FileCreatedEvent(str(project / "assets" / "new.png")))
        assert seen == ["assets/new.png"]

    def test_brace_glob(self, project, seen):
        handler = InputEventHandler(project, ["assets/*.{png,jpg}"], [], seen.append)
        handler.dispatch(FileCreatedEvent(str(project / "assets" / "photo.jpg")))
        assert seen == ["assets/photo.jpg"]

    def test_move_reports_both_ends(self, handler, project, seen):
        handler.dispatch(
            FileMovedEvent(str(project / "assets" / "old.png"), str(project / "assets" / "ui" / "new.png"))
        )
        assert seen == ["assets/old.png", "assets/ui/new.png"]

    def test_outside_project(self, handler, temp_dir):
        assert handler.identity_for(str(temp_dir / "elsewhere.png")) is None

    def test_bytes_path(self, handler, project):
        assert handler.identity_for(bytes(project / "assets" / "logo.png")) == "assets/logo.png"


class TestWatchRoots:
    """Tests for watch_roots."""

    def test_glob_prefix(self, project):
        assert watch_roots(project, ["assets/ui/**/*.png"]) == [project / "assets" / "ui"]

    def test_nested_roots_collapse(self, project):
        assert watch_roots(project, ["assets/**/*.png", "assets/ui/*.png"]) == [project / "assets"]

    def test_missing_prefix_falls_back_to_root(self, project):
        assert watch_roots(project, ["missing/**/*.png", "assets/**/*.png"]) == [project]


class TestWatchProject:
    """Tests for watch_project wiring."""

    def test_stops_when_cancelled(self, project):
        cancel = threading.Event()
        passes = []

        def run_pass(event):
            passes.append(event)
            cancel.set()

        watch_project(project, ["assets/**/*.png"], [], run_pass, debounce=0.01, cancel=cancel)

        assert len(passes) == 1
