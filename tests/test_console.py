# Tests for runway.output.console
# Rich-based console output

from io import StringIO

from rich.console import Console as RichConsole

from runway.codegen import CodegenFailure
from runway.exceptions import TransientNetworkError
from runway.output.console import Console, create_console
from runway.sync.diff import ChangeKind, PlanEntry, SyncPlan
from runway.sync.engine import SyncReport


def _make_console(verbose: bool = False) -> Console:
    """Create a console with captured output."""
    console = Console(verbose=verbose, colored=False)
    console._console = RichConsole(file=StringIO(), no_color=True, width=120)
    return console


def _get_output(console: Console) -> str:
    """Get captured output from console."""
    console._console.file.seek(0)
    return console._console.file.read()


class TestConsoleBasic:
    """Tests for basic console methods."""

    def test_print(self):
        c = _make_console()
        c.print("hello world")
        assert "hello world" in _get_output(c)

    def test_print_error(self):
        c = _make_console()
        c.print_error("something failed")
        output = _get_output(c)
        assert "Error:" in output
        assert "something failed" in output

    def test_print_error_escapes_markup(self):
        c = _make_console()
        c.print_error("bad [bold]value[/bold]")
        assert "[bold]value[/bold]" in _get_output(c)

    def test_print_warning(self):
        c = _make_console()
        c.print_warning("be careful")
        output = _get_output(c)
        assert "Warning:" in output
        assert "be careful" in output

    def test_print_success(self):
        c = _make_console()
        c.print_success("all good")
        assert "all good" in _get_output(c)

    def test_print_info(self):
        c = _make_console()
        c.print_info("fyi")
        assert "fyi" in _get_output(c)


class TestPrintPlan:
    """Tests for plan output."""

    def _plan(self) -> SyncPlan:
        return SyncPlan(
            entries=[
                PlanEntry("assets/a.png", ChangeKind.NEW, "New asset"),
                PlanEntry("assets/b.png", ChangeKind.UNCHANGED, "Content identical"),
                PlanEntry("assets/c.png", ChangeKind.MODIFIED, "Content changed"),
                PlanEntry("assets/old.png", ChangeKind.REMOVED, "No longer matched by any input"),
            ]
        )

    def test_summary(self):
        c = _make_console()
        c.print_plan(self._plan(), target="local")
        output = _get_output(c)
        assert "2 to sync: 1 new, 1 modified, 1 unchanged, 1 removed" in output
        assert "assets/a.png" in output
        assert "assets/b.png" not in output

    def test_verbose_lists_unchanged(self):
        c = _make_console(verbose=True)
        c.print_plan(self._plan(), target="local")
        assert "assets/b.png" in _get_output(c)

    def test_empty_plan(self):
        c = _make_console()
        c.print_plan(SyncPlan(), target="local")
        assert "0 to sync: 0 new, 0 modified, 0 unchanged" in _get_output(c)


class TestPrintSyncReport:
    """Tests for sync report output."""

    def test_success(self):
        c = _make_console()
        c.print_sync_report(SyncReport(target="local", synced=["a.png"], unchanged=["b.png"]))
        output = _get_output(c)
        assert "Sync completed" in output
        assert "Synced: 1" in output
        assert "Unchanged: 1" in output
        assert "a.png" not in output

    def test_verbose_lists_synced(self):
        c = _make_console(verbose=True)
        c.print_sync_report(SyncReport(target="local", synced=["a.png"]))
        assert "a.png" in _get_output(c)

    def test_failures(self):
        report = SyncReport(target="production")
        report.add_failure("a.png", TransientNetworkError("timed out"))
        c = _make_console()
        c.print_sync_report(report)
        output = _get_output(c)
        assert "completed with errors" in output
        assert "a.png: timed out (TransientNetworkError)" in output

    def test_aborted(self):
        report = SyncReport(target="production", aborted=True, fatal_error="Invalid API key")
        c = _make_console()
        c.print_sync_report(report)
        assert "Sync aborted: Invalid API key" in _get_output(c)

    def test_cancelled_and_removed(self):
        report = SyncReport(target="local", cancelled=["a.png"], removed=["gone.png"])
        c = _make_console()
        c.print_sync_report(report)
        output = _get_output(c)
        assert "Sync cancelled" in output
        assert "Not started: 1" in output
        assert "runway prune" in output

    def test_codegen_failures_and_warnings(self):
        report = SyncReport(target="local", warnings=["state file unreadable"])
        c = _make_console()
        c.print_sync_report(report, [CodegenFailure("src/assets.luau", "collision")])
        output = _get_output(c)
        assert "Codegen errors" in output
        assert "src/assets.luau: collision" in output
        assert "state file unreadable" in output


class TestOtherOutput:
    """Tests for codegen and config summaries."""

    def test_codegen_success(self):
        c = _make_console()
        c.print_codegen_result(2, [])
        assert "Generated 2 outputs" in _get_output(c)

    def test_codegen_failure(self):
        c = _make_console()
        c.print_codegen_result(2, [CodegenFailure("out.json", "disk full")])
        output = _get_output(c)
        assert "out.json: disk full" in output
        assert "1 of 2 outputs failed" in output

    def test_config_summary(self):
        c = _make_console()
        c.print_config_summary("/p/runway.yaml", ["local", "production"], 3)
        output = _get_output(c)
        assert "local, production" in output
        assert "Inputs: 3" in output


class TestCreateConsole:
    """Tests for create_console."""

    def test_verbose(self):
        assert create_console(verbose=True).verbose is True

    def test_rich_property(self):
        c = create_console(colored=False)
        assert c.rich is c._console
