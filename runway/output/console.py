# Runway Console Output
# Rich-based console output for user-friendly display

from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from runway.codegen import CodegenFailure
from runway.sync.diff import ChangeKind, SyncPlan
from runway.sync.engine import SyncReport, SyncStatus


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for sync operations.
    """

    def __init__(self, *, verbose: bool = False, colored: Optional[bool] = None):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Force colored output on or off; detect from the terminal if None.
        """
        self.verbose = verbose
        self._console = RichConsole(force_terminal=colored, no_color=colored is False)

    @property
    def rich(self) -> RichConsole:
        """Underlying Rich console, shared with the log handler."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}", highlight=False)

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]")

    def _kind_label(self, kind: ChangeKind) -> str:
        labels = {
            ChangeKind.NEW: "[green]+ new[/green]",
            ChangeKind.MODIFIED: "[yellow]~ modified[/yellow]",
            ChangeKind.UNCHANGED: "[dim]= unchanged[/dim]",
            ChangeKind.REMOVED: "[red]- removed[/red]",
        }
        return labels.get(kind, kind.value)

    def print_plan(self, plan: SyncPlan, *, target: str) -> None:
        """
        Print the classification of every asset.

        Unchanged assets are only listed in verbose mode.
        """
        counts = plan.counts()
        rows = [entry for entry in plan.entries if self.verbose or entry.kind != ChangeKind.UNCHANGED]

        if rows:
            table = Table(title=f"Target '{target}'", show_header=True, header_style="bold")
            table.add_column("Asset", style="cyan")
            table.add_column("Change")
            table.add_column("Reason", style="dim")
            for entry in rows:
                table.add_row(escape(entry.identity), self._kind_label(entry.kind), entry.reason)
            self._console.print(table)

        parts = [f"{counts[ChangeKind.NEW]} new", f"{counts[ChangeKind.MODIFIED]} modified"]
        parts.append(f"{counts[ChangeKind.UNCHANGED]} unchanged")
        if counts[ChangeKind.REMOVED]:
            parts.append(f"{counts[ChangeKind.REMOVED]} removed")
        self._console.print(f"{len(plan.to_dispatch)} to sync: " + ", ".join(parts))

    def print_sync_report(
        self,
        report: SyncReport,
        codegen_failures: Optional[list[CodegenFailure]] = None,
    ) -> None:
        """
        Print sync result summary.

        Args:
            report: Report of the pass.
            codegen_failures: Outputs that failed to generate.
        """
        codegen_failures = codegen_failures or []
        status = report.status

        if status == SyncStatus.ABORTED:
            headline = f"[red]Sync aborted:[/red] {escape(report.fatal_error or '')}"
            border = "red"
        elif status == SyncStatus.CANCELLED:
            headline = "[yellow]Sync cancelled[/yellow]"
            border = "yellow"
        elif report.failures or codegen_failures:
            headline = "[yellow]Sync completed with errors[/yellow]"
            border = "yellow"
        else:
            headline = "[green]Sync completed[/green]"
            border = "green"

        lines = [
            headline,
            f"Synced: [cyan]{len(report.synced)}[/cyan]",
            f"Unchanged: [dim]{len(report.unchanged)}[/dim]",
            f"Failed: [red]{len(report.failed)}[/red]",
        ]
        if report.removed:
            lines.append(f"No longer matched: {len(report.removed)} (run 'runway prune' to drop their records)")
        if report.cancelled:
            lines.append(f"Not started: {len(report.cancelled)}")
        lines.append(f"Time: {report.elapsed:.2f}s")

        if report.failures:
            lines.append("\n[red]Errors:[/red]")
            lines.extend(f"  • {escape(str(failure))}" for failure in report.failures)

        if codegen_failures:
            lines.append("\n[red]Codegen errors:[/red]")
            lines.extend(f"  • {escape(str(failure))}" for failure in codegen_failures)

        if report.warnings:
            lines.append("\n[yellow]Warnings:[/yellow]")
            lines.extend(f"  • {escape(warning)}" for warning in report.warnings)

        if self.verbose and report.synced:
            lines.append("\n[bold]Synced assets:[/bold]")
            lines.extend(f"  • {escape(identity)}" for identity in report.synced)

        self._console.print(Panel("\n".join(lines), title=f"Target '{report.target}'", border_style=border))

    def print_codegen_result(self, count: int, failures: list[CodegenFailure]) -> None:
        """Print the outcome of regenerating outputs."""
        if not failures:
            self.print_success(f"Generated {count} outputs")
            return
        for failure in failures:
            self.print_error(str(failure))
        self.print_warning(f"{len(failures)} of {count} outputs failed to generate")

    def print_config_summary(self, config_path: str, targets: list[str], inputs: int) -> None:
        """Print configuration summary."""
        self._console.print(
            Panel(
                f"Config: {config_path}\nTargets: {', '.join(targets)}\nInputs: {inputs}",
                title="Runway Configuration",
                border_style="blue",
            )
        )


def create_console(*, verbose: bool = False, colored: Optional[bool] = None) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Force colored output on or off.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
