"""Click-based CLI for Runway - asset sync and codegen for Roblox projects."""

from __future__ import annotations

import functools
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional

import click

from runway import __version__
from runway.config import (
    ProjectConfig,
    ensure_config_exists,
    get_config_path,
    load_config,
    resolve_credentials,
    validate_config_file,
)
from runway.exceptions import ConfigError
from runway.logger import setup_logging
from runway.output import Console, create_console
from runway.sync.session import (
    SessionResult,
    SyncOptions,
    SyncSession,
    plan_sync,
    prune as prune_records,
    regenerate,
    run_sync,
)
from runway.sync.watch import DEFAULT_DEBOUNCE, watch_project

logger = logging.getLogger(__name__)

EXIT_FAILURES = 1
EXIT_FATAL = 2


def _console(ctx: click.Context) -> Console:
    ctx.ensure_object(dict)
    console = ctx.obj.get("console")
    if console is None:
        console = ctx.obj["console"] = create_console()
    return console


def project_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Add the --target and --config options."""
    f = click.option(
        "--config",
        "config_path",
        type=click.Path(path_type=Path),
        default=None,
        help="Config file or directory containing runway.yaml (default: $RUNWAY_CONFIG or current directory)",
    )(f)
    f = click.option("--target", "-t", "target", required=True, help="Key of the target to use")(f)
    return f


def cloud_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Add the credential options for cloud targets."""
    f = click.option("--group-id", envvar="RUNWAY_GROUP_ID", default=None, help="Upload as this group")(f)
    f = click.option("--user-id", envvar="RUNWAY_USER_ID", default=None, help="Upload as this user")(f)
    f = click.option(
        "--api-key",
        envvar="RUNWAY_API_KEY",
        default=None,
        help="Open Cloud API key (default: $RUNWAY_API_KEY)",
    )(f)
    return f


def handle_config_errors(f: Callable[..., Any]) -> Callable[..., Any]:
    """Report configuration errors and exit with the fatal status."""

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except ConfigError as e:
            ctx = click.get_current_context()
            _console(ctx).print_error(str(e))
            ctx.exit(EXIT_FATAL)

    return wrapper


def _sync_options(
    config: ProjectConfig,
    target: str,
    *,
    force: bool = False,
    concurrency: Optional[int] = None,
    api_key: Optional[str] = None,
    user_id: Optional[str] = None,
    group_id: Optional[str] = None,
) -> SyncOptions:
    target_config = config.get_target(target)
    credentials = resolve_credentials(target_config, api_key=api_key, user_id=user_id, group_id=group_id)
    return SyncOptions(target=target, force=force, concurrency=concurrency, credentials=credentials)


@click.group()
@click.version_option(version=__version__, prog_name="runway")
@click.option("--verbose", "-v", count=True, help="More output (repeatable)")
@click.option("--quiet", "-q", count=True, help="Less output (repeatable)")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(ctx: click.Context, verbose: int, quiet: int, no_color: bool) -> None:
    """Runway - sync game assets and generate code that references them.

    \b
    Targets:
      local    copy assets into a content cache for testing
      roblox   upload assets through Open Cloud
    """
    ctx.ensure_object(dict)
    ctx.obj["console"] = create_console(verbose=verbose > 0, colored=False if no_color else None)
    setup_logging(verbose - quiet)


@cli.command()
@project_options
@cloud_options
@click.option("--force", "-f", is_flag=True, help="Sync every asset, even if unchanged")
@click.option("--concurrency", "-j", type=click.IntRange(1, 64), default=None, help="Maximum simultaneous uploads")
@click.pass_context
@handle_config_errors
def sync(
    ctx: click.Context,
    target: str,
    config_path: Optional[Path],
    api_key: Optional[str],
    user_id: Optional[str],
    group_id: Optional[str],
    force: bool,
    concurrency: Optional[int],
) -> None:
    """Sync changed assets to a target and regenerate code.

    Exits with 0 when everything synced, 1 when some assets or outputs
    failed, and 2 on configuration errors or rejected credentials.
    """
    console = _console(ctx)
    config = load_config(config_path)
    options = _sync_options(
        config,
        target,
        force=force,
        concurrency=concurrency,
        api_key=api_key,
        user_id=user_id,
        group_id=group_id,
    )

    result = run_sync(config, options)

    console.print_sync_report(result.report, result.codegen_failures)
    ctx.exit(result.exit_code)


@cli.command()
@project_options
@cloud_options
@click.option("--force", "-f", is_flag=True, help="Sync every asset on the first pass")
@click.option("--concurrency", "-j", type=click.IntRange(1, 64), default=None, help="Maximum simultaneous uploads")
@click.option(
    "--debounce",
    type=click.FloatRange(0.0),
    default=DEFAULT_DEBOUNCE,
    show_default=True,
    help="Seconds without changes before syncing",
)
@click.pass_context
@handle_config_errors
def watch(
    ctx: click.Context,
    target: str,
    config_path: Optional[Path],
    api_key: Optional[str],
    user_id: Optional[str],
    group_id: Optional[str],
    force: bool,
    concurrency: Optional[int],
    debounce: float,
) -> None:
    """Sync, then keep syncing whenever input files change.

    Press Ctrl-C to stop; uploads in progress finish and are recorded.
    """
    console = _console(ctx)
    config = load_config(config_path)
    options = _sync_options(
        config,
        target,
        force=force,
        concurrency=concurrency,
        api_key=api_key,
        user_id=user_id,
        group_id=group_id,
    )

    with SyncSession(config, options) as session:

        def run_pass(cancel: threading.Event) -> SessionResult:
            result = session.run(cancel)
            # Only the first pass is forced
            session.options.force = False
            console.print_sync_report(result.report, result.codegen_failures)
            return result

        watch_project(
            config.root,
            config.globs,
            config.exclude,
            run_pass,
            cache_dirs=config.cache_dirs,
            debounce=debounce,
        )


@cli.command()
@project_options
@click.pass_context
@handle_config_errors
def codegen(ctx: click.Context, target: str, config_path: Optional[Path]) -> None:
    """Regenerate code from stored state without syncing."""
    console = _console(ctx)
    config = load_config(config_path)

    failures = regenerate(config, target)

    console.print_codegen_result(len(config.codegen), failures)
    if failures:
        ctx.exit(EXIT_FAILURES)


@cli.command()
@project_options
@click.option("--force", "-f", is_flag=True, help="Show what a forced sync would do")
@click.pass_context
@handle_config_errors
def status(ctx: click.Context, target: str, config_path: Optional[Path], force: bool) -> None:
    """Show which assets would sync, without syncing."""
    console = _console(ctx)
    config = load_config(config_path)

    prepared = plan_sync(config, SyncOptions(target=target, force=force))

    console.print_plan(prepared.plan, target=target)
    for failure in prepared.failures:
        console.print_error(str(failure))
    if prepared.failures:
        ctx.exit(EXIT_FAILURES)


@cli.command()
@project_options
@click.option("--dry-run", "-n", is_flag=True, help="List records that would be dropped")
@click.pass_context
@handle_config_errors
def prune(ctx: click.Context, target: str, config_path: Optional[Path], dry_run: bool) -> None:
    """Drop stored records of assets no longer matched by any input."""
    console = _console(ctx)
    config = load_config(config_path)

    removed = prune_records(config, target, dry_run=dry_run)

    if not removed:
        console.print_info("Nothing to prune")
        return

    verb = "Would drop" if dry_run else "Dropped"
    for identity in removed:
        console.print(f"  - {identity}", markup=False, highlight=False)
    console.print_success(f"{verb} {len(removed)} records from target '{target}'")


@cli.command()
@click.argument("directory", type=click.Path(file_okay=False, path_type=Path), required=False)
@click.option("--name", default="", help="Project name (default: directory name)")
@click.pass_context
def init(ctx: click.Context, directory: Optional[Path], name: str) -> None:
    """Create a starter runway.yaml."""
    console = _console(ctx)
    config_path, created = ensure_config_exists(directory, name=name)

    if created:
        console.print_success(f"Created {config_path}")
    else:
        console.print_warning(f"{config_path} already exists")


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("validate")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file or directory containing runway.yaml",
)
@click.pass_context
def config_validate(ctx: click.Context, config_path: Optional[Path]) -> None:
    """Check runway.yaml for errors."""
    console = _console(ctx)
    path = get_config_path(config_path)
    ok, messages = validate_config_file(config_path)

    if not ok:
        console.print_error(f"{path} is invalid")
        for message in messages:
            console.print(f"  • {message}", highlight=False, markup=False)
        ctx.exit(EXIT_FATAL)

    for message in messages:
        console.print_warning(message)

    loaded = load_config(config_path)
    console.print_config_summary(str(path), loaded.target_keys(), len(loaded.inputs))
    console.print_success("Configuration is valid")


if __name__ == "__main__":
    cli()
