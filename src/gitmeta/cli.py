"""Command-line interface for gitmeta."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import ConfigError, load_context
from .manager import GitmetaManager
from .models import ReapplyAction, ReapplyResult, ReconcileAction, ReconcileReport
from .vcs import GitRepository, VcsEnvironmentError

COMMANDS = ("commit", "merge", "init", "status")
USAGE = "Usage: gitmeta [dev] {commit|merge|init|status}"

app = typer.Typer(help="Record and restore file modes and ownership for a git repository", add_completion=False)
console = Console()
err_console = Console(stderr=True)

_ACTION_STYLES = {
    ReconcileAction.ADDED: "green",
    ReconcileAction.REMOVED: "red",
    ReconcileAction.CHANGED: "yellow",
}


class UnknownCommandError(ValueError):
    """Raised when the command words are missing or not recognized."""


@dataclass(frozen=True)
class Invocation:
    command: str
    dev_mode: bool = False


def parse_invocation(words: Sequence[str] | None) -> Invocation:
    """Parse ``[dev] <command>`` into an :class:`Invocation`."""

    remaining = list(words or [])
    dev_mode = bool(remaining) and remaining[0] == "dev"
    if dev_mode:
        remaining = remaining[1:]

    if not remaining:
        raise UnknownCommandError("No command given")
    if len(remaining) > 1 or remaining[0] not in COMMANDS:
        raise UnknownCommandError(f"Unknown command '{' '.join(remaining)}'")
    return Invocation(command=remaining[0], dev_mode=dev_mode)


def _configure_logging(verbose: bool) -> None:
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger = logging.getLogger("gitmeta")
    package_logger.handlers = [handler]
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_manager(config: Path | None) -> GitmetaManager:
    vcs = GitRepository.discover()
    context = load_context(vcs.root, config)
    return GitmetaManager(context, vcs)


def _handle_error(exc: Exception) -> None:
    if isinstance(exc, UnknownCommandError):
        console.print(f"[red]{escape(str(exc))}[/red]")
        console.print(USAGE, markup=False)
        raise typer.Exit(code=1)
    if isinstance(exc, VcsEnvironmentError):
        console.print(f"[red]{escape(str(exc))}[/red]")
        console.print("[yellow]Run gitmeta from inside a git working tree.[/yellow]")
        raise typer.Exit(code=1)
    if isinstance(exc, ConfigError):
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    if isinstance(exc, PermissionError):
        console.print("[red]Permission denied.[/red] Re-run the command with elevated privileges (e.g. `sudo`).")
        raise typer.Exit(code=1)
    raise exc


def _format_changes(report: ReconcileReport) -> None:
    for change in report.changes:
        style = _ACTION_STYLES[change.action]
        console.print(f"[{style}]{change.action.value}[/{style}] {escape(change.describe())}")


def _format_status(report: ReconcileReport) -> None:
    if not report.changes:
        console.print("[green]Metadata store is up to date.[/green]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Path", overflow="fold")
    table.add_column("Action")
    table.add_column("Stored")
    table.add_column("Current")

    for change in report.changes:
        style = _ACTION_STYLES[change.action]
        table.add_row(
            escape(change.path),
            f"[{style}]{change.action.value}[/{style}]",
            change.old.format() if change.old is not None else "",
            change.new.format() if change.new is not None else "",
        )

    console.print(table)
    console.print(f"[yellow]Pending: {report.summary()}. Run 'gitmeta commit' to record.[/yellow]")


def _format_reapply_results(results: Iterable[ReapplyResult]) -> None:
    for result in results:
        if result.action is ReapplyAction.SKIPPED:
            console.print(f"[yellow]skipped[/yellow] {escape(result.path)}: {escape(result.details or '')}")


def _run_commit(manager: GitmetaManager, invocation: Invocation) -> None:
    report = manager.commit(dev_mode=invocation.dev_mode)
    _format_changes(report)
    if invocation.dev_mode:
        console.print(f"gitmeta: {report.summary()}")


def _run_merge(manager: GitmetaManager, invocation: Invocation) -> None:
    _format_reapply_results(manager.merge())


def _run_status(manager: GitmetaManager, invocation: Invocation) -> None:
    _format_status(manager.status())


def _run_init(manager: GitmetaManager, invocation: Invocation, *, write_config: bool = False) -> None:
    for hook, line, added in manager.install_hooks(dev_mode=invocation.dev_mode):
        if added:
            console.print(f"[green]Added '{escape(line)}' to {escape(str(hook))}.[/green]")
        else:
            console.print(f"'{escape(line)}' already present in {escape(str(hook))}.")

    if write_config:
        written = manager.write_config()
        if written is None:
            console.print("[yellow]Configuration file already exists; left unchanged.[/yellow]")
        else:
            console.print(f"[green]Created '{escape(str(written))}'.[/green]")


_HANDLERS: dict[str, Callable[[GitmetaManager, Invocation], None]] = {
    "commit": _run_commit,
    "merge": _run_merge,
    "status": _run_status,
}


@app.command()
def main(
    words: list[str] = typer.Argument(
        None,
        metavar="[dev] {commit|merge|init|status}",
        help="Command to run, optionally preceded by 'dev'",
        show_default=False,
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to gitmeta.toml"),
    write_config: bool = typer.Option(
        False,
        "--write-config",
        help="With 'init', also write the active settings to gitmeta.toml",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Record metadata on commit, reapply it on merge, or install the hooks."""

    _configure_logging(verbose)
    try:
        invocation = parse_invocation(words)
        manager = _load_manager(config)
        if invocation.command == "init":
            _run_init(manager, invocation, write_config=write_config)
        else:
            _HANDLERS[invocation.command](manager, invocation)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


def run() -> None:
    """Entry point used for console_script bindings."""

    app()
