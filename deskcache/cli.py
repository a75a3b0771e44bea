"""Command line interface for deskcache."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__, api
from .config import load_config, resolve_database_path
from .errors import DeskcacheError
from .output import ConsoleProgress, format_visibility_icon
from .services.config_service import apply_config_updates, get_config_snapshot
from .services.query_service import QueryStatus
from .services.reconcile_service import ReconcileResult, ReconcileStatus
from .text import Messages, Styles

console = Console()

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"deskcache v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("deskcache")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help=Messages.HELP_VERBOSE,
    ),
) -> None:
    """Global Typer callback for shared options."""
    _configure_logging(verbose)


@app.command(help=Messages.HELP_REFRESH)
def refresh(
    app_dir: Path | None = typer.Option(
        None,
        "--app-dir",
        "-d",
        help=Messages.HELP_APP_DIR,
    ),
) -> None:
    config = load_config()
    directory = app_dir if app_dir is not None else config.application_dir
    console.print(_styled(Messages.INFO_REFRESH_RUNNING.format(path=directory), Styles.INFO))
    try:
        with _progress() as progress:
            result = api.refresh(application_dir=app_dir, progress=progress)
    except DeskcacheError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)

    _check_result(result, provider=config.provider, action="search files")
    console.print(
        _styled(
            Messages.INFO_REFRESH_DONE.format(
                validated=result.validated,
                updated=result.updated,
                removed=result.removed,
                added=result.added,
                skipped=result.skipped,
            ),
            Styles.SUCCESS,
        )
    )


@app.command(help=Messages.HELP_INGEST)
def ingest(
    packages: list[str] = typer.Argument(..., help=Messages.HELP_INGEST_PACKAGES),
) -> None:
    config = load_config()
    console.print(
        _styled(
            Messages.INFO_INGEST_RUNNING.format(
                count=len(packages), plural="" if len(packages) == 1 else "s"
            ),
            Styles.INFO,
        )
    )
    try:
        with _progress() as progress:
            result = api.ingest(packages, progress=progress)
    except DeskcacheError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)

    if result.status == ReconcileStatus.NOTHING_TO_DO:
        console.print(_styled(Messages.INFO_INGEST_NOTHING, Styles.INFO))
        return
    _check_result(result, provider=config.provider, action="list package files")
    console.print(
        _styled(
            Messages.INFO_INGEST_DONE.format(
                added=result.added, plural="" if result.added == 1 else "s"
            ),
            Styles.SUCCESS,
        )
    )


@app.command(help=Messages.HELP_LOOKUP)
def lookup(
    path: Path = typer.Argument(..., help=Messages.HELP_LOOKUP_PATH),
) -> None:
    try:
        entry = api.lookup(path)
    except DeskcacheError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)
    if entry is None:
        console.print(_styled(Messages.INFO_LOOKUP_MISSING.format(path=path), Styles.WARNING))
        raise typer.Exit(code=1)
    console.print(
        Messages.INFO_LOOKUP_RESULT.format(
            path=_styled(entry.path, Styles.TITLE),
            owner=entry.owner,
            visible="yes" if entry.visible else "no",
            fingerprint=entry.fingerprint,
        )
    )


@app.command("list", help=Messages.HELP_LIST)
def list_command(
    package: str | None = typer.Option(
        None,
        "--package",
        "-p",
        help=Messages.HELP_LIST_PACKAGE,
    ),
) -> None:
    try:
        entries = api.list_entries(owner=package)
    except DeskcacheError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)
    if not entries:
        console.print(_styled(Messages.INFO_LIST_EMPTY, Styles.INFO))
        return
    console.print(_styled(Messages.TABLE_TITLE, Styles.TITLE))
    table = Table(show_header=True, header_style=Styles.TABLE_HEADER)
    table.add_column(Messages.TABLE_HEADER_PATH, overflow="fold")
    table.add_column(Messages.TABLE_HEADER_PACKAGE, no_wrap=True)
    table.add_column(Messages.TABLE_HEADER_SHOW, justify="center")
    for entry in entries:
        table.add_row(entry.path, entry.owner, format_visibility_icon(entry.visible, console))
    console.print(table)


@app.command(help=Messages.HELP_CLEAR)
def clear() -> None:
    try:
        removed = api.clear_cache()
    except DeskcacheError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)
    if removed == 0:
        console.print(_styled(Messages.INFO_CLEAR_NONE, Styles.INFO))
        return
    console.print(
        _styled(
            Messages.INFO_CLEARED.format(count=removed, plural="" if removed == 1 else "s"),
            Styles.SUCCESS,
        )
    )


@app.command(help=Messages.HELP_CONFIG)
def config(
    show: bool = typer.Option(False, "--show", help=Messages.HELP_SHOW_CONFIG),
    enable: bool | None = typer.Option(
        None,
        "--enable/--disable",
        help=Messages.HELP_ENABLE,
    ),
    set_app_dir_option: str | None = typer.Option(
        None,
        "--set-app-dir",
        help=Messages.HELP_SET_APP_DIR,
    ),
    set_provider_option: str | None = typer.Option(
        None,
        "--set-provider",
        help=Messages.HELP_SET_PROVIDER,
    ),
    set_timeout_option: float | None = typer.Option(
        None,
        "--set-timeout",
        help=Messages.HELP_SET_TIMEOUT,
    ),
    set_database_option: str | None = typer.Option(
        None,
        "--set-database",
        help=Messages.HELP_SET_DATABASE,
    ),
) -> None:
    clear_database = set_database_option is not None and not set_database_option.strip()
    try:
        updates = apply_config_updates(
            scan_desktop_files=enable,
            application_dir=set_app_dir_option,
            provider=set_provider_option,
            query_timeout=set_timeout_option,
            database_path=None if clear_database else set_database_option,
            clear_database_path=clear_database,
        )
    except ValueError as exc:
        console.print(_styled(str(exc), Styles.ERROR))
        raise typer.Exit(code=1)

    if updates.enabled_set and enable is not None:
        state = "enabled" if enable else "disabled"
        console.print(_styled(Messages.INFO_ENABLED_SET.format(state=state), Styles.SUCCESS))
    if updates.application_dir_set and set_app_dir_option is not None:
        console.print(
            _styled(Messages.INFO_APP_DIR_SET.format(value=set_app_dir_option), Styles.SUCCESS)
        )
    if updates.provider_set and set_provider_option is not None:
        console.print(
            _styled(Messages.INFO_PROVIDER_SET.format(value=set_provider_option), Styles.SUCCESS)
        )
    if updates.timeout_set and set_timeout_option is not None:
        console.print(
            _styled(Messages.INFO_TIMEOUT_SET.format(value=set_timeout_option), Styles.SUCCESS)
        )
    if updates.database_set and set_database_option is not None:
        console.print(
            _styled(Messages.INFO_DATABASE_SET.format(value=set_database_option), Styles.SUCCESS)
        )
    if updates.database_cleared:
        console.print(_styled(Messages.INFO_DATABASE_RESET, Styles.SUCCESS))

    if show or not updates.changed:
        cfg = get_config_snapshot()
        timeout = cfg.effective_timeout
        console.print(
            _styled(
                Messages.INFO_CONFIG_SUMMARY.format(
                    enabled="yes" if cfg.scan_desktop_files else "no",
                    app_dir=cfg.application_dir,
                    provider=cfg.provider,
                    timeout=f"{timeout:g}s" if timeout is not None else "none",
                    database=resolve_database_path(cfg),
                ),
                Styles.INFO,
            )
        )


def _check_result(result: ReconcileResult, *, provider: str, action: str) -> None:
    if result.status == ReconcileStatus.UNSUPPORTED:
        console.print(
            _styled(
                Messages.WARNING_UNSUPPORTED.format(provider=provider, action=action),
                Styles.WARNING,
            )
        )
        raise typer.Exit()
    if result.status == ReconcileStatus.FAILED:
        console.print(
            _styled(
                Messages.WARNING_QUERY_FAILED.format(status=result.query_status.value),
                Styles.ERROR,
            )
        )
        raise typer.Exit(code=1)
    if result.query_status != QueryStatus.SUCCESS:
        console.print(
            _styled(
                Messages.WARNING_QUERY_FAILED.format(status=result.query_status.value),
                Styles.WARNING,
            )
        )


@contextmanager
def _progress():
    if not console.is_terminal:
        yield None
        return
    with ConsoleProgress(console) as progress:
        yield progress


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    args = list(argv) if argv is not None else sys.argv[1:]
    if argv is None:
        app()
    else:
        app(args=args)
