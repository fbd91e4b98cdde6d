"""Command-line interface for modpack-sync."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .api import CurseForgeAPI
from .config import API_KEY_ENV, ConfigError, SyncConfig, resolve_paths
from .downloader import Downloader, create_download_progress
from .manifest import ManifestError, load_manifest
from .reconcile import Replace, Skip, WarnMissingUrl
from .service import SyncService
from .state import DirectoryError
from .synclog import SyncLog

console = Console()

path_options = [
    click.option(
        "--mods-file",
        type=click.Path(path_type=Path),
        help="Manifest file (default: BASE_DIR/modlist.json)",
    ),
    click.option(
        "--mods-dir",
        type=click.Path(path_type=Path),
        help="Mods directory (default: BASE_DIR/.minecraft/mods)",
    ),
]


def with_path_options(func):
    for option in reversed(path_options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--api-key",
    envvar=API_KEY_ENV,
    help=f"CurseForge API key (or set {API_KEY_ENV} env var)",
)
@click.pass_context
def main(ctx: click.Context, api_key: str | None) -> None:
    """Keep a modpack's mods directory in sync with its modlist."""
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = api_key


@main.command()
@click.argument("base_dir", type=click.Path(path_type=Path))
@with_path_options
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=Path("sync.log"),
    show_default=True,
    help="Run log, overwritten on each run",
)
@click.pass_context
def sync(
    ctx: click.Context,
    base_dir: Path,
    mods_file: Path | None,
    mods_dir: Path | None,
    log_file: Path,
) -> None:
    """
    Download, replace and remove mods to match the modlist.

    BASE_DIR: Modpack directory containing modlist.json
    """
    try:
        config = SyncConfig.build(base_dir, ctx.obj.get("api_key"), mods_file, mods_dir)
        entries = load_manifest(config.mods_file)
        log = SyncLog(log_file, console)
    except (ConfigError, ManifestError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    log.info("Starting new run of modpack-sync...")
    log.info(f"   mods_dir={config.mods_dir}")
    log.info(f"   base_dir={config.base_dir}")
    log.info(f"   mods_file={config.mods_file}")

    api = CurseForgeAPI(config.api_key)

    with create_download_progress(console) as progress:
        service = SyncService(
            api,
            config.mods_dir,
            on_log=log,
            downloader=Downloader(api, progress),
        )
        try:
            result = service.run(entries)
        except DirectoryError as e:
            log.error(str(e))
            sys.exit(1)

    console.print(
        f"\n[bold]Downloaded:[/bold] {len(result.downloaded)}  "
        f"[bold]Deleted:[/bold] {len(result.deleted)}  "
        f"[bold]Skipped:[/bold] {len(result.skipped)}"
    )
    if result.warnings:
        console.print(f"[yellow]Entries without url:[/yellow] {len(result.warnings)}")
    if result.errors:
        console.print(f"[red]Failed:[/red] {len(result.errors)} (see {log.log_file})")
    else:
        console.print("[green]Sync complete![/green]")


@main.command()
@click.argument("base_dir", type=click.Path(path_type=Path))
@with_path_options
def plan(base_dir: Path, mods_file: Path | None, mods_dir: Path | None) -> None:
    """
    Show what a sync would do, without downloading or deleting anything.

    BASE_DIR: Modpack directory containing modlist.json
    """
    try:
        paths = resolve_paths(base_dir, mods_file, mods_dir)
        entries = load_manifest(paths["mods_file"])
        sync_plan = SyncService(None, paths["mods_dir"]).plan(entries)
    except (ConfigError, ManifestError, DirectoryError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    table = Table(title="Sync Plan")
    table.add_column("Mod", style="cyan")
    table.add_column("File", style="blue")
    table.add_column("Action")
    table.add_column("Removes", style="dim")

    for action in sync_plan.actions:
        entry = action.entry
        if isinstance(action, Skip):
            status = f"[green]Skip ({action.reason.value})[/green]"
            removes = ""
        elif isinstance(action, WarnMissingUrl):
            status = "[yellow]Missing url[/yellow]"
            removes = ""
        elif isinstance(action, Replace):
            status = "[blue]Update[/blue]" if action.obsolete else "[blue]Install[/blue]"
            removes = ", ".join(sorted(p.name for p in action.obsolete))
        table.add_row(entry.name[:40], entry.filename, status, removes)

    replaced = {p for a in sync_plan.actions if isinstance(a, Replace) for p in a.obsolete}
    for orphan in sync_plan.orphans:
        if orphan.path in replaced:
            continue
        table.add_row("-", orphan.filename, "[red]Remove (not in modlist)[/red]", "")

    console.print(table)


if __name__ == "__main__":
    main()
