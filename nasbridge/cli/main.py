"""Command-line interface for nasbridge."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from nasbridge import __version__
from nasbridge.core.config import AppConfig, NasConfig, load_config
from nasbridge.core.models import Photo
from nasbridge.core.nas_sync import NasSyncEngine
from nasbridge.sources.nas import describe_address, relative_remote_path, select_protocol
from nasbridge.sources.photos import LocalPhotoScanner
from nasbridge.utils.credentials import CredentialStore
from nasbridge.utils.logging import setup_logging
from nasbridge.utils.settings_db import get_config_path, set_config_path

# Create Typer app
app = typer.Typer(
    name="nasbridge",
    help="Synchronize local photos to a NAS over WebDAV or SMB",
    add_completion=False,
)

# Create console for rich output
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
) -> None:
    """nasbridge - Sync photos to your NAS."""
    ctx.ensure_object(dict)
    effective_config_path = config_file
    if effective_config_path is None:
        stored_path = get_config_path()
        if stored_path:
            effective_config_path = stored_path

    cfg = load_config(effective_config_path)
    ctx.obj["config"] = cfg

    if config_file is not None:
        set_config_path(config_file)

    setup_logging(cfg, level_name=log_level, console=console)


def _engine(cfg: AppConfig) -> NasSyncEngine:
    cfg.ensure_data_dir()
    return NasSyncEngine.from_config(cfg)


def _nas_config(cfg: AppConfig) -> NasConfig:
    """Configured NAS section with the password resolved, or exit."""
    if not cfg.nas.is_configured:
        console.print("[red]NAS host and username are not configured[/red]")
        console.print("[dim]Set them in the [nas] section of your config or via NASBRIDGE_NAS__HOST[/dim]")
        raise typer.Exit(1)

    nas = cfg.nas.with_credentials()
    if not nas.password:
        console.print("[red]No NAS password found[/red]")
        console.print("[dim]Store one with: nasbridge nas set-password[/dim]")
        raise typer.Exit(1)
    return nas


@app.command()
def version() -> None:
    """Show version information."""
    import platform

    table = Table(title="nasbridge Version Information")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    table.add_row("Version", __version__)
    table.add_row("Python", platform.python_version())
    table.add_row("Platform", platform.platform())

    console.print(table)


@app.command()
def config(
    ctx: typer.Context,
    show: bool = typer.Option(
        False,
        "--show",
        "-s",
        help="Show current configuration",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        "-i",
        help="Create a default configuration file",
    ),
) -> None:
    """Manage configuration."""
    cfg: AppConfig = ctx.obj["config"]

    if init:
        config_path = cfg.default_config_path

        if config_path.exists():
            console.print(f"[yellow]Config file already exists:[/yellow] {config_path}")
            overwrite = typer.confirm("Overwrite existing config?")
            if not overwrite:
                console.print("[dim]Config creation cancelled[/dim]")
                raise typer.Exit(0)

        cfg.save_to_file(config_path)
        set_config_path(config_path)
        console.print(f"[green]✓ Config file created:[/green] {config_path}")
        console.print("[yellow]Edit the [nas] section to point nasbridge at your NAS.[/yellow]")
        return

    if show:
        table = Table(title="nasbridge Configuration")
        table.add_column("Setting", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")

        table.add_row("Data Directory", str(cfg.general.data_dir))
        table.add_row("Config File", str(cfg.general.config_file or "Not set"))
        table.add_row("Log Level", cfg.general.log_level)

        nas = cfg.nas
        table.add_row("", "")
        table.add_row("[bold]NAS[/bold]", "")
        table.add_row("Host", nas.host or "Not set")
        table.add_row("Port", str(nas.port) if nas.port else "Default")
        table.add_row("Protocol", f"{nas.protocol} → {select_protocol(nas).value}")
        table.add_row("Username", nas.username or "Not set")
        table.add_row("Remote Path", nas.remote_path or "/")
        table.add_row("HTTPS", "✓" if nas.use_https else "✗")
        table.add_row("Favorites Only", "✓" if nas.sync_favorites_only else "✗")

        console.print(table)
    else:
        console.print(
            f"[yellow]Configuration file:[/yellow] {cfg.general.config_file or 'Not set'}"
        )
        console.print(f"[yellow]Data directory:[/yellow] {cfg.general.data_dir}")
        console.print("\n[dim]Use --show to display full configuration[/dim]")
        console.print("[dim]Use --init to create a default config file[/dim]")


# NAS subcommand group
nas_app = typer.Typer(help="Manage NAS synchronization")
app.add_typer(nas_app, name="nas")


@nas_app.command("test")
def nas_test(ctx: typer.Context) -> None:
    """Test the connection to the configured NAS."""
    cfg: AppConfig = ctx.obj["config"]
    nas = _nas_config(cfg)

    console.print(f"[cyan]Testing connection to[/cyan] {describe_address(nas)}")
    ok = asyncio.run(_engine(cfg).test_connection(nas))

    if ok:
        console.print("[green]✓ Connection successful[/green]")
    else:
        console.print("[red]✗ Connection failed[/red]")
        raise typer.Exit(1)


@nas_app.command("sync")
def nas_sync(
    ctx: typer.Context,
    folder: Annotated[Path, typer.Argument(help="Local folder with photos", exists=True, file_okay=False)],
    favorite: Annotated[
        Optional[list[str]],
        typer.Option("--favorite", "-f", help="File name to mark as favorite (repeatable)"),
    ] = None,
    favorites_only: Annotated[
        bool, typer.Option("--favorites-only", help="Only sync photos marked as favorite")
    ] = False,
    recursive: Annotated[bool, typer.Option("--recursive/--no-recursive", help="Scan subfolders")] = True,
) -> None:
    """Upload the photos of a local folder to the NAS."""
    cfg: AppConfig = ctx.obj["config"]
    nas = _nas_config(cfg)
    if favorites_only:
        nas = nas.model_copy(update={"sync_favorites_only": True})

    photos = LocalPhotoScanner(folder, recursive=recursive, favorites=favorite or []).scan()
    engine = _engine(cfg)
    selected = engine.select_photos(photos, nas)

    if not selected:
        console.print("[yellow]No photos to sync[/yellow]")
        return

    console.print(f"[cyan]Syncing {len(selected)} photo(s) to[/cyan] {describe_address(nas)}\n")

    async def run_sync():
        with Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Uploading", total=len(selected))

            async def on_progress(processed: int, total: int) -> None:
                progress.update(task, completed=processed, total=total)

            return await engine.sync_to_nas(selected, nas, progress_callback=on_progress)

    result = asyncio.run(run_sync())

    table = Table(title="Sync Summary")
    table.add_column("Outcome", style="cyan")
    table.add_column("Photos", justify="right")
    table.add_row("Successful", f"[green]{result.successful}[/green]")
    table.add_row("Failed", f"[red]{result.failed}[/red]")
    console.print(table)

    for failure in result.failures:
        console.print(f"  [red]✗[/red] {failure.filename}: {failure.reason}")

    if result.failed:
        raise typer.Exit(1)


@nas_app.command("list")
def nas_list(ctx: typer.Context) -> None:
    """List files in the remote NAS folder.

    Paths are printed relative to the remote folder, as `nas download` takes them.
    """
    cfg: AppConfig = ctx.obj["config"]
    nas = _nas_config(cfg)

    files = asyncio.run(_engine(cfg).list_remote_files(nas))
    if not files:
        console.print("[yellow]No remote files found[/yellow]")
        return

    for entry in files:
        console.print(relative_remote_path(nas, entry), markup=False, highlight=False)
    console.print(f"\n[dim]{len(files)} file(s)[/dim]")


@nas_app.command("mkdir")
def nas_mkdir(ctx: typer.Context) -> None:
    """Create the remote NAS folder."""
    cfg: AppConfig = ctx.obj["config"]
    nas = _nas_config(cfg)

    if asyncio.run(_engine(cfg).create_remote_directory(nas)):
        console.print(f"[green]✓ Remote folder ready:[/green] {describe_address(nas)}")
    else:
        console.print("[red]✗ Could not create remote folder[/red]")
        raise typer.Exit(1)


@nas_app.command("download")
def nas_download(
    ctx: typer.Context,
    remote_path: Annotated[str, typer.Argument(help="Path relative to the remote folder")],
) -> None:
    """Download one file from the NAS into the local download folder."""
    cfg: AppConfig = ctx.obj["config"]
    nas = _nas_config(cfg)

    result = asyncio.run(_engine(cfg).download_photo(remote_path, nas))
    if result is None:
        console.print(f"[red]✗ Download failed:[/red] {remote_path}")
        raise typer.Exit(1)

    if isinstance(result, Photo):
        console.print(f"[green]✓ Downloaded[/green] {result.filename} ({result.size} bytes, {result.type})")
        console.print(f"[dim]{result.local_path}[/dim]")
    else:
        console.print(f"[green]✓ Downloaded[/green] {remote_path} ({len(result)} bytes)")
        console.print(f"[dim]{cfg.download_dir}[/dim]")


@nas_app.command("status")
def nas_status(ctx: typer.Context) -> None:
    """Show NAS sync configuration and the last sync time."""
    cfg: AppConfig = ctx.obj["config"]
    nas = cfg.nas

    console.print("[bold]NAS Sync Status[/bold]\n")

    if nas.host:
        console.print(f"✓ Target: {describe_address(nas)}", style="green")
        console.print(f"✓ Protocol: {select_protocol(nas).value}", style="green")
    else:
        console.print("✗ NAS host not configured", style="red")

    if nas.username:
        console.print(f"✓ Username: {nas.username}", style="green")
        if nas.host and CredentialStore().has_nas_password(nas.host, nas.username):
            console.print("✓ Password: stored in system keyring (secure)", style="green")
        elif nas.password:
            console.print("✓ Password: configured in config/env (consider using keyring)", style="yellow")
        else:
            console.print("✗ Password not configured", style="red")
    else:
        console.print("✗ NAS username not configured", style="red")

    last_sync = asyncio.run(_engine(cfg).get_last_sync_time())
    if last_sync:
        console.print(f"\nLast sync: {last_sync.astimezone().strftime('%Y-%m-%d %H:%M:%S')}")
    else:
        console.print("\n[dim]Never synced[/dim]")


@nas_app.command("set-password")
def nas_set_password(ctx: typer.Context) -> None:
    """Store the NAS password securely in system keyring."""
    cfg: AppConfig = ctx.obj["config"]
    nas = cfg.nas

    if not nas.is_configured:
        console.print("[red]NAS host and username must be configured first[/red]")
        raise typer.Exit(1)

    password = typer.prompt(f"Enter NAS password for {nas.username}@{nas.host}", hide_input=True)
    password_confirm = typer.prompt("Confirm password", hide_input=True)

    if password != password_confirm:
        console.print("[red]Passwords do not match[/red]")
        raise typer.Exit(1)

    try:
        CredentialStore().set_nas_password(nas.host, nas.username, password)
    except Exception as e:
        console.print(f"[red]Failed to store password: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(f"[green]✓ Password stored securely for {nas.username}@{nas.host}[/green]")


@nas_app.command("delete-password")
def nas_delete_password(
    ctx: typer.Context,
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt",
    ),
) -> None:
    """Delete the NAS password from system keyring."""
    cfg: AppConfig = ctx.obj["config"]
    nas = cfg.nas

    if not nas.is_configured:
        console.print("[red]NAS host and username are not configured[/red]")
        raise typer.Exit(1)

    if not yes and not typer.confirm(f"Delete stored password for {nas.username}@{nas.host}?"):
        console.print("[dim]Cancelled[/dim]")
        raise typer.Exit(0)

    if CredentialStore().delete_nas_password(nas.host, nas.username):
        console.print("[green]✓ Password deleted[/green]")
    else:
        console.print("[yellow]No stored password found[/yellow]")


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host", "-h", help="Host to bind to")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Port to bind to")] = 8000,
    reload: Annotated[bool, typer.Option("--reload", help="Enable auto-reload (development)")] = False,
) -> None:
    """Start the nasbridge API server.

    Examples:
        # Start on specific host and port
        nasbridge serve --host 0.0.0.0 --port 8080
    """
    import uvicorn

    console.print(Panel.fit(
        f"[bold cyan]nasbridge API Server[/bold cyan]\n\n"
        f"[white]Starting server on {host}:{port}[/white]",
        border_style="cyan"
    ))

    try:
        console.print(f"[dim]API docs: http://{host}:{port}/api/docs[/dim]")
        console.print("[dim]Press Ctrl+C to stop[/dim]\n")

        uvicorn.run(
            "nasbridge.api.app:app",
            host=host,
            port=port,
            reload=reload,
            log_level="info",
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped[/yellow]")


def main_entry() -> None:
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        logging.exception("Unhandled exception")
        sys.exit(1)


if __name__ == "__main__":
    main_entry()
