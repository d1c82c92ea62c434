"""
Command Line Interface for the Resource Listing Registry.
"""

import asyncio
from typing import Optional

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_settings
from ..db.base import get_session_local, init_database
from ..logging_config import configure_logging
from ..policy import RegistryError
from ..registry import ListingRegistry

app = typer.Typer(help="Resource Listing Registry - surplus listings ledger")
console = Console()

_registry: Optional[ListingRegistry] = None


def get_registry() -> ListingRegistry:
    global _registry
    if _registry is None:
        _registry = ListingRegistry(get_session_local())
    return _registry


def _fail(exc: RegistryError) -> None:
    console.print(f"❌ {exc.code.value}: {exc.message}")
    raise typer.Exit(code=1)


@app.callback()
def setup() -> None:
    configure_logging(get_settings())


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind the server to"),
    port: Optional[int] = typer.Option(None, help="Port to run the API server on"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the registry HTTP API."""
    settings = get_settings()
    rprint(Panel.fit(f"Starting {settings.app_name}", style="bold blue"))
    uvicorn.run(
        "resource_registry.api:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        workers=1 if reload else settings.api_workers,
    )


@app.command("init-db")
def init_db():
    """Create all registry tables."""
    asyncio.run(init_database())
    console.print("✅ Database initialized")


@app.command()
def status():
    """Show the admin gate and counters."""
    state = get_registry().get_state()

    table = Table(title="Registry Status", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Paused", "🔴 yes" if state.paused else "🟢 no")
    table.add_row("Admin", state.admin)
    table.add_row("Next listing id", str(state.next_listing_id))
    table.add_row("Ledger height", str(state.block_height))

    console.print(table)


@app.command()
def pause(caller: str = typer.Option(..., help="Identity performing the call")):
    """Pause all listing mutations (admin only)."""
    try:
        get_registry().pause(caller)
    except RegistryError as exc:
        _fail(exc)
    console.print("⏸️ Registry paused")


@app.command()
def unpause(caller: str = typer.Option(..., help="Identity performing the call")):
    """Resume listing mutations (admin only)."""
    try:
        get_registry().unpause(caller)
    except RegistryError as exc:
        _fail(exc)
    console.print("▶️ Registry resumed")


@app.command("set-admin")
def set_admin(
    new_admin: str = typer.Argument(..., help="Identity of the new admin"),
    caller: str = typer.Option(..., help="Identity performing the call"),
):
    """Hand the admin role to another identity."""
    try:
        get_registry().set_admin(caller, new_admin)
    except RegistryError as exc:
        _fail(exc)
    console.print(f"✅ Admin is now {new_admin}")


@app.command("show-listing")
def show_listing(listing_id: int = typer.Argument(..., help="Listing id")):
    """Show a listing with its classification and verification."""
    registry = get_registry()
    listing = registry.get_listing(listing_id)
    if listing is None:
        console.print(f"❌ Listing {listing_id} not found")
        raise typer.Exit(code=1)

    table = Table(title=f"Listing {listing_id}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for field, value in listing.model_dump(mode="json").items():
        table.add_row(field, "" if value is None else str(value))

    categories = registry.get_listing_categories(listing_id)
    if categories is not None:
        table.add_row("category", categories.category)
        table.add_row("tags", ", ".join(categories.tags))

    verification = registry.get_listing_verification(listing_id)
    if verification is not None:
        table.add_row(
            "verified",
            f"by {verification.verified_by} at {verification.verified_at}: "
            f"{verification.verification_notes}",
        )

    console.print(table)


@app.command()
def history(
    listing_id: int = typer.Argument(..., help="Listing id"),
    limit: int = typer.Option(100, help="Maximum entries to show"),
):
    """Show the update history of a listing."""
    entries = get_registry().list_listing_updates(listing_id, limit=limit)
    if not entries:
        console.print("No updates recorded")
        return

    table = Table(title=f"Updates for listing {listing_id}", header_style="bold cyan")
    table.add_column("#", style="yellow")
    table.add_column("Height", style="blue")
    table.add_column("Updater", style="green")
    table.add_column("Notes")
    table.add_column("Changes", style="magenta")

    for entry in entries:
        changes = ", ".join(
            f"{c['field']}: {c['old']} → {c['new']}" for c in entry.changes
        )
        table.add_row(
            str(entry.update_id),
            str(entry.timestamp),
            entry.updater,
            entry.notes,
            changes,
        )

    console.print(table)


@app.command()
def version():
    """Show version information."""
    from .. import __version__

    rprint(Panel.fit(f"Resource Listing Registry v{__version__}", style="bold green"))


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
