"""CLI commands for slotwise."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from slotwise.config import get_settings

app = typer.Typer(
    name="slotwise",
    help="Staff scheduling and waiting-queue engine",
    add_completion=False,
)
console = Console()


def _run(work):
    """Run an async callable with a session, disposing the engine afterwards."""
    from slotwise.core.database import close_db, get_session_factory

    async def runner():
        try:
            async with get_session_factory()() as session:
                return await work(session)
        finally:
            await close_db()

    return asyncio.run(runner())


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Host to bind"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
):
    """Start the REST API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print(f"Starting slotwise API server on {host}:{port}")
    uvicorn.run(
        "slotwise.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def init_db():
    """Create the database tables."""
    from slotwise.core.database import close_db, init_db as create_tables

    async def runner():
        try:
            await create_tables()
        finally:
            await close_db()

    asyncio.run(runner())
    console.print("[green]Database initialized.[/green]")


@app.command()
def waiting(
    owner: str = typer.Option(..., "--owner", "-o", help="Owner id"),
):
    """Show an owner's waiting queue."""
    from slotwise.scheduling.service import SchedulingService

    async def work(session):
        entries = await SchedulingService(session).list_waiting(owner)
        return [
            (a.queue_position, a.customer_name, a.service.name, a.start_time)
            for a in entries
        ]

    rows = _run(work)
    if not rows:
        console.print("[yellow]Waiting queue is empty.[/yellow]")
        return

    table = Table(title=f"Waiting queue ({len(rows)})")
    table.add_column("#", justify="right")
    table.add_column("Customer")
    table.add_column("Service")
    table.add_column("Requested (UTC)")
    for position, customer, service_name, start in rows:
        table.add_row(str(position), customer, service_name, start.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@app.command()
def assign(
    owner: str = typer.Option(..., "--owner", "-o", help="Owner id"),
    staff: str = typer.Option(..., "--staff", "-s", help="Staff id"),
):
    """Assign the earliest eligible waiting appointment to a staff member."""
    import uuid

    from slotwise.scheduling.errors import SchedulingError
    from slotwise.scheduling.service import SchedulingService

    try:
        staff_id = uuid.UUID(staff)
    except ValueError:
        console.print(f"[red]Invalid staff id: {staff}[/red]")
        raise typer.Exit(1)

    async def work(session):
        return await SchedulingService(session).assign_from_queue(owner, staff_id)

    try:
        result = _run(work)
    except SchedulingError as e:
        console.print(f"[red]{e.kind}: {e.message}[/red]")
        raise typer.Exit(1)

    appt = result.appointment
    console.print(f"[green]{result.message}[/green]")
    console.print(
        f"{appt.customer_name}: {appt.start_time:%Y-%m-%d %H:%M} - {appt.end_time:%H:%M} UTC"
    )


@app.command()
def activity(
    owner: str = typer.Option(..., "--owner", "-o", help="Owner id"),
    limit: int = typer.Option(10, "--limit", "-n", help="Number of entries"),
):
    """Show recent scheduling activity for an owner."""
    from slotwise.core.repository import ActivityLogRepository

    async def work(session):
        entries = await ActivityLogRepository(session).list_recent(owner, limit=limit)
        return [(e.created_at, e.action, e.message) for e in entries]

    rows = _run(work)
    if not rows:
        console.print("[yellow]No activity recorded.[/yellow]")
        return

    table = Table(title="Recent activity")
    table.add_column("When (UTC)", no_wrap=True)
    table.add_column("Action", no_wrap=True)
    table.add_column("Message")
    for created_at, action, message in rows:
        table.add_row(created_at.strftime("%Y-%m-%d %H:%M:%S"), action, message)
    console.print(table)


@app.command()
def version():
    """Show version information."""
    from slotwise import __version__

    console.print(f"slotwise v{__version__}")
