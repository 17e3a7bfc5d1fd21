"""Chatflow CLI entry point."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from chatflow import __version__
from chatflow.config import get_database_settings
from chatflow.db.session import DatabaseSessionManager
from chatflow.utils import configure_logging
from chatflow.workflow import GraphStore

from .seed import create_welcome_workflow

app = typer.Typer(name="chatflow", help="Chat workflow engine administration")
console = Console()


def _session_manager() -> DatabaseSessionManager:
    settings = get_database_settings()
    return DatabaseSessionManager(
        settings.url,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )


async def _seed() -> bool:
    manager = _session_manager()
    try:
        async with manager.session_factory() as session:
            return await create_welcome_workflow(GraphStore(session)) is not None
    finally:
        await manager.close()


async def _list() -> list[tuple[str, str, str]]:
    manager = _session_manager()
    try:
        async with manager.session_factory() as session:
            workflows = await GraphStore(session).list_workflows(limit=1000)
            return [(str(w.id), w.name, w.status) for w in workflows]
    finally:
        await manager.close()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs")) -> None:
    """Chat workflow engine administration."""
    configure_logging("DEBUG" if verbose else "WARNING", json_logs=False)


@app.command("create-initial-chat-workflows")
def create_initial_chat_workflows() -> None:
    """Install the default chat workflows if they are missing."""
    if asyncio.run(_seed()):
        console.print("Created and published the welcome chat workflow", style="bold green")
    else:
        console.print("Initial chat workflows already exist", style="yellow")


@app.command("list-workflows")
def list_workflows() -> None:
    """List chat workflows."""
    table = Table(title="Chat workflows")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Status")
    for workflow_id, name, status in asyncio.run(_list()):
        table.add_row(workflow_id, name, status)
    console.print(table)


@app.command()
def version() -> None:
    """Show the chatflow version."""
    console.print(f"chatflow {__version__}", style="bold")


if __name__ == "__main__":
    app()
