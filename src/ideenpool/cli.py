"""CLI — list, show, submit, edit, subscribe, revisions, fields, token, serve."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ideenpool.auth.jwt import (
    TokenExpiredError,
    TokenInvalidError,
    extract_user,
    is_token_expired,
    time_remaining,
)
from ideenpool.auth.permissions import can_edit, can_unsubscribe, is_subscribed
from ideenpool.auth.session import TokenStore, current_actor, resolve_token
from ideenpool.config import Config
from ideenpool.core.ideas import IdeaEngine, group_by_phase
from ideenpool.core.status import STATUS_LABELS
from ideenpool.core.visibility import FIELD_CONFIG, describe, fields_by_section
from ideenpool.errors import IdeenpoolError
from ideenpool.events.bus import EventBus
from ideenpool.models.actor import Actor
from ideenpool.models.idea import BpfPhase, Idea, IdeaStatus, IdeaType
from ideenpool.storage import IdeaStore, open_store

T = TypeVar("T")

console = Console()
err_console = Console(stderr=True)

_USER_ERRORS = (IdeenpoolError, TokenInvalidError, TokenExpiredError, ValueError)


def _in_session(
    config: Config,
    session: Callable[[IdeaEngine, IdeaStore, str | None], Awaitable[T]],
) -> T:
    """Open a store session, run ``session`` against an engine, close the session."""

    async def _main() -> T:
        token = resolve_token(config)
        store = open_store(config, token)
        await store.initialize()
        try:
            return await session(IdeaEngine(store, EventBus()), store, token)
        finally:
            await store.close()

    if config.demo_mode:
        err_console.print("[yellow]Demo mode: sample data, changes are not saved.[/yellow]")
    try:
        return asyncio.run(_main())
    except _USER_ERRORS as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _run(config: Config, body: Callable[[IdeaEngine], Awaitable[T]]) -> T:
    async def _session(engine: IdeaEngine, store: IdeaStore, token: str | None) -> T:
        return await body(engine)

    return _in_session(config, _session)


def _run_as_actor(config: Config, body: Callable[[IdeaEngine, Actor], Awaitable[T]]) -> T:
    """Like ``_run``, with the signed-in user resolved first."""

    async def _session(engine: IdeaEngine, store: IdeaStore, token: str | None) -> T:
        return await body(engine, await current_actor(config, store, token))

    return _in_session(config, _session)


def _not_found(idea_id: str) -> None:
    click.echo(f"Error: Idea {idea_id} not found", err=True)
    sys.exit(1)


def _format_value(value: Any) -> str:
    if value is None or value == "":
        return "—"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _ideas_table(ideas: list[Idea], title: str | None = None) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Titel")
    table.add_column("Status")
    table.add_column("Typ")
    table.add_column("Eingereicht von")
    table.add_column("Datum", no_wrap=True)
    for idea in ideas:
        table.add_row(
            idea.id,
            idea.title,
            STATUS_LABELS[idea.status],
            _format_value(idea.type),
            idea.submitted_by,
            (idea.created_on or "")[:10],
        )
    return table


@click.group()
@click.version_option(package_name="ideenpool")
@click.option(
    "--home",
    type=click.Path(file_okay=False),
    default=None,
    help="Config directory (default ~/.ideenpool)",
)
@click.option("--demo", is_flag=True, default=False, help="Use the sample dataset.")
@click.pass_context
def main(ctx: click.Context, home: str | None, demo: bool) -> None:
    """Ideenpool — submit and follow digitalization ideas."""
    config = Config.load(Path(home).expanduser() if home else None)
    if demo:
        config.demo_mode = True
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    ctx.obj = config


@main.command("list")
@click.option("--search", "-s", default=None, help="Search title, description, submitter")
@click.option(
    "--type", "types", multiple=True, type=click.Choice([t.value for t in IdeaType])
)
@click.option(
    "--phase", "phases", multiple=True, type=click.Choice([p.value for p in BpfPhase])
)
@click.option("--person", default=None, help="Only ideas by this submitter")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_obj
def list_cmd(
    config: Config,
    search: str | None,
    types: tuple[str, ...],
    phases: tuple[str, ...],
    person: str | None,
    as_json: bool,
) -> None:
    """List ideas grouped by workflow phase."""

    async def _list(engine: IdeaEngine) -> list[Idea]:
        return await engine.list_ideas(
            search=search,
            types=[IdeaType(t) for t in types],
            phases=[BpfPhase(p) for p in phases],
            person=person,
        )

    ideas = _run(config, _list)

    if as_json:
        items = [i.to_response() for i in ideas]
        click.echo(json.dumps({"count": len(items), "ideas": items}, indent=2))
        return

    if not ideas:
        click.echo("No ideas found")
        return

    for phase, items in group_by_phase(ideas).items():
        console.print(_ideas_table(items, title=f"{phase or 'Keine Phase'} ({len(items)})"))


@main.command()
@click.argument("idea_id")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_obj
def show(config: Config, idea_id: str, as_json: bool) -> None:
    """Show the fields of an idea visible in its current status."""

    async def _show(engine: IdeaEngine, actor: Actor) -> tuple[Idea | None, Actor]:
        return await engine.get(idea_id), actor

    idea, actor = _run_as_actor(config, _show)
    if idea is None:
        _not_found(idea_id)
        return

    sections = describe(idea)
    if as_json:
        data = {
            "_v": "1.0",
            "id": idea.id,
            "sections": {
                str(section): {row["name"]: row["value"] for row in rows}
                for section, rows in sections.items()
            },
            "editable": sorted(
                row["name"] for rows in sections.values() for row in rows if row["editable"]
            ),
        }
        click.echo(json.dumps(data, indent=2, default=str))
        return

    for section, rows in sections.items():
        lines = []
        for row in rows:
            marker = " [green]✎[/green]" if row["editable"] else ""
            lines.append(f"[bold]{row['label']}[/bold]{marker}: {_format_value(row['value'])}")
        console.print(Panel("\n".join(lines), title=str(section)))

    if can_edit(actor, idea):
        console.print("[green]You can edit the description: ideenpool edit[/green]")
    if is_subscribed(actor, idea):
        console.print("Subscribed" + ("" if can_unsubscribe(actor, idea) else " (submitter)"))


@main.command()
@click.option("--title", prompt=True, help="5 to 200 characters")
@click.option("--description", prompt=True, help="20 to 4000 characters")
@click.pass_obj
def submit(config: Config, title: str, description: str) -> None:
    """Submit a new idea."""

    async def _submit(engine: IdeaEngine, actor: Actor) -> Idea:
        return await engine.submit(title=title, description=description, actor=actor)

    idea = _run_as_actor(config, _submit)
    console.print(
        Panel(
            f"[green]✓[/green] Idea submitted: {idea.title}\n"
            f"ID: {idea.id}\n"
            f"Status: {STATUS_LABELS[idea.status]}",
            title="Idea Submitted",
        )
    )


@main.command()
@click.argument("idea_id")
@click.option("--description", prompt=True, help="New description, 20 to 4000 characters")
@click.pass_obj
def edit(config: Config, idea_id: str, description: str) -> None:
    """Edit the description of one of your ideas."""

    async def _edit(engine: IdeaEngine, actor: Actor) -> Idea | None:
        return await engine.edit_description(idea_id, description, actor)

    idea = _run_as_actor(config, _edit)
    if idea is None:
        _not_found(idea_id)
        return
    console.print(
        Panel(
            f"[green]✓[/green] Description updated\n"
            f"ID: {idea.id}\n"
            f"Status: {STATUS_LABELS[idea.status]}",
            title="Idea Updated",
        )
    )


@main.command()
@click.argument("idea_id")
@click.pass_obj
def subscribe(config: Config, idea_id: str) -> None:
    """Subscribe to notifications about an idea."""

    async def _subscribe(engine: IdeaEngine, actor: Actor) -> Idea | None:
        return await engine.subscribe(idea_id, actor)

    idea = _run_as_actor(config, _subscribe)
    if idea is None:
        _not_found(idea_id)
        return
    click.echo(f"Subscribed to {idea.title}")


@main.command()
@click.argument("idea_id")
@click.pass_obj
def unsubscribe(config: Config, idea_id: str) -> None:
    """Drop your subscription to an idea."""

    async def _unsubscribe(engine: IdeaEngine, actor: Actor) -> Idea | None:
        return await engine.unsubscribe(idea_id, actor)

    idea = _run_as_actor(config, _unsubscribe)
    if idea is None:
        _not_found(idea_id)
        return
    click.echo(f"Unsubscribed from {idea.title}")


@main.command()
@click.pass_obj
def revisions(config: Config) -> None:
    """List ideas sent back for revision."""

    async def _revisions(engine: IdeaEngine) -> list[Idea]:
        return await engine.revision_queue()

    ideas = _run(config, _revisions)
    if not ideas:
        click.echo("No ideas waiting for revision")
        return
    console.print(_ideas_table(ideas, title=f"Zur Überarbeitung ({len(ideas)})"))


@main.command()
@click.option(
    "--status", "status", default=None, type=click.Choice([s.value for s in IdeaStatus])
)
def fields(status: str | None) -> None:
    """Show which fields are visible and editable per status."""
    statuses = [IdeaStatus(status)] if status else list(IdeaStatus)

    table = Table(title="Field configuration", caption="👁 visible  ✎ editable")
    table.add_column("Section", style="dim")
    table.add_column("Field")
    for s in statuses:
        table.add_column(STATUS_LABELS[s], justify="center")

    for section, definitions in fields_by_section().items():
        for definition in definitions:
            cells = []
            for s in statuses:
                status_config = FIELD_CONFIG[s]
                if definition.name in status_config.editable:
                    cells.append("✎")
                elif definition.name in status_config.visible:
                    cells.append("👁")
                else:
                    cells.append("")
            table.add_row(str(section), definition.label, *cells)

    console.print(table)


@main.group()
def token() -> None:
    """Manage the pasted access token."""


@token.command("set")
@click.argument("value")
@click.pass_obj
def token_set(config: Config, value: str) -> None:
    """Store an access token copied from the platform."""
    try:
        user = TokenStore(config).save(value)
    except (TokenInvalidError, TokenExpiredError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    console.print(
        Panel(
            f"[green]✓[/green] Token stored\nUser: {user.name}\nE-Mail: {user.email}",
            title="Signed In",
        )
    )


@token.command("status")
@click.pass_obj
def token_status(config: Config) -> None:
    """Show who the current token belongs to and how long it is valid."""
    value = resolve_token(config)
    if not value:
        click.echo("Not signed in")
        sys.exit(1)
    try:
        user = extract_user(value)
    except TokenInvalidError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if is_token_expired(value):
        click.echo(
            f"Token for {user.name} has expired. Paste a new one with 'ideenpool token set'."
        )
        sys.exit(1)
    click.echo(f"Signed in as {user.name} <{user.email}>, valid for {time_remaining(value)}")


@token.command("clear")
@click.pass_obj
def token_clear(config: Config) -> None:
    """Forget the pasted token."""
    if TokenStore(config).clear():
        click.echo("Token removed")
    else:
        click.echo("No stored token")


@main.command()
@click.option("--transport", type=click.Choice(["stdio"]), default="stdio")
@click.pass_obj
def serve(config: Config, transport: str) -> None:
    """Start the MCP server."""
    from ideenpool.server import create_server

    server = create_server(config)
    server.run(transport=transport)  # type: ignore[arg-type]


if __name__ == "__main__":
    main()
