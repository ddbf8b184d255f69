"""FastMCP server — 2 tools, 1 resource."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Annotated, Any, Literal

from fastmcp import FastMCP
from pydantic import Field

from ideenpool.auth.jwt import TokenExpiredError, TokenInvalidError, time_remaining
from ideenpool.auth.permissions import can_edit, is_subscribed
from ideenpool.auth.session import current_actor, resolve_token
from ideenpool.config import Config
from ideenpool.core.ideas import IdeaEngine, group_by_phase
from ideenpool.core.status import STATUS_LABELS
from ideenpool.core.visibility import FIELD_CONFIG, describe
from ideenpool.errors import IdeenpoolError
from ideenpool.events.bus import EventBus
from ideenpool.models.actor import Actor
from ideenpool.models.idea import BpfPhase, IdeaStatus, IdeaType
from ideenpool.storage import open_store

logger = logging.getLogger(__name__)


def _json(data: dict[str, Any]) -> str:
    return json.dumps(data, default=str)


def _ok(data: dict[str, Any]) -> str:
    """Return a versioned JSON success response."""
    return _json({**data, "_v": "1.0"})


def _err(msg: str) -> str:
    """Return a versioned JSON error response."""
    return _json({"_v": "1.0", "error": msg})


def create_server(config: Config) -> FastMCP:
    """Create the FastMCP server for one configuration."""
    mcp = FastMCP("ideenpool", version="0.1.0")

    state: dict[str, Any] = {}
    _lock = asyncio.Lock()

    async def _init() -> dict[str, Any]:
        async with _lock:
            if "engine" not in state:
                token = resolve_token(config)
                store = open_store(config, token)
                await store.initialize()
                state["store"] = store
                state["token"] = token
                state["engine"] = IdeaEngine(store, EventBus())
        return state

    async def _actor(s: dict[str, Any]) -> Actor:
        if "actor" not in s:
            s["actor"] = await current_actor(config, s["store"], s["token"])
        return s["actor"]

    # ── ip_idea ───────────────────────────────────────────────

    @mcp.tool()
    async def ip_idea(
        action: Annotated[
            Literal["list", "get", "submit", "edit", "subscribe", "unsubscribe", "revisions"],
            Field(description="list | get | submit | edit | subscribe | unsubscribe | revisions"),
        ],
        idea_id: Annotated[
            str | None,
            Field(description="Idea ID (get, edit, subscribe, unsubscribe)"),
        ] = None,
        title: Annotated[
            str | None,
            Field(description="Title, 5-200 chars (submit)"),
        ] = None,
        description: Annotated[
            str | None,
            Field(description="Description, 20-4000 chars (submit, edit)"),
        ] = None,
        search: Annotated[
            str | None,
            Field(description="Text search over title, description, submitter (list)"),
        ] = None,
        types: Annotated[
            list[IdeaType] | None,
            Field(description="Idee | Vorhaben | Projekt (list)"),
        ] = None,
        phases: Annotated[
            list[BpfPhase] | None,
            Field(description="Workflow phases to keep (list)"),
        ] = None,
        person: Annotated[
            str | None,
            Field(description="Submitter name (list)"),
        ] = None,
    ) -> str:
        """Submit digitalization ideas and follow them through the approval workflow. Only the description of your own ideas can be edited, and only while submitted or sent back for revision.

Actions: list, get, submit, edit, subscribe, unsubscribe, revisions."""  # noqa: E501
        try:
            s = await _init()
            engine: IdeaEngine = s["engine"]

            if action == "list":
                ideas = await engine.list_ideas(
                    search=search, types=types, phases=phases, person=person
                )
                groups = group_by_phase(ideas)
                return _ok({
                    "count": len(ideas),
                    "phases": {
                        str(phase) if phase else "none": [i.to_response() for i in items]
                        for phase, items in groups.items()
                    },
                })

            if action == "revisions":
                ideas = await engine.revision_queue()
                return _ok({"count": len(ideas), "ideas": [i.to_response() for i in ideas]})

            if action == "submit":
                if not title or not description:
                    return _err("title and description are required for submit")
                idea = await engine.submit(
                    title=title, description=description, actor=await _actor(s)
                )
                return _ok(idea.to_response())

            if not idea_id:
                return _err(f"idea_id is required for {action}")

            if action == "get":
                idea = await engine.get(idea_id)
                if idea is None:
                    return _err(f"Idea not found: {idea_id}")
                actor = await _actor(s)
                return _ok({
                    **idea.to_response(),
                    "status_label": STATUS_LABELS[idea.status],
                    "fields": {
                        str(section): {row["name"]: row["value"] for row in rows}
                        for section, rows in describe(idea).items()
                    },
                    "can_edit": can_edit(actor, idea),
                    "subscribed": is_subscribed(actor, idea),
                })

            if action == "edit":
                if not description:
                    return _err("description is required for edit")
                idea = await engine.edit_description(idea_id, description, await _actor(s))
            elif action == "subscribe":
                idea = await engine.subscribe(idea_id, await _actor(s))
            elif action == "unsubscribe":
                idea = await engine.unsubscribe(idea_id, await _actor(s))
            else:
                return _err(f"Unknown action: {action}")

            if idea is None:
                return _err(f"Idea not found: {idea_id}")
            return _ok(idea.to_response())
        except (IdeenpoolError, TokenInvalidError, TokenExpiredError, ValueError) as e:
            logger.warning("ip_idea %s failed: %s", action, e)
            return _err(str(e))

    # ── ip_fields ─────────────────────────────────────────────

    @mcp.tool()
    async def ip_fields(
        status: Annotated[
            IdeaStatus | None,
            Field(description="Lifecycle status; omit for all statuses"),
        ] = None,
    ) -> str:
        """Which idea fields are visible and editable in each lifecycle status."""
        statuses = [status] if status else list(IdeaStatus)
        return _ok({
            "statuses": {
                str(s): {
                    "visible": sorted(FIELD_CONFIG[s].visible),
                    "editable": sorted(FIELD_CONFIG[s].editable),
                }
                for s in statuses
            }
        })

    # ── Resources (1) ─────────────────────────────────────────

    @mcp.resource("ip://status")
    async def ip_resource_status() -> str:
        """Connection and token overview."""
        token = resolve_token(config)
        return _ok({
            "demo_mode": config.demo_mode,
            "configured": config.is_configured,
            "token_missing": config.token_missing,
            "token_valid_for": time_remaining(token) if token else None,
        })

    return mcp
