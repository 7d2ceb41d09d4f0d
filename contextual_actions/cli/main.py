"""
CLI entrypoint.

doctor / providers: environment and registration checks.
suggest: run one fan-out for a query and render the aggregate.
validate: offline check of a JSON list of actions against the Action model.
serve: run the SSE API with uvicorn.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..core.action import Action, ContextOptions
from ..core.logging_utils import setup_logging
from ..core.settings import settings
from ..providers.bootstrap import build_orchestrator

app = typer.Typer(help="contextual-actions CLI")
console = Console()


@app.callback()
def _configure(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override CA_LOG_LEVEL"),
) -> None:
    setup_logging(log_level or settings.log_level)


@app.command("doctor")
def doctor() -> None:
    """Environment check: print key settings to confirm the CLI is usable."""
    console.print("[bold green]contextual-actions[/] environment")
    console.print(f"- provider timeout: {settings.provider_timeout_seconds}s")
    console.print(f"- event name:       {settings.event_name}")
    console.print(f"- tmdb api key:     {'set' if settings.tmdb_api_key else 'missing (movie provider disabled)'}")
    console.print(f"- store dir:        {settings.store_dir or '(in-memory)'}")


@app.command("providers")
def providers() -> None:
    """List registered providers in fan-out order."""
    orchestrator = build_orchestrator(settings)
    table = Table(title="Providers", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("name")
    table.add_column("type")
    for i, provider in enumerate(orchestrator.registry, start=1):
        table.add_row(str(i), getattr(provider, "name", "-"), type(provider).__name__)
    console.print(table)


@app.command("suggest")
def suggest(
    query: str = typer.Argument(..., help="User query text"),
    user_id: str = typer.Option("cli", "--user", help="User identifier passed to providers"),
    conversation_id: Optional[str] = typer.Option(None, "--conversation", help="Conversation id"),
    as_json: bool = typer.Option(False, "--json", help="Print the event payload as JSON"),
) -> None:
    """
    Run every provider once for QUERY and print the aggregated actions plus
    one row per provider outcome.
    """
    orchestrator = build_orchestrator(settings)
    options = ContextOptions(conversation_id=conversation_id)
    aggregate = asyncio.run(orchestrator.generate_actions(query, user_id, options))

    if as_json:
        payload = {
            "actions": [a.to_wire() for a in aggregate.actions],
            "count": aggregate.count,
        }
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    table = Table(title="Actions", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("kind")
    table.add_column("label")
    table.add_column("target")
    for i, action in enumerate(aggregate.actions, start=1):
        table.add_row(str(i), action.kind, action.label, action.target)
    console.print(table)

    outcomes = Table(title="Providers", show_header=True, header_style="bold")
    outcomes.add_column("provider")
    outcomes.add_column("result")
    outcomes.add_column("actions", justify="right")
    outcomes.add_column("elapsed", justify="right")
    outcomes.add_column("detail")
    for r in aggregate.results:
        result = "[green]OK[/]" if r.ok else f"[red]{(r.failure or 'error').upper()}[/]"
        outcomes.add_row(r.provider, result, str(len(r.actions)), f"{r.elapsed:.2f}s", r.error or "-")
    console.print(outcomes)


@app.command("validate")
def validate(path: Path = typer.Argument(..., help="Path to JSON file of Action[]")) -> None:
    """
    Validate each item of a JSON array against the Action model. Prints a table
    and exits non-zero if any item is invalid.
    """
    if not path.exists():
        typer.secho(f"[validate] file not found: {path}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        typer.secho(f"[validate] invalid JSON: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)
    if not isinstance(data, list):
        typer.secho("[validate] expected a JSON array of actions", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    table = Table(title="Validation Results", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("label")
    table.add_column("result")
    table.add_column("detail")

    failures = 0
    for i, item in enumerate(data, start=1):
        label = str(item.get("label", "-")) if isinstance(item, dict) else "-"
        try:
            Action.model_validate(item)
            table.add_row(str(i), label, "[green]OK[/]", "-")
        except ValidationError as ve:
            failures += 1
            msg = ve.errors()[0].get("msg", "invalid action")
            table.add_row(str(i), label, "[red]Invalid[/]", msg)

    console.print(table)
    if failures:
        raise typer.Exit(code=1)
    typer.secho("[validate] all actions passed", fg=typer.colors.GREEN)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
) -> None:
    """Run the SSE API (POST /api/ask) with uvicorn."""
    import uvicorn

    from ..api.app import create_app

    uvicorn.run(create_app(cfg=settings), host=host or settings.host, port=port or settings.port, log_config=None)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
