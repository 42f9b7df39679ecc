"""CLI entry point for personfinder."""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import replace
from typing import Any

import click

from personfinder import __version__
from personfinder.app import App, build_app
from personfinder.config import Config
from personfinder.logging_setup import init_logging


def _guess_type(query: str) -> str:
    return "email" if "@" in query else "company"


def _echo_person(person: dict[str, Any]) -> None:
    labels = (
        ("name", "Name"),
        ("email", "Email"),
        ("company", "Company"),
        ("phone", "Phone"),
        ("whatsapp", "WhatsApp"),
        ("instagram", "Instagram"),
        ("linkedIn", "LinkedIn"),
        ("twitter", "Twitter"),
    )
    for key, label in labels:
        if person.get(key):
            click.echo(f"  {label}: {person[key]}")


def _echo_result(status: int, payload: dict[str, Any], as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if not payload.get("success"):
        click.echo(f"  ✗ {payload.get('error', 'Search failed')} (HTTP {status})")
        return

    source = "cache" if payload.get("cached") else "providers"
    data = payload.get("data")
    people = data if isinstance(data, list) else [data]
    click.echo(f"  ✓ {len(people)} result(s) from {source}")
    for i, person in enumerate(people, 1):
        if len(people) > 1:
            click.echo(f"\n  #{i}")
        _echo_person(person)


def _search(app: App, query: str, search_type: str | None) -> tuple[int, dict[str, Any]]:
    body = {"query": query, "type": search_type or _guess_type(query)}
    return asyncio.run(app.controller.search(body))


def _interactive(app: App, as_json: bool) -> None:
    """REPL for repeated searches; repeats within the cache window are served from cache."""
    click.echo(f"personfinder v{__version__} — Interactive Mode")
    click.echo("Type an email or company name. Commands: company <name>, email <addr>, quit\n")

    while True:
        try:
            raw = click.prompt("personfinder", prompt_suffix="> ", default="", show_default=False)
        except click.Abort:
            click.echo()
            break

        text = raw.strip()
        if not text:
            continue
        if text.lower() in ("quit", "exit", "q"):
            break

        search_type = None
        head, _, rest = text.partition(" ")
        if head.lower() in ("email", "company") and rest.strip():
            search_type, text = head.lower(), rest.strip()

        status, payload = _search(app, text, search_type)
        _echo_result(status, payload, as_json)


@click.group(invoke_without_command=True)
@click.option("--mock", is_flag=True, help="Enable the seeded mock provider")
@click.option("--no-discovery", is_flag=True, help="Skip search-engine discovery of social profiles")
@click.option("--log-level", default=None, help="Logging level (DEBUG/INFO/WARNING/ERROR)")
@click.version_option(__version__, prog_name="personfinder")
@click.pass_context
def main(ctx: click.Context, mock: bool, no_discovery: bool, log_level: str | None) -> None:
    """personfinder — aggregate contact information from several sources."""
    config = Config.from_env()
    overrides: dict[str, object] = {}
    if mock:
        overrides["use_mock"] = True
    if no_discovery:
        overrides["discovery"] = "off"
    if log_level:
        overrides["log_level"] = log_level
    if overrides:
        config = replace(config, **overrides)

    init_logging(config.log_level)
    ctx.obj = build_app(config)

    if ctx.invoked_subcommand is None:
        _interactive(ctx.obj, as_json=False)


@main.command()
@click.argument("query", required=False)
@click.option(
    "--type", "-t", "search_type",
    type=click.Choice(["email", "company"]),
    default=None,
    help="Search type (default: email when the query contains '@')",
)
@click.option("--json", "as_json", is_flag=True, help="Print the raw response payload")
@click.pass_obj
def search(app: App, query: str | None, search_type: str | None, as_json: bool) -> None:
    """Search a person by email or the people of a company."""
    if not query:
        _interactive(app, as_json)
        return

    status, payload = _search(app, query, search_type)
    _echo_result(status, payload, as_json)
    if not payload.get("success"):
        sys.exit(1)


@main.command()
@click.pass_obj
def health(app: App) -> None:
    """Print the liveness payload."""
    _, payload = app.controller.health()
    click.echo(json.dumps(payload, indent=2))


@main.command()
@click.pass_obj
def metrics(app: App) -> None:
    """Print counters and gauges in exposition format."""
    _, text = asyncio.run(app.controller.metrics())
    click.echo(text, nl=False)


@main.command()
@click.pass_obj
def info(app: App) -> None:
    """Print the API capability description."""
    _, payload = app.controller.info()
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
