"""
CLI config command — show the effective encoder configuration.

Usage:
    python -m cellimage config
    python -m cellimage config --json
"""

from __future__ import annotations

import json

import click

from ..encoder import HARD_LIMIT, SOFT_LIMIT


@click.command("config")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show_config(ctx: click.Context, as_json: bool) -> None:
    """Show effective configuration and the fixed size budget."""
    settings = ctx.obj["config"].to_dict()
    settings["soft_limit"] = SOFT_LIMIT
    settings["hard_limit"] = HARD_LIMIT

    if as_json:
        click.echo(json.dumps(settings, indent=2))
        return

    for key, value in settings.items():
        click.echo(f"  {key:<20} {value if value is not None else '—'}")
