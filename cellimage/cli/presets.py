"""
CLI presets command — list the named field presets.

Usage:
    python -m cellimage presets
    python -m cellimage presets --json
"""

from __future__ import annotations

import json

import click

from ..presets import load_presets
from ..validation import ValidationError


@click.command("presets")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def presets(ctx: click.Context, as_json: bool) -> None:
    """List field presets (built-in plus CELLIMAGE_PRESETS_FILE)."""
    config = ctx.obj["config"]
    try:
        catalog = load_presets(config.presets_file)
    except ValidationError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(
            {name: catalog.get(name).model_dump(exclude={"name"}) for name in catalog.names()},
            indent=2,
        ))
        return

    click.echo(f"  {'Preset':<18} {'Width':>6} {'Quality':>8}  Description")
    click.echo(f"  {'─' * 18} {'─' * 6} {'─' * 8}  {'─' * 30}")
    for name in catalog.names():
        p = catalog.get(name)
        click.echo(f"  {name:<18} {p.max_width:>6} {p.quality:>8.2f}  {p.description or ''}")
