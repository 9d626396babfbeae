"""
Cell Image Encoder — CLI Entry Point

Usage:
    python -m cellimage encode FILE [--preset NAME] [--max-width N] [--quality Q]
    python -m cellimage presets
    python -m cellimage config
"""

from __future__ import annotations

# Load .env before anything reads CELLIMAGE_* variables
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from typing import Optional

import click

from .cli.config import show_config
from .cli.encode import encode
from .cli.presets import presets
from .config.loader import load_config
from .logging_config import setup_logging
from .validation import ValidationError


@click.group()
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
@click.option("--log-format", type=click.Choice(["text", "json"]), default=None)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_format: Optional[str]) -> None:
    """Cell Image Encoder — images that fit in a spreadsheet cell."""
    setup_logging(log_level, log_format)
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}")


cli.add_command(encode)
cli.add_command(presets)
cli.add_command(show_config)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
