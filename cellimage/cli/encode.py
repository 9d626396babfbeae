"""
CLI encode command — encode one image file into a cell-sized data URL.

Usage:
    python -m cellimage encode logo.png --preset school-logo
    python -m cellimage encode photo.jpg --max-width 300 --quality 0.6 -o photo.txt
    python -m cellimage encode photo.jpg --json
"""

from __future__ import annotations

import asyncio
import json
import mimetypes
from pathlib import Path
from typing import Optional, Tuple

import click

from ..encoder import ENCODE_ERRORS, USER_MESSAGE, encode_image
from ..validation import ValidationError, validate_image_file


def _resolve_params(
    ctx: click.Context,
    preset: Optional[str],
    max_width: Optional[int],
    quality: Optional[float],
) -> Tuple[int, float]:
    """Explicit options win over the preset, the preset over config defaults."""
    config = ctx.obj["config"]
    width, q = config.default_max_width, config.default_quality

    if preset:
        from ..presets import load_presets

        try:
            chosen = load_presets(config.presets_file).get(preset)
        except KeyError as e:
            raise click.BadParameter(str(e.args[0]), param_hint="--preset")
        except ValidationError as e:
            raise click.ClickException(str(e))
        width, q = chosen.max_width, chosen.quality

    if max_width is not None:
        width = max_width
    if quality is not None:
        q = quality
    return width, q


@click.command("encode")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--preset", default=None, help="Named field preset (see `presets`)")
@click.option("--max-width", type=int, default=None, help="Maximum width in pixels")
@click.option("--quality", type=float, default=None, help="Quality factor 0.0-1.0")
@click.option("--content-type", default=None, help="Declared MIME type (default: from extension)")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the data URL to this file")
@click.option("--json", "as_json", is_flag=True, help="Output a JSON summary")
@click.pass_context
def encode(
    ctx: click.Context,
    file: Path,
    preset: Optional[str],
    max_width: Optional[int],
    quality: Optional[float],
    content_type: Optional[str],
    output: Optional[Path],
    as_json: bool,
) -> None:
    """Encode FILE into a data URL that fits in a spreadsheet cell."""
    config = ctx.obj["config"]
    width, q = _resolve_params(ctx, preset, max_width, quality)
    content_type = content_type or mimetypes.guess_type(file.name)[0] or ""

    try:
        data = validate_image_file(file)
        result = asyncio.run(
            encode_image(data, content_type, width, q, limits=config.surface_limits)
        )
    except ValidationError as e:
        raise click.ClickException(str(e))
    except ENCODE_ERRORS as e:
        if as_json:
            click.echo(json.dumps({"success": False, "error": e.kind, "message": str(e)}))
        else:
            click.secho(f"✗ {USER_MESSAGE}", fg="red", err=True)
            click.echo(f"  {e.kind}: {e}", err=True)
        ctx.exit(1)

    if output:
        output.write_text(result.data_url, encoding="utf-8")

    if as_json:
        summary = {"success": True, **result.to_dict()}
        if not output:
            summary["data_url"] = result.data_url
        click.echo(json.dumps(summary, indent=2))
        return

    if output:
        a = result.attempt
        click.secho(
            f"✓ {a.width}x{a.height} {a.format} (tier {a.tier}): "
            f"{result.length:,} chars → {output}",
            fg="green",
        )
    else:
        click.echo(result.data_url)
