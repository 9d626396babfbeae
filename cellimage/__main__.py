"""
Run the CLI as a module.

Usage:
    python -m cellimage encode photo.jpg --preset photo
"""

from .main import cli

if __name__ == "__main__":
    cli()
