"""
Entry point for running pushbullet_cli as a module.

Usage:
    python -m pushbullet_cli --help
    python -m pushbullet_cli list
    python -m pushbullet_cli push all note "Title" "Body"
"""

from pushbullet_cli.cli import cli

if __name__ == "__main__":
    cli()
