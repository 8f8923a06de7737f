"""
droplet_launcher.cli – container entry point.

    droplet-launcher <app-directory> <start-command> <metadata> [<platform-options>]

Arguments are taken positionally and verbatim (a start command may itself
start with ``-``), so argument-count checking is done by the launcher rather
than by Click.
"""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional

import typer

from .controller import Launcher
from .errors import LaunchError
from .logging_config import setup_logging

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)

INTERNAL_ERROR = 70


def _prog() -> str:
    return Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "droplet-launcher"


@app.command()
def launch(
    args: Optional[List[str]] = typer.Argument(
        None,
        metavar="APP_DIR START_COMMAND METADATA [PLATFORM_OPTIONS]",
        show_default=False,
    ),
) -> None:
    """Prepare the droplet environment and exec its start command."""
    setup_logging(os.environ)
    launcher = Launcher(args or [], os.environ, prog=_prog())
    try:
        launcher.run()
    except LaunchError as exc:
        typer.secho(exc.message, fg=typer.colors.RED, err=True)
        raise typer.Exit(exc.exit_code)


# ────────────────────────── entry-point glue ─────────────────────────────
def main() -> None:  # pragma: no cover
    try:
        app()
    except Exception as exc:  # pylint: disable=broad-except
        typer.echo(f"Unhandled error: {exc}", err=True)
        sys.exit(INTERNAL_ERROR)


if __name__ == "__main__":  # pragma: no cover
    main()
