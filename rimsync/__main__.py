"""
Console-script entry point: `rimsync` and `python -m rimsync`.

Commands report their own expected failures; anything that escapes them is
rendered here so the user never sees a bare traceback.
"""

import asyncio
import logging
import os
import sys

import typer
from rich.console import Console

from rimsync.cli.app import app
from rimsync.cli.formatters import print_error
from rimsync.exceptions import RimsyncError

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

log = logging.getLogger("rimsync")


def _use_utf8_streams() -> None:
    # Windows consoles default to a legacy code page; mod names are Unicode.
    if os.name != "nt":
        return
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass


def main() -> None:
    """Runs the CLI and turns escaped errors into exit codes."""
    _use_utf8_streams()
    console = Console(stderr=True)

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]⚠️  Sync interrupted. Mods placed so far are kept.[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    except RimsyncError as e:
        print_error(e, console)
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        print_error(e, console, {"type": "Unexpected"})
        log.debug("Full traceback:", exc_info=True)
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
