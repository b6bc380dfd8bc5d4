"""Typer application and CLI entry point for storefront.

The root callback installs the global :class:`~storefront.output.OutputManager`
from the output flags and stores ``--base-url`` / ``--locale`` in the
context for the sub-commands. :func:`main` is the console-script entry
point declared in ``pyproject.toml``.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from storefront import __version__
from storefront.commands.cache import cache_app
from storefront.commands.config import config_app
from storefront.commands.request import get_command, normalize_command
from storefront.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="storefront",
    help="Query the storefront API through its response cache and error normalizer.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("get")(get_command)
app.command("normalize")(normalize_command)
app.add_typer(cache_app, name="cache", help="Response cache management.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"storefront {__version__}")
        raise typer.Exit()


def _locale_callback(value: Optional[str]) -> Optional[str]:
    from storefront.client.messages import available_locales, is_supported_locale

    if value is not None and not is_supported_locale(value):
        raise typer.BadParameter(
            f"Unsupported locale '{value}'; choose from: {', '.join(available_locales())}"
        )
    return value


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Storefront API base URL."
    ),
    locale: Optional[str] = typer.Option(
        None, "--locale", callback=_locale_callback, help="Locale for error messages (en, ru)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command."""
    from storefront.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["base_url"] = base_url
    ctx.obj["locale"] = locale


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback under the data directory and return its path."""
    from storefront.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``storefront`` console script.

    :class:`~storefront.exceptions.StorefrontError` exits with the error's
    ``exit_code``; any other exception writes a crash log and exits 1.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from storefront.exceptions import StorefrontError
        from storefront.output import error

        if isinstance(exc, StorefrontError):
            error(exc.message)
            sys.exit(exc.exit_code)
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
