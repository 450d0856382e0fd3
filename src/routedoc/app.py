"""Typer application and CLI entry point for routedoc.

This module wires together the top-level Typer application and registers
the built-in commands (``dump``, ``swagger-dump``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~routedoc.exceptions.RoutedocError` exits with its exit code;
anything else is written to a crash log under the data directory.

See Also:
    :mod:`routedoc.config`: Configuration resolution used in :func:`main_callback`.
    :mod:`routedoc.output`: Output handling initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from routedoc import __version__
from routedoc.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="routedoc",
    help="Generate API documentation from route and handler metadata.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from routedoc.commands.dump import dump_command, swagger_dump_command  # noqa: E402

app.command("dump")(dump_command)
app.command("swagger-dump")(swagger_dump_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"routedoc {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send library log records to stderr: debug with ``--verbose``, warnings otherwise."""
    logger = logging.getLogger("routedoc")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


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
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Config file (JSON or YAML)."
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Extract without reading or writing the cache."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every command.

    Installs the global :class:`~routedoc.output.OutputManager`, configures
    logging, and stores the resolved :class:`~routedoc.models.RoutedocConfig`
    in ``ctx.obj["config"]``.
    """
    from routedoc.config import resolve_config
    from routedoc.exceptions import RoutedocError
    from routedoc.output import OutputManager, error, set_output

    output = OutputManager(
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)
    _configure_logging(verbose)

    try:
        config = resolve_config(cli_config=config_file, cli_no_cache=no_cache)
    except RoutedocError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from routedoc.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    command = " ".join(sys.argv)
    log_path.write_text(f"routedoc {__version__}: {command}\n\n{traceback.format_exc()}")
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``routedoc`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
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
        from routedoc.exceptions import RoutedocError
        from routedoc.output import error

        if isinstance(exc, RoutedocError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
