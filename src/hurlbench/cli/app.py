"""The ``hurlbench`` command line.

``run`` benchmarks a request file, ``check`` validates one and ``init``
writes a starter file.
"""

from __future__ import annotations

import typer

from hurlbench import __version__
from hurlbench.cli.check import check_cmd
from hurlbench.cli.init_cmd import init_cmd
from hurlbench.cli.run import run_cmd

app = typer.Typer(
    name="hurlbench",
    help="Time-boxed HTTP benchmarks from Hurl-style request files.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("run", help="Benchmark a request file.")(run_cmd)
app.command("check", help="Parse a request file and list its requests.")(check_cmd)
app.command("init", help="Scaffold a new request file.")(init_cmd)


def _version_callback(value: bool) -> None:
    """Echo ``hurlbench <version>`` and stop before any subcommand runs."""
    if value:
        typer.echo(f"hurlbench {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Replay a Hurl-style file on parallel workers for a fixed duration."""
