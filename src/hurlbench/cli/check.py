"""``hurlbench check`` — parse a request file and list its requests."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from hurlbench._internal.errors import WorkloadError
from hurlbench.workload.loader import load_workload

console = Console(stderr=True)


def check_cmd(
    request_file: Path = typer.Argument(
        ...,
        help="Path to the .hurl request file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Validate a request file without sending anything."""
    try:
        workload = load_workload(request_file)
    except WorkloadError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1) from exc

    for index, spec in enumerate(workload.requests, start=1):
        typer.echo(f"{index}. {spec.describe()} (line {spec.line})")
    console.print(
        f"[green]OK:[/green] {len(workload)} request(s) in {escape(request_file.name)}"
    )
