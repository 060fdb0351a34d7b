"""``hurlbench init`` — scaffold a new request file from a template."""

from __future__ import annotations

from pathlib import Path
from string import Template

import typer
from rich.console import Console

console = Console(stderr=True)

_REQUEST_TEMPLATE = Template("""\
# $name
#
# Run with:
#     hurlbench run $filename --duration 10s --parallelism 4

GET http://localhost:8080/
Accept: application/json
HTTP 200

POST http://localhost:8080/echo
{"hello": "world"}
HTTP *
""")


def init_cmd(
    name: str = typer.Argument(
        "bench",
        help="Name for the request file (without extension).",
    ),
) -> None:
    """Scaffold a new request file in the current directory."""
    safe_name = "".join(c if c.isalnum() or c in "_-" else "_" for c in name).strip("_")
    if not safe_name:
        safe_name = "bench"

    filename = f"{safe_name}.hurl"
    target = Path.cwd() / filename
    if target.exists():
        console.print(f"[red]File already exists:[/red] {filename}")
        raise typer.Exit(code=1)

    display_name = safe_name.replace("_", " ").replace("-", " ").title()
    target.write_text(_REQUEST_TEMPLATE.substitute(name=display_name, filename=filename))
    console.print(f"[green]Created request file:[/green] {filename}")
