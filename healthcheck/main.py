"""Entry point for the healthcheck service."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from healthcheck.config import settings
from healthcheck.health import SUCCESS, Probe

console = Console()
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)


def run_server() -> None:
    """Start the FastAPI server."""
    console.print(Panel("Starting healthcheck server", style="bold green"))
    uvicorn.run(
        "healthcheck.api.server:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


def run_check(probe: Probe, checks_file: Path | None) -> int:
    """Run one evaluation pass and print the outcome table. Returns the exit code."""
    from healthcheck.api.server import build_handler

    handler = build_handler(checks_file)

    with console.status(f"[bold green]Running {probe.value} checks..."):
        result = handler.evaluate(probe)

    table = Table(title=f"{probe.value} checks")
    table.add_column("Check")
    table.add_column("Outcome")
    for name, outcome in sorted(result.results.items()):
        style = "green" if outcome == SUCCESS else "red"
        table.add_row(name, f"[{style}]{outcome}[/{style}]")
    console.print(table)

    style = "bold green" if result.healthy else "bold red"
    console.print(Panel(result.status.value, style=style))
    return 0 if result.healthy else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Liveness / readiness health endpoints")
    sub = parser.add_subparsers(dest="command")

    # Server mode
    sub.add_parser("serve", help="Start the API server")

    # One-off evaluation
    check_parser = sub.add_parser("check", help="Run the checks once and print the results")
    check_parser.add_argument("--ready", action="store_true", help="Evaluate readiness instead of liveness")
    check_parser.add_argument("--file", type=Path, default=None, help="Checks file (default: settings.checks_file)")

    args = parser.parse_args()

    if args.command == "serve":
        run_server()
    elif args.command == "check":
        probe = Probe.READINESS if args.ready else Probe.LIVENESS
        sys.exit(run_check(probe, args.file))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
