from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from . import __version__
from .config import apply_overrides, default_config, load_harness_config
from .mock_service import ROUTES, make_server
from .report import write_summary
from .runner import default_probes, extended_probes, run_probes

app = typer.Typer(add_completion=False, help="queueprobe — smoke checks for the email queue service")
console = Console()


# -----------------------------
# Global callback / --version
# -----------------------------

@app.callback(invoke_without_command=True)
def _main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show queueprobe version and exit.",
        is_eager=True,
    ),
):
    if version:
        console.print(f"queueprobe {__version__}")
        raise typer.Exit()

    # If no subcommand provided, show help and exit (instead of 'Missing command')
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()


@app.command(help="Show queueprobe version.")
def version() -> None:
    console.print(f"queueprobe {__version__}")


# -----------------------------
# Commands
# -----------------------------

@app.command(help="Probe a running email queue service and print a pass/fail tally.")
def run(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to a harness YAML file (host, port, delays, timeouts).",
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Target host (default: localhost)."),
    port: Optional[int] = typer.Option(None, "--port", help="Target port (default: 8080)."),
    warmup_ms: Optional[int] = typer.Option(
        None,
        "--warmup-ms",
        help="Grace period before the first probe, in ms (default: 2000).",
    ),
    delay_ms: Optional[int] = typer.Option(
        None,
        "--delay-ms",
        help="Pause after each probe, in ms (default: 1000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Per-request connect/read timeout in seconds (default: wait forever).",
    ),
    max_body_bytes: Optional[int] = typer.Option(
        None,
        "--max-body-bytes",
        help="Stop reading a response body after N bytes (default: unbounded).",
    ),
    extended: bool = typer.Option(
        False,
        "--extended",
        help="Also probe /api/v1/dead-letter and malformed-JSON rejection.",
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        help="Write the run result as JSON to this path.",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with code 1 unless every probe passed.",
    ),
):
    """
    Loads settings (file, then flags), runs the probe sequence once, prints
    per-probe lines and the passed/total summary.
    """
    try:
        cfg = load_harness_config(config) if config is not None else default_config()
        cfg = apply_overrides(
            cfg,
            host=host,
            port=port,
            warmup_delay_ms=warmup_ms,
            inter_probe_delay_ms=delay_ms,
            timeout=timeout,
            max_body_bytes=max_body_bytes,
        )
        probes = extended_probes() if extended else default_probes()
    except Exception as e:
        console.print(f"[red]Setup failed:[/red] {e}")
        raise typer.Exit(code=2)

    console.print("🚀 Starting email queue service tests...")
    console.print(f"Make sure the service is running on {cfg.host}:{cfg.port}")

    try:
        result = asyncio.run(run_probes(probes, cfg, console=console))
    except Exception as e:
        console.print(f"[red]Probe run failed:[/red] {e}")
        raise typer.Exit(code=2)

    if out is not None:
        try:
            path = write_summary(result, out)
        except OSError as e:
            console.print(f"[red]Failed to write {out}:[/red] {e}")
            raise typer.Exit(code=2)
        console.print(f"[green]Summary ->[/green] {path.resolve()}")

    if strict and not result.all_passed:
        raise typer.Exit(code=1)


@app.command("serve-mock", help="Serve a stub email queue service for local runs.")
def serve_mock(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8080, "--port", help="Port to bind (0 = any free port)."),
):
    httpd = make_server(host, port)
    bound_host, bound_port = httpd.server_address[:2]
    console.print(f"Mock queue service listening on http://{bound_host}:{bound_port}")
    console.print("Routes:")
    for route in ROUTES:
        console.print(f"  {route}")
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        console.print("\nShutting down...")
    finally:
        httpd.server_close()


if __name__ == "__main__":
    app()
