from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape

from ..models import ProbeOutcome, RunResult

console = Console()

BODY_PREVIEW_CHARS = 2048


def _out(c: Optional[Console]) -> Console:
    return c if c is not None else console


def print_banner(name: str, icon: str = "🔍", *, console: Optional[Console] = None) -> None:
    _out(console).print(f"\n{icon} Testing {escape(name.lower())}...")


def print_outcome(
    outcome: ProbeOutcome,
    *,
    body: str = "",
    truncated: bool = False,
    console: Optional[Console] = None,
) -> None:
    """One line per probe, followed by the response body when there is one."""
    c = _out(console)
    if outcome.status_code is None:
        c.print(f"[red]❌ {escape(outcome.name)} failed:[/red] {escape(outcome.detail or 'no response')}")
        return

    if outcome.ok:
        c.print(f"[green]✅ {escape(outcome.name)}:[/green] {outcome.status_code}")
    else:
        c.print(
            f"[red]❌ {escape(outcome.name)}:[/red] {outcome.status_code} "
            f"(expected {outcome.expected_status})"
        )

    if outcome.detail:
        c.print(f"[dim]{escape(outcome.detail)}[/dim]")

    if body:
        preview = body[:BODY_PREVIEW_CHARS]
        more = " [dim](truncated)[/dim]" if truncated or len(body) > BODY_PREVIEW_CHARS else ""
        c.print(f"Response: {escape(preview.rstrip())}{more}")


def print_run_summary(result: RunResult, *, console: Optional[Console] = None) -> None:
    c = _out(console)
    c.print(f"\n📋 Test Results: {result.passed}/{result.total} tests passed")
    if result.all_passed:
        c.print("[green]🎉 All tests passed! The service is working correctly.[/green]")
    else:
        c.print("[yellow]⚠️  Some tests failed. Check the service logs.[/yellow]")
