from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Sequence

from rich.console import Console

from ..models import HarnessConfig, ProbeOutcome, RunResult
from ..report import print_banner, print_outcome, print_run_summary
from ..report import console as default_console
from .client import HttpClient
from .probes import Probe

Sleep = Callable[[float], Awaitable[None]]


async def run_probes(
    probes: Sequence[Probe],
    config: HarnessConfig,
    *,
    client: Optional[HttpClient] = None,
    console: Optional[Console] = None,
    sleep: Sleep = asyncio.sleep,
) -> RunResult:
    """
    Run `probes` one after another against config.host:config.port.

      - waits `warmup_delay_ms` before the first probe (grace period only,
        readiness is never checked)
      - awaits each probe fully before starting the next
      - waits `inter_probe_delay_ms` after every probe, the last one included
      - a probe that raises counts as failed; the run always continues

    The caller decides what to do with the result; no exit code is set here.
    A caller-supplied `client` is left open.
    """
    out = console or default_console
    result = RunResult(total=len(probes))

    own_client = client is None
    if client is None:
        client = HttpClient(config.timeouts, max_body_bytes=config.max_body_bytes)

    try:
        await sleep(config.warmup_delay_ms / 1000.0)

        for probe in probes:
            name = getattr(probe, "name", None) or repr(probe)
            print_banner(name, getattr(probe, "icon", "🔍"), console=out)
            try:
                outcome = await probe(client, config, console=out)
            except Exception as e:
                outcome = ProbeOutcome(name=name, ok=False, detail=f"{type(e).__name__}: {e}")
                print_outcome(outcome, console=out)

            result.record(outcome)
            await sleep(config.inter_probe_delay_ms / 1000.0)
    finally:
        if own_client:
            await client.aclose()

    print_run_summary(result, console=out)
    return result


__all__ = ["run_probes", "Sleep"]
