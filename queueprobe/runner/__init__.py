from __future__ import annotations

from .client import HttpClient
from .harness import run_probes
from .probes import StatusProbe, default_probes, extended_probes

__all__ = ["HttpClient", "run_probes", "StatusProbe", "default_probes", "extended_probes"]
