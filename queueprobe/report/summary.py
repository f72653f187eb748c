from __future__ import annotations

from pathlib import Path

from .._json import dumps
from ..models import RunResult


def write_summary(result: RunResult, path: Path) -> Path:
    """Write the run result as pretty JSON (status per probe plus the tally)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump()
    payload["all_passed"] = result.all_passed
    path.write_bytes(dumps(payload))
    return path
