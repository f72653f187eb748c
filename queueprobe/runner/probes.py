from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional, Protocol

from rich.console import Console

from ..errors import TransportError
from ..models import HarnessConfig, ProbeOutcome, RequestDescriptor
from ..report import print_outcome
from .client import HttpClient, elapsed_ms_since


class Probe(Protocol):
    name: str
    icon: str

    def __call__(
        self, client: HttpClient, config: HarnessConfig, *, console: Optional[Console] = None
    ) -> Awaitable[ProbeOutcome]: ...


# -----------------------------
# Status-code probe
# -----------------------------

@dataclass(frozen=True)
class StatusProbe:
    """
    Send one request and pass iff the response status equals `expected_status`.
    """
    name: str
    method: str
    path: str
    expected_status: int
    payload: Any | None = None
    content: Optional[str] = None
    icon: str = "🔍"
    headers: Dict[str, str] = field(default_factory=dict)

    def descriptor(self, config: HarnessConfig) -> RequestDescriptor:
        headers = dict(self.headers)
        if self.payload is not None or self.content is not None:
            headers.setdefault("Content-Type", "application/json")
        return RequestDescriptor(
            host=config.host,
            port=config.port,
            path=self.path,
            method=self.method,
            headers=headers,
            body=self.payload,
            content=self.content,
        )

    async def __call__(
        self,
        client: HttpClient,
        config: HarnessConfig,
        *,
        console: Optional[Console] = None,
    ) -> ProbeOutcome:
        start_ns = time.perf_counter_ns()
        try:
            resp = await client.send(self.descriptor(config))
        except TransportError as e:
            outcome = ProbeOutcome(
                name=self.name,
                ok=False,
                expected_status=self.expected_status,
                detail=str(e),
                elapsed_ms=elapsed_ms_since(start_ns),
            )
            print_outcome(outcome, console=console)
            return outcome

        outcome = ProbeOutcome(
            name=self.name,
            ok=resp.status_code == self.expected_status,
            expected_status=self.expected_status,
            status_code=resp.status_code,
            detail=resp.body_error,
            elapsed_ms=elapsed_ms_since(start_ns),
        )
        print_outcome(outcome, body=resp.body, truncated=resp.truncated, console=console)
        return outcome


# -----------------------------
# Built-in probe sets
# -----------------------------

VALID_EMAIL = {
    "to": "test@example.com",
    "subject": "Test Email",
    "body": "This is a test email from the queue service.",
}

INVALID_EMAIL = {
    "to": "invalid-email",
    "subject": "Test",
    "body": "Test",
}

HEALTH_CHECK = StatusProbe(
    name="Health check", method="GET", path="/health", expected_status=200, icon="🔍"
)
SEND_EMAIL = StatusProbe(
    name="Send email",
    method="POST",
    path="/api/v1/send-email",
    expected_status=202,
    payload=VALID_EMAIL,
    icon="📧",
)
STATS = StatusProbe(
    name="Stats", method="GET", path="/api/v1/stats", expected_status=200, icon="📊"
)
INVALID_EMAIL_VALIDATION = StatusProbe(
    name="Invalid email validation",
    method="POST",
    path="/api/v1/send-email",
    expected_status=422,
    payload=INVALID_EMAIL,
    icon="❌",
)
DEAD_LETTER = StatusProbe(
    name="Dead letter", method="GET", path="/api/v1/dead-letter", expected_status=200, icon="📭"
)
MALFORMED_JSON = StatusProbe(
    name="Malformed JSON rejection",
    method="POST",
    path="/api/v1/send-email",
    expected_status=400,
    content="{not json",
    icon="🧱",
)


def default_probes() -> List[StatusProbe]:
    return [HEALTH_CHECK, SEND_EMAIL, STATS, INVALID_EMAIL_VALIDATION]


def extended_probes() -> List[StatusProbe]:
    """The default four plus the routes the basic smoke run leaves untouched."""
    return default_probes() + [DEAD_LETTER, MALFORMED_JSON]
