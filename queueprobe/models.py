from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ------------------------------------------------------------------
# Harness configuration
# ------------------------------------------------------------------


class Timeouts(BaseModel):
    connect: float = Field(default=5.0, gt=0, description="Connect timeout seconds.")
    read: float = Field(default=15.0, gt=0, description="Read timeout seconds (also used for write/pool).")


class HarnessConfig(BaseModel):
    host: str = Field(default="localhost", min_length=1, description="Target service host.")
    port: int = Field(default=8080, ge=1, le=65535, description="Target service port.")
    warmup_delay_ms: int = Field(
        default=2000,
        ge=0,
        description="Grace period before the first probe. Not a readiness check.",
    )
    inter_probe_delay_ms: int = Field(
        default=1000,
        ge=0,
        description="Pause after every probe, including the last one.",
    )
    timeouts: Optional[Timeouts] = Field(
        default=None,
        description="Per-request timeouts. None waits forever for a response.",
    )
    max_body_bytes: Optional[int] = Field(
        default=None,
        ge=1,
        description="Stop reading a response body after this many bytes (None = unbounded).",
    )


# ------------------------------------------------------------------
# HTTP request/response
# ------------------------------------------------------------------


class RequestDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    port: int
    path: str
    method: str = "GET"
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any | None = Field(default=None, description="JSON payload, encoded on send.")
    content: Optional[str] = Field(default=None, description="Raw payload sent verbatim.")

    @model_validator(mode="after")
    def _one_payload(self) -> "RequestDescriptor":
        if self.body is not None and self.content is not None:
            raise ValueError("set either `body` or `content`, not both")
        return self

    @property
    def url(self) -> str:
        path = self.path if self.path.startswith("/") else "/" + self.path
        return f"http://{self.host}:{self.port}{path}"


class ResponseCapture(BaseModel):
    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""
    truncated: bool = Field(
        default=False,
        description="True when max_body_bytes cut the body short.",
    )
    body_error: Optional[str] = Field(
        default=None,
        description="Set when the body could not be decoded; status_code is still valid.",
    )


# ------------------------------------------------------------------
# Results
# ------------------------------------------------------------------


class ProbeOutcome(BaseModel):
    name: str
    ok: bool
    expected_status: Optional[int] = None
    status_code: Optional[int] = None
    detail: Optional[str] = Field(default=None, description="Transport error, or a body decoding error next to a valid status.")
    elapsed_ms: float = 0.0


class RunResult(BaseModel):
    passed: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    outcomes: List[ProbeOutcome] = Field(default_factory=list)

    @model_validator(mode="after")
    def _passed_within_total(self) -> "RunResult":
        if self.passed > self.total:
            raise ValueError(f"passed ({self.passed}) cannot exceed total ({self.total})")
        return self

    @property
    def all_passed(self) -> bool:
        return self.passed == self.total

    def record(self, outcome: ProbeOutcome) -> None:
        if len(self.outcomes) >= self.total:
            raise ValueError(f"run already holds {self.total} outcomes")
        self.outcomes.append(outcome)
        if outcome.ok:
            self.passed += 1
