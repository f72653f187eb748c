from __future__ import annotations

import json
import threading
import time
from email.errors import HeaderParseError
from email.headerregistry import Address
from email.utils import parseaddr
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse


def json_bytes(data: dict) -> bytes:
    return json.dumps(data).encode("utf-8")


REQUEST_FIELDS = ("to", "subject", "body")


def decode_email_request(payload: Any) -> Dict[str, str]:
    """
    Shape check for a send-email body. Missing or null fields become "";
    a non-object body or a non-string field raises ValueError (answered 400).
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValueError("request body must be a JSON object")
    req: Dict[str, str] = {}
    for key in REQUEST_FIELDS:
        value = payload.get(key)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ValueError(f"field `{key}` must be a string")
        req[key] = value
    return req


def is_valid_address(value: str) -> bool:
    """RFC 5322 address, bare (`user@localhost`) or with a display name (`Alice <a@b.io>`)."""
    _, addr = parseaddr(value)
    if not addr:
        return False
    try:
        parsed = Address(addr_spec=addr)
    except (ValueError, HeaderParseError):
        return False
    return bool(parsed.username and parsed.domain)


def validate_email_request(req: Dict[str, str]) -> Optional[str]:
    """Return an error message, or None when the request would be queued."""
    if not req["to"]:
        return "email address is required"
    if not req["subject"]:
        return "subject is required"
    if not req["body"]:
        return "body is required"
    if not is_valid_address(req["to"]):
        return "invalid email format"
    return None


class QueueState:
    """In-memory stand-in for the queue: accepted jobs only, nothing is delivered."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.jobs: List[Dict[str, Any]] = []
        self.dead_letter: List[Dict[str, Any]] = []
        self._seq = 0

    def enqueue(self, payload: Dict[str, Any]) -> str:
        with self._lock:
            self._seq += 1
            job_id = f"{time.strftime('%Y%m%d%H%M%S')}-{self._seq}"
            self.jobs.append({"id": job_id, "to": payload["to"], "subject": payload["subject"], "retries": 0})
            return job_id

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "queue_length": len(self.jobs),
                "retry_queue_length": 0,
                "dead_letter_count": len(self.dead_letter),
                "is_closed": False,
            }


class Handler(BaseHTTPRequestHandler):
    server_version = "QueueProbeMock/1.0"

    # --- Utilities ---------------------------------------------------------

    @property
    def state(self) -> QueueState:
        return self.server.state  # type: ignore[attr-defined]

    def _send_json(self, code: int, payload: dict) -> None:
        body = json_bytes(payload)
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_text(self, code: int, text: str = "") -> None:
        body = text.encode("utf-8")
        self.send_response(code)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if body:
            self.wfile.write(body)

    def _send_error_json(self, code: int, error: str, message: str) -> None:
        self._send_json(code, {"error": error, "message": message})

    def _read_body(self) -> bytes:
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length > 0 else b""

    # --- Routes ------------------------------------------------------------

    def do_GET(self) -> None:
        path = urlparse(self.path).path

        if path == "/health":
            return self._send_text(200, "OK")

        if path == "/api/v1/stats":
            return self._send_json(200, self.state.stats())

        if path == "/api/v1/dead-letter":
            jobs = list(self.state.dead_letter)
            return self._send_json(200, {"dead_letter_jobs": jobs, "count": len(jobs)})

        self._send_error_json(404, "Not found", path)

    def do_POST(self) -> None:
        path = urlparse(self.path).path
        if path != "/api/v1/send-email":
            return self._send_error_json(404, "Not found", path)

        raw = self._read_body()
        if not raw:
            return self._send_error_json(400, "Invalid JSON", "empty request body")
        try:
            payload = decode_email_request(json.loads(raw))
        except ValueError as e:
            return self._send_error_json(400, "Invalid JSON", str(e))

        problem = validate_email_request(payload)
        if problem:
            return self._send_error_json(422, "Validation failed", problem)

        job_id = self.state.enqueue(payload)
        self._send_json(202, {"id": job_id, "status": "accepted", "message": "Email queued for processing"})

    # Less noisy logs
    def log_message(self, fmt: str, *args) -> None:
        pass


def make_server(host: str = "127.0.0.1", port: int = 8080) -> ThreadingHTTPServer:
    """Build (but do not start) a stub server. Port 0 picks a free port."""
    httpd = ThreadingHTTPServer((host, port), Handler)
    httpd.daemon_threads = True
    httpd.state = QueueState()  # type: ignore[attr-defined]
    return httpd


ROUTES = (
    "GET  /health",
    "POST /api/v1/send-email   (202 accepted, 422 invalid fields, 400 invalid JSON)",
    "GET  /api/v1/stats",
    "GET  /api/v1/dead-letter",
)
