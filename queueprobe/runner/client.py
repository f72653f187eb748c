from __future__ import annotations

import time
from typing import Dict, Optional

import httpx

from ..errors import TransportError
from ..models import RequestDescriptor, ResponseCapture, Timeouts

# -----------------------------
# HTTP client: one request at a time, full body capture
# -----------------------------


def _default_timeout(t: Optional[Timeouts]) -> httpx.Timeout:
    if t is None:
        return httpx.Timeout(None)
    # Use read timeout for write/pool too.
    return httpx.Timeout(connect=t.connect, read=t.read, write=t.read, pool=t.read)


class HttpClient:
    """
    Thin wrapper over httpx.AsyncClient used by probes:
      - builds the request from a RequestDescriptor (JSON body or raw content)
      - streams the response and concatenates the whole body
      - optional byte cap on the body (off by default)
      - a body that fails Content-Encoding decoding keeps its status code
      - maps every transport-level failure to TransportError
    No retries and no redirects: a single observed status decides a probe.
    """

    def __init__(
        self,
        timeouts: Optional[Timeouts] = None,
        *,
        max_body_bytes: Optional[int] = None,
        user_agent: str = "queueprobe/0.1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeouts = timeouts
        self.max_body_bytes = max_body_bytes
        self._client = httpx.AsyncClient(
            timeout=_default_timeout(timeouts),
            headers={"User-Agent": user_agent, "Accept-Encoding": "identity"},
            follow_redirects=False,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def send(self, options: RequestDescriptor) -> ResponseCapture:
        """
        Issue one request and wait for the complete response.

        Raises TransportError when no HTTP response arrives (connection
        refused/reset, DNS failure, socket error, timeout). Any status code,
        2xx or not, is returned as a normal ResponseCapture.
        """
        headers: Dict[str, str] = dict(options.headers)
        kwargs = {}
        if options.body is not None:
            kwargs["json"] = options.body
        elif options.content is not None:
            kwargs["content"] = options.content.encode("utf-8")

        try:
            async with self._client.stream(
                options.method.upper(),
                options.url,
                headers=headers,
                **kwargs,
            ) as resp:
                raw, truncated, body_error = await self._read_body(resp)
                return ResponseCapture(
                    status_code=resp.status_code,
                    headers={k: v for k, v in resp.headers.items()},
                    body=raw.decode(resp.encoding or "utf-8", errors="replace"),
                    truncated=truncated,
                    body_error=body_error,
                )
        except httpx.TransportError as e:
            msg = str(e) or type(e).__name__
            raise TransportError(msg) from e

    async def _read_body(self, resp: httpx.Response) -> tuple[bytes, bool, Optional[str]]:
        chunks = bytearray()
        cap = self.max_body_bytes
        try:
            async for chunk in resp.aiter_bytes():
                if cap is not None and len(chunks) + len(chunk) > cap:
                    chunks.extend(chunk[: cap - len(chunks)])
                    return bytes(chunks), True, None
                chunks.extend(chunk)
        except httpx.DecodingError as e:
            # The status line already arrived; only the body is unusable.
            return bytes(chunks), False, f"DecodingError: {e}"
        return bytes(chunks), False, None


def elapsed_ms_since(start_ns: int) -> float:
    return (time.perf_counter_ns() - start_ns) / 1e6
