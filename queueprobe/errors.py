from __future__ import annotations


class QueueProbeError(Exception):
    """Base class for queueprobe errors."""


class TransportError(QueueProbeError):
    """The request never produced an HTTP response (refused, reset, DNS, timeout)."""


class ConfigError(QueueProbeError, ValueError):
    pass


__all__ = ["QueueProbeError", "TransportError", "ConfigError"]
