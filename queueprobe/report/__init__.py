from __future__ import annotations

from .console import console, print_banner, print_outcome, print_run_summary
from .summary import write_summary

__all__ = ["console", "print_banner", "print_outcome", "print_run_summary", "write_summary"]
