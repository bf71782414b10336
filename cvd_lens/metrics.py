"""
Lightweight runtime metrics for requests and local references.

Uses in-process counters so it works without extra dependencies.  The
reference counters are what lets a caller (or a test) check that every
acquired reference was released once its view went away.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Dict


class _RuntimeMetrics:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests: Counter = Counter()
        self._failures: Counter = Counter()
        self._references_acquired = 0
        self._references_released = 0

    def record_request(self, operation: str, ok: bool) -> None:
        with self._lock:
            self._requests[operation] += 1
            if not ok:
                self._failures[operation] += 1

    def record_reference_acquired(self) -> None:
        with self._lock:
            self._references_acquired += 1

    def record_reference_released(self) -> None:
        with self._lock:
            self._references_released += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "requests_total": sum(self._requests.values()),
                "request_failures": sum(self._failures.values()),
                "requests_by_operation": dict(self._requests),
                "failures_by_operation": dict(self._failures),
                "references_acquired": self._references_acquired,
                "references_released": self._references_released,
                "live_references": self._references_acquired - self._references_released,
            }

    def reset_for_tests(self) -> None:
        with self._lock:
            self._requests.clear()
            self._failures.clear()
            self._references_acquired = 0
            self._references_released = 0


_METRICS = _RuntimeMetrics()


def record_request(operation: str, ok: bool) -> None:
    _METRICS.record_request(operation, ok)


def record_reference_acquired() -> None:
    _METRICS.record_reference_acquired()


def record_reference_released() -> None:
    _METRICS.record_reference_released()


def metrics_snapshot() -> Dict[str, object]:
    return _METRICS.snapshot()


def reset_metrics_for_tests() -> None:
    _METRICS.reset_for_tests()
