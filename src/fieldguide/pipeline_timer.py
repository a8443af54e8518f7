# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Stage timer for page requests: resolve → fetch → extract → toc → assemble.

Created before the fetch so a failed request can still report how far it
got and how long each completed stage took.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

STAGES: tuple[str, ...] = ("resolve", "fetch", "extract", "toc", "assemble")

_HINTS = {
    "resolve": "Identifier could not be turned into a guide URL.",
    "fetch": "The guide site is slow or unreachable. Try again shortly.",
    "extract": "Page markup is unusually large or malformed.",
    "toc": "Page has a very large number of anchored headings.",
    "assemble": "Text assembly stalled.",
}


@dataclass(slots=True)
class StageRecord:
    name: str
    start_ns: int
    end_ns: int = 0

    @property
    def elapsed_ms(self) -> float:
        return round((self.end_ns - self.start_ns) / 1e6, 1)


class PipelineTimer:
    """Track stage transitions of a single page request."""

    __slots__ = ("_stages", "_current", "_start_ns")

    def __init__(self) -> None:
        self._stages: list[StageRecord] = []
        self._current: StageRecord | None = None
        self._start_ns: int = time.monotonic_ns()

    def stage(self, name: str) -> None:
        """Close the running stage and open *name*."""
        now = time.monotonic_ns()
        if self._current is not None:
            self._current.end_ns = now
            self._stages.append(self._current)
        self._current = StageRecord(name=name, start_ns=now)

    def finalize(self) -> None:
        if self._current is not None:
            self._current.end_ns = time.monotonic_ns()
            self._stages.append(self._current)
            self._current = None

    @property
    def current_stage(self) -> str | None:
        return self._current.name if self._current else None

    def elapsed_per_stage(self) -> dict[str, float]:
        """{stage: elapsed_ms}, the running stage measured up to now."""
        result = {s.name: s.elapsed_ms for s in self._stages}
        if self._current is not None:
            result[self._current.name] = round((time.monotonic_ns() - self._current.start_ns) / 1e6, 1)
        return result

    def total_ms(self) -> float:
        return round((time.monotonic_ns() - self._start_ns) / 1e6, 1)

    def failure_report(self, error: BaseException | None = None) -> dict:
        """Structured diagnostic for a request that did not complete."""
        failed_at = self.current_stage or (self._stages[-1].name if self._stages else "unknown")
        report = {
            "completed_stages": [{"stage": s.name, "ms": s.elapsed_ms} for s in self._stages],
            "failed_at": failed_at,
            "total_ms": self.total_ms(),
            "hint": self.hint_for_stage(failed_at),
        }
        if error is not None:
            report["error"] = str(error)
        return report

    @staticmethod
    def hint_for_stage(stage: str) -> str:
        return _HINTS.get(stage, f"Failed during '{stage}' stage.")
