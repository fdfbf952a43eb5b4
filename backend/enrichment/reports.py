"""Run summaries returned by the enrichment passes."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class PassReport:
    """Outcome counters for one pass over a batch of titles."""

    name: str
    selected: int = 0
    enriched: int = 0
    missed: int = 0
    errors: int = 0
    skipped: int = 0
    rate_limited: int = 0
    rows_written: int = 0
    stopped_reason: str | None = None

    def summary(self) -> str:
        parts = [
            f"selected={self.selected}",
            f"enriched={self.enriched}",
            f"missed={self.missed}",
            f"errors={self.errors}",
        ]
        if self.skipped:
            parts.append(f"skipped={self.skipped}")
        if self.rate_limited:
            parts.append(f"rate_limited={self.rate_limited}")
        if self.rows_written:
            parts.append(f"rows={self.rows_written}")
        if self.stopped_reason:
            parts.append(f"stopped={self.stopped_reason!r}")
        return f"{self.name}: " + ", ".join(parts)


@dataclass(slots=True)
class KindImportReport:
    kind: str
    export_file: str | None = None
    processed: int = 0
    skipped: int = 0
    error: str | None = None


@dataclass(slots=True)
class BulkImportReport:
    kinds: list[KindImportReport] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return sum(item.processed for item in self.kinds)

    @property
    def skipped(self) -> int:
        return sum(item.skipped for item in self.kinds)

    def for_kind(self, kind: str) -> KindImportReport:
        for item in self.kinds:
            if item.kind == kind:
                return item
        raise KeyError(kind)


@dataclass(slots=True)
class SeedReport:
    seeded: int = 0
    skipped: int = 0
    unresolved: list[str] = field(default_factory=list)
    api_calls: int = 0


@dataclass(slots=True)
class VerifyReport:
    live: int = 0
    dead: int = 0
    timed_out: int = 0

    @property
    def checked(self) -> int:
        return self.live + self.dead + self.timed_out


@dataclass(slots=True)
class PipelineReport:
    """Per-pass results of one scheduler run, in execution order."""

    passes: list[PassReport] = field(default_factory=list)
    verify: VerifyReport | None = None
    published: int | None = None
    seed: SeedReport | None = None
    failed_passes: list[str] = field(default_factory=list)
