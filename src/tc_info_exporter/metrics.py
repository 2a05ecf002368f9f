"""
Core metric shapes for the exporter.

A Descriptor is the fixed schema of one inventory metric. Every Sample
carries its label values in exactly the descriptor's label order, and a
CollectionResult is what one collector hands back for one scrape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


def build_fqname(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with underscores, e.g. tc_info_es_instance."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class Descriptor:
    name: str
    help_text: str
    label_names: Tuple[str, ...]

    def sample(self, label_values, value: float = 1.0) -> "Sample":
        return Sample(descriptor=self, value=value, label_values=tuple(label_values))


@dataclass(frozen=True)
class Sample:
    """One gauge reading for one resource item."""

    descriptor: Descriptor
    value: float
    label_values: Tuple[str, ...]

    def __post_init__(self):
        if len(self.label_values) != len(self.descriptor.label_names):
            raise ValueError(
                f"{self.descriptor.name}: got {len(self.label_values)} label values "
                f"for {len(self.descriptor.label_names)} labels"
            )

    def labels(self) -> dict:
        return dict(zip(self.descriptor.label_names, self.label_values))


@dataclass
class CollectionResult:
    """Outcome of one collector's pass during one scrape."""

    collector: str
    samples: List[Sample] = field(default_factory=list)

    # Set when the pass failed; samples is then always empty
    error: Optional[str] = None
    error_kind: Optional[str] = None  # "api", "unexpected" or "timeout"

    skipped: int = 0
    pages: int = 0
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def fail(self, kind: str, error: BaseException):
        self.samples = []
        self.error_kind = kind
        self.error = str(error) or type(error).__name__

    def summary(self) -> dict:
        """Return a plain dict for display or JSON output."""
        return {
            "collector": self.collector,
            "ok": self.ok,
            "samples": len(self.samples),
            "skipped": self.skipped,
            "pages": self.pages,
            "duration_s": round(self.duration_seconds, 3),
            "error_kind": self.error_kind,
            "error": self.error,
        }
