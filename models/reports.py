"""Result records produced by the transforms, the validator and the batch driver.

Accumulators (image counts, byte totals) live in these records and are owned
by the single call that creates them.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class EmbedStats(BaseModel):
    """Aggregate statistics for one embedding pass."""

    images_converted: int = 0
    original_bytes: int = 0
    output_bytes: int = 0
    has_images: bool = False
    """True when the document had at least one external image reference."""

    @property
    def size_increase_pct(self) -> float | None:
        """Bundle growth relative to the raw images, or None without images."""
        if not self.original_bytes:
            return None
        return (self.output_bytes / self.original_bytes - 1) * 100


class EmbedResult(BaseModel):
    animation: str
    bundle_path: Path
    stats: EmbedStats
    warnings: list[str] = Field(default_factory=list)


class ExtractedImage(BaseModel):
    """One decoded image waiting to be written under images/."""

    filename: str
    media_type: str
    data: bytes


class ExtractionSummary(BaseModel):
    image_count: int = 0
    width: Any = None
    height: Any = None
    frame_rate: Any = None
    frames: int | float | None = None
    duration: int | None = None
    """Seconds, ``frames / frame_rate`` rounded half-up; None if not computable."""


class ExtractionResult(BaseModel):
    document_path: Path
    image_paths: list[Path] = Field(default_factory=list)
    summary: ExtractionSummary


class OptimizeResult(BaseModel):
    animation: str
    output_path: Path
    original_bytes: int
    optimized_bytes: int

    @property
    def saved_bytes(self) -> int:
        return self.original_bytes - self.optimized_bytes

    @property
    def saved_pct(self) -> float:
        if not self.original_bytes:
            return 0.0
        return self.saved_bytes / self.original_bytes * 100


class ValidationReport(BaseModel):
    """Errors (must fix) and warnings (should fix) for one animation directory."""

    animation: str
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def failure_reason(self) -> str:
        return f"{len(self.errors)} validation error(s)"


class RoundTripReport(BaseModel):
    """Outcome of embedding then extracting one animation."""

    animation: str
    asset_count: int = 0
    images_checked: int = 0
    mismatches: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.mismatches

    @property
    def failure_reason(self) -> str:
        return "; ".join(self.mismatches)


class UnitOutcome(BaseModel):
    """Per-animation outcome recorded by the batch driver."""

    name: str
    ok: bool
    reason: str = ""
    result: Any = None


class BatchReport(BaseModel):
    outcomes: list[UnitOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)

    @property
    def ok(self) -> bool:
        return self.failed == 0
