"""
Receipt model: the result contract of a provisioning step.

Every step returns a Receipt. Steps report failure through the receipt,
the runner decides (per step policy) whether a failure stops the run.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

FailurePolicy = Literal["fatal", "warn"]


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of one provisioning step.

    ``warnings`` collects recoverable problems the step logged while
    still finishing (e.g. BBR not available on this kernel).
    """

    step: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the step succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the step failed."""
        return self.status == "failed"

    @classmethod
    def success(cls, step: str, output: str = "", **kwargs: Any) -> Receipt:
        """Create a success receipt."""
        return cls(step=step, status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, step: str, error: str, **kwargs: Any) -> Receipt:
        """Create a failure receipt."""
        return cls(step=step, status="failed", error=error, **kwargs)

    @classmethod
    def skip(cls, step: str, reason: str = "", **kwargs: Any) -> Receipt:
        """Create a skip receipt."""
        return cls(step=step, status="skipped", output=reason, **kwargs)
