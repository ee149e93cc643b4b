"""
Engine executor: the provisioning step loop.

Takes an ordered list of steps, runs them one by one against a shared
StepContext, collects receipts and applies each step's failure policy.

Flow:
    steps → (skip? → run) → receipt → fatal? stop : warn and continue
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable

from xrayr_setup.adapters.base import CommandRunner, Downloader
from xrayr_setup.core.models.action import FailurePolicy, Receipt
from xrayr_setup.core.models.host import HostProfile
from xrayr_setup.core.models.settings import Settings
from xrayr_setup.core.observability.logging_config import step as log_step

logger = logging.getLogger(__name__)


def _never(_question: str) -> bool:
    return False


@dataclass
class StepContext:
    """Everything a step needs: who we are, what to use, how to act."""

    host: HostProfile
    settings: Settings
    runner: CommandRunner
    downloader: Downloader
    confirm: Callable[[str], bool] = _never
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], datetime] = datetime.now


@dataclass
class ProvisionStep:
    """One named step of the provisioning sequence."""

    name: str
    title: str
    func: Callable[[StepContext], Receipt]
    policy: FailurePolicy = "warn"
    skip_on: Callable[[HostProfile], bool] | None = None
    skip_reason: str = ""


@dataclass
class ExecutionReport:
    """Result of running a step list."""

    receipts: list[Receipt] = field(default_factory=list)
    aborted_by: str | None = None

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.status == "skipped")

    @property
    def warnings(self) -> list[str]:
        return [w for r in self.receipts for w in r.warnings]

    @property
    def aborted(self) -> bool:
        return self.aborted_by is not None

    @property
    def status(self) -> str:
        if self.aborted:
            return "aborted"
        if self.failed or self.warnings:
            return "partial"
        return "ok"

    def get(self, name: str) -> Receipt | None:
        """Receipt of the step called ``name``, if it ran."""
        for r in self.receipts:
            if r.step == name:
                return r
        return None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "aborted_by": self.aborted_by,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


def _run_one(step: ProvisionStep, ctx: StepContext) -> Receipt:
    """Run a single step, converting escaped exceptions into a receipt."""
    started = datetime.now(UTC)
    start = time.monotonic()
    try:
        receipt = step.func(ctx)
    except Exception as e:
        # Steps should report through receipts; this is the backstop
        logger.debug("Step %s raised", step.name, exc_info=True)
        receipt = Receipt.failure(step=step.name, error=f"Unexpected error: {e}")

    return receipt.model_copy(update={
        "step": step.name,
        "started_at": started.isoformat(),
        "ended_at": datetime.now(UTC).isoformat(),
        "duration_ms": int((time.monotonic() - start) * 1000),
    })


def run_steps(steps: list[ProvisionStep], ctx: StepContext) -> ExecutionReport:
    """Execute steps in order, stopping only on a fatal failure.

    Args:
        steps: The ordered step list.
        ctx: Shared context handed to every step.

    Returns:
        ExecutionReport with one receipt per step that was reached.
    """
    report = ExecutionReport()

    for index, step in enumerate(steps):
        if step.skip_on is not None and step.skip_on(ctx.host):
            log_step(logger, "%d. Skipping %s (%s)", index, step.title, ctx.host.os_id)
            if step.skip_reason:
                logger.info("%s", step.skip_reason)
            report.receipts.append(Receipt.skip(step=step.name, reason=step.skip_reason))
            continue

        log_step(logger, "%d. %s...", index, step.title)
        receipt = _run_one(step, ctx)
        report.receipts.append(receipt)

        if not receipt.failed:
            continue

        if step.policy == "fatal":
            logger.error("%s", receipt.error)
            report.aborted_by = step.name
            break

        logger.warning("%s, continuing", receipt.error)

    return report
