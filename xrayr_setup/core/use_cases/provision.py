"""
Provision use case: the full node setup, start to finish.

Builds the ordered step list with its failure-policy table, runs it,
and then collects the read-only summary. Everything host-specific comes
in through the arguments, so tests drive the whole flow with mocks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from xrayr_setup.core.engine.executor import (
    ExecutionReport,
    ProvisionStep,
    StepContext,
    run_steps,
)
from xrayr_setup.core.models.host import HostProfile
from xrayr_setup.core.models.settings import Settings
from xrayr_setup.core.services.benchmark import run_benchmark_step
from xrayr_setup.core.services.config_patch import configure_audit_rules_step
from xrayr_setup.core.services.editor import configure_editor_step
from xrayr_setup.core.services.hosts import fix_hostname_step
from xrayr_setup.core.services.installers import (
    cleanup_step,
    create_directories_step,
    gost_provisioner,
    install_gost_step,
    install_xrayr_step,
    xrayr_provisioner,
)
from xrayr_setup.core.services.packages import install_packages_step
from xrayr_setup.core.services.rule_data import fetch_rule_data_step
from xrayr_setup.core.services.summary import SummaryReport, collect_summary
from xrayr_setup.core.services.sysctl import tune_kernel_step

logger = logging.getLogger(__name__)


def _alpine(host: HostProfile) -> bool:
    return host.is_alpine


def build_steps(host: HostProfile, settings: Settings) -> list[ProvisionStep]:
    """The provisioning sequence.

    Only the XrayR installer download is fatal; every other failure is
    logged and the run goes on.
    """
    xrayr = xrayr_provisioner(host, settings)
    gost = gost_provisioner(settings)

    return [
        ProvisionStep("hosts", "System initialisation", fix_hostname_step),
        ProvisionStep("packages", "Installing dependencies", install_packages_step),
        ProvisionStep(
            "kernel", "Kernel tuning (BBR + network)", tune_kernel_step,
            skip_on=_alpine,
            skip_reason="Alpine uses a minimal kernel; skipping kernel tuning",
        ),
        ProvisionStep(
            "xrayr", "Installing XrayR", install_xrayr_step,
            policy="fatal" if xrayr.fatal_on_missing else "warn",
        ),
        ProvisionStep(
            "gost", "Installing GOST", install_gost_step,
            policy="fatal" if gost.fatal_on_missing else "warn",
            skip_on=_alpine,
            skip_reason="GOST is not installed on Alpine",
        ),
        ProvisionStep("directories", "Creating configuration directories", create_directories_step),
        ProvisionStep("rule-data", "Downloading GeoSite / GeoIP rule data", fetch_rule_data_step),
        ProvisionStep("audit-rules", "Configuring audit rules", configure_audit_rules_step),
        ProvisionStep("editor", "Configuring vim", configure_editor_step),
        ProvisionStep("benchmark", "Benchmark", run_benchmark_step),
        ProvisionStep("cleanup", "Cleaning up temporary files", cleanup_step),
    ]


@dataclass
class ProvisionResult:
    """Outcome of a provisioning run."""

    report: ExecutionReport
    summary: SummaryReport | None = None

    @property
    def exit_code(self) -> int:
        return 1 if self.report.aborted else 0

    def to_dict(self) -> dict:
        result: dict = {"report": self.report.to_dict()}
        if self.summary is not None:
            result["summary"] = self.summary.to_dict()
        return result


def provision(ctx: StepContext) -> ProvisionResult:
    """Run every step, then summarise the host (unless a fatal step aborted)."""
    steps = build_steps(ctx.host, ctx.settings)
    report = run_steps(steps, ctx)

    if report.aborted:
        logger.error("Provisioning aborted at step '%s'", report.aborted_by)
        return ProvisionResult(report=report)

    summary = collect_summary(ctx.host, ctx.settings, ctx.runner)
    return ProvisionResult(report=report, summary=summary)
