"""
Summary: read-only snapshot of the host after provisioning.

Re-derives everything from the live system (sysctl, PATH, service
manager) instead of trusting what the steps reported, so ``status``
gives the same answer on a later run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from xrayr_setup.adapters.base import CommandRunner
from xrayr_setup.core.models.host import HostProfile
from xrayr_setup.core.models.settings import Settings
from xrayr_setup.core.services import service_manager
from xrayr_setup.core.services.sysctl import CONGESTION_KEY, IPV6_DISABLE_KEY, read_sysctl


@dataclass
class ServiceReport:
    """Installed/running state of one managed service."""

    name: str
    installed: bool = False
    running: bool = False
    enabled: bool | None = None     # None = not queried
    version: str = ""
    edition: str = ""

    @property
    def state(self) -> str:
        if self.running:
            return "running"
        if self.enabled:
            return "enabled (not running)"
        if self.enabled is False:
            return "not enabled"
        return "not running"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "installed": self.installed,
            "running": self.running,
            "enabled": self.enabled,
            "state": self.state,
            "version": self.version,
            "edition": self.edition,
        }


@dataclass
class SummaryReport:
    """Everything the closing report prints."""

    os_id: str = "unknown"
    os_family: str = "unknown"
    hostname: str = ""
    kernel_tuning: bool = True
    bbr: str = "unknown"
    ipv6_disabled: str = "unknown"
    services: list[ServiceReport] = field(default_factory=list)
    config_files: list[tuple[str, str]] = field(default_factory=list)
    commands: dict[str, list[tuple[str, str]]] = field(default_factory=dict)
    tips: list[str] = field(default_factory=list)

    def service(self, name: str) -> ServiceReport | None:
        for s in self.services:
            if s.name == name:
                return s
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "os": self.os_id,
            "os_family": self.os_family,
            "hostname": self.hostname,
            "kernel_tuning": {
                "applied": self.kernel_tuning,
                "bbr": self.bbr if self.kernel_tuning else None,
                "ipv6_disabled": self.ipv6_disabled if self.kernel_tuning else None,
            },
            "services": [s.to_dict() for s in self.services],
            "config_files": {label: path for label, path in self.config_files},
            "commands": {
                section: {label: cmd for label, cmd in items}
                for section, items in self.commands.items()
            },
            "tips": list(self.tips),
        }


def xrayr_service_name(host: HostProfile) -> str:
    """The XrayR unit is ``xrayr`` under OpenRC, ``XrayR`` under systemd."""
    return "xrayr" if host.is_alpine else "XrayR"


def _check_xrayr(host: HostProfile, settings: Settings, runner: CommandRunner) -> ServiceReport:
    report = ServiceReport(name="XrayR")
    report.installed = (
        runner.which("XrayR") is not None or settings.paths.xrayr_config.exists()
    )
    if not report.installed:
        return report
    if host.is_alpine:
        report.edition = "Alpine edition"
    report.running = service_manager.is_active(runner, host, xrayr_service_name(host))
    if not report.running:
        report.enabled = service_manager.is_enabled(runner, host, xrayr_service_name(host))
    return report


def _check_gost(host: HostProfile, runner: CommandRunner) -> ServiceReport | None:
    if host.is_alpine or runner.which("gost") is None:
        return None
    report = ServiceReport(name="GOST", installed=True)
    report.version = runner.run(["gost", "-V"], timeout=10).first_line or "installed"
    report.running = service_manager.is_active(runner, host, "gost")
    if not report.running:
        report.enabled = service_manager.is_enabled(runner, host, "gost")
    return report


def _xrayr_commands(host: HostProfile, settings: Settings) -> list[tuple[str, str]]:
    name = xrayr_service_name(host)

    def svc(action: str) -> str:
        return " ".join(service_manager.service_command(host, action, name))

    config = settings.paths.xrayr_config
    if host.is_alpine:
        return [
            ("Start service", svc("start")),
            ("Stop service", svc("stop")),
            ("Restart service", svc("restart")),
            ("Show status", svc("status")),
            ("Show logs", "cat /var/log/xrayr/xrayr.log"),
            ("Enable at boot", svc("enable")),
            ("Edit config", f"vi {config}"),
        ]
    return [
        ("XrayR management", "XrayR or xrayr"),
        ("Start service", svc("start")),
        ("Stop service", svc("stop")),
        ("Restart service", svc("restart")),
        ("Show status", svc("status")),
        ("Show logs", f"XrayR log or journalctl -u {name} -f"),
        ("Edit config", f"vim {config}"),
    ]


def _gost_commands(host: HostProfile, settings: Settings) -> dict[str, list[tuple[str, str]]]:
    def svc(action: str) -> str:
        return " ".join(service_manager.service_command(host, action, "gost"))

    return {
        "GOST usage": [
            ("Show version", "gost -V"),
            ("Show help", "gost -h"),
            ("Example forward", "gost -L=:8080 -F=proxy_server:port"),
        ],
        "GOST service management": [
            ("Start service", svc("start")),
            ("Stop service", svc("stop")),
            ("Restart service", svc("restart")),
            ("Show status", svc("status")),
            ("Show logs", "journalctl -u gost -f"),
            ("Edit config", f"vim {settings.paths.gost_config}"),
        ],
    }


def collect_summary(
    host: HostProfile,
    settings: Settings,
    runner: CommandRunner,
) -> SummaryReport:
    """Query the live system and build the closing report."""
    paths = settings.paths
    summary = SummaryReport(
        os_id=host.os_id,
        os_family=host.os_family.value,
        hostname=host.hostname,
        kernel_tuning=not host.is_alpine,
    )

    if summary.kernel_tuning:
        summary.bbr = read_sysctl(runner, CONGESTION_KEY) or "unknown"
        summary.ipv6_disabled = read_sysctl(runner, IPV6_DISABLE_KEY) or "unknown"

    xrayr = _check_xrayr(host, settings, runner)
    if xrayr.installed:
        summary.services.append(xrayr)
    gost = _check_gost(host, runner)
    if gost is not None:
        summary.services.append(gost)

    summary.config_files = [
        ("XrayR config", str(paths.xrayr_config)),
        ("Audit rules", str(paths.rulelist)),
        ("GeoSite", str(paths.xrayr_dir / "geosite.dat")),
        ("GeoIP", str(paths.xrayr_dir / "geoip.dat")),
    ]
    gost_config_present = not host.is_alpine and paths.gost_config.exists()
    if gost_config_present:
        summary.config_files.append(("GOST config", str(paths.gost_config)))

    xrayr_section = "XrayR management (Alpine)" if host.is_alpine else "XrayR management"
    summary.commands[xrayr_section] = _xrayr_commands(host, settings)
    if gost is not None:
        summary.commands.update(_gost_commands(host, settings))

    if host.is_alpine:
        summary.tips = [
            "Kernel tuning was skipped on Alpine",
            "The Alpine edition of XrayR is installed",
            "GOST is not installed on Alpine (unsupported)",
            f"XrayR config: vi {paths.xrayr_config}",
        ]
    else:
        summary.tips = [f"XrayR config: vim {paths.xrayr_config}"]
        if gost_config_present:
            summary.tips.append(
                f"GOST config: vim {paths.gost_config} "
                "(then run systemctl restart gost)"
            )
        summary.tips.append("BBR and network tuning are enabled")

    return summary
