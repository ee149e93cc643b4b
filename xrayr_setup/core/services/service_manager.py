"""
Service manager: one place for systemd / OpenRC command strings.

Alpine runs OpenRC (``rc-service``, ``rc-update``); every other
supported family runs systemd. Steps and the summary reporter ask this
module instead of spelling out service commands themselves.
"""

from __future__ import annotations

from xrayr_setup.adapters.base import CommandRunner
from xrayr_setup.core.models.host import HostProfile, OSFamily

_STATUS_TIMEOUT = 10


def init_system_for(host: HostProfile) -> str:
    """``"openrc"`` on Alpine, ``"systemd"`` everywhere else."""
    return "openrc" if host.os_family is OSFamily.ALPINE else "systemd"


def service_command(host: HostProfile, action: str, service: str) -> list[str]:
    """Build the service-manager command for ``action`` on ``service``.

    Raises:
        ValueError: If ``action`` is not a known service action.
    """
    if init_system_for(host) == "openrc":
        cmd_map = {
            "start":   ["rc-service", service, "start"],
            "stop":    ["rc-service", service, "stop"],
            "restart": ["rc-service", service, "restart"],
            "status":  ["rc-service", service, "status"],
            "enable":  ["rc-update", "add", service, "default"],
        }
    else:
        cmd_map = {
            "start":   ["systemctl", "start", service],
            "stop":    ["systemctl", "stop", service],
            "restart": ["systemctl", "restart", service],
            "status":  ["systemctl", "status", service],
            "enable":  ["systemctl", "enable", service],
        }

    cmd = cmd_map.get(action)
    if cmd is None:
        raise ValueError(f"Unknown service action: {action}")
    return cmd


def is_active(runner: CommandRunner, host: HostProfile, service: str) -> bool:
    """Whether ``service`` is currently running."""
    if init_system_for(host) == "openrc":
        cmd = ["rc-service", service, "status"]
    else:
        cmd = ["systemctl", "is-active", "--quiet", service]
    return runner.run(cmd, timeout=_STATUS_TIMEOUT).ok


def is_enabled(runner: CommandRunner, host: HostProfile, service: str) -> bool:
    """Whether ``service`` starts at boot."""
    if init_system_for(host) == "openrc":
        cmd = ["rc-update", "show", "default"]
        result = runner.run(cmd, timeout=_STATUS_TIMEOUT)
        return result.ok and any(
            line.split("|")[0].strip() == service for line in result.stdout.splitlines()
        )
    return runner.run(
        ["systemctl", "is-enabled", "--quiet", service], timeout=_STATUS_TIMEOUT,
    ).ok


def daemon_reload(runner: CommandRunner, host: HostProfile) -> bool:
    """Reload unit definitions (systemd only; a no-op on OpenRC)."""
    if init_system_for(host) == "openrc":
        return True
    return runner.run(["systemctl", "daemon-reload"]).ok
