"""
Package installer: OS-native package manager per family.

The per-family command table is the only place package-manager
invocations are spelled out. Output is captured so the console only
shows the installer's own log lines.
"""

from __future__ import annotations

import logging

from xrayr_setup.core.engine.executor import StepContext
from xrayr_setup.core.models.action import Receipt
from xrayr_setup.core.models.host import OSFamily
from xrayr_setup.core.models.settings import Settings

logger = logging.getLogger(__name__)

_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def install_commands(
    family: OSFamily,
    settings: Settings,
) -> tuple[list[list[str]], dict[str, str]]:
    """Return the command sequence and env overrides for ``family``.

    An empty command list means the family has no known package manager.
    """
    if family in (OSFamily.UBUNTU, OSFamily.DEBIAN):
        return [
            ["apt-get", "update", "-qq"],
            ["apt-get", "install", "-y", *settings.packages],
        ], dict(_APT_ENV)

    if family in (OSFamily.CENTOS, OSFamily.RHEL, OSFamily.FEDORA):
        return [["yum", "install", "-y", *settings.packages]], {}

    if family is OSFamily.ALPINE:
        return [["apk", "add", "--no-cache", *settings.alpine_packages]], {}

    return [], {}


def install_packages_step(ctx: StepContext) -> Receipt:
    logger.info("Checking and installing required packages...")
    commands, env = install_commands(ctx.host.os_family, ctx.settings)

    if not commands:
        msg = "Unknown OS type, continuing without installing dependencies"
        logger.warning(msg)
        return Receipt.skip(step="packages", reason=msg, warnings=[msg])

    for cmd in commands:
        result = ctx.runner.run(cmd, env_overrides=env or None)
        if not result.ok:
            detail = result.error or result.stderr.strip() or f"exit {result.returncode}"
            return Receipt.failure(
                step="packages",
                error=f"Package command failed: {' '.join(cmd[:3])} ({detail})",
                metadata={"return_code": result.returncode},
            )

    logger.info("Dependencies installed")
    return Receipt.success(step="packages", metadata={"packages": commands[-1][3:]})
