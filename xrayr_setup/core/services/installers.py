"""
Remote installers: download and run third-party installer scripts.

Each installer is declared as an ExternalProvisioner: where to fetch it,
what to call the local copy, and whether a failed download should stop
the run. The step functions only differ in which provisioner they pick
and what they lay down afterwards, so swapping an installer URL or
script never touches the sequencer.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from pydantic import BaseModel

from xrayr_setup.core.engine.executor import StepContext
from xrayr_setup.core.models.action import Receipt
from xrayr_setup.core.models.host import HostProfile
from xrayr_setup.core.models.settings import Settings
from xrayr_setup.core.services import service_manager

logger = logging.getLogger(__name__)

# Every script name an installer run may leave in the work directory
TRANSIENT_SCRIPTS = (
    "install.sh",
    "FastBench.sh",
    "install-xrayr.sh",
    "alpine-xrayr-install.sh",
    "xrayr-install.sh",
    "fastbench.sh",
    "gost-install.sh",
)

GOST_EXAMPLE_CONFIG = """\
# GOST example configuration
# Adjust to your needs
services:
  - name: service-0
    addr: ":8080"
    handler:
      type: auto
    listener:
      type: tcp
"""

GOST_UNIT_TEMPLATE = """\
[Unit]
Description=Gost Proxy Service
After=network.target

[Service]
Type=simple
User=root
Group=root
WorkingDirectory={gost_dir}
ExecStart={gost_binary} -C {gost_config}
StandardOutput=null
StandardError=null
Restart=on-failure
RestartSec=5s

[Install]
WantedBy=multi-user.target
"""


class ExternalProvisioner(BaseModel):
    """Declared contract of one third-party installer script."""

    name: str                       # human label, e.g. "XrayR"
    url: str
    script: str                     # local file name in the work directory
    fatal_on_missing: bool = False  # download failure stops the run
    make_executable: bool = False


class ProvisionerRun(BaseModel):
    """What happened when a provisioner was invoked."""

    downloaded: bool = False
    exit_code: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.downloaded and self.exit_code == 0


def xrayr_provisioner(host: HostProfile, settings: Settings) -> ExternalProvisioner:
    """Pick the Alpine or the standard XrayR installer."""
    if host.is_alpine:
        return ExternalProvisioner(
            name="Alpine XrayR",
            url=settings.urls.xrayr_alpine_installer,
            script="alpine-xrayr-install.sh",
            fatal_on_missing=True,
            make_executable=True,
        )
    return ExternalProvisioner(
        name="XrayR",
        url=settings.urls.xrayr_installer,
        script="xrayr-install.sh",
        fatal_on_missing=True,
    )


def gost_provisioner(settings: Settings) -> ExternalProvisioner:
    return ExternalProvisioner(
        name="GOST",
        url=settings.urls.gost_installer,
        script="gost-install.sh",
    )


def _make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def run_provisioner(ctx: StepContext, provisioner: ExternalProvisioner) -> ProvisionerRun:
    """Download ``provisioner`` into the work directory and run it.

    The downloaded script is removed afterwards whether or not it
    succeeded. A non-zero exit is reported, never raised.
    """
    work_dir = ctx.settings.paths.work_dir
    script = (work_dir / provisioner.script).absolute()

    if not ctx.downloader.fetch(provisioner.url, script):
        return ProvisionerRun(downloaded=False)

    try:
        if provisioner.make_executable:
            _make_executable(script)
        result = ctx.runner.run(["bash", str(script)], capture=False, cwd=work_dir)
    finally:
        script.unlink(missing_ok=True)

    return ProvisionerRun(downloaded=True, exit_code=result.returncode)


def _installer_receipt(
    step: str,
    provisioner: ExternalProvisioner,
    run: ProvisionerRun,
) -> Receipt:
    if not run.downloaded:
        return Receipt.failure(
            step=step,
            error=f"{provisioner.name} installer script download failed",
            metadata={"url": provisioner.url, "fatal": provisioner.fatal_on_missing},
        )

    warnings: list[str] = []
    if run.exit_code == 0:
        logger.info("✓ %s installation finished", provisioner.name)
    else:
        msg = (
            f"{provisioner.name} installation may have failed "
            f"(exit code: {run.exit_code}), please check manually"
        )
        logger.warning(msg)
        warnings.append(msg)

    return Receipt.success(
        step=step,
        warnings=warnings,
        metadata={"url": provisioner.url, "exit_code": run.exit_code},
    )


# ── Steps ──────────────────────────────────────────────────────


def install_xrayr_step(ctx: StepContext) -> Receipt:
    provisioner = xrayr_provisioner(ctx.host, ctx.settings)
    if ctx.host.is_alpine:
        logger.info("Alpine detected, installing the Alpine edition of XrayR...")
    else:
        logger.info("Installing standard XrayR...")
    run = run_provisioner(ctx, provisioner)
    return _installer_receipt("xrayr", provisioner, run)


def write_gost_artifacts(ctx: StepContext) -> dict[str, bool]:
    """Create the GOST config directory, example config and systemd unit.

    The example config is only written when absent; the unit file is
    always rewritten.
    """
    paths = ctx.settings.paths
    paths.gost_dir.mkdir(parents=True, exist_ok=True)

    created_config = False
    if not paths.gost_config.exists():
        logger.info("Creating GOST example configuration...")
        paths.gost_config.write_text(GOST_EXAMPLE_CONFIG, encoding="utf-8")
        logger.info("Created example config: %s", paths.gost_config)
        created_config = True

    logger.info("Creating GOST systemd service...")
    paths.gost_unit.parent.mkdir(parents=True, exist_ok=True)
    paths.gost_unit.write_text(
        GOST_UNIT_TEMPLATE.format(
            gost_dir=paths.gost_dir,
            gost_binary=paths.gost_binary,
            gost_config=paths.gost_config,
        ),
        encoding="utf-8",
    )

    reloaded = service_manager.daemon_reload(ctx.runner, ctx.host)
    return {"created_config": created_config, "reloaded": reloaded}


def install_gost_step(ctx: StepContext) -> Receipt:
    provisioner = gost_provisioner(ctx.settings)
    logger.info("Installing GOST...")
    run = run_provisioner(ctx, provisioner)
    receipt = _installer_receipt("gost", provisioner, run)
    if not run.succeeded:
        return receipt

    if ctx.runner.which("gost"):
        version = ctx.runner.run(["gost", "-V"], timeout=10).first_line
        logger.info("GOST version: %s", version or "unknown")

    try:
        artifacts = write_gost_artifacts(ctx)
    except OSError as e:
        msg = f"Cannot write GOST service files: {e}"
        logger.warning(msg)
        return receipt.model_copy(update={"warnings": [*receipt.warnings, msg]})

    if artifacts["reloaded"]:
        logger.info("✓ GOST service file created")
    else:
        msg = "systemctl daemon-reload failed"
        logger.warning(msg)
        receipt = receipt.model_copy(update={"warnings": [*receipt.warnings, msg]})

    start = " ".join(service_manager.service_command(ctx.host, "start", "gost"))
    enable = " ".join(service_manager.service_command(ctx.host, "enable", "gost"))
    logger.info("Hint: after editing the config, start the service with '%s'", start)
    logger.info("Hint: enable it at boot with '%s'", enable)

    return receipt.model_copy(update={"metadata": {**receipt.metadata, **artifacts}})


def create_directories_step(ctx: StepContext) -> Receipt:
    paths = ctx.settings.paths
    for directory in (paths.xrayr_dir, paths.v2bx_dir):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Receipt.failure(step="directories", error=f"Cannot create {directory}: {e}")
    logger.info("Configuration directories ready")
    return Receipt.success(step="directories")


def cleanup_transient_scripts(work_dir: Path) -> list[str]:
    """Remove leftover installer scripts; returns the names removed."""
    removed: list[str] = []
    for name in TRANSIENT_SCRIPTS:
        path = work_dir / name
        try:
            os.remove(path)
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.debug("Cannot remove %s: %s", path, e)
            continue
        removed.append(name)
    return removed


def cleanup_step(ctx: StepContext) -> Receipt:
    removed = cleanup_transient_scripts(ctx.settings.paths.work_dir)
    logger.info("Temporary files cleaned up")
    return Receipt.success(step="cleanup", metadata={"removed": removed})
