"""
Kernel tuner: BBR congestion control and network buffer tuning.

Writes a fixed sysctl.conf (after backing up the old one), applies it
and checks that BBR and the IPv6 switch actually took effect. None of
the verification results are fatal: older kernels simply lack BBR.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from xrayr_setup.adapters.base import CommandRunner
from xrayr_setup.core.engine.executor import StepContext
from xrayr_setup.core.models.action import Receipt
from xrayr_setup.core.services.backup import backup_file

logger = logging.getLogger(__name__)

# (comment, [(key, value), ...]): written in this order
SYSCTL_SECTIONS: list[tuple[str, list[tuple[str, str]]]] = [
    ("Filesystem", [
        ("fs.file-max", "6815744"),
    ]),
    ("TCP basics", [
        ("net.ipv4.tcp_no_metrics_save", "1"),
        ("net.ipv4.tcp_ecn", "0"),
        ("net.ipv4.tcp_frto", "0"),
        ("net.ipv4.tcp_mtu_probing", "0"),
        ("net.ipv4.tcp_rfc1337", "0"),
        ("net.ipv4.tcp_sack", "1"),
        ("net.ipv4.tcp_fack", "1"),
        ("net.ipv4.tcp_window_scaling", "1"),
        ("net.ipv4.tcp_adv_win_scale", "1"),
        ("net.ipv4.tcp_moderate_rcvbuf", "1"),
    ]),
    ("TCP fast open", [
        ("net.ipv4.tcp_fastopen", "3"),
    ]),
    ("TCP connection setup", [
        ("net.ipv4.tcp_syncookies", "1"),
        ("net.ipv4.tcp_syn_retries", "2"),
        ("net.ipv4.tcp_synack_retries", "2"),
        ("net.ipv4.tcp_max_syn_backlog", "8192"),
    ]),
    ("TCP connection reuse", [
        ("net.ipv4.tcp_tw_reuse", "1"),
        ("net.ipv4.tcp_fin_timeout", "30"),
        ("net.ipv4.tcp_keepalive_time", "1200"),
        ("net.ipv4.tcp_keepalive_probes", "3"),
        ("net.ipv4.tcp_keepalive_intvl", "30"),
    ]),
    ("Network buffers (32MB)", [
        ("net.core.rmem_max", "33554432"),
        ("net.core.wmem_max", "33554432"),
        ("net.ipv4.tcp_rmem", "4096 87380 33554432"),
        ("net.ipv4.tcp_wmem", "4096 16384 33554432"),
        ("net.ipv4.udp_rmem_min", "8192"),
        ("net.ipv4.udp_wmem_min", "8192"),
    ]),
    ("Network queues", [
        ("net.core.netdev_max_backlog", "16384"),
        ("net.core.somaxconn", "8192"),
    ]),
    ("IPv4 forwarding", [
        ("net.ipv4.ip_forward", "1"),
        ("net.ipv4.conf.all.route_localnet", "1"),
        ("net.ipv4.conf.all.forwarding", "1"),
        ("net.ipv4.conf.default.forwarding", "1"),
    ]),
    ("Congestion control: BBR", [
        ("net.core.default_qdisc", "fq"),
        ("net.ipv4.tcp_congestion_control", "bbr"),
    ]),
    ("Disable IPv6 permanently", [
        ("net.ipv6.conf.all.disable_ipv6", "1"),
        ("net.ipv6.conf.default.disable_ipv6", "1"),
        ("net.ipv6.conf.lo.disable_ipv6", "1"),
    ]),
]

CONGESTION_KEY = "net.ipv4.tcp_congestion_control"
IPV6_DISABLE_KEY = "net.ipv6.conf.all.disable_ipv6"


def render_sysctl_conf() -> str:
    """Render the full sysctl.conf content."""
    out = [
        "# ============================================",
        "# XrayR node system tuning",
        "# ============================================",
    ]
    for title, params in SYSCTL_SECTIONS:
        out.append(f"# {title}")
        out.extend(f"{key} = {value}" for key, value in params)
        out.append("")
    return "\n".join(out)


def write_sysctl_conf(path: Path, now: datetime | None = None) -> Path | None:
    """Back up ``path`` (if present) and overwrite it with the tuned block.

    Returns:
        The backup path, or None when there was nothing to back up.
    """
    backup = backup_file(path, now)
    if backup is not None:
        logger.info("Backed up original config to %s", backup)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_sysctl_conf(), encoding="utf-8")
    return backup


def read_sysctl(runner: CommandRunner, key: str) -> str | None:
    """Current kernel value of ``key`` via ``sysctl -n``, or None."""
    result = runner.run(["sysctl", "-n", key], timeout=10)
    if not result.ok:
        return None
    return result.stdout.strip()


def tune_kernel_step(ctx: StepContext) -> Receipt:
    conf = ctx.settings.paths.sysctl_conf
    warnings: list[str] = []

    logger.info("Writing kernel parameters...")
    try:
        backup = write_sysctl_conf(conf, ctx.clock())
    except OSError as e:
        return Receipt.failure(step="kernel", error=f"Cannot write {conf}: {e}")

    logger.info("Applying kernel parameters...")
    applied = ctx.runner.run(["sysctl", "-p", str(conf)])
    if not applied.ok:
        # Unknown keys on older kernels make sysctl -p exit non-zero
        msg = f"sysctl -p reported errors (exit {applied.returncode})"
        logger.warning(msg)
        warnings.append(msg)

    congestion = read_sysctl(ctx.runner, CONGESTION_KEY)
    if congestion and "bbr" in congestion:
        logger.info("✓ BBR congestion control enabled")
    else:
        msg = "BBR could not be enabled, a newer kernel may be required"
        logger.warning(msg)
        warnings.append(msg)

    ipv6_disabled = read_sysctl(ctx.runner, IPV6_DISABLE_KEY) == "1"
    if ipv6_disabled:
        logger.info("✓ IPv6 disabled")
    else:
        msg = "IPv6 is still enabled"
        logger.warning(msg)
        warnings.append(msg)

    logger.info("Kernel tuning finished")
    return Receipt.success(
        step="kernel",
        warnings=warnings,
        metadata={
            "backup": str(backup) if backup else None,
            "congestion_control": congestion,
            "ipv6_disabled": ipv6_disabled,
        },
    )
