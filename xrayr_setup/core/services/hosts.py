"""
Hostname resolution: make sure the hostname resolves to 127.0.0.1.

Some cloud images ship an ``/etc/hosts`` without the machine's own
name, which makes sudo and several installers slow or noisy.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from xrayr_setup.core.engine.executor import StepContext
from xrayr_setup.core.models.action import Receipt

logger = logging.getLogger(__name__)

_LOCALHOST_RE = re.compile(r"127\.0\.0\.1.*localhost")


def ensure_hostname_entry(hosts_file: Path, hostname: str) -> bool:
    """Add ``127.0.0.1 <hostname>`` to the hosts file if missing.

    The entry goes right after the first ``127.0.0.1 ... localhost``
    line, or at the end when there is none.

    Returns:
        True if the file was changed.
    """
    text = ""
    if hosts_file.exists():
        with open(hosts_file, encoding="utf-8", newline="") as f:
            text = f.read()
    pattern = rf"^[ \t]*127\.0\.0\.1[ \t].*(?<!\S){re.escape(hostname)}(?!\S)"
    if re.search(pattern, text, re.MULTILINE):
        return False

    eol = "\r\n" if "\r\n" in text else "\n"
    entry = f"127.0.0.1 {hostname}{eol}"
    lines = text.splitlines(keepends=True)
    if lines and not lines[-1].endswith(("\n", "\r")):
        lines[-1] += eol
    for i, line in enumerate(lines):
        if _LOCALHOST_RE.search(line):
            lines.insert(i + 1, entry)
            break
    else:
        lines.append(entry)

    with open(hosts_file, "w", encoding="utf-8", newline="") as f:
        f.write("".join(lines))
    return True


def fix_hostname_step(ctx: StepContext) -> Receipt:
    logger.info("Checking hostname resolution...")
    hosts_file = ctx.settings.paths.hosts_file
    try:
        changed = ensure_hostname_entry(hosts_file, ctx.host.hostname)
    except OSError as e:
        return Receipt.failure(step="hosts", error=f"Cannot update {hosts_file}: {e}")

    if changed:
        logger.info("Added %s to %s", ctx.host.hostname, hosts_file)
    return Receipt.success(step="hosts", metadata={"changed": changed})
