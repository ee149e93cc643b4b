"""
Timestamped backups before a file is overwritten.
"""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

BACKUP_TS_FORMAT = "%Y%m%d%H%M%S"


def backup_file(path: Path, now: datetime | None = None) -> Path | None:
    """Copy ``path`` to ``PATH.bak.YYYYmmddHHMMSS`` (attributes preserved).

    Two backups in the same second get ``.1``, ``.2``, ... appended so
    an earlier backup is never overwritten.

    Returns:
        The backup path, or None if ``path`` does not exist.

    Raises:
        OSError: If the copy fails.
    """
    if not path.exists():
        logger.debug("backup: path does not exist, skipping: %s", path)
        return None

    ts = (now or datetime.now()).strftime(BACKUP_TS_FORMAT)
    dest = path.with_name(f"{path.name}.bak.{ts}")
    counter = 1
    while dest.exists():
        dest = path.with_name(f"{path.name}.bak.{ts}.{counter}")
        counter += 1

    shutil.copy2(path, dest)
    logger.debug("Backed up %s → %s", path, dest)
    return dest


def list_backups(path: Path) -> list[Path]:
    """Existing backups of ``path``, oldest name first."""
    return sorted(path.parent.glob(f"{path.name}.bak.*"))
