"""
HTTP download adapter: fetch remote files with urllib.

Installer scripts, rule data and the benchmark script are all plain
HTTPS GETs. The body is streamed into ``<dest>.part`` and renamed into
place only when the transfer completed, so a failed attempt never
clobbers an existing file.
"""

from __future__ import annotations

import logging
import urllib.request
from pathlib import Path

from xrayr_setup import __version__
from xrayr_setup.adapters.base import Downloader

logger = logging.getLogger(__name__)


def _fmt_size(n: int | float) -> str:
    """Format byte count to human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


class UrllibDownloader(Downloader):
    """Download files with ``urllib.request``.

    Args:
        timeout: Socket timeout in seconds for each request.
    """

    def __init__(self, timeout: int = 60):
        self._timeout = timeout

    def fetch(self, url: str, dest: Path) -> bool:
        partial = dest.with_name(dest.name + ".part")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            req = urllib.request.Request(
                url, headers={"User-Agent": f"xrayr-setup/{__version__}"},
            )
            downloaded = 0
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                with open(partial, "wb") as f:
                    while True:
                        chunk = resp.read(8192)
                        if not chunk:
                            break
                        f.write(chunk)
                        downloaded += len(chunk)
            partial.replace(dest)
        except Exception as e:
            partial.unlink(missing_ok=True)
            logger.debug("Download failed: %s → %s", url, e)
            return False

        logger.debug("Downloaded %s (%s) to %s", url, _fmt_size(downloaded), dest)
        return True
