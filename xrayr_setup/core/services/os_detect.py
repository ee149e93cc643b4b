"""
OS detection: classify the host into a known OS family.

Read-only probes of the identification files. Detection never fails:
an unrecognised system yields a non-empty raw token and the UNKNOWN
family, which later steps treat as "warn and carry on".
"""

from __future__ import annotations

import logging
import platform
import socket
from pathlib import Path

from xrayr_setup.core.models.host import HostProfile, OSFamily

logger = logging.getLogger(__name__)

_FAMILIES: dict[str, OSFamily] = {family.value: family for family in OSFamily}


def _read_os_release_id(path: Path) -> str:
    """Return the ``ID=`` value of an os-release file (may be empty)."""
    try:
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line.startswith("ID="):
                    return line.split("=", 1)[1].strip().strip("'\"").lower()
    except (OSError, UnicodeDecodeError):
        pass
    return ""


def detect_os(root: Path = Path("/")) -> str:
    """Return the raw OS token of the host.

    Checks, in order:
        1. ``/etc/os-release`` → its ``ID`` value
        2. ``/etc/redhat-release`` → ``"centos"``
        3. ``platform.system()`` (what ``uname -s`` prints)

    Args:
        root: Filesystem root to probe (tests point this at a tmp dir).

    Returns:
        A non-empty token such as ``"ubuntu"``, ``"centos"`` or ``"Linux"``.
    """
    os_release = root / "etc" / "os-release"
    if os_release.is_file():
        return _read_os_release_id(os_release) or "unknown"

    if (root / "etc" / "redhat-release").is_file():
        return "centos"

    return platform.system() or "unknown"


def classify_os(token: str) -> OSFamily:
    """Map a raw token onto the closed OSFamily set."""
    return _FAMILIES.get(token.strip().lower(), OSFamily.UNKNOWN)


def build_host_profile(root: Path = Path("/"), hostname: str | None = None) -> HostProfile:
    """Detect the OS once and bundle it with the hostname."""
    token = detect_os(root)
    family = classify_os(token)
    profile = HostProfile(
        os_family=family,
        os_id=token,
        hostname=hostname or socket.gethostname(),
    )

    logger.info("Detected operating system: %s", token)
    if family is OSFamily.UNKNOWN:
        logger.warning("Unrecognised operating system '%s', continuing anyway", token)
    return profile
