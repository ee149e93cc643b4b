"""
Privilege guard: the installer only runs as root.
"""

from __future__ import annotations

import os
from typing import Callable


class PrivilegeError(Exception):
    """Raised when the process lacks root privileges."""


def require_root(geteuid: Callable[[], int] | None = None) -> None:
    """Raise PrivilegeError unless the effective UID is 0."""
    euid = (geteuid or os.geteuid)()
    if euid != 0:
        raise PrivilegeError("Please run this installer as root or via sudo")
