"""
Host model: what machine are we provisioning.

The host profile is built once at startup and then threaded through
every step. It is frozen: the OS classification never changes mid-run.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class OSFamily(str, Enum):
    """Closed set of host operating systems the installer knows about."""

    UBUNTU = "ubuntu"
    DEBIAN = "debian"
    CENTOS = "centos"
    RHEL = "rhel"
    FEDORA = "fedora"
    ALPINE = "alpine"
    UNKNOWN = "unknown"


class HostProfile(BaseModel):
    """Immutable facts about the host, shared by all steps."""

    model_config = ConfigDict(frozen=True)

    os_family: OSFamily = OSFamily.UNKNOWN
    os_id: str = "unknown"          # raw token as detected (never empty)
    hostname: str = "localhost"

    @property
    def is_alpine(self) -> bool:
        """Alpine ships a minimal kernel and OpenRC instead of systemd."""
        return self.os_family is OSFamily.ALPINE

    @property
    def is_known(self) -> bool:
        return self.os_family is not OSFamily.UNKNOWN
