"""Adapters: bindings for processes and HTTP downloads.

Public re-exports for convenient access.
"""

from xrayr_setup.adapters.base import CommandResult, CommandRunner, Downloader
from xrayr_setup.adapters.mock import MockCommandRunner, MockDownloader

__all__ = [
    "CommandResult",
    "CommandRunner",
    "Downloader",
    "MockCommandRunner",
    "MockDownloader",
]
