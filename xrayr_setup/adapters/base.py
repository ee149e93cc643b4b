"""
Adapter base: the contract between steps and the outside world.

Steps never call ``subprocess`` or ``urllib`` directly. They go through
a CommandRunner (processes) and a Downloader (HTTP), so that tests can
swap both for the doubles in ``adapters.mock``.

Adapters NEVER raise for ordinary failures: a non-zero exit or a failed
download is reported through the return value.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Outcome of one external command."""

    cmd: list[str] = Field(default_factory=list)
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    error: str | None = None        # set when the command could not run at all
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and self.error is None

    @property
    def first_line(self) -> str:
        """First line of stdout, stripped (empty if none)."""
        lines = self.stdout.strip().splitlines()
        return lines[0].strip() if lines else ""


class CommandRunner(ABC):
    """Runs external processes and reports their outcome."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'subprocess', 'mock')."""

    @abstractmethod
    def which(self, program: str) -> str | None:
        """Return the full path of ``program`` on PATH, or None."""

    @abstractmethod
    def run(
        self,
        cmd: list[str],
        *,
        capture: bool = True,
        env_overrides: dict[str, str] | None = None,
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        """Run ``cmd`` and return its result.

        ``capture=False`` lets the child inherit the terminal, which is
        what interactive third-party installers need.

        MUST never raise. Launch errors end up in ``CommandResult.error``.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class Downloader(ABC):
    """Fetches a URL into a local file."""

    @abstractmethod
    def fetch(self, url: str, dest: Path) -> bool:
        """Download ``url`` to ``dest``.

        On failure ``dest`` is left untouched and False is returned.
        MUST never raise.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
