"""
Mock adapters: test doubles for commands and downloads.

MockCommandRunner records every command and answers from a table of
canned results keyed by command prefix. MockDownloader serves bodies
from a URL → bytes table; unknown URLs fail like an unreachable mirror.
"""

from __future__ import annotations

from pathlib import Path

from xrayr_setup.adapters.base import CommandResult, CommandRunner, Downloader


class MockCommandRunner(CommandRunner):
    """Command runner that never touches the host.

    By default every command succeeds with empty output. Responses are
    matched on the longest registered prefix of the command list.
    """

    def __init__(self, programs: dict[str, str] | None = None):
        self._programs: dict[str, str] = dict(programs or {})
        self._responses: dict[tuple[str, ...], CommandResult] = {}
        self._call_log: list[list[str]] = []
        self._env_log: list[dict[str, str] | None] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[list[str]]:
        """All commands this mock has received, in order."""
        return self._call_log

    @property
    def env_log(self) -> list[dict[str, str] | None]:
        """Environment overrides passed with each command."""
        return self._env_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def add_program(self, program: str, path: str | None = None) -> None:
        """Make ``which(program)`` succeed."""
        self._programs[program] = path or f"/usr/bin/{program}"

    def set_response(
        self,
        prefix: list[str],
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Answer commands starting with ``prefix`` with a canned result."""
        self._responses[tuple(prefix)] = CommandResult(
            cmd=list(prefix),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )

    def set_failure(self, prefix: list[str], returncode: int = 1) -> None:
        """Make commands starting with ``prefix`` exit non-zero."""
        self.set_response(prefix, returncode=returncode, stderr="mock failure")

    def calls_starting_with(self, *prefix: str) -> list[list[str]]:
        """Recorded commands that start with ``prefix``."""
        n = len(prefix)
        return [c for c in self._call_log if tuple(c[:n]) == prefix]

    def which(self, program: str) -> str | None:
        return self._programs.get(program)

    def run(
        self,
        cmd: list[str],
        *,
        capture: bool = True,
        env_overrides: dict[str, str] | None = None,
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        self._call_log.append(list(cmd))
        self._env_log.append(env_overrides)

        best: tuple[str, ...] | None = None
        for prefix in self._responses:
            if tuple(cmd[: len(prefix)]) == prefix:
                if best is None or len(prefix) > len(best):
                    best = prefix

        if best is None:
            return CommandResult(cmd=list(cmd))
        canned = self._responses[best]
        return canned.model_copy(update={"cmd": list(cmd)})

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._env_log.clear()
        self._responses.clear()


class MockDownloader(Downloader):
    """Downloader serving canned bodies.

    URLs not present in ``files`` fail. Every attempt is recorded in
    ``attempts``, successful or not.
    """

    def __init__(self, files: dict[str, bytes] | None = None):
        self.files: dict[str, bytes] = dict(files or {})
        self.attempts: list[str] = []

    def fetch(self, url: str, dest: Path) -> bool:
        self.attempts.append(url)
        body = self.files.get(url)
        if body is None:
            return False
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(body)
        return True
