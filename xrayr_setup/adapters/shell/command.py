"""
Shell command adapter: the single place where ``subprocess.run`` is called.

Every package manager call, installer script, sysctl invocation and
service-manager query flows through SubprocessRunner. Logging and error
capture are centralised here.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from pathlib import Path

from xrayr_setup.adapters.base import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

# Keep captured output bounded; installers can be chatty
_MAX_OUTPUT = 4000


class SubprocessRunner(CommandRunner):
    """Execute commands on the local host.

    Captured output is trimmed to the last few KB. Commands run without
    a shell; callers pass argument lists.
    """

    @property
    def name(self) -> str:
        return "subprocess"

    def which(self, program: str) -> str | None:
        return shutil.which(program)

    def run(
        self,
        cmd: list[str],
        *,
        capture: bool = True,
        env_overrides: dict[str, str] | None = None,
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        env = os.environ.copy()
        if env_overrides:
            env.update(env_overrides)

        logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), cwd or ".")
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                capture_output=capture,
                text=True,
                timeout=timeout,
                env=env,
                cwd=cwd,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                cmd=cmd,
                returncode=-1,
                error=f"Command timed out ({timeout}s)",
                elapsed_ms=int((time.monotonic() - start) * 1000),
            )
        except OSError as e:
            # Missing binary, permission denied, ...
            logger.debug("Cannot launch %s: %s", cmd[0], e)
            return CommandResult(cmd=cmd, returncode=127, error=str(e))

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = (result.stdout or "")[-_MAX_OUTPUT:]
        stderr = (result.stderr or "")[-_MAX_OUTPUT:]

        if result.returncode != 0:
            logger.debug(
                "Command exited %d: %s%s",
                result.returncode,
                " ".join(cmd),
                f": {stderr.strip()}" if stderr.strip() else "",
            )

        return CommandResult(
            cmd=cmd,
            returncode=result.returncode,
            stdout=stdout,
            stderr=stderr,
            elapsed_ms=elapsed_ms,
        )
