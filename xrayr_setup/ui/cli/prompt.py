"""
Operator prompts with a bounded wait.

click's own prompts block forever; provisioning often runs from
cloud-init or a pipe, so every question here has a timeout and a
default of "no".
"""

from __future__ import annotations

import select
import sys

import click


def timed_confirm(question: str, timeout: float = 30.0) -> bool:
    """Ask a yes/no question, answering "no" on timeout or empty input.

    Non-interactive stdin is never read and counts as "no".
    """
    if not sys.stdin.isatty():
        return False

    click.echo(f"{question} [y/N] (auto-no in {int(timeout)}s): ", nl=False)
    ready, _, _ = select.select([sys.stdin], [], [], timeout)
    if not ready:
        click.echo()
        return False

    answer = sys.stdin.readline().strip().lower()
    return answer in ("y", "yes")
