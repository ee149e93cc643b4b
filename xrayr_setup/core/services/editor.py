"""
Editor preferences: a few vim defaults for the root account.
"""

from __future__ import annotations

import logging
from pathlib import Path

from xrayr_setup.core.engine.executor import StepContext
from xrayr_setup.core.models.action import Receipt

logger = logging.getLogger(__name__)

VIM_DIRECTIVES = ("set mouse-=a", "set paste", "syntax on")


def ensure_lines(path: Path, directives: tuple[str, ...] = VIM_DIRECTIVES) -> list[str]:
    """Append each directive unless a line already starts with it.

    Creates the file if absent.

    Returns:
        The directives that were appended.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(exist_ok=True)
    content = path.read_text(encoding="utf-8")
    existing = content.splitlines()

    missing = [d for d in directives if not any(line.startswith(d) for line in existing)]
    if missing:
        with open(path, "a", encoding="utf-8") as f:
            if content and not content.endswith("\n"):
                f.write("\n")
            for directive in missing:
                f.write(directive + "\n")
    return missing


def configure_editor_step(ctx: StepContext) -> Receipt:
    vimrc = ctx.settings.paths.vimrc.expanduser()
    try:
        added = ensure_lines(vimrc)
    except OSError as e:
        return Receipt.failure(step="editor", error=f"Cannot update {vimrc}: {e}")
    logger.info("Vim configuration done")
    return Receipt.success(step="editor", metadata={"added": added})
