"""
Audit rules: point XrayR at the block list and download it.

The XrayR installer generates ``config.yml`` with the ``RuleListPath``
option commented out. Patching turns that placeholder into an active
setting; running it again leaves the file as it is.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from xrayr_setup.core.engine.executor import StepContext
from xrayr_setup.core.models.action import Receipt

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"RuleListPath: # /etc/XrayR/rulelist[^\r\n]*")
ACTIVE_LINE = "RuleListPath: /etc/XrayR/rulelist"


def find_xrayr_configs(xrayr_dir: Path) -> list[Path]:
    """Generated configs: ``<parent>/XrayR*/config.yml``."""
    return sorted(xrayr_dir.parent.glob(f"{xrayr_dir.name}*/config.yml"))


def patch_rule_list_path(text: str) -> tuple[str, int]:
    """Replace the commented ``RuleListPath`` placeholder.

    Returns:
        The new text and the number of replacements.
    """
    return PLACEHOLDER_RE.subn(ACTIVE_LINE, text)


def patch_config_file(path: Path) -> str:
    """Patch one config file in place.

    Returns:
        ``"patched"``, ``"active"`` (already enabled), ``"missing"`` (no
        placeholder) or ``"error"``.
    """
    try:
        # newline="" keeps CRLF endings byte-for-byte
        with open(path, encoding="utf-8", newline="") as f:
            text = f.read()
        new_text, count = patch_rule_list_path(text)
        if count:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(new_text)
            return "patched"
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Cannot patch %s: %s", path, e)
        return "error"

    if re.search(rf"^\s*{re.escape(ACTIVE_LINE)}\s*$", text, re.MULTILINE):
        return "active"
    return "missing"


def configure_audit_rules_step(ctx: StepContext) -> Receipt:
    paths = ctx.settings.paths

    # Give the freshly started XrayR service time to write its config
    ctx.sleep(ctx.settings.config_wait_seconds)

    configs = find_xrayr_configs(paths.xrayr_dir)
    if not configs:
        msg = "XrayR config file not found, skipping audit rules"
        logger.warning(msg)
        return Receipt.skip(step="audit-rules", reason=msg, warnings=[msg])

    warnings: list[str] = []
    results = {str(path): patch_config_file(path) for path in configs}
    if not any(r in ("patched", "active") for r in results.values()):
        msg = "RuleListPath placeholder not found in XrayR config, left unchanged"
        logger.warning(msg)
        warnings.append(msg)

    if ctx.downloader.fetch(ctx.settings.urls.rulelist, paths.rulelist):
        logger.info("Audit rules configured")
    else:
        msg = "Audit rule list download failed"
        logger.warning(msg)
        warnings.append(msg)

    return Receipt.success(step="audit-rules", warnings=warnings, metadata={"configs": results})
