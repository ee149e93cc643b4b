"""
Rule data: geosite / geoip files for XrayR and V2bX.

geosite.dat has several mirrors; the first one that answers wins. Each
file lands in the XrayR directory and is then copied verbatim into the
V2bX directory so both panels see identical data.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from xrayr_setup.adapters.base import Downloader
from xrayr_setup.core.engine.executor import StepContext
from xrayr_setup.core.models.action import Receipt

logger = logging.getLogger(__name__)


def fetch_with_fallback(
    downloader: Downloader,
    urls: list[str],
    dest: Path,
    mirror_dest: Path | None = None,
) -> str | None:
    """Try ``urls`` in order until one downloads into ``dest``.

    On success the file is copied to ``mirror_dest`` as well.

    Returns:
        The URL that succeeded, or None if every candidate failed.
    """
    for url in urls:
        if not downloader.fetch(url, dest):
            logger.debug("Mirror failed: %s", url)
            continue
        if mirror_dest is not None:
            mirror_dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(dest, mirror_dest)
        return url
    return None


def fetch_rule_data_step(ctx: StepContext) -> Receipt:
    paths = ctx.settings.paths
    urls = ctx.settings.urls
    warnings: list[str] = []
    sources: dict[str, str | None] = {}

    logger.info("Downloading GeoSite rule data...")
    sources["geosite"] = fetch_with_fallback(
        ctx.downloader,
        urls.geosite_mirrors,
        paths.xrayr_dir / "geosite.dat",
        paths.v2bx_dir / "geosite.dat",
    )
    if sources["geosite"]:
        logger.info("GeoSite rule data downloaded")
    else:
        msg = "All mirrors failed, please download geosite.dat manually"
        logger.warning(msg)
        warnings.append(msg)

    logger.info("Downloading GeoIP rule data...")
    sources["geoip"] = fetch_with_fallback(
        ctx.downloader,
        [urls.geoip],
        paths.xrayr_dir / "geoip.dat",
        paths.v2bx_dir / "geoip.dat",
    )
    if sources["geoip"]:
        logger.info("GeoIP rule data downloaded")
    else:
        msg = "GeoIP download failed, please download geoip.dat manually"
        logger.warning(msg)
        warnings.append(msg)

    return Receipt.success(step="rule-data", warnings=warnings, metadata=sources)
