"""
Shared test fixtures and configuration.
"""

import logging
from datetime import datetime
from pathlib import Path

import pytest

from xrayr_setup.adapters.mock import MockCommandRunner, MockDownloader
from xrayr_setup.core.engine.executor import StepContext
from xrayr_setup.core.models.host import HostProfile, OSFamily
from xrayr_setup.core.models.settings import Paths, Settings


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def sandbox(tmp_path: Path) -> Path:
    """A fake filesystem root with /etc in place."""
    (tmp_path / "etc").mkdir()
    (tmp_path / "work").mkdir()
    (tmp_path / "root").mkdir()
    return tmp_path


@pytest.fixture
def settings(sandbox: Path) -> Settings:
    """Settings with every path redirected into the sandbox."""
    etc = sandbox / "etc"
    return Settings(
        paths=Paths(
            os_root=sandbox,
            hosts_file=etc / "hosts",
            sysctl_conf=etc / "sysctl.conf",
            xrayr_dir=etc / "XrayR",
            v2bx_dir=etc / "V2bX",
            gost_dir=etc / "gost",
            systemd_dir=etc / "systemd" / "system",
            vimrc=sandbox / "root" / ".vimrc",
            work_dir=sandbox / "work",
        ),
        benchmark="no",
        config_wait_seconds=0,
    )


@pytest.fixture
def runner() -> MockCommandRunner:
    return MockCommandRunner()


@pytest.fixture
def downloader() -> MockDownloader:
    return MockDownloader()


@pytest.fixture
def make_ctx(settings: Settings, runner: MockCommandRunner, downloader: MockDownloader):
    """Build a StepContext for a given OS family (mocks shared with fixtures)."""

    def _make(family: OSFamily = OSFamily.UBUNTU, **overrides) -> StepContext:
        host = HostProfile(os_family=family, os_id=family.value, hostname="node-1")
        kwargs = dict(
            host=host,
            settings=settings,
            runner=runner,
            downloader=downloader,
            sleep=lambda _s: None,
            clock=lambda: datetime(2026, 10, 17, 12, 0, 0),
        )
        kwargs.update(overrides)
        return StepContext(**kwargs)

    return _make
