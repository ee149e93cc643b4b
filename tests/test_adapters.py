"""
Tests for the command runner and downloader adapters and their mocks.
"""

import sys
from pathlib import Path

from xrayr_setup.adapters.base import CommandResult
from xrayr_setup.adapters.http.download import UrllibDownloader, _fmt_size
from xrayr_setup.adapters.mock import MockCommandRunner, MockDownloader
from xrayr_setup.adapters.shell.command import SubprocessRunner

# ── Mock Tests ───────────────────────────────────────────────────────


class TestMockCommandRunner:
    def test_default_success(self):
        mock = MockCommandRunner()
        result = mock.run(["apt-get", "update"])
        assert result.ok
        assert mock.call_log == [["apt-get", "update"]]

    def test_longest_prefix_wins(self):
        mock = MockCommandRunner()
        mock.set_failure(["systemctl"], returncode=1)
        mock.set_response(["systemctl", "is-active"], stdout="active\n")
        assert mock.run(["systemctl", "is-active", "gost"]).first_line == "active"
        assert not mock.run(["systemctl", "start", "gost"]).ok

    def test_which_and_reset(self):
        mock = MockCommandRunner({"gost": "/usr/local/bin/gost"})
        assert mock.which("gost") == "/usr/local/bin/gost"
        assert mock.which("XrayR") is None
        mock.run(["true"])
        mock.reset()
        assert mock.call_count == 0

    def test_env_overrides_recorded(self):
        mock = MockCommandRunner()
        mock.run(["apt-get", "install"], env_overrides={"DEBIAN_FRONTEND": "noninteractive"})
        assert mock.env_log == [{"DEBIAN_FRONTEND": "noninteractive"}]


class TestMockDownloader:
    def test_known_and_unknown(self, tmp_path: Path):
        dl = MockDownloader({"https://a/x": b"body"})
        assert dl.fetch("https://a/x", tmp_path / "x")
        assert not dl.fetch("https://a/y", tmp_path / "y")
        assert (tmp_path / "x").read_bytes() == b"body"
        assert not (tmp_path / "y").exists()
        assert dl.attempts == ["https://a/x", "https://a/y"]


# ── Subprocess Tests ─────────────────────────────────────────────────


class TestSubprocessRunner:
    def test_captures_output(self):
        result = SubprocessRunner().run([sys.executable, "-c", "print('hi')"])
        assert result.ok
        assert result.first_line == "hi"

    def test_non_zero_exit(self):
        result = SubprocessRunner().run([sys.executable, "-c", "raise SystemExit(3)"])
        assert result.returncode == 3
        assert result.error is None
        assert not result.ok

    def test_missing_binary(self):
        result = SubprocessRunner().run(["definitely-not-a-real-binary-xyz"])
        assert result.returncode == 127
        assert result.error

    def test_env_overrides(self):
        result = SubprocessRunner().run(
            [sys.executable, "-c", "import os; print(os.environ['XRAYR_PROBE'])"],
            env_overrides={"XRAYR_PROBE": "42"},
        )
        assert result.first_line == "42"

    def test_timeout(self):
        result = SubprocessRunner().run(
            [sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2,
        )
        assert result.returncode == -1
        assert "timed out" in result.error


class TestCommandResult:
    def test_first_line_empty(self):
        assert CommandResult().first_line == ""


# ── Downloader Tests ─────────────────────────────────────────────────


class TestUrllibDownloader:
    def test_file_url(self, tmp_path: Path):
        src = tmp_path / "geoip.dat"
        src.write_bytes(b"\x01\x02data")
        dest = tmp_path / "out" / "geoip.dat"
        assert UrllibDownloader(timeout=5).fetch(src.as_uri(), dest)
        assert dest.read_bytes() == b"\x01\x02data"
        assert not dest.with_name("geoip.dat.part").exists()

    def test_failure_keeps_existing_file(self, tmp_path: Path):
        dest = tmp_path / "geosite.dat"
        dest.write_bytes(b"old")
        missing = (tmp_path / "missing.dat").as_uri()
        assert not UrllibDownloader(timeout=5).fetch(missing, dest)
        assert dest.read_bytes() == b"old"
        assert not dest.with_name("geosite.dat.part").exists()

    def test_fmt_size(self):
        assert _fmt_size(512) == "512.0 B"
        assert _fmt_size(2048) == "2.0 KB"
