"""
Tests for geosite / geoip downloads with mirror fallback.
"""

from pathlib import Path

from xrayr_setup.adapters.mock import MockDownloader
from xrayr_setup.core.services.rule_data import fetch_rule_data_step, fetch_with_fallback

MIRRORS = ["https://m1/geosite.dat", "https://m2/geosite.dat", "https://m3/geosite.dat"]


class TestFetchWithFallback:
    def test_first_success_wins(self, tmp_path: Path):
        dl = MockDownloader({MIRRORS[1]: b"second", MIRRORS[2]: b"third"})
        dest = tmp_path / "XrayR" / "geosite.dat"
        assert fetch_with_fallback(dl, MIRRORS, dest) == MIRRORS[1]
        assert dest.read_bytes() == b"second"
        assert dl.attempts == MIRRORS[:2]

    def test_mirror_copy_identical(self, tmp_path: Path):
        dl = MockDownloader({MIRRORS[2]: b"\x00\x01payload"})
        dest = tmp_path / "XrayR" / "geosite.dat"
        mirror = tmp_path / "V2bX" / "geosite.dat"
        assert fetch_with_fallback(dl, MIRRORS, dest, mirror) == MIRRORS[2]
        assert mirror.read_bytes() == dest.read_bytes() == b"\x00\x01payload"

    def test_all_fail(self, tmp_path: Path):
        dl = MockDownloader()
        dest = tmp_path / "geosite.dat"
        mirror = tmp_path / "V2bX" / "geosite.dat"
        assert fetch_with_fallback(dl, MIRRORS, dest, mirror) is None
        assert dl.attempts == MIRRORS
        assert not dest.exists()
        assert not mirror.exists()


class TestFetchRuleDataStep:
    def test_both_files_in_both_dirs(self, make_ctx, settings, downloader):
        urls = settings.urls
        downloader.files[urls.geosite_mirrors[0]] = b"site"
        downloader.files[urls.geoip] = b"ip"
        receipt = fetch_rule_data_step(make_ctx())
        assert receipt.ok
        assert receipt.warnings == []
        for directory in (settings.paths.xrayr_dir, settings.paths.v2bx_dir):
            assert (directory / "geosite.dat").read_bytes() == b"site"
            assert (directory / "geoip.dat").read_bytes() == b"ip"

    def test_failures_are_warnings(self, make_ctx, settings):
        receipt = fetch_rule_data_step(make_ctx())
        assert receipt.ok
        assert len(receipt.warnings) == 2
        assert not (settings.paths.v2bx_dir / "geosite.dat").exists()
