"""
Tests for kernel tuning: sysctl.conf rendering, backups and verification.
"""

from datetime import datetime
from pathlib import Path

from xrayr_setup.core.services.backup import backup_file, list_backups
from xrayr_setup.core.services.sysctl import (
    CONGESTION_KEY,
    IPV6_DISABLE_KEY,
    render_sysctl_conf,
    tune_kernel_step,
    write_sysctl_conf,
)


def _kernel_ok(runner) -> None:
    runner.set_response(["sysctl", "-n", CONGESTION_KEY], stdout="bbr\n")
    runner.set_response(["sysctl", "-n", IPV6_DISABLE_KEY], stdout="1\n")


class TestRenderSysctlConf:
    def test_contains_bbr_and_ipv6(self):
        text = render_sysctl_conf()
        assert "net.core.default_qdisc = fq" in text
        assert "net.ipv4.tcp_congestion_control = bbr" in text
        assert "net.ipv6.conf.lo.disable_ipv6 = 1" in text
        assert "net.ipv4.tcp_rmem = 4096 87380 33554432" in text

    def test_keys_unique(self):
        keys = [
            line.split("=")[0].strip()
            for line in render_sysctl_conf().splitlines()
            if line and not line.startswith("#")
        ]
        assert len(keys) == len(set(keys))


class TestBackupFile:
    def test_missing_file(self, tmp_path: Path):
        assert backup_file(tmp_path / "nope") is None

    def test_same_second_gets_suffix(self, tmp_path: Path):
        target = tmp_path / "sysctl.conf"
        target.write_text("a = 1\n")
        now = datetime(2026, 10, 17, 12, 0, 0)
        first = backup_file(target, now)
        second = backup_file(target, now)
        assert first.name == "sysctl.conf.bak.20261017120000"
        assert second.name == "sysctl.conf.bak.20261017120000.1"
        assert first.read_text() == "a = 1\n"


class TestWriteSysctlConf:
    def test_fresh_file_has_no_backup(self, tmp_path: Path):
        conf = tmp_path / "sysctl.conf"
        assert write_sysctl_conf(conf) is None
        assert conf.read_text() == render_sysctl_conf()

    def test_existing_content_preserved_in_backup(self, tmp_path: Path):
        conf = tmp_path / "sysctl.conf"
        conf.write_text("vm.swappiness = 10\n")
        backup = write_sysctl_conf(conf, datetime(2026, 1, 2, 3, 4, 5))
        assert backup.read_text() == "vm.swappiness = 10\n"
        assert conf.read_text() == render_sysctl_conf()


class TestTuneKernelStep:
    def test_success(self, make_ctx, runner, settings):
        _kernel_ok(runner)
        receipt = tune_kernel_step(make_ctx())
        assert receipt.ok
        assert receipt.warnings == []
        assert receipt.metadata["ipv6_disabled"] is True
        assert ["sysctl", "-p", str(settings.paths.sysctl_conf)] in runner.call_log

    def test_repeated_runs_are_stable(self, make_ctx, runner, settings):
        _kernel_ok(runner)
        conf = settings.paths.sysctl_conf
        conf.write_text("# distro default\n")
        ctx = make_ctx()

        tune_kernel_step(ctx)
        after_first = conf.read_text()
        assert len(list_backups(conf)) == 1

        tune_kernel_step(ctx)
        assert conf.read_text() == after_first
        assert len(list_backups(conf)) == 2

    def test_bbr_unavailable_is_warning(self, make_ctx, runner):
        runner.set_response(["sysctl", "-n", CONGESTION_KEY], stdout="cubic\n")
        runner.set_response(["sysctl", "-n", IPV6_DISABLE_KEY], stdout="1\n")
        receipt = tune_kernel_step(make_ctx())
        assert receipt.ok
        assert any("BBR" in w for w in receipt.warnings)

    def test_ipv6_still_enabled_is_warning(self, make_ctx, runner):
        runner.set_response(["sysctl", "-n", CONGESTION_KEY], stdout="bbr\n")
        runner.set_response(["sysctl", "-n", IPV6_DISABLE_KEY], stdout="0\n")
        receipt = tune_kernel_step(make_ctx())
        assert receipt.ok
        assert "IPv6 is still enabled" in receipt.warnings
        assert receipt.metadata["ipv6_disabled"] is False

    def test_sysctl_apply_errors_do_not_fail(self, make_ctx, runner):
        _kernel_ok(runner)
        runner.set_failure(["sysctl", "-p"], returncode=255)
        receipt = tune_kernel_step(make_ctx())
        assert receipt.ok
        assert any("exit 255" in w for w in receipt.warnings)
