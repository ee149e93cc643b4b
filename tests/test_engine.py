"""
Tests for the step executor and its failure policies.
"""

from xrayr_setup.core.engine.executor import ProvisionStep, run_steps
from xrayr_setup.core.models.action import Receipt
from xrayr_setup.core.models.host import OSFamily


def _ok(name):
    return lambda ctx: Receipt.success(step=name)


def _fail(name):
    return lambda ctx: Receipt.failure(step=name, error=f"{name} broke")


class TestReceipt:
    def test_constructors(self):
        assert Receipt.success(step="a").ok
        assert Receipt.failure(step="a", error="x").failed
        skipped = Receipt.skip(step="a", reason="not needed")
        assert skipped.status == "skipped"
        assert skipped.output == "not needed"


class TestRunSteps:
    def test_all_ok(self, make_ctx):
        steps = [ProvisionStep("a", "A", _ok("a")), ProvisionStep("b", "B", _ok("b"))]
        report = run_steps(steps, make_ctx())
        assert report.status == "ok"
        assert report.total == report.succeeded == 2
        assert not report.aborted

    def test_warn_policy_continues(self, make_ctx):
        steps = [
            ProvisionStep("a", "A", _fail("a"), policy="warn"),
            ProvisionStep("b", "B", _ok("b")),
        ]
        report = run_steps(steps, make_ctx())
        assert report.failed == 1
        assert report.get("b").ok
        assert report.status == "partial"

    def test_fatal_policy_stops(self, make_ctx):
        reached = []
        steps = [
            ProvisionStep("a", "A", _fail("a"), policy="fatal"),
            ProvisionStep("b", "B", lambda ctx: reached.append("b") or Receipt.success(step="b")),
        ]
        report = run_steps(steps, make_ctx())
        assert report.aborted_by == "a"
        assert report.status == "aborted"
        assert reached == []
        assert report.get("b") is None

    def test_skip_on_host(self, make_ctx):
        steps = [
            ProvisionStep(
                "kernel", "Kernel", _fail("kernel"), policy="fatal",
                skip_on=lambda host: host.is_alpine, skip_reason="minimal kernel",
            ),
        ]
        report = run_steps(steps, make_ctx(OSFamily.ALPINE))
        assert report.skipped == 1
        assert report.get("kernel").output == "minimal kernel"
        assert not report.aborted

    def test_exception_becomes_failure(self, make_ctx):
        def explode(ctx):
            raise KeyError("missing")

        report = run_steps([ProvisionStep("x", "X", explode)], make_ctx())
        receipt = report.get("x")
        assert receipt.failed
        assert "Unexpected error" in receipt.error
        assert receipt.started_at and receipt.ended_at

    def test_receipt_named_after_step(self, make_ctx):
        report = run_steps([ProvisionStep("real", "R", _ok("other"))], make_ctx())
        assert report.receipts[0].step == "real"

    def test_to_dict(self, make_ctx):
        steps = [ProvisionStep("a", "A", lambda ctx: Receipt.success(step="a", warnings=["w"]))]
        data = run_steps(steps, make_ctx()).to_dict()
        assert data["status"] == "partial"
        assert data["receipts"][0]["warnings"] == ["w"]
