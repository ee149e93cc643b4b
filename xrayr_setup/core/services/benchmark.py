"""
Benchmark: optional FastBench run at the end of provisioning.

Whether to run is decided up front (``--bench`` / ``--no-bench`` or the
``benchmark`` setting). Only the ``ask`` mode prompts, through the
context's confirm callback, which bounds the wait.
"""

from __future__ import annotations

import logging

from xrayr_setup.core.engine.executor import StepContext
from xrayr_setup.core.models.action import Receipt

logger = logging.getLogger(__name__)

BENCH_SCRIPT = "fastbench.sh"
PROMPT = "Run a server benchmark?"


def should_run_benchmark(ctx: StepContext) -> bool:
    mode = ctx.settings.benchmark
    if mode == "yes":
        return True
    if mode == "no":
        return False
    return ctx.confirm(PROMPT)


def run_benchmark_step(ctx: StepContext) -> Receipt:
    if not should_run_benchmark(ctx):
        logger.info("Benchmark skipped")
        return Receipt.skip(step="benchmark", reason="declined")

    logger.info("Starting benchmark...")
    work_dir = ctx.settings.paths.work_dir
    script = (work_dir / BENCH_SCRIPT).absolute()

    if not ctx.downloader.fetch(ctx.settings.urls.benchmark, script):
        msg = "Benchmark script download failed, skipping this step"
        logger.warning(msg)
        return Receipt.skip(step="benchmark", reason=msg, warnings=[msg])

    try:
        script.chmod(0o755)
        result = ctx.runner.run(["bash", str(script)], capture=False, cwd=work_dir)
    finally:
        script.unlink(missing_ok=True)

    warnings: list[str] = []
    code = result.returncode
    if code == 0:
        logger.info("✓ Benchmark finished")
    elif code == 1:
        logger.info("✓ Benchmark finished with warnings")
    else:
        msg = f"Benchmark exited abnormally (exit code: {code}), continuing"
        logger.warning(msg)
        warnings.append(msg)

    return Receipt.success(step="benchmark", warnings=warnings, metadata={"exit_code": code})
