"""Tests for the nano-vanity subprocess runner.

The miner is replaced by small ``python -c`` scripts so the real
subprocess plumbing (argv, stdout capture, exit status, timeouts)
is exercised end to end.
"""

from __future__ import annotations

import asyncio
import os
import sys

import pytest

from app.core.exceptions import ComputationFailed, LaunchFailed
from app.services.runner import NanoVanityRunner, parse_runner_output
from tests.conftest import BASE_KEY, RESULT_KEY


def _script_runner(script: str, **kwargs) -> NanoVanityRunner:
    return NanoVanityRunner([sys.executable, "-c", script], **kwargs)


class TestParseRunnerOutput:
    def test_first_token_of_first_line(self):
        output = f"{RESULT_KEY} xrb_1abcdef\nsecond line\n"
        assert parse_runner_output(output) == RESULT_KEY

    def test_leading_whitespace_ignored(self):
        assert parse_runner_output(f"  {RESULT_KEY}\n") == RESULT_KEY

    @pytest.mark.parametrize(
        "output",
        ["", "\n", "not-a-key address\n", RESULT_KEY[:-1] + " x\n"],
    )
    def test_garbled_output_fails(self, output):
        with pytest.raises(ComputationFailed):
            parse_runner_output(output)


class TestBuildArgs:
    def test_flags_follow_configured_command(self):
        runner = NanoVanityRunner(["nano-vanity", "--gpu"])
        assert runner.build_args(BASE_KEY, "1abc.") == [
            "nano-vanity",
            "--gpu",
            "--simple-output",
            "1abc.",
            "--public-offset",
            BASE_KEY,
        ]

    def test_empty_command_rejected(self):
        with pytest.raises(ValueError):
            NanoVanityRunner([])


class TestRun:
    async def test_success(self):
        """The key is read from the miner's stdout."""
        runner = _script_runner(
            "import sys\n"
            "args = sys.argv[1:]\n"
            f"expected = ['--simple-output', '1abc.', '--public-offset', '{BASE_KEY}']\n"
            f"print('{RESULT_KEY} xrb_1abc' if args == expected else 'bad-args')\n",
        )
        assert await runner.run(BASE_KEY, "1abc.") == RESULT_KEY

    async def test_empty_output_fails(self):
        runner = _script_runner("pass")
        with pytest.raises(ComputationFailed):
            await runner.run(BASE_KEY, "1abc.")

    async def test_nonzero_exit_fails(self):
        runner = _script_runner(f"print('{RESULT_KEY}'); raise SystemExit(3)")
        with pytest.raises(ComputationFailed, match="status 3"):
            await runner.run(BASE_KEY, "1abc.")

    async def test_missing_executable_is_launch_failure(self, tmp_path):
        runner = NanoVanityRunner([str(tmp_path / "no-such-miner")])
        with pytest.raises(LaunchFailed):
            await runner.run(BASE_KEY, "1abc.")

    async def test_timeout_kills_miner(self):
        runner = _script_runner("import time; time.sleep(30)", timeout=0.5)
        with pytest.raises(ComputationFailed, match="timed out"):
            await runner.run(BASE_KEY, "1abc.")

    async def test_cancel_kills_miner(self, tmp_path):
        """A cancelled job leaves no miner process behind."""
        pid_file = tmp_path / "miner.pid"
        runner = _script_runner(
            "import os, time\n"
            f"open({str(pid_file)!r}, 'w').write(str(os.getpid()))\n"
            "time.sleep(30)\n",
        )
        task = asyncio.ensure_future(runner.run(BASE_KEY, "1abc."))

        for _ in range(100):
            if pid_file.exists() and pid_file.read_text():
                break
            await asyncio.sleep(0.05)
        pid = int(pid_file.read_text())

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        # Killed and reaped: the pid no longer exists.
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)
