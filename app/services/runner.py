"""
Computation runner: the external vanity-key miner.

The job queue only needs ``ComputationRunner.run(base_key, prefix)``;
``NanoVanityRunner`` binds that to a ``nano-vanity`` style process
invoked as::

    <command...> --simple-output <prefix> --public-offset <base_key>

The process prints the mined private key as the first
whitespace-delimited token of its first output line.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from typing import Protocol

from app.core.constants import (
    BASE_KEY_PATTERN,
    RUNNER_OFFSET_FLAG,
    RUNNER_OUTPUT_FLAG,
)
from app.core.exceptions import ComputationFailed, LaunchFailed

logger = logging.getLogger(__name__)


class ComputationRunner(Protocol):
    """Anything that can mine a key for a (base key, prefix) pair."""

    async def run(self, base_key: str, prefix: str) -> str:
        """Return the mined result key or raise ``ComputationError``."""
        ...


def parse_runner_output(output: str) -> str:
    """Extract the result key from raw runner output.

    Args:
        output: Everything the runner wrote to stdout.

    Returns:
        The 64-character hex result key.

    Raises:
        ComputationFailed: If no valid key leads the first line.
    """
    lines = output.splitlines()
    tokens = lines[0].split() if lines else []
    key = tokens[0] if tokens else ""
    if not BASE_KEY_PATTERN.match(key):
        raise ComputationFailed(
            f"nano-vanity returned invalid key. Result: {output!r}",
        )
    return key


class NanoVanityRunner:
    """Run the miner as a subprocess, one invocation per job."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        timeout: float | None = None,
    ) -> None:
        if not command:
            raise ValueError("command must name an executable")
        self._command = list(command)
        self._timeout = timeout

    def build_args(self, base_key: str, prefix: str) -> list[str]:
        """Return the full argv for mining *prefix* off *base_key*."""
        return [
            *self._command,
            RUNNER_OUTPUT_FLAG,
            prefix,
            RUNNER_OFFSET_FLAG,
            base_key,
        ]

    async def run(self, base_key: str, prefix: str) -> str:
        """Spawn the miner and wait for its single result.

        The miner is killed if the wait is cancelled or times out.

        Args:
            base_key: Validated base public key.
            prefix: Validated, normalized prefix.

        Returns:
            The mined result key.

        Raises:
            LaunchFailed: If the process cannot be started.
            ComputationFailed: On timeout, non-zero exit, or output
                without a valid key.
        """
        args = self.build_args(base_key, prefix)
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise LaunchFailed(f"Could not start {args[0]!r}: {exc}") from exc

        try:
            stdout, _ = await asyncio.wait_for(
                proc.communicate(),
                timeout=self._timeout,
            )
        except TimeoutError as exc:
            raise ComputationFailed(
                f"nano-vanity timed out after {self._timeout}s",
            ) from exc
        finally:
            # Timed out or cancelled: the miner must not outlive its job.
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()

        output = stdout.decode(errors="replace")
        if proc.returncode != 0:
            raise ComputationFailed(
                f"nano-vanity exited with status {proc.returncode}. "
                f"Result: {output!r}",
            )
        key = parse_runner_output(output)
        logger.info("Mining complete for prefix %s", prefix)
        return key
