"""Remote script execution through the system ``ssh`` client."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from loguru import logger

from pgdb.core.exceptions import RemoteShellLaunchError

REMOTE_COMMAND = "bash -s"


@runtime_checkable
class RemoteShellExecutor(Protocol):
    async def run_script(self, target: str, script: str) -> int: ...


class SSHExecutor:
    """Streams a script to ``ssh <target> bash -s`` and returns its exit code.

    stdout/stderr are inherited, so remote progress shows up live on the
    operator's terminal instead of being buffered.
    """

    def __init__(self, binary: str = "ssh", options: Sequence[str] = ()) -> None:
        self._binary = binary
        self._options = tuple(options)
        self._log = logger.bind(component="ssh")

    def command(self, target: str) -> list[str]:
        return [self._binary, *self._options, "--", target, REMOTE_COMMAND]

    async def run_script(self, target: str, script: str) -> int:
        argv = self.command(target)
        self._log.debug("Running {cmd}", cmd=" ".join(argv), host=target)
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=None,
                stderr=None,
            )
        except OSError as e:
            raise RemoteShellLaunchError(f"failed to execute {self._binary}: {e}") from e

        assert proc.stdin is not None
        try:
            proc.stdin.write(script.encode())
            await proc.stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # ssh exited before reading all input; the exit code is reported below
            self._log.debug("ssh closed stdin before the script was fully sent")
        finally:
            proc.stdin.close()

        code = await proc.wait()
        self._log.debug("ssh exited with {code}", code=code)
        return code
