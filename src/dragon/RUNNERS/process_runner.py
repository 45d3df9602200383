# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Execution of external commands with live output forwarding.
"""
import asyncio
import codecs
import contextlib
import logging
import sys
from typing import List, Optional, TextIO

from ..errors import ExecutionError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class ProcessRunner:
    """
    Runs external commands one at a time and forwards their output.
    """
    def __init__(self,
                 name: str = "dragon",
                 stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None):
        """
        Initializes the process runner.

        Args:
            name (str): Prefix used when logging commands.
            stdout (Optional[TextIO]): Stream receiving the command's stdout. Defaults to sys.stdout.
            stderr (Optional[TextIO]): Stream receiving the command's stderr. Defaults to sys.stderr.
        """
        self.name = name
        self._stdout = stdout
        self._stderr = stderr

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr if self._stderr is not None else sys.stderr

    async def run(self, command: List[str], cwd: Optional[str] = None) -> str:
        """
        Runs a command to completion.

        The command is executed directly, never through a shell, so arguments
        are passed verbatim.

        Args:
            command (List[str]): Command and arguments to execute.
            cwd (Optional[str]): Directory to start the process in.

        Returns:
            str: Everything the command wrote to stdout.

        Raises:
            ExecutionError: If the command cannot be started or exits non-zero.
        """
        logger.debug("[%s] Starting command: %s", self.name, " ".join(command))

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug("[%s] Failed to start: %s", self.name, e)
            returncode = 127 if isinstance(e, FileNotFoundError) else 126
            raise ExecutionError(command, returncode, str(e)) from e

        try:
            captured_out, captured_err = await asyncio.gather(
                self._pump(process.stdout, self.stdout),
                self._pump(process.stderr, self.stderr),
            )
            returncode = await process.wait()
        except BaseException:
            # Cancelled or failed while the child still runs: kill and reap it
            if process.returncode is None:
                logger.debug("[%s] Killing process %d", self.name, process.pid)
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
            raise

        if returncode != 0:
            logger.debug("[%s] Command exited with status %d", self.name, returncode)
            raise ExecutionError(command, returncode, captured_err)
        return captured_out

    @staticmethod
    async def _pump(stream: asyncio.StreamReader, sink: TextIO) -> str:
        """
        Copies a pipe into a text stream chunk by chunk, returning everything read.
        """
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        chunks = []
        while True:
            data = await stream.read(CHUNK_SIZE)
            text = decoder.decode(data, final=not data)
            if text:
                chunks.append(text)
                sink.write(text)
                sink.flush()
            if not data:
                break
        return "".join(chunks)
