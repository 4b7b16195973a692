"""MCP server process management."""

import asyncio
import logging
import os
import shlex
import signal
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Optional

from ..config.models import ServerDefinition

logger = logging.getLogger(__name__)


class ProcessStatus(Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    FAILED = "failed"


class MCPProcess:
    def __init__(self, server: ServerDefinition, install_path: Path):
        self.server = server
        self.install_path = install_path
        self.process: Optional[asyncio.subprocess.Process] = None
        self.status = ProcessStatus.STOPPED
        self.start_time: Optional[datetime] = None
        self._relay_tasks = []

    @property
    def server_id(self) -> str:
        return self.server.id

    async def start(self, grace_period: float = 2.0) -> None:
        """Spawn the server and wait for it to settle."""
        if self.status != ProcessStatus.STOPPED:
            return

        self.status = ProcessStatus.STARTING
        logger.info(f"Starting {self.server.display_name} on port {self.server.port}...")

        command, *args = shlex.split(self.server.command_line())
        env = dict(os.environ, PORT=str(self.server.port))

        try:
            self.process = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=self.install_path,
                env=env,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self.status = ProcessStatus.FAILED
            logger.error(f"Failed to start {self.server.display_name}: {e}")
            raise

        self._relay_tasks = [
            asyncio.create_task(self._relay(self.process.stdout, logging.INFO)),
            asyncio.create_task(self._relay(self.process.stderr, logging.ERROR)),
        ]

        # Give the server time to start
        await asyncio.sleep(grace_period)

        if self.process.returncode is not None:
            self.status = ProcessStatus.FAILED
            raise RuntimeError(
                f"{self.server.display_name} exited with code "
                f"{self.process.returncode}"
            )

        self.status = ProcessStatus.RUNNING
        self.start_time = datetime.now()
        logger.info(f"{self.server.display_name} started")

    async def _relay(self, stream: asyncio.StreamReader, level: int) -> None:
        """Forward child output to the log, prefixed with the server id."""
        while True:
            line = await stream.readline()
            if not line:
                break
            logger.log(level, f"[{self.server_id}] {line.decode(errors='replace').rstrip()}")

    async def stop(self, timeout: float = 5.0) -> None:
        """Terminate the process, killing it if it does not exit in time."""
        if self.process is None or self.status not in (
            ProcessStatus.RUNNING,
            ProcessStatus.STARTING,
            ProcessStatus.FAILED,
        ):
            return

        self.status = ProcessStatus.STOPPING
        logger.info(f"Stopping {self.server_id}...")

        if self.process.returncode is None:
            try:
                self.process.terminate()
            except ProcessLookupError:
                pass
            try:
                await asyncio.wait_for(self.process.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning(f"{self.server_id} did not stop, killing it")
                self.process.kill()
                await self.process.wait()

        for task in self._relay_tasks:
            task.cancel()
        await asyncio.gather(*self._relay_tasks, return_exceptions=True)
        self._relay_tasks = []

        if self.process.returncode not in (0, None, -signal.SIGTERM):
            logger.warning(
                f"{self.server.display_name} exited with code {self.process.returncode}"
            )
        self.status = ProcessStatus.STOPPED
        logger.info(f"{self.server_id} stopped")

    @property
    def returncode(self) -> Optional[int]:
        return self.process.returncode if self.process else None

    @property
    def uptime(self) -> Optional[timedelta]:
        """Get process uptime."""
        if self.start_time and self.status == ProcessStatus.RUNNING:
            return datetime.now() - self.start_time
        return None
