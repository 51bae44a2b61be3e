import asyncio
import os
from typing import IO

import psutil

from finality_harness.logging import Logger

from .logging_models import ServiceWarning
from .managed_service import ManagedService
from .probes import tcp_probe


class ProcessService(ManagedService):
    """
    A managed service backed by a local subprocess.

    Output is appended to <working_directory>/<name>.log. Readiness is a TCP
    connect to the service's listener. Shutdown terminates the whole
    process tree and kills whatever is left after the grace period.
    """

    def __init__(
        self,
        name: str,
        command: list[str],
        host: str,
        port: int,
        working_directory: str | None = None,
        env: dict[str, str] | None = None,
        stop_grace_period: float = 5.0,
        logger: Logger | None = None,
    ) -> None:
        super().__init__(name, logger=logger)
        self.command = command
        self.host = host
        self.port = port
        self.working_directory = working_directory
        self.env = env
        self.stop_grace_period = stop_grace_period

        self._process: asyncio.subprocess.Process | None = None
        self._output: IO[bytes] | None = None

    @property
    def pid(self) -> int | None:
        if self._process is None:
            return None

        return self._process.pid

    @property
    def output_path(self) -> str | None:
        if self.working_directory is None:
            return None

        return os.path.join(self.working_directory, f"{self.name}.log")

    async def _prepare(self) -> None:
        """Hook for one-off setup run before the process is spawned."""
        return None

    async def _launch(self) -> None:
        await self._prepare()

        if output_path := self.output_path:
            self._output = open(output_path, "ab")

        self._process = await asyncio.create_subprocess_exec(
            *self.command,
            stdout=self._output or asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.STDOUT,
            cwd=self.working_directory,
            env=self.env,
        )

    async def _probe(self) -> bool:
        if self._process is None:
            raise RuntimeError(f"{self.name} has not been launched")

        if self._process.returncode is not None:
            raise RuntimeError(
                f"{self.name} exited with code {self._process.returncode}"
            )

        return await tcp_probe(self.host, self.port)

    async def _shutdown(self) -> None:
        try:
            if self._process is not None and self._process.returncode is None:
                await self._terminate_tree(self._process.pid)
                await self._process.wait()

        finally:
            if self._output is not None:
                self._output.close()
                self._output = None

    async def _terminate_tree(self, pid: int) -> None:
        try:
            parent = psutil.Process(pid)
            processes = [parent, *parent.children(recursive=True)]

        except psutil.NoSuchProcess:
            return

        for process in processes:
            try:
                process.terminate()

            except psutil.NoSuchProcess:
                continue

        loop = asyncio.get_running_loop()
        _, alive = await loop.run_in_executor(
            None,
            lambda: psutil.wait_procs(processes, timeout=self.stop_grace_period),
        )

        for process in alive:
            await self._logger.log(
                ServiceWarning(
                    message=f"Killing pid {process.pid} of {self.name} after {self.stop_grace_period}s grace period",
                    service_name=self.name,
                    state=self.state.value,
                )
            )

            try:
                process.kill()

            except psutil.NoSuchProcess:
                continue
