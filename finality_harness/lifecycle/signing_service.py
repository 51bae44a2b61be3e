import asyncio
import os

from finality_harness.logging import Logger
from finality_harness.models import SigningServiceConfig

from .probes import parse_address
from .process_service import ProcessService


CONFIG_FILENAME = "eotsd.conf"


def override_config_values(
    contents: str,
    overrides: dict[str, dict[str, str]],
) -> str:
    """
    Set keys in an INI style config, keeping every other line as written.

    Keys are matched case-insensitively within their [section]. Keys the
    file lacks are appended to their section, and sections it lacks are
    appended to the end.
    """
    pending = {
        section: {key.lower(): (key, value) for key, value in values.items()}
        for section, values in overrides.items()
    }
    lines: list[str] = []
    section: str | None = None

    def append_missing(name: str | None) -> None:
        for key, value in pending.pop(name, {}).values():
            lines.append(f"{key} = {value}")

    for line in contents.splitlines():
        stripped = line.strip()

        if stripped.startswith("[") and stripped.endswith("]"):
            append_missing(section)
            section = stripped[1:-1].strip()

        elif (
            section in pending
            and "=" in stripped
            and not stripped.startswith((";", "#"))
        ):
            key = stripped.split("=", 1)[0].strip()
            if key.lower() in pending[section]:
                _, value = pending[section].pop(key.lower())
                line = f"{key} = {value}"

        lines.append(line)

    append_missing(section)

    for name, values in pending.items():
        if values:
            lines.extend(["", f"[{name}]"])
            lines.extend(f"{key} = {value}" for key, value in values.values())

    return "\n".join(lines) + "\n"


class SigningService(ProcessService):
    """
    The signing daemon, run as a local process from its own home directory.

    `init` writes the daemon's default config, which is then pointed at the
    allocated RPC listener and metrics port before `start` reads it.
    """

    def __init__(
        self,
        config: SigningServiceConfig,
        binary: str = "eotsd",
        stop_grace_period: float = 5.0,
        logger: Logger | None = None,
    ) -> None:
        host, port = parse_address(config.rpc_listener)

        super().__init__(
            "signing-service",
            [
                binary,
                "start",
                "--home",
                config.home_directory,
                "--rpc-listener",
                config.rpc_listener,
            ],
            host=host,
            port=port,
            working_directory=config.home_directory,
            stop_grace_period=stop_grace_period,
            logger=logger,
        )
        self.binary = binary
        self.config = config

    @property
    def address(self) -> str:
        return self.config.rpc_listener

    @property
    def config_path(self) -> str:
        return os.path.join(self.config.home_directory, CONFIG_FILENAME)

    async def _prepare(self) -> None:
        process = await asyncio.create_subprocess_exec(
            self.binary,
            "init",
            "--home",
            self.config.home_directory,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        _, stderr = await process.communicate()
        if process.returncode != 0:
            raise RuntimeError(
                f"{self.binary} init failed with code {process.returncode}: "
                f"{stderr.decode(errors='replace').strip()}"
            )

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_config)

    def _write_config(self) -> None:
        contents = ""
        if os.path.exists(self.config_path):
            with open(self.config_path) as config_file:
                contents = config_file.read()

        contents = override_config_values(
            contents,
            {
                "Application Options": {"RPCListener": self.config.rpc_listener},
                "metrics": {"Port": str(self.config.metrics_port)},
            },
        )

        with open(self.config_path, "w") as config_file:
            config_file.write(contents)
