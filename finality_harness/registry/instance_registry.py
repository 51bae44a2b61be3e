import asyncio

from finality_harness.errors import TeardownError
from finality_harness.logging import Logger

from .application_instance import ApplicationInstance
from .logging_models import InstanceError, InstanceInfo


class InstanceRegistry:
    """
    Tracks the live application instances of one test run.

    Concurrency-safe: registration and bulk stop share one lock so an instance
    registered while stop_all() runs is either stopped by it or left for
    the next call.
    """

    def __init__(self, logger: Logger | None = None) -> None:
        self._logger = logger or Logger()
        self._instances: dict[str, ApplicationInstance] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._instances)

    async def register(self, instance: ApplicationInstance) -> None:
        async with self._lock:
            if instance.instance_id in self._instances:
                raise ValueError(
                    f"Instance {instance.instance_id} is already registered"
                )

            self._instances[instance.instance_id] = instance

        await self._logger.log(
            InstanceInfo(
                message=f"Registered instance {instance.key_name}",
                instance_id=instance.instance_id,
                account_address=instance.account_address,
            )
        )

    def all(self) -> list[ApplicationInstance]:
        return list(self._instances.values())

    def running(self) -> list[ApplicationInstance]:
        return [instance for instance in self._instances.values() if instance.running]

    def get(self, instance_id: str) -> ApplicationInstance | None:
        return self._instances.get(instance_id)

    async def stop_all(self) -> None:
        """
        Attempt to stop every running instance, collecting failures.

        Raises:
            TeardownError listing every instance whose stop failed
        """
        errors: list[tuple[str, BaseException]] = []

        async with self._lock:
            for instance in self.running():
                try:
                    await instance.stop()

                except Exception as err:
                    errors.append((instance.key_name, err))
                    await self._logger.log(
                        InstanceError(
                            message=f"Failed to stop instance {instance.key_name}: {err}",
                            instance_id=instance.instance_id,
                            account_address=instance.account_address,
                        )
                    )

        if errors:
            raise TeardownError(errors)
