import asyncio
from abc import ABC, abstractmethod
from typing import Callable


class TimerHandle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        ...


class Scheduler(ABC):
    """Source of cancelable delayed callbacks."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioScheduler(Scheduler):
    """Runs callbacks on the running event loop."""

    def call_later(self, delay, callback):
        # asyncio.TimerHandle already provides cancel()
        return asyncio.get_running_loop().call_later(delay, callback)


TimerHandle.register(asyncio.TimerHandle)
