import asyncio
import random
from typing import Callable

ProgressListener = Callable[[float], None]


class UploadProgress:
    """
    Observable upload progress in percent.

    The value is synthetic: the ingestion endpoint reports nothing until it
    responds, so a ticker estimates progress up to `cap` and `complete()` snaps
    to 100. Between resets the value never decreases.
    """

    def __init__(self, cap: float = 90.0):
        self.cap = cap
        self.value: float = 0.0
        self._listeners: list[ProgressListener] = []

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self.value)

    def reset(self) -> None:
        self.value = 0.0
        self._publish()

    def advance(self, step: float) -> None:
        if step <= 0 or self.value >= self.cap:
            return
        self.value = min(self.value + step, self.cap)
        self._publish()

    def complete(self) -> None:
        self.value = 100.0
        self._publish()


async def simulate(progress: UploadProgress, interval: float = 0.2, max_step: float = 15.0) -> None:
    """Advance `progress` by random steps until cancelled."""
    while True:
        await asyncio.sleep(interval)
        progress.advance(random.uniform(0, max_step))
