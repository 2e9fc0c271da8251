"""Trailing-edge debounce for event-loop callbacks."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass
class Debouncer:
    """Delay a zero-argument callable until calls stop for ``delay_seconds``.

    Every call cancels the pending timer and schedules a new one on the event
    loop, so the wrapped callable runs at most once per quiet period. Nothing
    is returned to the caller; exceptions raised by the callable surface in
    the loop's exception handler.

    Outside a running event loop there is nothing to schedule on, so the
    callable runs immediately.
    """

    func: Callable[[], object]
    delay_seconds: float
    loop: asyncio.AbstractEventLoop | None = None
    _handle: asyncio.TimerHandle | None = field(default=None, init=False, repr=False)

    def __call__(self) -> None:
        self.cancel()
        loop = self.loop or _running_loop()
        if loop is None:
            self.func()
            return
        self._handle = loop.call_later(self.delay_seconds, self._run)

    @property
    def pending(self) -> bool:
        """Whether a call is scheduled and has not fired yet."""
        return self._handle is not None

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _run(self) -> None:
        self._handle = None
        self.func()


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
