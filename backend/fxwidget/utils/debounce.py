"""
Debounce helper for the asyncio event loop.
"""

import asyncio
import inspect
from typing import Any, Callable, Optional, Tuple, Dict


class Debouncer:
    """
    Coalesce rapid calls into one invocation after ``wait`` seconds of quiet.

    Every call cancels the pending invocation and schedules a new one with the
    latest arguments. Coroutine functions are run as tasks on the same loop.
    """

    def __init__(self, func: Callable[..., Any], wait: float):
        self.func = func
        self.wait = wait
        self._handle: Optional[asyncio.TimerHandle] = None
        self._args: Tuple[Any, ...] = ()
        self._kwargs: Dict[str, Any] = {}
        self._tasks: set = set()

    @property
    def pending(self) -> bool:
        """True while an invocation is scheduled but has not run yet."""
        return self._handle is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        self._args = args
        self._kwargs = kwargs
        self._handle = loop.call_later(self.wait, self._fire)

    def cancel(self) -> None:
        """Drop the pending invocation, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def flush(self) -> None:
        """Run the pending invocation now instead of waiting for the timer."""
        if self._handle is None:
            return
        self.cancel()
        result = self.func(*self._args, **self._kwargs)
        if inspect.isawaitable(result):
            await result

    def _fire(self) -> None:
        self._handle = None
        result = self.func(*self._args, **self._kwargs)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
