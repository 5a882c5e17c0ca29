"""
Periodic exchange rate refresh.

Runs one background asyncio task that fetches immediately and then every
``interval`` seconds. Stopping cancels the task; a fetch already in flight
when ``refresh_now`` is called is not aborted.
"""

import asyncio
import contextlib
from datetime import datetime, timezone
from typing import Optional

from fxwidget.core.config import settings
from fxwidget.core.logging import get_logger
from fxwidget.services.exchange_widget_service import ExchangeWidgetService

logger = get_logger(__name__)


class RateRefreshScheduler:
    """Cancellable scheduled task that keeps the widget's rate table fresh."""

    def __init__(self, widget: ExchangeWidgetService, interval: Optional[float] = None):
        self.widget = widget
        self.interval = settings.RATES_REFRESH_INTERVAL_SECONDS if interval is None else interval
        self._task: Optional[asyncio.Task] = None
        self.last_run: Optional[datetime] = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the refresh loop on the running event loop."""
        if self.running:
            return
        logger.info(f"Starting rate refresh every {self.interval}s")
        self._task = asyncio.create_task(self._run(), name="rate-refresh")

    async def stop(self) -> None:
        """Cancel the refresh loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Rate refresh stopped")

    async def refresh_now(self) -> bool:
        """Fetch on demand without resetting the timer."""
        return await self._tick()

    async def _tick(self) -> bool:
        self.last_run = datetime.now(timezone.utc)
        self.runs += 1
        return await self.widget.fetch_exchange_rates()

    async def _run(self) -> None:
        while True:
            try:
                await self._tick()
            except Exception as e:
                # Keep the timer alive; the next tick is the only recovery
                logger.exception(f"Scheduled rate refresh crashed: {e}")
            await asyncio.sleep(self.interval)
