"""
Health service.
Provides health check functionality.
"""

import time
from typing import Optional

from fxwidget.services.base_service import BaseService
from fxwidget.services.exchange_widget_service import ExchangeWidgetService
from fxwidget.services.refresh_scheduler import RateRefreshScheduler
from fxwidget.schemas.health import HealthResponse


class HealthService(BaseService):
    """Service for health check operations."""

    def __init__(
        self,
        widget: ExchangeWidgetService,
        scheduler: Optional[RateRefreshScheduler] = None,
    ):
        self.start_time = time.time()
        self.widget = widget
        self.scheduler = scheduler

    async def get_health(self) -> HealthResponse:
        """
        Get system health status.

        Returns:
            HealthResponse with status, uptime, and checks
        """
        # Calculate uptime
        uptime_seconds = int(time.time() - self.start_time)
        uptime_str = f"PT{uptime_seconds}S"  # ISO 8601 duration format

        checks = {
            # ok, error or pending (no fetch finished yet)
            "rates": self.widget.rates_status,
        }
        if self.scheduler is not None:
            checks["scheduler"] = "ok" if self.scheduler.running else "stopped"

        # Determine overall status
        status = "ok" if checks["rates"] == "ok" else "degraded"

        return HealthResponse(
            status=status,
            uptime=uptime_str,
            checks=checks,
        )
