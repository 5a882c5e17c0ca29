"""
Dependency injection container using dependency-injector.
Wires the HTTP client, services and controllers.
"""

from dependency_injector import containers, providers

from fxwidget.core.config import settings
from fxwidget.core.integrations.http.http_client import HttpClient
from fxwidget.services.component_service import ComponentService
from fxwidget.services.exchange_widget_service import ExchangeWidgetService
from fxwidget.services.health_service import HealthService
from fxwidget.services.rate_fetcher_service import RateFetcherService
from fxwidget.services.refresh_scheduler import RateRefreshScheduler
from fxwidget.controllers.health_controller import HealthController
from fxwidget.controllers.page_controller import PageController
from fxwidget.controllers.rates_controller import RatesController
from fxwidget.controllers.widget_controller import WidgetController


class Container(containers.DeclarativeContainer):
    """Dependency injection container."""

    # Configuration
    config = providers.Configuration()

    # Integrations
    http_client = providers.Singleton(
        HttpClient,
        timeout=config.rates_request_timeout,
        max_retries=config.rates_max_retries,
    )

    # Services
    rate_fetcher = providers.Singleton(
        RateFetcherService,
        http_client=http_client,
        api_url=config.rates_api_url,
    )

    widget_service = providers.Singleton(
        ExchangeWidgetService,
        rate_fetcher=rate_fetcher,
    )

    refresh_scheduler = providers.Singleton(
        RateRefreshScheduler,
        widget=widget_service,
        interval=config.refresh_interval,
    )

    component_service = providers.Singleton(
        ComponentService,
        site_dir=config.site_dir,
    )

    health_service = providers.Singleton(
        HealthService,
        widget=widget_service,
        scheduler=refresh_scheduler,
    )

    # Controllers
    health_controller = providers.Factory(
        HealthController,
        health_service=health_service,
    )

    rates_controller = providers.Factory(
        RatesController,
        widget_service=widget_service,
        scheduler=refresh_scheduler,
    )

    widget_controller = providers.Factory(
        WidgetController,
        widget_service=widget_service,
    )

    page_controller = providers.Factory(
        PageController,
        component_service=component_service,
    )


def create_container() -> Container:
    """Build a container configured from settings."""
    container = Container()
    container.config.from_dict({
        "rates_api_url": settings.RATES_API_URL,
        "rates_request_timeout": settings.RATES_REQUEST_TIMEOUT,
        "rates_max_retries": settings.RATES_MAX_RETRIES,
        "refresh_interval": settings.RATES_REFRESH_INTERVAL_SECONDS,
        "site_dir": settings.SITE_DIR,
    })
    return container


# Global container instance
_container: Container = None


def get_container() -> Container:
    """Get the global dependency injection container."""
    global _container
    if _container is None:
        _container = create_container()
    return _container


def set_container(container: Container) -> None:
    """Install the global container (used by the lifespan and tests)."""
    global _container
    _container = container
