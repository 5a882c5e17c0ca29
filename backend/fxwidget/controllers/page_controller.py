"""
Page controller.
"""

from fxwidget.controllers.base_controller import BaseController
from fxwidget.services.component_service import ComponentService


class PageController(BaseController):
    """Controller for assembled site pages."""

    def __init__(self, component_service: ComponentService):
        self.component_service = component_service

    async def get_page(self, request_path: str) -> str:
        """Get a page with its header and footer injected."""
        return await self.component_service.render_page(request_path)
