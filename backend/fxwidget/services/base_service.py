"""
Base service class.
Services contain business logic and own the widget state.
"""

from abc import ABC


class BaseService(ABC):
    """Base service class for all services."""
    pass
