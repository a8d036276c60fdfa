"""Web API layer."""

from vakit_period.api.app import create_app
from vakit_period.api.dependencies import get_app_state

__all__ = ["create_app", "get_app_state"]
