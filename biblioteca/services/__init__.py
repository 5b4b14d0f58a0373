"""
Page controllers for the admin.

Each controller orchestrates the store provider for one entity and exposes
the list, the form draft and the current notification to the routers.
"""

from .author_controller import AuthorController
from .book_controller import BookController
from .entity_controller import ControllerState, EntityController
from .notifications import Notification, Notifier

__all__ = [
    "AuthorController",
    "BookController",
    "ControllerState",
    "EntityController",
    "Notification",
    "Notifier",
]
