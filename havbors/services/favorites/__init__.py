"""Favorites domain components split by responsibility.

Persistence, caching and schema conversion live in separate modules so the
orchestrating :class:`~havbors.services.favorites_service.FavoritesService`
stays focused on the workflow and each collaborator can be tested alone.
"""

from .cache import FavoritesCache
from .persistence import FavoritesPersistence
from .presentation import FavoritesPresenter

__all__ = [
    "FavoritesCache",
    "FavoritesPersistence",
    "FavoritesPresenter",
]
