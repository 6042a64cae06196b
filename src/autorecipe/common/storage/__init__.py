"""配方存储"""

from .persistence import RecipePersistence

__all__ = ["RecipePersistence"]
