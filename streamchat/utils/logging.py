"""
Category-aware logging for streamchat

Every logger belongs to one category: 'chat' for page resolution and
polling, 'events' for the event bus, 'system' for everything else.
LOG_CATEGORIES (comma-separated) limits output to the listed categories and
LOG_LEVEL sets the threshold. Both are read from settings when a record is
filtered, so changing them at runtime takes effect immediately.

Usage:
    from streamchat.utils.logging import get_logger

    logger = get_logger(__name__, category='chat')
    logger.info('Live chat resolved')
"""

import logging
from typing import FrozenSet, Optional
from streamchat.config import settings


CATEGORIES = frozenset({"chat", "events", "system"})
DEFAULT_CATEGORY = "system"


def allowed_categories() -> Optional[FrozenSet[str]]:
    """Categories enabled by LOG_CATEGORIES, or None when every category is shown."""
    if not settings.log_categories:
        return None
    return frozenset(
        part.strip().lower() for part in settings.log_categories.split(",") if part.strip()
    )


def resolve_level(name: str) -> int:
    """Map a level name (WARN accepted as an alias) to a logging level, INFO if unknown."""
    name = name.upper()
    if name == "WARN":
        name = "WARNING"
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


class CategoryFilter(logging.Filter):
    """Tags records with their category and drops the ones not enabled."""

    def __init__(self, category: Optional[str] = None):
        super().__init__()
        category = (category or DEFAULT_CATEGORY).lower()
        if category not in CATEGORIES:
            raise ValueError(f"Unknown log category '{category}'")
        self.category = category

    def filter(self, record: logging.LogRecord) -> bool:
        record.category = self.category
        enabled = allowed_categories()
        return enabled is None or self.category in enabled


def get_logger(name: str, category: Optional[str] = None) -> logging.Logger:
    """
    Get a logger bound to a category.

    Args:
        name: Logger name (typically __name__)
        category: One of CATEGORIES; defaults to 'system'

    Returns:
        Logger with its level set from LOG_LEVEL and a single CategoryFilter
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(settings.log_level))

    # Re-binding replaces the previous category instead of stacking filters
    for existing in [f for f in logger.filters if isinstance(f, CategoryFilter)]:
        logger.removeFilter(existing)
    logger.addFilter(CategoryFilter(category))

    return logger
