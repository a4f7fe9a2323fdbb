"""
Find-or-create for supplier and category reference entities.

Names are matched exactly (case-sensitive) after trimming.
"""

import structlog

from models.catalog import Supplier, Category
from services.catalog_session import CatalogSession

logger = structlog.get_logger(__name__)


def find_or_create_supplier(session: CatalogSession, name: str) -> Supplier:
    """
    Resolve a supplier by name, staging a new one if needed.

    An empty name returns a transient Supplier that is never persisted.
    """
    trimmed = (name or "").strip()
    if not trimmed:
        return Supplier(name="")

    existing = session.find_supplier(trimmed)
    if existing is not None:
        return existing

    logger.info("supplier_created", name=trimmed)
    return session.add_supplier(Supplier(name=trimmed))


def find_or_create_category(session: CatalogSession, name: str) -> Category:
    """
    Resolve a category by name, staging a new one if needed.

    An empty name returns a transient Category that is never persisted.
    """
    trimmed = (name or "").strip()
    if not trimmed:
        return Category(name="")

    existing = session.find_category(trimmed)
    if existing is not None:
        return existing

    logger.info("category_created", name=trimmed)
    return session.add_category(Category(name=trimmed))
