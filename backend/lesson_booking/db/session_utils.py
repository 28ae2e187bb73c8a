"""
Helpers for working with async sessions in a dialect-agnostic way.
"""

from sqlalchemy.ext.asyncio import AsyncSession


def get_dialect_name(session: AsyncSession, default: str = "postgresql") -> str:
    """Return the bound engine's dialect name, or ``default`` if unbound."""
    try:
        bind = session.get_bind()
    except Exception:
        return default
    dialect = getattr(bind, "dialect", None)
    return getattr(dialect, "name", None) or default
