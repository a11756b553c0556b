"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from tagaudit.api import app

    uvicorn tagaudit.api:app --reload
"""

from tagaudit.api.app import app

__all__ = ["app"]
