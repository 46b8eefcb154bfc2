"""Shared API dependencies: single import point for all routers::

    from concierge.api.deps import get_db, get_current_active_user, get_current_admin
"""

from concierge.auth.dependencies import get_current_active_user, get_current_admin, get_current_user
from concierge.database import get_db

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_current_admin",
]
