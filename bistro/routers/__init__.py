"""
API routers, grouped by capability.

Groups that require a logged-in user declare ``require_user_id`` in their
router dependencies.
"""

from bistro.routers import auth, menu, orders, system

__all__ = ["auth", "menu", "orders", "system"]
