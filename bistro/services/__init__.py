"""
                        Services Module

Business logic, independent of the HTTP layer.

Services:
    - session: signed session cookie codec
    - passwords: bcrypt hashing off the event loop
    - auth: register / login / current user / logout
    - orders: order creation and listing
    - menu: menu reads and seeding
"""

from bistro.services.session import ANONYMOUS, SessionCodec, SessionCookie, SessionData

__all__ = ["ANONYMOUS", "SessionCodec", "SessionCookie", "SessionData"]
