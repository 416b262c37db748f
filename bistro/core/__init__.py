"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from bistro.core.config import (
    get_settings,
    load_settings_or_exit,
    setup_logging,
    Settings,
    EnvironmentMode,
)
from bistro.core.errors import (
    AppError,
    ValidationError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    InternalError,
)

__all__ = [
    "get_settings",
    "load_settings_or_exit",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "AppError",
    "ValidationError",
    "AuthenticationError",
    "ConflictError",
    "NotFoundError",
    "InternalError",
]
