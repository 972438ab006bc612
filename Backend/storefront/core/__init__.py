"""
Core module - configuration, database and error formatting.
"""
from .config import Settings, get_settings
from .db import Base, engine, AsyncSessionLocal, build_engine
from .responses import ErrorDetail, ErrorCodes, error_response

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Database
    "Base",
    "engine",
    "AsyncSessionLocal",
    "build_engine",
    # Responses
    "ErrorDetail",
    "ErrorCodes",
    "error_response",
]
