"""
Error Taxonomy

    DashboardError
    ├── AuthError           rejected credentials, login response without a token
    ├── NetworkError        transport failure or non-2xx response
    ├── ValidationError     client-side input checks
    └── StorageCorruption   unreadable persisted session record

Session operations raise AuthError to the login form. Hooks never raise
from a fetch; they turn failures into their `error` field. StorageCorruption
is recovered inside the account store and never leaves it.
"""

from typing import Optional


class DashboardError(Exception):
    """Base class for all client errors"""


class AuthError(DashboardError):
    pass


class NetworkError(DashboardError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ValidationError(DashboardError):
    pass


class StorageCorruption(DashboardError):
    pass
