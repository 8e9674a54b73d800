"""
State Management
Multi-account session: login, logout, switching.
"""

from .session import SessionManager, Authenticator

__all__ = [
    "SessionManager",
    "Authenticator",
]
