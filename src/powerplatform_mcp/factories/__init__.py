"""
Factory classes for Dependency Injection

Provides factory methods to create implementations based on configuration.
"""

from .auth_factory import AuthProviderFactory, MockAuthProvider
from .client_factory import ClientFactory

__all__ = [
    "AuthProviderFactory",
    "MockAuthProvider",
    "ClientFactory",
]
