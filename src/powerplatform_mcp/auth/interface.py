"""
Authentication Provider Interface

Defines contract for bearer token providers (Azure identity, mock, etc.)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


FLOW_SCOPE = "https://service.flow.microsoft.com/.default"


def dataverse_scope(org_url: str) -> str:
    """Token scope for a Dataverse organization URL"""
    return f"{org_url.rstrip('/')}/.default"


class IAuthProvider(ABC):
    """Interface for authentication providers"""

    @abstractmethod
    async def get_token(self, scope: str) -> str:
        """
        Get a bearer token for one audience scope.

        Args:
            scope: Audience scope, e.g. https://contoso.crm.dynamics.com/.default

        Returns:
            Bearer token string

        Raises:
            AuthenticationError: If authentication fails
        """
        pass

    @abstractmethod
    async def validate_credentials(self, scope: str) -> bool:
        """
        Check that a token can be acquired for the scope.

        Returns:
            True if a token was acquired, False otherwise
        """
        pass

    @abstractmethod
    def get_provider_info(self) -> Dict[str, Any]:
        """
        Get information about the auth provider.

        Returns:
            Provider metadata (type, settings, etc.)
        """
        pass

    async def close(self) -> None:
        """Release credential resources"""
        return None


class AuthenticationError(Exception):
    """Authentication related errors"""
    pass
