"""
Authentication Provider Factory

Creates auth provider instances based on configuration.
"""

from typing import Dict, Any, List
import structlog

from ..config import Settings
from ..auth import IAuthProvider, AzureIdentityAuthProvider

logger = structlog.get_logger(__name__)


class MockAuthProvider(IAuthProvider):
    """Mock auth provider for testing"""

    def __init__(self, token: str = "mock_bearer_token_12345"):
        self.mock_token = token
        self.requested_scopes: List[str] = []

    async def get_token(self, scope: str) -> str:
        """Returns mock token"""
        self.requested_scopes.append(scope)
        return self.mock_token

    async def validate_credentials(self, scope: str) -> bool:
        """Always returns True for mock"""
        return True

    def get_provider_info(self) -> Dict[str, Any]:
        """Returns mock provider info"""
        return {
            "type": "mock",
            "mock_token": self.mock_token[:20] + "...",
            "status": "active"
        }


class AuthProviderFactory:
    """Factory for creating authentication providers"""

    @staticmethod
    def create(settings: Settings) -> IAuthProvider:
        """
        Create auth provider based on configuration.

        Args:
            settings: Application settings

        Returns:
            Configured auth provider instance

        Raises:
            ValueError: If provider type is not supported
        """
        provider_type = settings.auth_provider.lower()

        logger.info("Creating auth provider", provider_type=provider_type)

        if provider_type in ("default", "client_secret"):
            return AzureIdentityAuthProvider(settings)
        elif provider_type == "mock":
            return MockAuthProvider()
        else:
            raise ValueError(f"Unsupported auth provider: {provider_type}")
