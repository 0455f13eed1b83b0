"""
Azure Identity Authentication Provider

azure-identity implementation of IAuthProvider for Dataverse and the Flow API.
"""

import asyncio
import time
from typing import Dict, Any, Optional
from azure.core.credentials import TokenCredential
from azure.identity import DefaultAzureCredential, ClientSecretCredential
import structlog

from ..config import Settings, get_settings
from .interface import IAuthProvider, AuthenticationError

logger = structlog.get_logger(__name__)

# Refresh tokens this many seconds before they expire
EXPIRY_BUFFER_SECONDS = 60


class AzureIdentityAuthProvider(IAuthProvider):
    """Acquires and caches bearer tokens per scope through an Azure credential"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        credential: Optional[TokenCredential] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.token_cache: Dict[str, Dict[str, Any]] = {}
        self.credential = credential or self._create_credential()

        logger.info(
            "Azure identity auth provider initialized",
            auth_provider=self.settings.auth_provider,
            credential=type(self.credential).__name__,
        )

    def _create_credential(self) -> TokenCredential:
        if self.settings.auth_provider == "client_secret":
            missing = [
                name
                for name in ("azure_tenant_id", "azure_client_id", "azure_client_secret")
                if not getattr(self.settings, name)
            ]
            if missing:
                raise AuthenticationError(
                    f"client_secret auth requires: {', '.join(m.upper() for m in missing)}"
                )
            return ClientSecretCredential(
                tenant_id=self.settings.azure_tenant_id,
                client_id=self.settings.azure_client_id,
                client_secret=self.settings.azure_client_secret,
            )

        # Managed identity, environment variables, az login...
        return DefaultAzureCredential(exclude_interactive_browser_credential=True)

    async def get_token(self, scope: str) -> str:
        """
        Get a bearer token for the scope, reusing a cached one when still valid

        Args:
            scope: Audience scope ending in /.default

        Returns:
            Access token string
        """
        cached = self.token_cache.get(scope)
        if cached and cached["expires_at"] > time.time() + EXPIRY_BUFFER_SECONDS:
            logger.debug("Using cached token", scope=scope)
            return str(cached["token"])

        try:
            logger.debug("Requesting new token", scope=scope)
            # azure-identity credentials are synchronous
            token = await asyncio.to_thread(self.credential.get_token, scope)
        except Exception as e:
            logger.error("Failed to acquire token", scope=scope, error=str(e))
            raise AuthenticationError(f"Failed to acquire token for {scope}: {e}") from e

        self.token_cache[scope] = {"token": token.token, "expires_at": token.expires_on}
        logger.info("Token acquired", scope=scope, expires_at=token.expires_on)
        return str(token.token)

    def clear_token_cache(self) -> None:
        """Clear the token cache"""
        self.token_cache.clear()
        logger.info("Token cache cleared")

    async def validate_credentials(self, scope: str) -> bool:
        try:
            token = await self.get_token(scope)
            return bool(token)
        except Exception as e:
            logger.error("Credential validation failed", scope=scope, error=str(e))
            return False

    def get_provider_info(self) -> Dict[str, Any]:
        return {
            "type": self.settings.auth_provider,
            "credential": type(self.credential).__name__,
            "tenant_id": self.settings.azure_tenant_id,
            "client_id": self.settings.azure_client_id,
            "cached_scopes": sorted(self.token_cache),
        }

    async def close(self) -> None:
        close = getattr(self.credential, "close", None)
        if close is not None:
            close()
