"""
Dependency Injection Container

Centralized dependency resolution for clean separation of concerns.
"""

from typing import Dict, Any, Optional
import structlog

from .config import Settings, get_settings
from .factories import AuthProviderFactory, ClientFactory
from .auth.interface import IAuthProvider
from .client import IDataverseClient, IPowerAutomateClient, RestInvoker

logger = structlog.get_logger(__name__)


class DIContainer:
    """
    Dependency Injection Container for managing service dependencies.

    Holds the process-wide credential and HTTP transport. Both are shared by
    every tool call and carry no per-call state.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._services: Dict[str, Any] = {}

        logger.info("DI Container initialized", auth_provider=self.settings.auth_provider)

    async def close(self) -> None:
        """Clean up all dependencies"""
        if 'invoker' in self._services:
            await self._services['invoker'].close()
        if 'auth_provider' in self._services:
            await self._services['auth_provider'].close()
        self._services.clear()

        logger.info("DI Container closed")

    def get_auth_provider(self) -> IAuthProvider:
        """Get auth provider instance (lazy initialization)"""
        if 'auth_provider' not in self._services:
            self._services['auth_provider'] = AuthProviderFactory.create(self.settings)
            logger.debug("Auth provider created", type=self.settings.auth_provider)
        return self._services['auth_provider']

    def get_invoker(self) -> RestInvoker:
        """Get shared REST invoker (lazy initialization)"""
        if 'invoker' not in self._services:
            self._services['invoker'] = ClientFactory.create_invoker(
                self.settings, self.get_auth_provider()
            )
        return self._services['invoker']

    def get_dataverse_client(self) -> IDataverseClient:
        if 'dataverse_client' not in self._services:
            self._services['dataverse_client'] = ClientFactory.create_dataverse_client(
                self.get_invoker()
            )
        return self._services['dataverse_client']

    def get_power_automate_client(self) -> IPowerAutomateClient:
        if 'power_automate_client' not in self._services:
            self._services['power_automate_client'] = ClientFactory.create_power_automate_client(
                self.get_invoker()
            )
        return self._services['power_automate_client']

    def get_container_info(self) -> Dict[str, Any]:
        """Get container status and dependency information"""
        return {
            "cached_services": list(self._services.keys()),
            "settings": {
                "auth_provider": self.settings.auth_provider,
                "dataverse_org_url": self.settings.dataverse_org_url,
                "flow_api_base_url": self.settings.flow_api_base_url,
                "http_timeout": self.settings.http_timeout,
            }
        }
