"""
Server Factory for Power Platform MCP Server

Creates fully configured server instances using dependency injection.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import structlog
from fastmcp import FastMCP

from . import __version__
from .auth import FLOW_SCOPE, dataverse_scope
from .config import Settings, get_settings
from .di_container import DIContainer
from .tools.registry import ToolRegistry

logger = structlog.get_logger(__name__)

SERVER_NAME = "PowerPlatform-MCP-Server"


class ServerFactory:
    """
    Factory for creating fully configured MCP server instances.
    """

    @staticmethod
    def create_configured_server(
        settings: Optional[Settings] = None,
        container: Optional[DIContainer] = None,
    ) -> FastMCP:
        """
        Create a ready-to-run MCP server.

        The credential and HTTP transport live in the container for the whole
        server lifetime and are released when the server shuts down.

        Returns:
            FastMCP server with all tools registered
        """
        logger.info("Creating Power Platform MCP Server")

        container = container or DIContainer(settings or get_settings())

        @asynccontextmanager
        async def lifespan(server: FastMCP) -> AsyncIterator[None]:
            try:
                yield
            finally:
                await container.close()

        mcp = FastMCP(name=SERVER_NAME, version=__version__, lifespan=lifespan)

        ToolRegistry.register_all_tools(
            mcp,
            container.get_dataverse_client(),
            container.get_power_automate_client(),
            container.settings,
        )

        # Kept for cleanup and diagnostics
        mcp._container = container

        logger.info("Power Platform MCP Server created", **container.get_container_info())
        return mcp


class ServerValidator:
    """
    Utility class for configuration checks from the command line.
    """

    @staticmethod
    async def validate_configuration(settings: Optional[Settings] = None) -> bool:
        """Acquire a token for every configured audience and report the result"""
        print("🔧 Validating Power Platform MCP Configuration...")

        try:
            settings = settings or get_settings()
        except Exception as e:
            print(f"❌ Configuration validation failed: {e}")
            return False

        print("✅ Configuration loaded")
        print(f"   - Auth Provider: {settings.auth_provider}")
        print(f"   - Dataverse Org URL: {settings.dataverse_org_url or '(per call)'}")
        print(f"   - Flow API Base URL: {settings.flow_api_base_url or '(per call)'}")
        print(f"   - HTTP Timeout: {settings.http_timeout}s")

        container = DIContainer(settings)
        try:
            try:
                auth_provider = container.get_auth_provider()
            except Exception as e:
                print(f"❌ Authentication provider failed: {e}")
                return False

            scopes = [FLOW_SCOPE]
            if settings.dataverse_org_url:
                scopes.append(dataverse_scope(settings.dataverse_org_url))

            ok = True
            for scope in scopes:
                if await auth_provider.validate_credentials(scope):
                    print(f"✅ Token acquired for {scope}")
                else:
                    print(f"❌ Token acquisition failed for {scope}")
                    ok = False
        finally:
            await container.close()

        if ok:
            print("\n🎉 Configuration validation completed successfully!")
        return ok
