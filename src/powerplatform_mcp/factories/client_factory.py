"""
REST Client Factory

Creates the shared invoker and the clients built on top of it.
"""

import structlog

from ..config import Settings
from ..auth import IAuthProvider
from ..client import (
    IDataverseClient,
    IPowerAutomateClient,
    DataverseClient,
    PowerAutomateClient,
    RestInvoker,
)

logger = structlog.get_logger(__name__)


class ClientFactory:
    """Factory for creating REST clients"""

    @staticmethod
    def create_invoker(settings: Settings, auth_provider: IAuthProvider) -> RestInvoker:
        logger.info("Creating REST invoker", timeout=settings.http_timeout)
        return RestInvoker(auth_provider, timeout=settings.http_timeout)

    @staticmethod
    def create_dataverse_client(invoker: RestInvoker) -> IDataverseClient:
        logger.info("Creating Dataverse client")
        return DataverseClient(invoker)

    @staticmethod
    def create_power_automate_client(invoker: RestInvoker) -> IPowerAutomateClient:
        logger.info("Creating Power Automate client")
        return PowerAutomateClient(invoker)
