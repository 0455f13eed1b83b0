"""
REST clients

Dataverse Web API and Power Automate Flow API clients over a shared invoker.
"""

from .interface import IDataverseClient, IPowerAutomateClient
from .invoker import RestInvoker
from .dataverse_client import DataverseClient
from .power_automate_client import PowerAutomateClient

__all__ = [
    "IDataverseClient",
    "IPowerAutomateClient",
    "RestInvoker",
    "DataverseClient",
    "PowerAutomateClient",
]
