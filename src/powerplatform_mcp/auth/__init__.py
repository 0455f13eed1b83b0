"""
Authentication module for Power Platform MCP Server

Handles Azure identity token acquisition for Dataverse and Power Automate.
"""

from .interface import IAuthProvider, AuthenticationError, FLOW_SCOPE, dataverse_scope
from .azure_auth import AzureIdentityAuthProvider

__all__ = [
    "IAuthProvider",
    "AuthenticationError",
    "AzureIdentityAuthProvider",
    "FLOW_SCOPE",
    "dataverse_scope",
]
