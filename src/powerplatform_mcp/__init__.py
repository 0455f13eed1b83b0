"""
Power Platform MCP Server

A Model Context Protocol server exposing Dataverse Web API and Power Automate
Flow API calls as tools, authenticated through Azure identity.
"""

__version__ = "0.1.0"

from .main import main

__all__ = ["main"]
