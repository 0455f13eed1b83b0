"""
MCP Tools for Power Platform MCP Server
"""

from .registry import ToolRegistry

__all__ = ["ToolRegistry"]
