"""
Tool Registry for Power Platform MCP Server

Centralized tool registration. Every tool maps to exactly one Dataverse or
Flow API call and returns its JSON document as text.
"""

import json
import re
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from uuid import UUID
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
import structlog

from ..auth import AuthenticationError
from ..client import IDataverseClient, IPowerAutomateClient
from ..config import Settings
from ..errors import ArgumentValidationError

logger = structlog.get_logger(__name__)

INVALID_WORKFLOW_ID = "ERROR: workflowId must be a valid GUID"
INVALID_SINCE = "ERROR: since must be ISO 8601 (e.g., 2025-09-08T00:00:00Z)"

_HEX = "[0-9a-fA-F]"
GUID_LAYOUTS = re.compile(
    rf"{_HEX}{{32}}"
    rf"|{_HEX}{{8}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{12}}"
    rf"|\{{{_HEX}{{8}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{12}}\}}"
    rf"|\({_HEX}{{8}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{12}}\)"
)


def to_json(document: Dict[str, Any]) -> str:
    return json.dumps(document, indent=2, default=str)


def parse_since(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp; a missing offset is taken as UTC.

    Raises:
        ValueError: If the value is not ISO 8601
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_workflow_id(value: str) -> UUID:
    """
    Parse a GUID in the 32-digit, hyphenated, braced or parenthesized layout.

    Raises:
        ValueError: If the value is not in one of those layouts
    """
    text = value.strip()
    if not GUID_LAYOUTS.fullmatch(text):
        raise ValueError(f"Not a GUID: {value!r}")
    return UUID(text.strip("{}()"))


def _caller_error(operation: str, error: Exception) -> ToolError:
    if isinstance(error, (ArgumentValidationError, AuthenticationError)):
        logger.warning(f"{operation} rejected", error=str(error))
        return ToolError(str(error))
    logger.error(f"{operation} failed", error=str(error))
    return ToolError(f"Failed to {operation}: {error}")


class ToolRegistry:
    """
    Centralized tool registration for Dataverse and Power Automate tools.
    """

    @staticmethod
    def register_all_tools(
        mcp: FastMCP,
        dataverse_client: IDataverseClient,
        power_automate_client: IPowerAutomateClient,
        settings: Settings,
    ) -> None:
        """Register all MCP tools"""
        logger.info("Registering MCP tools")

        ToolRegistry._register_dataverse_tools(mcp, dataverse_client, settings)
        ToolRegistry._register_power_automate_tools(mcp, power_automate_client, settings)

        logger.info("All MCP tools registered successfully")

    @staticmethod
    def _register_dataverse_tools(
        mcp: FastMCP, client: IDataverseClient, settings: Settings
    ) -> None:
        """Register Dataverse Web API tools"""

        def org(org_url: Optional[str]) -> str:
            # Blank falls back to DATAVERSE_ORG_URL; the client validates what remains
            return org_url if org_url and org_url.strip() else (settings.dataverse_org_url or "")

        @mcp.tool
        async def get_plugin_trace_logs(
            org_url: str = "",
            top: int = 25,
            filter: Optional[str] = None,
        ) -> str:
            """
            Query Dataverse plugin trace logs, newest first.

            Args:
                org_url: Dataverse org URL, e.g. https://contoso.crm.dynamics.com
                    (defaults to DATAVERSE_ORG_URL)
                top: Max records to return (default 25)
                filter: Optional OData filter, e.g. messagename eq 'Create'

            Returns:
                Raw Dataverse JSON, or an {"error": {...}} document
            """
            try:
                result = await client.get_plugin_trace_logs(org(org_url), top, filter)
                return to_json(result)
            except Exception as e:
                raise _caller_error("query plugin trace logs", e) from e

        @mcp.tool
        async def dataverse_get(
            table_set_name: str,
            org_url: str = "",
            select: Optional[str] = None,
            filter: Optional[str] = None,
            top: Optional[int] = None,
            expand: Optional[str] = None,
            orderby: Optional[str] = None,
            apply: Optional[str] = None,
            count: bool = False,
        ) -> str:
            """
            Generic Dataverse OData GET with formatted values. Returns raw JSON.

            Args:
                table_set_name: Table set name, e.g. contacts, accounts, plugintracelogs
                org_url: Dataverse org URL (defaults to DATAVERSE_ORG_URL)
                select: $select clause, comma-separated
                filter: $filter OData filter expression
                top: $top max records
                expand: $expand related entities
                orderby: $orderby clause
                apply: $apply transformation, e.g. groupby or aggregate
                count: Include $count=true

            Examples:
                dataverse_get("accounts", select="name,revenue", top=10)
                dataverse_get("contacts", filter="statecode eq 0", orderby="createdon desc")
            """
            try:
                result = await client.get(
                    org(org_url), table_set_name,
                    select=select, filter=filter, top=top, expand=expand,
                    orderby=orderby, apply=apply, count=count,
                )
                return to_json(result)
            except Exception as e:
                raise _caller_error(f"query {table_set_name}", e) from e

        @mcp.tool
        async def activate_workflow(
            workflow_id: str,
            org_url: str = "",
            activate: bool = True,
        ) -> str:
            """
            Activate or deactivate a workflow.

            When activate=true -> statecode=1/statuscode=2;
            when false -> statecode=0/statuscode=1.

            Args:
                workflow_id: workflowId GUID to activate/deactivate
                org_url: Dataverse org URL (defaults to DATAVERSE_ORG_URL)
                activate: true to activate, false to deactivate
            """
            try:
                parsed_id = parse_workflow_id(workflow_id)
            except (ValueError, AttributeError):
                return INVALID_WORKFLOW_ID

            try:
                await client.set_workflow_activation(org(org_url), parsed_id, activate)
            except Exception as e:
                logger.error("Workflow activation failed", workflow_id=workflow_id, error=str(e))
                return f"ERROR calling SetWorkflowActivation: {e}"

            return f"{'Activated' if activate else 'Deactivated'} workflow {workflow_id}"

        @mcp.tool
        async def get_entity_list(org_url: str = "") -> str:
            """
            Get list of available entities (tables) in Dataverse.

            Returns EntityDefinitions metadata. The response is large; prefer
            get_entity_metadata once the logical name is known.
            """
            try:
                return to_json(await client.get_entity_list(org(org_url)))
            except Exception as e:
                raise _caller_error("list entity definitions", e) from e

        @mcp.tool
        async def get_entity_metadata(
            entity_logical_name: str,
            org_url: str = "",
            include_attributes: bool = True,
            include_relationships: bool = False,
        ) -> str:
            """
            Get detailed metadata for a specific entity including attributes and relationships.

            Args:
                entity_logical_name: Entity logical name, e.g. contact, account, opportunity
                org_url: Dataverse org URL (defaults to DATAVERSE_ORG_URL)
                include_attributes: Include attribute definitions (default true)
                include_relationships: Include relationship definitions (default false)
            """
            try:
                result = await client.get_entity_metadata(
                    org(org_url), entity_logical_name, include_attributes, include_relationships
                )
                return to_json(result)
            except Exception as e:
                raise _caller_error(f"get metadata for {entity_logical_name}", e) from e

        logger.info("Dataverse tools registered successfully")

    @staticmethod
    def _register_power_automate_tools(
        mcp: FastMCP, client: IPowerAutomateClient, settings: Settings
    ) -> None:
        """Register Power Automate Flow API tools"""

        def base(flow_api_base_url: Optional[str]) -> str:
            if flow_api_base_url and flow_api_base_url.strip():
                return flow_api_base_url
            return settings.flow_api_base_url or ""

        @mcp.tool
        async def get_flow_triggers(
            environment_id: str,
            flow_id: str,
            flow_api_base_url: str = "",
        ) -> str:
            """
            List triggers for a Power Automate flow.

            Args:
                environment_id: Environment ID (GUID or name) e.g. Default-xxxx
                flow_id: Flow ID (GUID)
                flow_api_base_url: Flow API base URL, e.g. https://australia.api.flow.microsoft.com
                    (defaults to FLOW_API_BASE_URL)
            """
            try:
                result = await client.get_triggers(base(flow_api_base_url), environment_id, flow_id)
                return to_json(result)
            except Exception as e:
                raise _caller_error("list flow triggers", e) from e

        @mcp.tool
        async def get_manual_trigger_callback_url(
            environment_id: str,
            flow_id: str,
            flow_api_base_url: str = "",
            trigger_name: str = "manual",
        ) -> str:
            """
            Get the callback URL for a flow's manual (HTTP) trigger.

            Args:
                environment_id: Environment ID (GUID or name) e.g. Default-xxxx
                flow_id: Flow ID (GUID)
                flow_api_base_url: Flow API base URL (defaults to FLOW_API_BASE_URL)
                trigger_name: Trigger name (default 'manual')
            """
            try:
                result = await client.list_manual_trigger_callback_url(
                    base(flow_api_base_url), environment_id, flow_id, trigger_name
                )
                return to_json(result)
            except Exception as e:
                raise _caller_error("get trigger callback URL", e) from e

        @mcp.tool
        async def get_flow_runs(
            environment_id: str,
            flow_id: str,
            flow_api_base_url: str = "",
            since: Optional[str] = None,
            status: Optional[str] = None,
        ) -> str:
            """
            List runs (execution history) for a Power Automate flow.

            Args:
                environment_id: Environment ID (GUID or name) e.g. Default-xxxx
                flow_id: Flow ID (GUID)
                flow_api_base_url: Flow API base URL (defaults to FLOW_API_BASE_URL)
                since: Optional UTC lower bound. Include runs with StartTime greater
                    than this (e.g., 2025-09-08T00:00:00Z)
                status: Optional status filter: Succeeded, Failed, Canceled, Running,
                    or All (default)

            Returns at most 250 runs.
            """
            since_dt: Optional[datetime] = None
            if since and since.strip():
                try:
                    since_dt = parse_since(since)
                except ValueError:
                    return INVALID_SINCE

            try:
                result = await client.get_flow_runs(
                    base(flow_api_base_url), environment_id, flow_id, since_dt, status
                )
                return to_json(result)
            except Exception as e:
                raise _caller_error("list flow runs", e) from e

        @mcp.tool
        async def get_flow_run_details(
            environment_id: str,
            flow_id: str,
            run_name: str,
            flow_api_base_url: str = "",
        ) -> str:
            """
            Get details of a specific flow run.

            Args:
                run_name: Run name (from runs list)
            """
            try:
                result = await client.get_flow_run_details(
                    base(flow_api_base_url), environment_id, flow_id, run_name
                )
                return to_json(result)
            except Exception as e:
                raise _caller_error(f"get flow run {run_name}", e) from e

        @mcp.tool
        async def get_flow_run_actions(
            environment_id: str,
            flow_id: str,
            run_name: str,
            flow_api_base_url: str = "",
        ) -> str:
            """List actions (steps) of a specific flow run."""
            try:
                result = await client.get_flow_run_actions(
                    base(flow_api_base_url), environment_id, flow_id, run_name
                )
                return to_json(result)
            except Exception as e:
                raise _caller_error(f"list actions of run {run_name}", e) from e

        @mcp.tool
        async def get_trigger_histories(
            environment_id: str,
            flow_id: str,
            flow_api_base_url: str = "",
            trigger_name: str = "manual",
        ) -> str:
            """
            List trigger histories for a flow's trigger.

            Args:
                trigger_name: Trigger name (default 'manual')
            """
            try:
                result = await client.get_trigger_histories(
                    base(flow_api_base_url), environment_id, flow_id, trigger_name
                )
                return to_json(result)
            except Exception as e:
                raise _caller_error("list trigger histories", e) from e

        logger.info("Power Automate tools registered successfully")
