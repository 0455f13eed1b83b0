"""
Power Automate Flow API Client

Bearer-authenticated requests against the Flow management API
(providers/Microsoft.ProcessSimple) pinned to api-version 2016-11-01.
"""

from datetime import datetime, timezone
from typing import Dict, Any, Optional
import structlog

from ..auth import FLOW_SCOPE
from .interface import IPowerAutomateClient
from .invoker import RestInvoker
from .odata import build_query, combine_url, quote_segment, require_absolute_url, require_text

logger = structlog.get_logger(__name__)

API_VERSION = "2016-11-01"
FLOW_API_EXAMPLE = "https://australia.api.flow.microsoft.com"

# Page size requested for run listings
RUNS_PAGE_SIZE = 250


def format_since(since: datetime) -> str:
    """Render an instant as UTC ``YYYY-MM-DDTHH:MM:SSZ``; naive values are taken as UTC"""
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    return since.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_runs_filter(since: Optional[datetime], status: Optional[str]) -> Optional[str]:
    filter_parts = []
    if since is not None:
        filter_parts.append(f"StartTime gt {format_since(since)}")
    if status and status.strip() and status.strip().lower() != "all":
        filter_parts.append(f"Status eq '{status.strip()}'")
    return " and ".join(filter_parts) or None


class PowerAutomateClient(IPowerAutomateClient):
    """HTTP client for the Power Automate Flow API"""

    def __init__(self, invoker: RestInvoker):
        self.invoker = invoker

    def _flow_url(
        self,
        flow_api_base_url: str,
        environment_id: str,
        flow_id: str,
        *segments: str,
        query: str = "",
    ) -> str:
        base = require_absolute_url(flow_api_base_url, "Flow API base URL", FLOW_API_EXAMPLE)
        environment_id = require_text(environment_id, "Environment ID", "e.g. Default-<tenant id>")
        flow_id = require_text(flow_id, "Flow ID", "a flow GUID")

        path = "/".join(
            ["providers/Microsoft.ProcessSimple/environments", quote_segment(environment_id),
             "flows", quote_segment(flow_id)]
            + list(segments)
        )
        if not query:
            query = build_query([("api-version", API_VERSION)])
        return combine_url(base, path) + query

    async def _request(self, method: str, url: str, operation: str) -> Dict[str, Any]:
        logger.info(operation, method=method, url=url)
        return await self.invoker.request_json(method, url, FLOW_SCOPE, operation=operation)

    async def get_triggers(
        self, flow_api_base_url: str, environment_id: str, flow_id: str
    ) -> Dict[str, Any]:
        url = self._flow_url(flow_api_base_url, environment_id, flow_id, "triggers")
        return await self._request("GET", url, "Flow GET triggers")

    async def list_manual_trigger_callback_url(
        self,
        flow_api_base_url: str,
        environment_id: str,
        flow_id: str,
        trigger_name: str = "manual",
    ) -> Dict[str, Any]:
        trigger_name = require_text(trigger_name, "Trigger name", "e.g. manual")
        url = self._flow_url(
            flow_api_base_url, environment_id, flow_id,
            "triggers", quote_segment(trigger_name), "listCallbackUrl",
        )
        return await self._request("POST", url, "Flow POST listCallbackUrl")

    async def get_flow_runs(
        self,
        flow_api_base_url: str,
        environment_id: str,
        flow_id: str,
        since: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        query = build_query([
            ("api-version", API_VERSION),
            ("$filter", build_runs_filter(since, status)),
            ("$top", RUNS_PAGE_SIZE),
        ])
        url = self._flow_url(flow_api_base_url, environment_id, flow_id, "runs", query=query)
        return await self._request("GET", url, "Flow GET runs")

    async def get_flow_run_details(
        self, flow_api_base_url: str, environment_id: str, flow_id: str, run_name: str
    ) -> Dict[str, Any]:
        run_name = require_text(run_name, "Run name", "take it from the runs list")
        url = self._flow_url(
            flow_api_base_url, environment_id, flow_id, "runs", quote_segment(run_name)
        )
        return await self._request("GET", url, "Flow GET run")

    async def get_flow_run_actions(
        self, flow_api_base_url: str, environment_id: str, flow_id: str, run_name: str
    ) -> Dict[str, Any]:
        run_name = require_text(run_name, "Run name", "take it from the runs list")
        url = self._flow_url(
            flow_api_base_url, environment_id, flow_id,
            "runs", quote_segment(run_name), "actions",
        )
        return await self._request("GET", url, "Flow GET run actions")

    async def get_trigger_histories(
        self,
        flow_api_base_url: str,
        environment_id: str,
        flow_id: str,
        trigger_name: str = "manual",
    ) -> Dict[str, Any]:
        trigger_name = require_text(trigger_name, "Trigger name", "e.g. manual")
        url = self._flow_url(
            flow_api_base_url, environment_id, flow_id,
            "triggers", quote_segment(trigger_name), "histories",
        )
        return await self._request("GET", url, "Flow GET trigger histories")
