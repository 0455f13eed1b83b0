"""
Dataverse Web API Client

Bearer-authenticated OData requests against the Dataverse Web API v9.2.
"""

from typing import Dict, Any, Optional
from uuid import UUID
import structlog

from ..auth import dataverse_scope
from ..errors import ArgumentValidationError, RemoteRequestError
from .interface import IDataverseClient
from .invoker import RestInvoker
from .odata import (
    build_query,
    dataverse_url,
    odata_string_literal,
    quote_segment,
    require_absolute_url,
    require_text,
)

logger = structlog.get_logger(__name__)

ORG_URL_EXAMPLE = "https://contoso.crm.dynamics.com"

PLUGIN_TRACE_LOG_FIELDS = (
    "messagename,typename,exceptiondetails,performanceexecutionduration,"
    "createdon,correlationid,operationtype"
)

FORMATTED_VALUE_ANNOTATIONS = (
    'odata.include-annotations="OData.Community.Display.V1.FormattedValue,'
    "Microsoft.Dynamics.CRM.associatednavigationproperty,"
    'Microsoft.Dynamics.CRM.lookuplogicalname"'
)

RELATIONSHIP_EXPANSIONS = (
    "OneToManyRelationships",
    "ManyToOneRelationships",
    "ManyToManyRelationships",
)

# (statecode, statuscode)
WORKFLOW_ACTIVATED = (1, 2)
WORKFLOW_DRAFT = (0, 1)


class DataverseClient(IDataverseClient):
    """HTTP client for the Dataverse Web API"""

    def __init__(self, invoker: RestInvoker):
        self.invoker = invoker

    def get_headers(self) -> Dict[str, str]:
        """Get standard OData headers for Dataverse requests"""
        return {
            "Accept": "application/json",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
        }

    @staticmethod
    def _require_org_url(org_url: Optional[str]) -> str:
        return require_absolute_url(org_url, "Dataverse org URL", ORG_URL_EXAMPLE)

    async def get_plugin_trace_logs(
        self,
        org_url: str,
        top: int = 25,
        filter: Optional[str] = None,
    ) -> Dict[str, Any]:
        org_url = self._require_org_url(org_url)

        query = build_query([
            ("$select", PLUGIN_TRACE_LOG_FIELDS),
            ("$orderby", "createdon desc"),
            ("$top", top),
            ("$filter", filter),
        ])
        url = dataverse_url(org_url, "plugintracelogs", query)

        logger.info("Querying plugin trace logs", url=url, top=top)
        return await self.invoker.request_json(
            "GET", url, dataverse_scope(org_url),
            headers=self.get_headers(),
            operation="Dataverse GET plugintracelogs",
        )

    async def get(
        self,
        org_url: str,
        table_set_name: str,
        select: Optional[str] = None,
        filter: Optional[str] = None,
        top: Optional[int] = None,
        expand: Optional[str] = None,
        orderby: Optional[str] = None,
        apply: Optional[str] = None,
        count: bool = False,
    ) -> Dict[str, Any]:
        org_url = self._require_org_url(org_url)
        table_set_name = require_text(
            table_set_name, "Table set name", "e.g. contacts or plugintracelogs"
        )

        query = build_query([
            ("$select", select),
            ("$filter", filter),
            ("$top", top),
            ("$expand", expand),
            ("$orderby", orderby),
            ("$apply", apply),
            ("$count", count),
        ])
        # Key predicates and navigation paths stay readable
        url = dataverse_url(org_url, quote_segment(table_set_name, safe="()'=,/$@"), query)

        headers = self.get_headers()
        headers["Accept"] = "application/json;odata.metadata=full"
        headers["Prefer"] = FORMATTED_VALUE_ANNOTATIONS

        logger.info("Querying Dataverse table", table_set_name=table_set_name, url=url)
        return await self.invoker.request_json(
            "GET", url, dataverse_scope(org_url),
            headers=headers,
            operation=f"Dataverse GET {table_set_name}",
        )

    async def set_workflow_activation(
        self,
        org_url: str,
        workflow_id: UUID,
        activate: bool,
    ) -> None:
        org_url = self._require_org_url(org_url)
        if workflow_id.int == 0:
            raise ArgumentValidationError("A valid workflowId GUID is required.", "workflow_id")

        state, status = WORKFLOW_ACTIVATED if activate else WORKFLOW_DRAFT
        payload = {"statecode": state, "statuscode": status}

        url = dataverse_url(org_url, f"workflows({workflow_id})")
        headers = self.get_headers()
        headers["If-Match"] = "*"

        logger.info("SetWorkflowActivation (PATCH)", workflow_id=str(workflow_id),
                    activate=activate, url=url)
        logger.debug("SetWorkflowActivation PATCH payload", payload=payload)

        response = await self.invoker.send(
            "PATCH", url, dataverse_scope(org_url), headers=headers, json=payload
        )
        if not response.is_success:
            logger.error(
                "SetWorkflowActivation (PATCH) FAILED",
                status_code=response.status_code,
                reason=response.reason_phrase,
                body=response.text,
            )
            raise RemoteRequestError(
                "SetWorkflowActivation (PATCH)",
                response.status_code,
                response.reason_phrase,
                response.text,
            )

        logger.info("SetWorkflowActivation (PATCH) succeeded",
                    workflow_id=str(workflow_id), activate=activate)

    async def activate_workflow(self, org_url: str, workflow_id: UUID) -> None:
        await self.set_workflow_activation(org_url, workflow_id, activate=True)

    async def get_entity_list(self, org_url: str) -> Dict[str, Any]:
        org_url = self._require_org_url(org_url)
        url = dataverse_url(org_url, "EntityDefinitions")

        logger.info("Listing entity definitions", url=url)
        return await self.invoker.request_json(
            "GET", url, dataverse_scope(org_url),
            headers=self.get_headers(),
            operation="Dataverse GET EntityDefinitions",
        )

    async def get_entity_metadata(
        self,
        org_url: str,
        entity_logical_name: str,
        include_attributes: bool = True,
        include_relationships: bool = False,
    ) -> Dict[str, Any]:
        org_url = self._require_org_url(org_url)
        entity_logical_name = require_text(
            entity_logical_name, "Entity logical name", "e.g. contact or account"
        )

        expand_parts = []
        if include_attributes:
            expand_parts.append("Attributes")
        if include_relationships:
            expand_parts.extend(RELATIONSHIP_EXPANSIONS)

        query = build_query([("$expand", ",".join(expand_parts))])
        key = quote_segment(odata_string_literal(entity_logical_name), safe="'")
        url = dataverse_url(org_url, f"EntityDefinitions(LogicalName={key})", query)

        logger.info("Getting entity definition", entity=entity_logical_name, url=url)
        return await self.invoker.request_json(
            "GET", url, dataverse_scope(org_url),
            headers=self.get_headers(),
            operation="Dataverse GET EntityDefinition",
        )
