"""
Client Interfaces

Defines contracts for the Dataverse Web API and Power Automate Flow API clients
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Any, Optional
from uuid import UUID


class IDataverseClient(ABC):
    """Interface for Dataverse Web API clients"""

    @abstractmethod
    async def get_plugin_trace_logs(
        self,
        org_url: str,
        top: int = 25,
        filter: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Query plugin trace logs, newest first.

        Args:
            org_url: Dataverse org URL, e.g. https://contoso.crm.dynamics.com
            top: Maximum records to return
            filter: Optional OData filter expression

        Returns:
            Dataverse response body or normalized error document
        """
        pass

    @abstractmethod
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
        """
        Generic OData GET against a table set with formatted value annotations.

        Returns:
            Dataverse response body or normalized error document
        """
        pass

    @abstractmethod
    async def set_workflow_activation(
        self,
        org_url: str,
        workflow_id: UUID,
        activate: bool,
    ) -> None:
        """
        Activate or deactivate a workflow.

        Raises:
            ArgumentValidationError: If org_url is missing or workflow_id is nil
            RemoteRequestError: If Dataverse rejects the update
        """
        pass

    @abstractmethod
    async def get_entity_list(self, org_url: str) -> Dict[str, Any]:
        """List EntityDefinitions"""
        pass

    @abstractmethod
    async def get_entity_metadata(
        self,
        org_url: str,
        entity_logical_name: str,
        include_attributes: bool = True,
        include_relationships: bool = False,
    ) -> Dict[str, Any]:
        """Get one EntityDefinition, optionally expanding attributes and relationships"""
        pass


class IPowerAutomateClient(ABC):
    """Interface for Power Automate Flow API clients"""

    @abstractmethod
    async def get_triggers(
        self, flow_api_base_url: str, environment_id: str, flow_id: str
    ) -> Dict[str, Any]:
        """List triggers of a flow"""
        pass

    @abstractmethod
    async def list_manual_trigger_callback_url(
        self,
        flow_api_base_url: str,
        environment_id: str,
        flow_id: str,
        trigger_name: str = "manual",
    ) -> Dict[str, Any]:
        """Get the callback URL of a manual (HTTP) trigger"""
        pass

    @abstractmethod
    async def get_flow_runs(
        self,
        flow_api_base_url: str,
        environment_id: str,
        flow_id: str,
        since: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        List runs of a flow.

        Args:
            since: Only runs that started after this instant
            status: Succeeded, Failed, Canceled, Running, or All
        """
        pass

    @abstractmethod
    async def get_flow_run_details(
        self, flow_api_base_url: str, environment_id: str, flow_id: str, run_name: str
    ) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def get_flow_run_actions(
        self, flow_api_base_url: str, environment_id: str, flow_id: str, run_name: str
    ) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def get_trigger_histories(
        self,
        flow_api_base_url: str,
        environment_id: str,
        flow_id: str,
        trigger_name: str = "manual",
    ) -> Dict[str, Any]:
        pass
