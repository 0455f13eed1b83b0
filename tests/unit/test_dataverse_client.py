"""
Tests for the DataverseClient
"""

import json
from uuid import UUID

import httpx
import pytest
from respx import MockRouter

from powerplatform_mcp.errors import ArgumentValidationError, RemoteRequestError

ORG_URL = "https://contoso.crm.dynamics.com"
HOST = "contoso.crm.dynamics.com"
API = "/api/data/v9.2"
WORKFLOW_ID = UUID("5b2d0c0e-7a0f-4a1b-9c55-1d2e3f4a5b6c")


@pytest.mark.unit
class TestPluginTraceLogs:
    async def test_defaults_to_top_25_newest_first(
        self, dataverse_client, mock_auth_provider, respx_mock: MockRouter
    ):
        route = respx_mock.get(host=HOST, path=f"{API}/plugintracelogs").mock(
            return_value=httpx.Response(200, json={"value": []})
        )

        result = await dataverse_client.get_plugin_trace_logs(ORG_URL)

        assert result == {"value": []}
        params = route.calls.last.request.url.params
        assert params["$top"] == "25"
        assert params["$orderby"] == "createdon desc"
        assert params["$select"].split(",") == [
            "messagename", "typename", "exceptiondetails", "performanceexecutionduration",
            "createdon", "correlationid", "operationtype",
        ]
        assert "$filter" not in params
        assert mock_auth_provider.requested_scopes == [f"{ORG_URL}/.default"]

    async def test_filter_and_top_are_sent(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.get(host=HOST, path=f"{API}/plugintracelogs").mock(
            return_value=httpx.Response(200, json={"value": []})
        )

        await dataverse_client.get_plugin_trace_logs(ORG_URL + "/", top=5, filter="messagename eq 'Create'")

        request = route.calls.last.request
        assert request.url.params["$top"] == "5"
        assert request.url.params["$filter"] == "messagename eq 'Create'"
        assert request.headers["OData-Version"] == "4.0"
        assert request.headers["OData-MaxVersion"] == "4.0"

    async def test_missing_org_url_fails_before_any_call(
        self, dataverse_client, mock_auth_provider, respx_mock: MockRouter
    ):
        with pytest.raises(ArgumentValidationError, match="Dataverse org URL must be provided"):
            await dataverse_client.get_plugin_trace_logs("")

        assert mock_auth_provider.requested_scopes == []
        assert len(respx_mock.calls) == 0

    async def test_error_document_returned(
        self, dataverse_client, respx_mock: MockRouter, dataverse_error_body
    ):
        respx_mock.get(host=HOST, path=f"{API}/plugintracelogs").mock(
            return_value=httpx.Response(403, json=dataverse_error_body)
        )

        result = await dataverse_client.get_plugin_trace_logs(ORG_URL)

        assert result == dataverse_error_body


@pytest.mark.unit
class TestGenericGet:
    async def test_no_options_means_no_query(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.get(host=HOST, path=f"{API}/accounts").mock(
            return_value=httpx.Response(200, json={"value": [{"name": "Fabrikam"}]})
        )

        result = await dataverse_client.get(ORG_URL, "accounts")

        assert result["value"][0]["name"] == "Fabrikam"
        request = route.calls.last.request
        assert request.url.query == b""
        assert request.headers["Accept"] == "application/json;odata.metadata=full"
        assert "OData.Community.Display.V1.FormattedValue" in request.headers["Prefer"]
        assert "Microsoft.Dynamics.CRM.lookuplogicalname" in request.headers["Prefer"]

    async def test_all_options_are_sent(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.get(host=HOST, path=f"{API}/contacts").mock(
            return_value=httpx.Response(200, json={"value": [], "@odata.count": 0})
        )

        await dataverse_client.get(
            ORG_URL, "contacts",
            select="fullname,emailaddress1",
            filter="statecode eq 0",
            top=10,
            expand="parentcustomerid_account($select=name)",
            orderby="createdon desc",
            apply="groupby((statecode))",
            count=True,
        )

        params = route.calls.last.request.url.params
        assert params["$select"] == "fullname,emailaddress1"
        assert params["$filter"] == "statecode eq 0"
        assert params["$top"] == "10"
        assert params["$expand"] == "parentcustomerid_account($select=name)"
        assert params["$orderby"] == "createdon desc"
        assert params["$apply"] == "groupby((statecode))"
        assert params["$count"] == "true"

    async def test_count_false_is_omitted(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.get(host=HOST, path=f"{API}/contacts").mock(
            return_value=httpx.Response(200, json={"value": []})
        )

        await dataverse_client.get(ORG_URL, "contacts", top=1, count=False)

        assert "$count" not in route.calls.last.request.url.params

    async def test_navigation_path_is_sent_unencoded(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.get(host=HOST).mock(
            return_value=httpx.Response(200, json={"value": []})
        )

        await dataverse_client.get(
            ORG_URL, "accounts(00000000-0000-0000-0000-000000000001)/contact_customer_accounts"
        )
        await dataverse_client.get(ORG_URL, "accounts/$count")

        paths = [call.request.url.raw_path for call in route.calls]
        assert paths == [
            b"/api/data/v9.2/accounts(00000000-0000-0000-0000-000000000001)/contact_customer_accounts",
            b"/api/data/v9.2/accounts/$count",
        ]

    async def test_alternate_key_predicate_kept(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.get(host=HOST).mock(
            return_value=httpx.Response(200, json={"name": "Fabrikam"})
        )

        await dataverse_client.get(ORG_URL, "accounts(accountnumber='AB 12')")

        assert route.calls.last.request.url.raw_path == (
            b"/api/data/v9.2/accounts(accountnumber='AB%2012')"
        )

    async def test_table_set_name_required(self, dataverse_client, respx_mock: MockRouter):
        with pytest.raises(ArgumentValidationError, match="Table set name must be provided"):
            await dataverse_client.get(ORG_URL, " ")

        assert len(respx_mock.calls) == 0


@pytest.mark.unit
class TestWorkflowActivation:
    async def test_activate_patches_state_and_status(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.patch(host=HOST, path=f"{API}/workflows({WORKFLOW_ID})").mock(
            return_value=httpx.Response(204)
        )

        await dataverse_client.set_workflow_activation(ORG_URL, WORKFLOW_ID, activate=True)

        request = route.calls.last.request
        assert json.loads(request.content) == {"statecode": 1, "statuscode": 2}
        assert request.headers["If-Match"] == "*"
        assert request.headers["Authorization"] == "Bearer mock_bearer_token_12345"

    async def test_deactivate_returns_to_draft(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.patch(host=HOST, path=f"{API}/workflows({WORKFLOW_ID})").mock(
            return_value=httpx.Response(204)
        )

        await dataverse_client.set_workflow_activation(ORG_URL, WORKFLOW_ID, activate=False)

        assert json.loads(route.calls.last.request.content) == {"statecode": 0, "statuscode": 1}

    async def test_activate_workflow_shorthand(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.patch(host=HOST, path=f"{API}/workflows({WORKFLOW_ID})").mock(
            return_value=httpx.Response(204)
        )

        await dataverse_client.activate_workflow(ORG_URL, WORKFLOW_ID)

        assert json.loads(route.calls.last.request.content)["statecode"] == 1

    async def test_failure_raises_with_status_and_body(self, dataverse_client, respx_mock: MockRouter):
        respx_mock.patch(host=HOST, path=f"{API}/workflows({WORKFLOW_ID})").mock(
            return_value=httpx.Response(400, text="Workflow must be in Published state")
        )

        with pytest.raises(RemoteRequestError) as exc_info:
            await dataverse_client.set_workflow_activation(ORG_URL, WORKFLOW_ID, activate=True)

        error = exc_info.value
        assert error.status_code == 400
        assert error.reason == "Bad Request"
        assert "Workflow must be in Published state" in str(error)

    async def test_nil_guid_rejected(self, dataverse_client, mock_auth_provider, respx_mock: MockRouter):
        with pytest.raises(ArgumentValidationError, match="valid workflowId"):
            await dataverse_client.set_workflow_activation(ORG_URL, UUID(int=0), activate=True)

        assert mock_auth_provider.requested_scopes == []
        assert len(respx_mock.calls) == 0


@pytest.mark.unit
class TestEntityDefinitions:
    async def test_entity_list(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.get(host=HOST, path=f"{API}/EntityDefinitions").mock(
            return_value=httpx.Response(200, json={"value": [{"LogicalName": "account"}]})
        )

        result = await dataverse_client.get_entity_list(ORG_URL)

        assert result["value"][0]["LogicalName"] == "account"
        assert route.calls.last.request.url.query == b""

    async def test_metadata_expands_attributes_by_default(
        self, dataverse_client, respx_mock: MockRouter
    ):
        route = respx_mock.get(
            host=HOST, path=f"{API}/EntityDefinitions(LogicalName='contact')"
        ).mock(return_value=httpx.Response(200, json={"LogicalName": "contact"}))

        await dataverse_client.get_entity_metadata(ORG_URL, "contact")

        assert route.calls.last.request.url.params["$expand"] == "Attributes"

    async def test_metadata_with_relationships(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.get(
            host=HOST, path=f"{API}/EntityDefinitions(LogicalName='account')"
        ).mock(return_value=httpx.Response(200, json={"LogicalName": "account"}))

        await dataverse_client.get_entity_metadata(
            ORG_URL, "account", include_attributes=True, include_relationships=True
        )

        assert route.calls.last.request.url.params["$expand"].split(",") == [
            "Attributes",
            "OneToManyRelationships",
            "ManyToOneRelationships",
            "ManyToManyRelationships",
        ]

    async def test_metadata_without_expansions(self, dataverse_client, respx_mock: MockRouter):
        route = respx_mock.get(
            host=HOST, path=f"{API}/EntityDefinitions(LogicalName='account')"
        ).mock(return_value=httpx.Response(200, json={"LogicalName": "account"}))

        await dataverse_client.get_entity_metadata(
            ORG_URL, "account", include_attributes=False, include_relationships=False
        )

        assert route.calls.last.request.url.query == b""

    async def test_unknown_entity_returns_error_document(self, dataverse_client, respx_mock: MockRouter):
        respx_mock.get(
            host=HOST, path=f"{API}/EntityDefinitions(LogicalName='nosuchentity')"
        ).mock(return_value=httpx.Response(404, text=""))

        result = await dataverse_client.get_entity_metadata(ORG_URL, "nosuchentity")

        assert result["error"]["code"] == 404
        assert result["error"]["message"] == "Not Found"
