"""Tests for DataStoreClient request shapes and response handling."""

import json

import httpx
import pytest

from moni.api_clients.data_store_client import DataStoreClient
from moni.exceptions import HttpStatusError, RedirectLoopError, ResponseDecodeError
from moni.models.data_store import (
    ConnectorEntity,
    ContentConfig,
    CreateDataStoreRequest,
    DataConnector,
    DataStore,
    DeleteDataStoreRequest,
    GetDataStoreRequest,
    IndustryVertical,
    SetupDataConnectorRequest,
    SolutionType,
)
from moni.models.documents import ListChunksRequest
from moni.models.search import ContentSearchSpec, SearchChunksRequest
from moni.remote.polling import PollStatus

BASE = "https://discoveryengine.googleapis.com"
DS_PATH = "projects/p/locations/global/collections/c/dataStores/ds1"
OPERATION_NAME = f"{DS_PATH}/operations/create-data-store-123"


@pytest.fixture
def client(make_http_client, recording_handler):
    return DataStoreClient(make_http_client(recording_handler))


class TestCreateDataStore:
    @pytest.mark.asyncio
    async def test_create_posts_camel_case_body_with_query_params(
        self, client, recording_handler
    ):
        recording_handler.responses.append(
            httpx.Response(200, json={"name": OPERATION_NAME})
        )
        request = CreateDataStoreRequest(
            project_id="p",
            collection="c",
            data_store_id="ds1",
            data_store=DataStore(
                display_name="Docs",
                industry_vertical=IndustryVertical.GENERIC,
                solution_types=[SolutionType.SOLUTION_TYPE_SEARCH],
                content_config=ContentConfig.CONTENT_REQUIRED,
            ),
        )

        operation = await client.create_data_store(request)

        sent = recording_handler.last_request
        assert sent.method == "POST"
        assert str(sent.url) == (
            f"{BASE}/v1beta/projects/p/locations/global/collections/c/dataStores"
            "?dataStoreId=ds1&createAdvancedSiteSearch=false"
        )
        assert recording_handler.last_json() == {
            "displayName": "Docs",
            "industryVertical": "GENERIC",
            "solutionTypes": ["SOLUTION_TYPE_SEARCH"],
            "contentConfig": "CONTENT_REQUIRED",
        }
        assert operation.name == OPERATION_NAME
        assert not operation.done

    @pytest.mark.asyncio
    async def test_conflict_surfaces_google_error_status(
        self, client, recording_handler
    ):
        body = json.dumps(
            {
                "error": {
                    "code": 409,
                    "message": "DataStore already exists",
                    "status": "ALREADY_EXISTS",
                }
            }
        )
        recording_handler.responses.append(httpx.Response(409, text=body))
        request = CreateDataStoreRequest(
            project_id="p", collection="c", data_store_id="ds1", data_store=DataStore()
        )

        with pytest.raises(HttpStatusError) as exc_info:
            await client.create_data_store(request)

        error = exc_info.value
        assert error.status_code == 409
        assert error.body == body
        assert error.error_status.status == "ALREADY_EXISTS"
        assert "already exists" in error.message
        assert not error.is_retryable


class TestGetAndDeleteDataStore:
    @pytest.mark.asyncio
    async def test_get_uses_data_store_resource_path(self, client, recording_handler):
        recording_handler.responses.append(
            httpx.Response(
                200,
                json={
                    "name": DS_PATH,
                    "displayName": "Docs",
                    "contentConfig": "CONTENT_REQUIRED",
                    "servingConfigDataStore": {"disabledForServing": False},
                },
            )
        )

        data_store = await client.get_data_store(
            GetDataStoreRequest(project_id="p", collection="c", data_store_id="ds1")
        )

        assert recording_handler.last_request.method == "GET"
        assert str(recording_handler.last_request.url) == f"{BASE}/v1/{DS_PATH}"
        assert data_store.display_name == "Docs"
        assert data_store.content_config is ContentConfig.CONTENT_REQUIRED
        # Unknown fields survive a re-encode.
        assert data_store.to_api_dict()["servingConfigDataStore"] == {
            "disabledForServing": False
        }

    @pytest.mark.asyncio
    async def test_delete_returns_operation(self, client, recording_handler):
        recording_handler.responses.append(
            httpx.Response(
                200,
                json={
                    "name": f"{DS_PATH}/operations/delete-1",
                    "metadata": {"@type": "type.googleapis.com/x.DeleteMetadata"},
                },
            )
        )

        operation = await client.delete_data_store(
            DeleteDataStoreRequest(project_id="p", collection="c", data_store_id="ds1")
        )

        assert recording_handler.last_request.method == "DELETE"
        assert str(recording_handler.last_request.url) == f"{BASE}/v1/{DS_PATH}"
        assert operation.operation_id == "delete-1"

    @pytest.mark.asyncio
    async def test_delete_missing_data_store_raises_404_with_verbatim_body(
        self, client, recording_handler
    ):
        body = (
            '{"error": {"code": 404, "message": "DataStore ds1 not found", '
            '"status": "NOT_FOUND"}}'
        )
        recording_handler.responses.append(httpx.Response(404, text=body))

        with pytest.raises(HttpStatusError) as exc_info:
            await client.delete_data_store(
                DeleteDataStoreRequest(
                    project_id="p", collection="c", data_store_id="ds1"
                )
            )

        error = exc_info.value
        assert error.status_code == 404
        assert error.body == body
        assert error.method == "DELETE"
        assert error.url == f"{BASE}/v1/{DS_PATH}"
        assert error.error_status.code == 404
        assert error.error_status.message == "DataStore ds1 not found"

    @pytest.mark.asyncio
    async def test_non_json_error_body_has_no_error_status(
        self, client, recording_handler
    ):
        recording_handler.responses.append(
            httpx.Response(502, text="<html>Bad Gateway</html>")
        )

        with pytest.raises(HttpStatusError) as exc_info:
            await client.get_data_store(
                GetDataStoreRequest(project_id="p", collection="c", data_store_id="ds1")
            )

        assert exc_info.value.error_status is None
        assert exc_info.value.body == "<html>Bad Gateway</html>"
        assert exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_success_body_not_matching_schema_raises_decode_error(
        self, client, recording_handler
    ):
        recording_handler.responses.append(httpx.Response(200, text='{"done": true}'))

        with pytest.raises(ResponseDecodeError) as exc_info:
            await client.delete_data_store(
                DeleteDataStoreRequest(
                    project_id="p", collection="c", data_store_id="ds1"
                )
            )

        assert exc_info.value.target == "Operation"
        assert exc_info.value.body == '{"done": true}'


class TestDataConnector:
    @pytest.mark.asyncio
    async def test_setup_posts_to_location_method(self, client, recording_handler):
        recording_handler.responses.append(
            httpx.Response(200, json={"name": "projects/p/locations/global/operations/c1"})
        )
        request = SetupDataConnectorRequest(
            project_id="p",
            collection_id="drive-collection",
            collection_display_name="Drive",
            data_connector=DataConnector(
                data_source="google_drive",
                refresh_interval="86400s",
                entities=[ConnectorEntity(entity_name="file")],
            ),
        )

        operation = await client.setup_data_connector(request)

        assert str(recording_handler.last_request.url) == (
            f"{BASE}/v1alpha/projects/p/locations/global:setUpDataConnector"
        )
        assert recording_handler.last_json() == {
            "collectionId": "drive-collection",
            "collectionDisplayName": "Drive",
            "dataConnector": {
                "dataSource": "google_drive",
                "refreshInterval": "86400s",
                "entities": [{"entityName": "file"}],
            },
        }
        assert operation.operation_id == "c1"


class TestChunks:
    @pytest.mark.asyncio
    async def test_list_chunks_paging_params(self, client, recording_handler):
        recording_handler.responses.append(
            httpx.Response(
                200,
                json={
                    "chunks": [
                        {
                            "id": "c1",
                            "content": "First chunk",
                            "pageSpan": {"pageStart": 1, "pageEnd": 2},
                        }
                    ],
                    "nextPageToken": "tok2",
                },
            )
        )

        result = await client.list_chunks(
            ListChunksRequest(
                project_id="p",
                collection="c",
                data_store_id="ds1",
                branch="default_branch",
                document_id="doc-1",
                page_size=50,
                page_token="tok1",
            )
        )

        assert str(recording_handler.last_request.url) == (
            f"{BASE}/v1alpha/{DS_PATH}/branches/default_branch/documents/doc-1/chunks"
            "?pageSize=50&pageToken=tok1"
        )
        assert result.chunks[0].page_span.page_end == 2
        assert result.next_page_token == "tok2"

    @pytest.mark.asyncio
    async def test_search_chunks_forces_chunk_mode(self, client, recording_handler):
        recording_handler.responses.append(
            httpx.Response(
                200,
                json={
                    "results": [
                        {"chunk": {"id": "c9", "content": "match", "relevanceScore": 0.8}}
                    ],
                    "totalSize": 1,
                },
            )
        )

        result = await client.search_chunks(
            SearchChunksRequest(
                project_id="p",
                collection="c",
                data_store_id="ds1",
                serving_config="default_search",
                query="quarterly revenue",
                page_size=5,
                content_search_spec=ContentSearchSpec(),
            )
        )

        assert recording_handler.last_request.method == "POST"
        assert str(recording_handler.last_request.url) == (
            f"{BASE}/v1alpha/{DS_PATH}/servingConfigs/default_search:search"
        )
        assert recording_handler.last_json() == {
            "query": "quarterly revenue",
            "pageSize": 5,
            "contentSearchSpec": {"searchResultMode": "CHUNKS"},
        }
        assert result.results[0].chunk.relevance_score == 0.8


class TestOperations:
    @pytest.mark.asyncio
    async def test_get_operation_by_full_name(self, client, recording_handler):
        recording_handler.responses.append(
            httpx.Response(200, json={"name": OPERATION_NAME, "done": True})
        )

        operation = await client.get_operation(OPERATION_NAME)

        assert str(recording_handler.last_request.url) == f"{BASE}/v1/{OPERATION_NAME}"
        assert operation.succeeded

    @pytest.mark.asyncio
    async def test_poll_operation_until_done(self, client, recording_handler):
        recording_handler.responses.extend(
            [
                httpx.Response(200, json={"name": OPERATION_NAME}),
                httpx.Response(200, json={"name": OPERATION_NAME, "done": False}),
                httpx.Response(
                    200,
                    json={
                        "name": OPERATION_NAME,
                        "done": True,
                        "response": {"name": DS_PATH},
                    },
                ),
            ]
        )

        result = await client.poll_operation(
            OPERATION_NAME, max_retries=3, interval_seconds=0
        )

        assert result.status is PollStatus.COMPLETED
        assert result.attempts == 3
        assert result.operation.response == {"name": DS_PATH}
        assert len(recording_handler.requests) == 3

    @pytest.mark.asyncio
    async def test_poll_operation_fetch_failure(self, client, recording_handler):
        recording_handler.responses.append(httpx.Response(403, text="denied"))

        result = await client.poll_operation(OPERATION_NAME, interval_seconds=0)

        assert result.status is PollStatus.FAILED
        assert isinstance(result.error, HttpStatusError)
        assert result.error.status_code == 403

    @pytest.mark.asyncio
    async def test_poll_operation_redirect_loop_fails(self, make_http_client):
        def handler(request):
            return httpx.Response(302, headers={"Location": str(request.url)})

        client = DataStoreClient(make_http_client(handler))

        result = await client.poll_operation(
            OPERATION_NAME, max_retries=3, interval_seconds=0
        )

        assert result.status is PollStatus.FAILED
        assert result.attempts == 1
        assert isinstance(result.error, RedirectLoopError)

    @pytest.mark.asyncio
    async def test_poll_operation_undecodable_body_fails(
        self, client, recording_handler
    ):
        recording_handler.responses.append(
            httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, content=b"notgzip"
            )
        )

        result = await client.poll_operation(
            OPERATION_NAME, max_retries=3, interval_seconds=0
        )

        assert result.status is PollStatus.FAILED
        assert isinstance(result.error, ResponseDecodeError)
        assert len(recording_handler.requests) == 1


class TestPathEncoding:
    @pytest.mark.asyncio
    async def test_reserved_characters_in_ids_stay_in_their_segment(
        self, client, recording_handler
    ):
        recording_handler.responses.append(httpx.Response(200, json={}))

        await client.get_data_store(
            GetDataStoreRequest(
                project_id="p", collection="c", data_store_id="ds1?x=1#frag"
            )
        )

        url = recording_handler.last_request.url
        assert str(url) == (
            f"{BASE}/v1/projects/p/locations/global/collections/c"
            "/dataStores/ds1%3Fx%3D1%23frag"
        )
        assert url.query == b""
        assert url.fragment == ""

    @pytest.mark.asyncio
    async def test_slash_in_document_id_is_escaped(self, client, recording_handler):
        recording_handler.responses.append(httpx.Response(200, json={"chunks": []}))

        await client.list_chunks(
            ListChunksRequest(
                project_id="p",
                collection="c",
                data_store_id="ds1",
                branch="default_branch",
                document_id="../../other",
            )
        )

        assert str(recording_handler.last_request.url) == (
            f"{BASE}/v1alpha/{DS_PATH}/branches/default_branch"
            "/documents/..%2F..%2Fother/chunks"
        )

    @pytest.mark.asyncio
    async def test_operation_name_keeps_slashes_but_escapes_query(
        self, client, recording_handler
    ):
        recording_handler.responses.append(
            httpx.Response(200, json={"name": "projects/p/operations/op?1"})
        )

        await client.get_operation("projects/p/operations/op?1")

        assert str(recording_handler.last_request.url) == (
            f"{BASE}/v1/projects/p/operations/op%3F1"
        )
