"""Discovery Engine data store, chunk and operation calls."""

import asyncio
import logging
from typing import Optional, Union

from ..models.data_store import (
    CreateDataStoreRequest,
    DataStore,
    DeleteDataStoreRequest,
    GetDataStoreRequest,
    SetupDataConnectorRequest,
)
from ..models.documents import ListChunksRequest, ListChunksResponse
from ..models.operations import Operation
from ..models.search import SearchChunksRequest, SearchResponse
from ..remote.polling import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_MAX_RETRIES,
    OperationPoller,
    PollResult,
    ProgressCallback,
)
from ..remote.url_validator import path_segment, resource_name_path
from .base_client import AuthenticatedHttpClient
from .resource_client import ResourceClient

logger = logging.getLogger(__name__)

DISCOVERY_ENGINE_BASE_URL = "https://discoveryengine.googleapis.com"


def collection_path(project_id: str, location: str, collection: str) -> str:
    return (
        f"projects/{path_segment(project_id)}/locations/{path_segment(location)}"
        f"/collections/{path_segment(collection)}"
    )


def data_store_path(
    project_id: str, location: str, collection: str, data_store_id: str
) -> str:
    return (
        f"{collection_path(project_id, location, collection)}"
        f"/dataStores/{path_segment(data_store_id)}"
    )


class DataStoreClient(ResourceClient):
    """Client for data stores, connectors, chunks and their operations."""

    def __init__(
        self,
        http_client: AuthenticatedHttpClient,
        base_url: str = DISCOVERY_ENGINE_BASE_URL,
    ):
        super().__init__(http_client, base_url)

    async def create_data_store(self, request: CreateDataStoreRequest) -> Operation:
        """Start creating a data store.

        Returns:
            Operation tracking the creation
        """
        parent = collection_path(
            request.project_id, request.location, request.collection
        )
        url = self._url(f"v1beta/{parent}/dataStores")
        response = await self.http_client.post(
            self.scopes,
            url,
            body=request.data_store,
            query_params={
                "dataStoreId": request.data_store_id,
                "createAdvancedSiteSearch": request.create_advanced_site_search,
            },
        )
        operation = self._decode(response, Operation)
        logger.info(f"Data store creation started: {operation.name}")
        return operation

    async def get_data_store(self, request: GetDataStoreRequest) -> DataStore:
        path = data_store_path(
            request.project_id,
            request.location,
            request.collection,
            request.data_store_id,
        )
        response = await self.http_client.get(self.scopes, self._url(f"v1/{path}"))
        return self._decode(response, DataStore)

    async def delete_data_store(self, request: DeleteDataStoreRequest) -> Operation:
        """Start deleting a data store.

        Raises:
            HttpStatusError: 404 when the data store does not exist
        """
        path = data_store_path(
            request.project_id,
            request.location,
            request.collection,
            request.data_store_id,
        )
        response = await self.http_client.delete(self.scopes, self._url(f"v1/{path}"))
        operation = self._decode(response, Operation)
        logger.info(f"Data store deletion started: {operation.name}")
        return operation

    async def setup_data_connector(
        self, request: SetupDataConnectorRequest
    ) -> Operation:
        """Create a collection with a data connector syncing into it."""
        url = self._url(
            f"v1alpha/projects/{path_segment(request.project_id)}"
            f"/locations/{path_segment(request.location)}"
            ":setUpDataConnector"
        )
        response = await self.http_client.post(self.scopes, url, body=request.body())
        return self._decode(response, Operation)

    async def list_chunks(self, request: ListChunksRequest) -> ListChunksResponse:
        path = data_store_path(
            request.project_id,
            request.location,
            request.collection,
            request.data_store_id,
        )
        url = self._url(
            f"v1alpha/{path}/branches/{path_segment(request.branch)}"
            f"/documents/{path_segment(request.document_id)}/chunks"
        )
        response = await self.http_client.get(
            self.scopes,
            url,
            query_params={
                "pageSize": request.page_size,
                "pageToken": request.page_token,
            },
        )
        return self._decode(response, ListChunksResponse)

    async def search_chunks(self, request: SearchChunksRequest) -> SearchResponse:
        """Search a data store serving config in chunk mode."""
        path = data_store_path(
            request.project_id,
            request.location,
            request.collection,
            request.data_store_id,
        )
        url = self._url(
            f"v1alpha/{path}/servingConfigs/{path_segment(request.serving_config)}"
            ":search"
        )
        response = await self.http_client.post(self.scopes, url, body=request.body())
        return self._decode(response, SearchResponse)

    async def get_operation(self, name: str) -> Operation:
        """Fetch a snapshot of a long-running operation by full resource name."""
        response = await self.http_client.get(
            self.scopes, self._url(f"v1/{resource_name_path(name)}")
        )
        return self._decode(response, Operation)

    async def poll_operation(
        self,
        operation: Union[Operation, str],
        max_retries: int = DEFAULT_MAX_RETRIES,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        cancel_event: Optional[asyncio.Event] = None,
        deadline_seconds: Optional[float] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> PollResult:
        """Poll ``operation`` through this client's ``get_operation``."""
        poller = OperationPoller(self, progress_callback=progress_callback)
        return await poller.poll(
            operation,
            max_retries=max_retries,
            interval_seconds=interval_seconds,
            cancel_event=cancel_event,
            deadline_seconds=deadline_seconds,
        )
