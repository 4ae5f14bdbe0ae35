"""Discovery Engine search and answer calls against engine serving configs."""

import logging

from ..models.answer import AnswerQueryResponse, AnswerRequest
from ..models.search import SearchRequest, SearchResponse
from ..remote.url_validator import path_segment
from .base_client import AuthenticatedHttpClient
from .data_store_client import DISCOVERY_ENGINE_BASE_URL, collection_path
from .resource_client import ResourceClient

logger = logging.getLogger(__name__)


def serving_config_path(
    project_id: str,
    location: str,
    collection: str,
    engine_id: str,
    serving_config: str,
) -> str:
    return (
        f"{collection_path(project_id, location, collection)}"
        f"/engines/{path_segment(engine_id)}"
        f"/servingConfigs/{path_segment(serving_config)}"
    )


class DiscoveryEngineClient(ResourceClient):
    """Client for the search and answer methods of an engine (app)."""

    def __init__(
        self,
        http_client: AuthenticatedHttpClient,
        base_url: str = DISCOVERY_ENGINE_BASE_URL,
    ):
        super().__init__(http_client, base_url)

    async def search(self, request: SearchRequest) -> SearchResponse:
        path = serving_config_path(
            request.project_id,
            request.location,
            request.collection,
            request.engine_id,
            request.serving_config,
        )
        response = await self.http_client.post(
            self.scopes,
            self._url(f"v1beta/{path}:search"),
            body=request.search_request,
        )
        result = self._decode(response, SearchResponse)
        logger.debug(f"Search returned {len(result.results or [])} results")
        return result

    async def answer(self, request: AnswerRequest) -> AnswerQueryResponse:
        """Ask a grounded question; the reply is wrapped in ``{"answer": ...}``."""
        path = serving_config_path(
            request.project_id,
            request.location,
            request.collection,
            request.engine_id,
            request.serving_config,
        )
        response = await self.http_client.post(
            self.scopes,
            self._url(f"v1beta/{path}:answer"),
            body=request.answer_request,
        )
        return self._decode(response, AnswerQueryResponse)
