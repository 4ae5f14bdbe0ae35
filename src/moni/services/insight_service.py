"""Document search and insight generation for the web layer.

Wraps the Discovery Engine and Gemini clients behind the two calls the
application needs, with caller-side retry for transient failures.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..api_clients.discovery_engine_client import DiscoveryEngineClient
from ..api_clients.generative_client import GenerativeClient
from ..api_clients.network_error_handler import NetworkErrorHandler, RetryConfig
from ..config import Config
from ..exceptions import APIClientError
from ..models.generative import Content, GenerateContentRequest, GenerationConfig
from ..models.search import (
    ContentSearchSpec,
    DiscoveryEngineSearchRequest,
    SearchRequest,
    SearchResult,
    SnippetSpec,
    SummarySpec,
)

logger = logging.getLogger(__name__)

NO_ANSWER = "no answer from Gemini"


@dataclass
class DocumentSearchResult:
    results: List[SearchResult] = field(default_factory=list)
    summary: Optional[str] = None


class InsightService:
    """Search documents and generate insight text."""

    def __init__(
        self,
        config: Config,
        discovery_client: DiscoveryEngineClient,
        generative_client: GenerativeClient,
        retry_config: Optional[RetryConfig] = None,
    ):
        self.config = config
        self.discovery_client = discovery_client
        self.generative_client = generative_client
        self.retry_config = retry_config or config.retry.to_retry_config()
        self._network_error_handler = NetworkErrorHandler()

    def _search_request(self, query: str) -> SearchRequest:
        gcp = self.config.google_cloud
        gen = self.config.generative
        return SearchRequest(
            project_id=gcp.project_id,
            collection=gcp.collection,
            engine_id=gcp.engine_id,
            serving_config=gcp.serving_config,
            location=gcp.location,
            search_request=DiscoveryEngineSearchRequest(
                query=query,
                page_size=gen.page_size,
                content_search_spec=ContentSearchSpec(
                    snippet_spec=SnippetSpec(
                        max_snippet_count=gen.snippet_count, return_snippet=True
                    ),
                    summary_spec=SummarySpec(
                        summary_result_count=gen.summary_result_count,
                        include_citations=True,
                        ignore_adversarial_query=True,
                        ignore_non_summary_seeking_query=True,
                    ),
                ),
            ),
        )

    async def search_documents(self, query: str) -> DocumentSearchResult:
        """Search the configured engine.

        Raises:
            ValueError: If ``query`` is blank
            APIClientError: If the search fails after retries
        """
        if not query or not query.strip():
            raise ValueError("Search query cannot be empty")

        request = self._search_request(query.strip())
        try:
            response = await self._network_error_handler.retry_with_backoff(
                lambda: self.discovery_client.search(request), self.retry_config
            )
        except APIClientError as e:
            logger.error(f"Document search failed for {query!r}: {e}")
            raise

        return DocumentSearchResult(
            results=list(response.results or []), summary=response.summary_text
        )

    async def generate_insight(self, prompt: str) -> str:
        """Generate text for ``prompt``; ``NO_ANSWER`` when the model returns none.

        Raises:
            APIClientError: If generation fails after retries
        """
        gen = self.config.generative
        generation_config = None
        if gen.temperature is not None or gen.max_output_tokens is not None:
            generation_config = GenerationConfig(
                temperature=gen.temperature, max_output_tokens=gen.max_output_tokens
            )
        request = GenerateContentRequest(
            contents=[Content.user_text(prompt)],
            generation_config=generation_config,
        )

        try:
            response = await self._network_error_handler.retry_with_backoff(
                lambda: self.generative_client.generate_content(request),
                self.retry_config,
            )
        except APIClientError as e:
            logger.error(f"Insight generation failed: {e}")
            raise

        text = response.text
        if text is None:
            logger.warning("Gemini returned no candidate text")
            return NO_ANSWER
        return text
