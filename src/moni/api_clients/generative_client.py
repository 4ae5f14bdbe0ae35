"""Vertex AI publisher model calls: Gemini generation and text embeddings."""

import logging
from typing import List, Optional

from ..models.generative import (
    Content,
    CountTokensRequest,
    CountTokensResponse,
    EmbedContentRequest,
    EmbedContentResponse,
    EmbeddingInstance,
    GenerateContentRequest,
    GenerateContentResponse,
    GenerationConfig,
)
from ..remote.url_validator import path_segment
from .base_client import AuthenticatedHttpClient
from .resource_client import ResourceClient

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-central1"
DEFAULT_MODEL = "gemini-1.5-flash-002"
DEFAULT_EMBEDDING_MODEL = "text-embedding-004"


def vertex_base_url(region: str) -> str:
    return f"https://{region}-aiplatform.googleapis.com"


class GenerativeClient(ResourceClient):
    """Client for one project/region of the Vertex AI publisher models."""

    def __init__(
        self,
        http_client: AuthenticatedHttpClient,
        project_id: str,
        region: str = DEFAULT_REGION,
        model: str = DEFAULT_MODEL,
        embedding_model: str = DEFAULT_EMBEDDING_MODEL,
        base_url: Optional[str] = None,
    ):
        super().__init__(http_client, base_url or vertex_base_url(region))
        self.project_id = project_id
        self.region = region
        self.model = model
        self.embedding_model = embedding_model

    def _model_url(self, model: str, method: str) -> str:
        return self._url(
            f"v1/projects/{path_segment(self.project_id)}"
            f"/locations/{path_segment(self.region)}"
            f"/publishers/google/models/{path_segment(model)}:{method}"
        )

    async def count_tokens(
        self, request: CountTokensRequest, model: Optional[str] = None
    ) -> CountTokensResponse:
        response = await self.http_client.post(
            self.scopes,
            self._model_url(model or self.model, "countTokens"),
            body=request,
        )
        return self._decode(response, CountTokensResponse)

    async def generate_content(
        self, request: GenerateContentRequest, model: Optional[str] = None
    ) -> GenerateContentResponse:
        response = await self.http_client.post(
            self.scopes,
            self._model_url(model or self.model, "generateContent"),
            body=request,
        )
        result = self._decode(response, GenerateContentResponse)
        if result.usage_metadata is not None:
            logger.debug(
                f"generateContent used {result.usage_metadata.total_token_count} tokens"
            )
        return result

    async def generate_text(
        self, prompt: str, generation_config: Optional[GenerationConfig] = None
    ) -> GenerateContentResponse:
        """Single user turn convenience wrapper around ``generate_content``."""
        return await self.generate_content(
            GenerateContentRequest(
                contents=[Content.user_text(prompt)],
                generation_config=generation_config,
            )
        )

    async def embed_content(
        self, request: EmbedContentRequest, model: Optional[str] = None
    ) -> EmbedContentResponse:
        response = await self.http_client.post(
            self.scopes,
            self._model_url(model or self.embedding_model, "predict"),
            body=request,
        )
        return self._decode(response, EmbedContentResponse)

    async def embed_texts(
        self, texts: List[str], task_type: Optional[str] = None
    ) -> List[List[float]]:
        request = EmbedContentRequest(
            instances=[EmbeddingInstance(content=t, task_type=task_type) for t in texts]
        )
        result = await self.embed_content(request)
        return result.vectors
