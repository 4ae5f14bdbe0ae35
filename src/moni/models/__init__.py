"""Typed request/response schemas for the Google Cloud REST resources.

One module per resource family; every model serializes to the camelCase wire
format through ``ApiModel.to_api_dict``.
"""

from .base import ApiModel
from .operations import Operation, OperationStatus
from .data_store import (
    DEFAULT_LOCATION,
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
from .documents import Chunk, Document, ListChunksRequest, ListChunksResponse
from .search import (
    ContentSearchSpec,
    DiscoveryEngineSearchRequest,
    SearchChunksRequest,
    SearchRequest,
    SearchResponse,
    SearchResult,
    SearchResultMode,
    SnippetSpec,
    SummarySpec,
)
from .answer import (
    Answer,
    AnswerQuery,
    AnswerQueryResponse,
    AnswerRequest,
    DiscoveryEngineAnswerRequest,
)
from .generative import (
    Content,
    CountTokensRequest,
    CountTokensResponse,
    EmbedContentRequest,
    EmbedContentResponse,
    EmbeddingInstance,
    GenerateContentRequest,
    GenerateContentResponse,
    GenerationConfig,
    Part,
)

__all__ = [
    "ApiModel",
    # Operations
    "Operation",
    "OperationStatus",
    # Data stores
    "DEFAULT_LOCATION",
    "ContentConfig",
    "CreateDataStoreRequest",
    "DataConnector",
    "DataStore",
    "DeleteDataStoreRequest",
    "GetDataStoreRequest",
    "IndustryVertical",
    "SetupDataConnectorRequest",
    "SolutionType",
    # Documents and chunks
    "Chunk",
    "Document",
    "ListChunksRequest",
    "ListChunksResponse",
    # Search
    "ContentSearchSpec",
    "DiscoveryEngineSearchRequest",
    "SearchChunksRequest",
    "SearchRequest",
    "SearchResponse",
    "SearchResult",
    "SearchResultMode",
    "SnippetSpec",
    "SummarySpec",
    # Answer
    "Answer",
    "AnswerQuery",
    "AnswerQueryResponse",
    "AnswerRequest",
    "DiscoveryEngineAnswerRequest",
    # Generative
    "Content",
    "CountTokensRequest",
    "CountTokensResponse",
    "EmbedContentRequest",
    "EmbedContentResponse",
    "EmbeddingInstance",
    "GenerateContentRequest",
    "GenerateContentResponse",
    "GenerationConfig",
    "Part",
]
