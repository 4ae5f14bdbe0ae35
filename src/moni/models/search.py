"""Discovery Engine ``servingConfigs.search`` request and response schemas."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .base import ApiModel
from .data_store import DEFAULT_LOCATION
from .documents import Chunk, Document


class SearchResultMode(str, Enum):
    SEARCH_RESULT_MODE_UNSPECIFIED = "SEARCH_RESULT_MODE_UNSPECIFIED"
    DOCUMENTS = "DOCUMENTS"
    CHUNKS = "CHUNKS"


class QueryExpansionCondition(str, Enum):
    CONDITION_UNSPECIFIED = "CONDITION_UNSPECIFIED"
    DISABLED = "DISABLED"
    AUTO = "AUTO"


class SpellCorrectionMode(str, Enum):
    MODE_UNSPECIFIED = "MODE_UNSPECIFIED"
    SUGGESTION_ONLY = "SUGGESTION_ONLY"
    AUTO = "AUTO"


class SearchAsYouTypeCondition(str, Enum):
    CONDITION_UNSPECIFIED = "CONDITION_UNSPECIFIED"
    DISABLED = "DISABLED"
    ENABLED = "ENABLED"


# Request side -----------------------------------------------------------


class ImageQuery(ApiModel):
    image_bytes: Optional[str] = None


class DataStoreSpec(ApiModel):
    data_store: str


class UserInfo(ApiModel):
    user_id: Optional[str] = None
    user_agent: Optional[str] = None


class Interval(ApiModel):
    minimum: Optional[float] = None
    exclusive_minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusive_maximum: Optional[float] = None


class FacetKey(ApiModel):
    key: str
    intervals: Optional[List[Interval]] = None
    restricted_values: Optional[List[str]] = None
    prefixes: Optional[List[str]] = None
    contains: Optional[List[str]] = None
    case_insensitive: Optional[bool] = None
    order_by: Optional[str] = None


class FacetSpec(ApiModel):
    facet_key: FacetKey
    limit: Optional[int] = None
    excluded_filter_keys: Optional[List[str]] = None
    enable_dynamic_position: Optional[bool] = None


class ConditionBoostSpec(ApiModel):
    condition: str
    boost: float


class BoostSpec(ApiModel):
    condition_boost_specs: List[ConditionBoostSpec] = []


class QueryExpansionSpec(ApiModel):
    condition: Optional[QueryExpansionCondition] = None
    pin_unexpanded_results: Optional[bool] = None


class SpellCorrectionSpec(ApiModel):
    mode: Optional[SpellCorrectionMode] = None


class SnippetSpec(ApiModel):
    max_snippet_count: Optional[int] = None
    reference_only: Optional[bool] = None
    return_snippet: Optional[bool] = None


class ModelPromptSpec(ApiModel):
    preamble: Optional[str] = None


class ModelSpec(ApiModel):
    version: Optional[str] = None


class SummarySpec(ApiModel):
    summary_result_count: Optional[int] = None
    include_citations: Optional[bool] = None
    ignore_adversarial_query: Optional[bool] = None
    ignore_non_summary_seeking_query: Optional[bool] = None
    model_prompt_spec: Optional[ModelPromptSpec] = None
    language_code: Optional[str] = None
    model_spec: Optional[ModelSpec] = None
    use_semantic_chunks: Optional[bool] = None


class ExtractiveContentSpec(ApiModel):
    max_extractive_answer_count: Optional[int] = None
    max_extractive_segment_count: Optional[int] = None
    return_extractive_segment_score: Optional[bool] = None
    num_previous_segments: Optional[int] = None
    num_next_segments: Optional[int] = None


class ChunkSpec(ApiModel):
    num_previous_chunks: Optional[int] = None
    num_next_chunks: Optional[int] = None


class ContentSearchSpec(ApiModel):
    snippet_spec: Optional[SnippetSpec] = None
    summary_spec: Optional[SummarySpec] = None
    extractive_content_spec: Optional[ExtractiveContentSpec] = None
    search_result_mode: Optional[SearchResultMode] = None
    chunk_spec: Optional[ChunkSpec] = None


class SearchAsYouTypeSpec(ApiModel):
    condition: Optional[SearchAsYouTypeCondition] = None


class SessionSpec(ApiModel):
    query_id: Optional[str] = None
    search_result_persistence_count: Optional[int] = None


class DiscoveryEngineSearchRequest(ApiModel):
    """Body of a ``:search`` call; the serving config travels in the URL."""

    branch: Optional[str] = None
    query: Optional[str] = None
    image_query: Optional[ImageQuery] = None
    page_size: Optional[int] = None
    page_token: Optional[str] = None
    offset: Optional[int] = None
    data_store_specs: Optional[List[DataStoreSpec]] = None
    filter: Optional[str] = None
    canonical_filter: Optional[str] = None
    order_by: Optional[str] = None
    user_info: Optional[UserInfo] = None
    language_code: Optional[str] = None
    facet_specs: Optional[List[FacetSpec]] = None
    boost_spec: Optional[BoostSpec] = None
    params: Optional[Dict[str, Any]] = None
    query_expansion_spec: Optional[QueryExpansionSpec] = None
    spell_correction_spec: Optional[SpellCorrectionSpec] = None
    user_pseudo_id: Optional[str] = None
    content_search_spec: Optional[ContentSearchSpec] = None
    safe_search: Optional[bool] = None
    user_labels: Optional[Dict[str, str]] = None
    search_as_you_type_spec: Optional[SearchAsYouTypeSpec] = None
    session: Optional[str] = None
    session_spec: Optional[SessionSpec] = None


# Response side ----------------------------------------------------------


class DoubleList(ApiModel):
    values: Optional[List[float]] = None


class SearchResult(ApiModel):
    id: Optional[str] = None
    document: Optional[Document] = None
    chunk: Optional[Chunk] = None
    model_scores: Optional[Dict[str, DoubleList]] = None


class FacetValue(ApiModel):
    value: Optional[str] = None
    interval: Optional[Interval] = None
    count: Optional[str] = None


class Facet(ApiModel):
    key: Optional[str] = None
    values: Optional[List[FacetValue]] = None
    dynamic_facet: Optional[bool] = None


class RefinementAttribute(ApiModel):
    attribute_key: Optional[str] = None
    attribute_value: Optional[str] = None


class GuidedSearchResult(ApiModel):
    refinement_attributes: Optional[List[RefinementAttribute]] = None
    follow_up_questions: Optional[List[str]] = None


class CitationSource(ApiModel):
    reference_index: Optional[str] = None


class Citation(ApiModel):
    start_index: Optional[str] = None
    end_index: Optional[str] = None
    sources: Optional[List[CitationSource]] = None


class CitationMetadata(ApiModel):
    citations: Optional[List[Citation]] = None


class SummaryChunkContent(ApiModel):
    content: Optional[str] = None
    page_identifier: Optional[str] = None


class SummaryReference(ApiModel):
    title: Optional[str] = None
    document: Optional[str] = None
    uri: Optional[str] = None
    chunk_contents: Optional[List[SummaryChunkContent]] = None


class SummaryWithMetadata(ApiModel):
    summary: Optional[str] = None
    citation_metadata: Optional[CitationMetadata] = None
    references: Optional[List[SummaryReference]] = None


class SafetyAttributes(ApiModel):
    categories: Optional[List[str]] = None
    scores: Optional[List[float]] = None


class Summary(ApiModel):
    summary_text: Optional[str] = None
    # Values such as ADVERSARIAL_QUERY_IGNORED; kept as strings because the
    # service keeps adding reasons.
    summary_skipped_reasons: Optional[List[str]] = None
    safety_attributes: Optional[SafetyAttributes] = None
    summary_with_metadata: Optional[SummaryWithMetadata] = None


class QueryExpansionInfo(ApiModel):
    expanded_query: Optional[bool] = None
    pinned_result_count: Optional[str] = None


class SessionInfo(ApiModel):
    name: Optional[str] = None
    query_id: Optional[str] = None


class SearchResponse(ApiModel):
    results: Optional[List[SearchResult]] = None
    facets: Optional[List[Facet]] = None
    guided_search_result: Optional[GuidedSearchResult] = None
    total_size: Optional[int] = None
    attribution_token: Optional[str] = None
    redirect_uri: Optional[str] = None
    next_page_token: Optional[str] = None
    corrected_query: Optional[str] = None
    summary: Optional[Summary] = None
    applied_controls: Optional[List[str]] = None
    query_expansion_info: Optional[QueryExpansionInfo] = None
    session_info: Optional[SessionInfo] = None

    @property
    def summary_text(self) -> Optional[str]:
        if self.summary is None or not self.summary.summary_text:
            return None
        return self.summary.summary_text


# Path parameters --------------------------------------------------------


@dataclass
class SearchRequest:
    """Search against an engine (app) serving config."""

    project_id: str
    collection: str
    engine_id: str
    serving_config: str
    search_request: DiscoveryEngineSearchRequest
    location: str = DEFAULT_LOCATION


@dataclass
class SearchChunksRequest:
    """Chunk-mode search against a single data store serving config."""

    project_id: str
    collection: str
    data_store_id: str
    serving_config: str
    query: str
    page_size: Optional[int] = None
    page_token: Optional[str] = None
    offset: Optional[int] = None
    filter: Optional[str] = None
    order_by: Optional[str] = None
    content_search_spec: Optional[ContentSearchSpec] = None
    location: str = DEFAULT_LOCATION

    def body(self) -> DiscoveryEngineSearchRequest:
        spec = (
            self.content_search_spec.model_copy()
            if self.content_search_spec is not None
            else ContentSearchSpec()
        )
        spec.search_result_mode = SearchResultMode.CHUNKS
        return DiscoveryEngineSearchRequest(
            query=self.query,
            page_size=self.page_size,
            page_token=self.page_token,
            offset=self.offset,
            filter=self.filter,
            order_by=self.order_by,
            content_search_spec=spec,
        )
