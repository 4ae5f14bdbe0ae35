"""Discovery Engine ``servingConfigs.answer`` request and response schemas."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .base import ApiModel
from .data_store import DEFAULT_LOCATION
from .search import (
    BoostSpec,
    DataStoreSpec,
    ModelPromptSpec,
    ModelSpec,
    SearchResultMode,
)


class AnswerState(str, Enum):
    STATE_UNSPECIFIED = "STATE_UNSPECIFIED"
    IN_PROGRESS = "IN_PROGRESS"
    FAILED = "FAILED"
    SUCCEEDED = "SUCCEEDED"


# Request side -----------------------------------------------------------


class AnswerQuery(ApiModel):
    text: Optional[str] = None
    query_id: Optional[str] = None


class SafetySpec(ApiModel):
    enable: Optional[bool] = None


class RelatedQuestionsSpec(ApiModel):
    enable: Optional[bool] = None


class AnswerGenerationSpec(ApiModel):
    model_spec: Optional[ModelSpec] = None
    prompt_spec: Optional[ModelPromptSpec] = None
    include_citations: Optional[bool] = None
    answer_language_code: Optional[str] = None
    ignore_adversarial_query: Optional[bool] = None
    ignore_non_answer_seeking_query: Optional[bool] = None
    ignore_low_relevant_content: Optional[bool] = None


class SearchParams(ApiModel):
    max_return_results: Optional[int] = None
    filter: Optional[str] = None
    boost_spec: Optional[BoostSpec] = None
    order_by: Optional[str] = None
    search_result_mode: Optional[SearchResultMode] = None
    data_store_specs: Optional[List[DataStoreSpec]] = None


class PageContent(ApiModel):
    page_identifier: Optional[str] = None
    content: Optional[str] = None


class UnstructuredDocumentInfo(ApiModel):
    document: Optional[str] = None
    uri: Optional[str] = None
    title: Optional[str] = None
    document_contexts: Optional[List[PageContent]] = None
    extractive_segments: Optional[List[PageContent]] = None
    extractive_answers: Optional[List[PageContent]] = None


class ChunkInfo(ApiModel):
    chunk: Optional[str] = None
    content: Optional[str] = None


class AnswerSearchResult(ApiModel):
    unstructured_document_info: Optional[UnstructuredDocumentInfo] = None
    chunk_info: Optional[ChunkInfo] = None


class SearchResultList(ApiModel):
    search_results: List[AnswerSearchResult] = []


class AnswerSearchSpec(ApiModel):
    """Either live search parameters or a caller-supplied result list."""

    search_params: Optional[SearchParams] = None
    search_result_list: Optional[SearchResultList] = None


class DiscoveryEngineAnswerRequest(ApiModel):
    query: AnswerQuery
    session: Optional[str] = None
    safety_spec: Optional[SafetySpec] = None
    related_questions_spec: Optional[RelatedQuestionsSpec] = None
    answer_generation_spec: Optional[AnswerGenerationSpec] = None
    search_spec: Optional[AnswerSearchSpec] = None
    user_pseudo_id: Optional[str] = None


# Response side ----------------------------------------------------------


class AnswerCitationSource(ApiModel):
    reference_id: Optional[str] = None


class AnswerCitation(ApiModel):
    start_index: Optional[str] = None
    end_index: Optional[str] = None
    sources: Optional[List[AnswerCitationSource]] = None


class AnswerChunkContent(ApiModel):
    content: Optional[str] = None
    page_identifier: Optional[str] = None
    relevance_score: Optional[float] = None


class ReferencedUnstructuredDocument(ApiModel):
    document: Optional[str] = None
    uri: Optional[str] = None
    title: Optional[str] = None
    chunk_contents: Optional[List[AnswerChunkContent]] = None
    struct_data: Optional[Dict[str, Any]] = None


class AnswerDocumentMetadata(ApiModel):
    document: Optional[str] = None
    uri: Optional[str] = None
    title: Optional[str] = None
    page_identifier: Optional[str] = None
    struct_data: Optional[Dict[str, Any]] = None


class ReferencedChunk(ApiModel):
    chunk: Optional[str] = None
    content: Optional[str] = None
    relevance_score: Optional[float] = None
    document_metadata: Optional[AnswerDocumentMetadata] = None


class ReferencedStructuredDocument(ApiModel):
    document: Optional[str] = None
    struct_data: Optional[Dict[str, Any]] = None


class AnswerReference(ApiModel):
    """One source backing the answer; only one of the three infos is set."""

    unstructured_document_info: Optional[ReferencedUnstructuredDocument] = None
    chunk_info: Optional[ReferencedChunk] = None
    structured_document_info: Optional[ReferencedStructuredDocument] = None


class StepObservation(ApiModel):
    search_results: Optional[List[Dict[str, Any]]] = None


class StepAction(ApiModel):
    search_action: Optional[Dict[str, Any]] = None
    observation: Optional[StepObservation] = None


class AnswerStep(ApiModel):
    state: Optional[AnswerState] = None
    description: Optional[str] = None
    thought: Optional[str] = None
    actions: Optional[List[StepAction]] = None


class Answer(ApiModel):
    name: Optional[str] = None
    state: Optional[AnswerState] = None
    answer_text: Optional[str] = None
    citations: Optional[List[AnswerCitation]] = None
    references: Optional[List[AnswerReference]] = None
    related_questions: Optional[List[str]] = None
    steps: Optional[List[AnswerStep]] = None
    answer_skipped_reasons: Optional[List[str]] = None
    create_time: Optional[str] = None
    complete_time: Optional[str] = None


class AnswerQueryResponse(ApiModel):
    answer: Optional[Answer] = None
    session: Optional[Dict[str, Any]] = None
    answer_query_token: Optional[str] = None

    @property
    def answer_text(self) -> Optional[str]:
        if self.answer is None:
            return None
        return self.answer.answer_text


# Path parameters --------------------------------------------------------


@dataclass
class AnswerRequest:
    project_id: str
    collection: str
    engine_id: str
    serving_config: str
    answer_request: DiscoveryEngineAnswerRequest
    location: str = DEFAULT_LOCATION
