"""Vertex AI generative model schemas (Gemini and text embeddings)."""

from typing import Any, Dict, List, Optional

from pydantic import ConfigDict

from .base import ApiModel


class Blob(ApiModel):
    mime_type: str
    data: str


class FileData(ApiModel):
    mime_type: str
    file_uri: str


class Part(ApiModel):
    text: Optional[str] = None
    inline_data: Optional[Blob] = None
    file_data: Optional[FileData] = None


class Content(ApiModel):
    role: Optional[str] = None
    parts: List[Part] = []

    @classmethod
    def user_text(cls, text: str) -> "Content":
        return cls(role="user", parts=[Part(text=text)])

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.parts if part.text)


class GenerationConfig(ApiModel):
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    candidate_count: Optional[int] = None
    max_output_tokens: Optional[int] = None
    stop_sequences: Optional[List[str]] = None
    response_mime_type: Optional[str] = None


class SafetySetting(ApiModel):
    category: str
    threshold: str


class GenerateContentRequest(ApiModel):
    contents: List[Content]
    system_instruction: Optional[Content] = None
    generation_config: Optional[GenerationConfig] = None
    safety_settings: Optional[List[SafetySetting]] = None
    tools: Optional[List[Dict[str, Any]]] = None


class SafetyRating(ApiModel):
    category: Optional[str] = None
    probability: Optional[str] = None
    blocked: Optional[bool] = None


class Candidate(ApiModel):
    index: Optional[int] = None
    content: Optional[Content] = None
    finish_reason: Optional[str] = None
    safety_ratings: Optional[List[SafetyRating]] = None
    citation_metadata: Optional[Dict[str, Any]] = None


class UsageMetadata(ApiModel):
    prompt_token_count: Optional[int] = None
    candidates_token_count: Optional[int] = None
    total_token_count: Optional[int] = None


class GenerateContentResponse(ApiModel):
    candidates: List[Candidate] = []
    usage_metadata: Optional[UsageMetadata] = None
    model_version: Optional[str] = None
    prompt_feedback: Optional[Dict[str, Any]] = None

    @property
    def text(self) -> Optional[str]:
        """Text of the first candidate, or None when it carries no text."""
        if not self.candidates or self.candidates[0].content is None:
            return None
        return self.candidates[0].content.text or None


class CountTokensRequest(ApiModel):
    contents: List[Content]


class CountTokensResponse(ApiModel):
    total_tokens: int = 0
    total_billable_characters: Optional[int] = None


# The text-embedding ``predict`` endpoint uses snake_case keys on the wire.


class EmbeddingInstance(ApiModel):
    model_config = ConfigDict(alias_generator=None)

    content: str
    task_type: Optional[str] = None
    title: Optional[str] = None


class EmbeddingParameters(ApiModel):
    model_config = ConfigDict(alias_generator=None)

    auto_truncate: Optional[bool] = None
    output_dimensionality: Optional[int] = None


class EmbedContentRequest(ApiModel):
    instances: List[EmbeddingInstance]
    parameters: Optional[EmbeddingParameters] = None


class EmbeddingStatistics(ApiModel):
    model_config = ConfigDict(alias_generator=None)

    token_count: Optional[int] = None
    truncated: Optional[bool] = None


class Embedding(ApiModel):
    values: List[float] = []
    statistics: Optional[EmbeddingStatistics] = None


class EmbeddingPrediction(ApiModel):
    embeddings: Embedding


class EmbedContentResponse(ApiModel):
    predictions: List[EmbeddingPrediction] = []
    metadata: Optional[Dict[str, Any]] = None

    @property
    def vectors(self) -> List[List[float]]:
        return [prediction.embeddings.values for prediction in self.predictions]
