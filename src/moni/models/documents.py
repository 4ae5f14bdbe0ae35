"""Document and chunk schemas shared by the data store and search APIs."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .base import ApiModel
from .data_store import DEFAULT_LOCATION


class DocumentContent(ApiModel):
    mime_type: Optional[str] = None
    raw_bytes: Optional[str] = None
    uri: Optional[str] = None


class Document(ApiModel):
    """Indexed document. Exactly one of ``struct_data``/``json_data`` is usually set."""

    name: Optional[str] = None
    id: Optional[str] = None
    schema_id: Optional[str] = None
    struct_data: Optional[Dict[str, Any]] = None
    json_data: Optional[str] = None
    derived_struct_data: Optional[Dict[str, Any]] = None
    content: Optional[DocumentContent] = None
    parent_document_id: Optional[str] = None
    acl_info: Optional[Dict[str, Any]] = None
    index_time: Optional[str] = None

    @property
    def title(self) -> Optional[str]:
        for source in (self.derived_struct_data, self.struct_data):
            if source and isinstance(source.get("title"), str):
                return source["title"]
        return None

    @property
    def link(self) -> Optional[str]:
        if self.derived_struct_data and isinstance(
            self.derived_struct_data.get("link"), str
        ):
            return self.derived_struct_data["link"]
        if self.content is not None:
            return self.content.uri
        return None


class ChunkDocumentMetadata(ApiModel):
    uri: Optional[str] = None
    title: Optional[str] = None
    struct_data: Optional[Dict[str, Any]] = None


class PageSpan(ApiModel):
    page_start: Optional[int] = None
    page_end: Optional[int] = None


class Chunk(ApiModel):
    """Layout-based chunk of a document."""

    name: Optional[str] = None
    id: Optional[str] = None
    content: Optional[str] = None
    relevance_score: Optional[float] = None
    document_metadata: Optional[ChunkDocumentMetadata] = None
    derived_struct_data: Optional[Dict[str, Any]] = None
    page_span: Optional[PageSpan] = None
    chunk_metadata: Optional["ChunkMetadata"] = None


class ChunkMetadata(ApiModel):
    previous_chunks: Optional[List[Chunk]] = None
    next_chunks: Optional[List[Chunk]] = None


Chunk.model_rebuild()


class ListChunksResponse(ApiModel):
    chunks: List[Chunk] = []
    next_page_token: Optional[str] = None


@dataclass
class ListChunksRequest:
    project_id: str
    collection: str
    data_store_id: str
    branch: str
    document_id: str
    page_size: Optional[int] = None
    page_token: Optional[str] = None
    location: str = DEFAULT_LOCATION
