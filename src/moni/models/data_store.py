"""Discovery Engine data store and data connector schemas."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .base import ApiModel

DEFAULT_LOCATION = "global"


class IndustryVertical(str, Enum):
    """Industry vertical a data store is registered for."""

    INDUSTRY_VERTICAL_UNSPECIFIED = "INDUSTRY_VERTICAL_UNSPECIFIED"
    GENERIC = "GENERIC"
    MEDIA = "MEDIA"
    HEALTHCARE_FHIR = "HEALTHCARE_FHIR"


class SolutionType(str, Enum):
    SOLUTION_TYPE_UNSPECIFIED = "SOLUTION_TYPE_UNSPECIFIED"
    SOLUTION_TYPE_RECOMMENDATION = "SOLUTION_TYPE_RECOMMENDATION"
    SOLUTION_TYPE_SEARCH = "SOLUTION_TYPE_SEARCH"
    SOLUTION_TYPE_CHAT = "SOLUTION_TYPE_CHAT"
    SOLUTION_TYPE_GENERATIVE_CHAT = "SOLUTION_TYPE_GENERATIVE_CHAT"


class ContentConfig(str, Enum):
    """How document content is stored in the data store."""

    CONTENT_CONFIG_UNSPECIFIED = "CONTENT_CONFIG_UNSPECIFIED"
    NO_CONTENT = "NO_CONTENT"
    CONTENT_REQUIRED = "CONTENT_REQUIRED"
    PUBLIC_WEBSITE = "PUBLIC_WEBSITE"


class LanguageInfo(ApiModel):
    language_code: Optional[str] = None
    normalized_language_code: Optional[str] = None
    language: Optional[str] = None
    region: Optional[str] = None


class LayoutBasedChunkingConfig(ApiModel):
    chunk_size: Optional[int] = None
    include_ancestor_headings: Optional[bool] = None


class ChunkingConfig(ApiModel):
    layout_based_chunking_config: Optional[LayoutBasedChunkingConfig] = None


class OcrParsingConfig(ApiModel):
    enhanced_document_elements: Optional[List[str]] = None
    use_native_text: Optional[bool] = None


class ParsingConfig(ApiModel):
    # Empty objects select the digital / layout parsers.
    digital_parsing_config: Optional[Dict[str, Any]] = None
    ocr_parsing_config: Optional[OcrParsingConfig] = None
    layout_parsing_config: Optional[Dict[str, Any]] = None


class DocumentProcessingConfig(ApiModel):
    name: Optional[str] = None
    chunking_config: Optional[ChunkingConfig] = None
    default_parsing_config: Optional[ParsingConfig] = None
    parsing_config_overrides: Optional[Dict[str, ParsingConfig]] = None


class DataStore(ApiModel):
    """DataStore resource as returned by ``dataStores.get``."""

    name: Optional[str] = None
    display_name: Optional[str] = None
    industry_vertical: Optional[IndustryVertical] = None
    solution_types: Optional[List[SolutionType]] = None
    default_schema_id: Optional[str] = None
    content_config: Optional[ContentConfig] = None
    create_time: Optional[str] = None
    language_info: Optional[LanguageInfo] = None
    document_processing_config: Optional[DocumentProcessingConfig] = None
    starting_schema: Optional[Dict[str, Any]] = None


class ConnectorEntity(ApiModel):
    entity_name: str
    data_store: Optional[str] = None
    params: Optional[Dict[str, Any]] = None


class DataConnector(ApiModel):
    """Data connector that syncs an external source into a collection."""

    data_source: str
    params: Optional[Dict[str, Any]] = None
    refresh_interval: Optional[str] = None
    entities: Optional[List[ConnectorEntity]] = None
    sync_mode: Optional[str] = None
    name: Optional[str] = None
    state: Optional[str] = None


@dataclass
class CreateDataStoreRequest:
    project_id: str
    collection: str
    data_store_id: str
    data_store: DataStore
    create_advanced_site_search: bool = False
    location: str = DEFAULT_LOCATION


@dataclass
class GetDataStoreRequest:
    project_id: str
    collection: str
    data_store_id: str
    location: str = DEFAULT_LOCATION


@dataclass
class DeleteDataStoreRequest:
    project_id: str
    collection: str
    data_store_id: str
    location: str = DEFAULT_LOCATION


@dataclass
class SetupDataConnectorRequest:
    """Parameters for ``locations.setUpDataConnector``.

    The service creates the collection named ``collection_id`` together with the
    connector and one data store per connector entity.
    """

    project_id: str
    collection_id: str
    collection_display_name: str
    data_connector: DataConnector
    location: str = DEFAULT_LOCATION

    def body(self) -> Dict[str, Any]:
        return {
            "collectionId": self.collection_id,
            "collectionDisplayName": self.collection_display_name,
            "dataConnector": self.data_connector.to_api_dict(),
        }
