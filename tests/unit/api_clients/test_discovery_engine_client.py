"""Tests for DiscoveryEngineClient search and answer calls."""

import httpx
import pytest

from moni.api_clients.discovery_engine_client import (
    DiscoveryEngineClient,
    serving_config_path,
)
from moni.exceptions import HttpStatusError
from moni.models.answer import (
    AnswerQuery,
    AnswerRequest,
    AnswerState,
    DiscoveryEngineAnswerRequest,
    RelatedQuestionsSpec,
)
from moni.models.search import (
    ContentSearchSpec,
    DiscoveryEngineSearchRequest,
    SearchRequest,
    SnippetSpec,
    SummarySpec,
)

SERVING_CONFIG = (
    "projects/p/locations/global/collections/default_collection"
    "/engines/engine1/servingConfigs/default_search"
)


@pytest.fixture
def client(make_http_client, recording_handler):
    return DiscoveryEngineClient(make_http_client(recording_handler))


def test_serving_config_path():
    assert (
        serving_config_path(
            "p", "global", "default_collection", "engine1", "default_search"
        )
        == SERVING_CONFIG
    )


def test_serving_config_path_escapes_ids():
    path = serving_config_path("p", "global", "c", "eng/1", "cfg#x")
    assert path.endswith("/engines/eng%2F1/servingConfigs/cfg%23x")


class TestSearch:
    @pytest.mark.asyncio
    async def test_search_request_and_response(self, client, recording_handler):
        recording_handler.responses.append(
            httpx.Response(
                200,
                json={
                    "results": [
                        {
                            "id": "doc-1",
                            "document": {
                                "name": "projects/p/.../documents/doc-1",
                                "id": "doc-1",
                                "derivedStructData": {
                                    "title": "Q3 report",
                                    "link": "gs://bucket/q3.pdf",
                                    "snippets": [{"snippet": "revenue grew"}],
                                },
                            },
                        }
                    ],
                    "totalSize": 1,
                    "attributionToken": "tok",
                    "summary": {"summaryText": "Revenue grew 12% [1]."},
                },
            )
        )
        request = SearchRequest(
            project_id="p",
            collection="default_collection",
            engine_id="engine1",
            serving_config="default_search",
            search_request=DiscoveryEngineSearchRequest(
                query="revenue",
                page_size=10,
                content_search_spec=ContentSearchSpec(
                    snippet_spec=SnippetSpec(return_snippet=True),
                    summary_spec=SummarySpec(
                        summary_result_count=5, include_citations=True
                    ),
                ),
            ),
        )

        response = await client.search(request)

        sent = recording_handler.last_request
        assert sent.method == "POST"
        assert str(sent.url) == (
            f"https://discoveryengine.googleapis.com/v1beta/{SERVING_CONFIG}:search"
        )
        assert recording_handler.last_json() == {
            "query": "revenue",
            "pageSize": 10,
            "contentSearchSpec": {
                "snippetSpec": {"returnSnippet": True},
                "summarySpec": {"summaryResultCount": 5, "includeCitations": True},
            },
        }
        assert response.total_size == 1
        assert response.summary_text == "Revenue grew 12% [1]."
        document = response.results[0].document
        assert document.title == "Q3 report"
        assert document.link == "gs://bucket/q3.pdf"

    @pytest.mark.asyncio
    async def test_empty_response_decodes(self, client, recording_handler):
        recording_handler.responses.append(httpx.Response(200, json={}))

        response = await client.search(
            SearchRequest(
                project_id="p",
                collection="default_collection",
                engine_id="engine1",
                serving_config="default_search",
                search_request=DiscoveryEngineSearchRequest(query="nothing"),
            )
        )

        assert response.results is None
        assert response.summary_text is None

    @pytest.mark.asyncio
    async def test_search_error_raises(self, client, recording_handler):
        recording_handler.responses.append(
            httpx.Response(
                400,
                json={
                    "error": {
                        "code": 400,
                        "message": "Invalid pageSize",
                        "status": "INVALID_ARGUMENT",
                    }
                },
            )
        )

        with pytest.raises(HttpStatusError) as exc_info:
            await client.search(
                SearchRequest(
                    project_id="p",
                    collection="default_collection",
                    engine_id="engine1",
                    serving_config="default_search",
                    search_request=DiscoveryEngineSearchRequest(page_size=-1),
                )
            )

        assert exc_info.value.error_status.status == "INVALID_ARGUMENT"


class TestAnswer:
    @pytest.mark.asyncio
    async def test_answer_decodes_wrapped_answer(self, client, recording_handler):
        recording_handler.responses.append(
            httpx.Response(
                200,
                json={
                    "answer": {
                        "name": f"{SERVING_CONFIG}/sessions/-/answers/a1",
                        "state": "SUCCEEDED",
                        "answerText": "The warranty lasts two years.",
                        "citations": [
                            {
                                "startIndex": "0",
                                "endIndex": "29",
                                "sources": [{"referenceId": "0"}],
                            }
                        ],
                        "references": [
                            {
                                "chunkInfo": {
                                    "chunk": "c1",
                                    "content": "Two year warranty.",
                                    "documentMetadata": {"title": "Terms"},
                                }
                            }
                        ],
                        "relatedQuestions": ["How do I claim it?"],
                    },
                    "answerQueryToken": "qtok",
                },
            )
        )
        request = AnswerRequest(
            project_id="p",
            collection="default_collection",
            engine_id="engine1",
            serving_config="default_search",
            answer_request=DiscoveryEngineAnswerRequest(
                query=AnswerQuery(text="How long is the warranty?"),
                related_questions_spec=RelatedQuestionsSpec(enable=True),
            ),
        )

        response = await client.answer(request)

        assert str(recording_handler.last_request.url) == (
            f"https://discoveryengine.googleapis.com/v1beta/{SERVING_CONFIG}:answer"
        )
        assert recording_handler.last_json() == {
            "query": {"text": "How long is the warranty?"},
            "relatedQuestionsSpec": {"enable": True},
        }
        assert response.answer_text == "The warranty lasts two years."
        assert response.answer.state is AnswerState.SUCCEEDED
        assert response.answer.references[0].chunk_info.document_metadata.title == (
            "Terms"
        )
        assert response.answer.related_questions == ["How do I claim it?"]
        assert response.answer_query_token == "qtok"
