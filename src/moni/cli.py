"""Command line interface for moni."""

import asyncio
import functools
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .api_clients.base_client import AuthenticatedHttpClient
from .api_clients.credential_provider import CredentialProvider
from .api_clients.data_store_client import DataStoreClient
from .api_clients.discovery_engine_client import DiscoveryEngineClient
from .api_clients.generative_client import GenerativeClient
from .config import Config, ConfigManager
from .exceptions import APIClientError
from .models.answer import AnswerQuery, AnswerRequest, DiscoveryEngineAnswerRequest
from .models.base import ApiModel
from .models.data_store import (
    ConnectorEntity,
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
from .models.documents import ListChunksRequest
from .models.generative import Content, CountTokensRequest
from .models.operations import Operation
from .models.search import SearchChunksRequest
from .remote.polling import PollResult
from .services.insight_service import InsightService

logger = logging.getLogger(__name__)

console = Console()

EXIT_API_ERROR = 1
EXIT_POLL_TIMEOUT = 2


def run_async(coro):
    """Run a coroutine to completion from synchronous click code."""
    return asyncio.run(coro)


class CliClients:
    """One credential provider and HTTP session shared by a command's clients."""

    def __init__(self, config: Config):
        self.config = config
        gcp = config.google_cloud
        self.credential_provider = CredentialProvider(
            refresh_threshold_seconds=gcp.refresh_threshold_seconds,
            credentials_env_var=gcp.credentials_env_var,
        )
        self.http_client = AuthenticatedHttpClient(
            self.credential_provider,
            timeout=config.timeouts.to_httpx(),
            max_concurrent_requests=config.timeouts.max_concurrent_requests,
        )
        self.data_stores = DataStoreClient(self.http_client)
        self.discovery = DiscoveryEngineClient(self.http_client)
        self.generative = GenerativeClient(
            self.http_client,
            project_id=gcp.project_id,
            region=config.generative.region,
            model=config.generative.model,
            embedding_model=config.generative.embedding_model,
        )
        self.insights = InsightService(config, self.discovery, self.generative)

    async def __aenter__(self) -> "CliClients":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.http_client.close()


def handle_api_errors(func):
    """Map client errors to a red error line and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except APIClientError as e:
            logger.debug(f"{type(e).__name__}: {e}", exc_info=True)
            console.print(f"❌ {type(e).__name__}: {e}", style="red")
            sys.exit(EXIT_API_ERROR)
        except ValueError as e:
            console.print(f"❌ {e}", style="red")
            sys.exit(EXIT_API_ERROR)

    return wrapper


def _load_config(ctx: click.Context) -> Config:
    config_manager: ConfigManager = ctx.obj["config_manager"]
    return config_manager.load()


def _require_project(config: Config) -> str:
    project_id = config.google_cloud.project_id
    if not project_id:
        raise ValueError(
            "No Google Cloud project configured. Run 'moni config init "
            "--project-id ...' or set MONI_PROJECT_ID."
        )
    return project_id


def _require_data_store(config: Config, data_store_id: Optional[str]) -> str:
    data_store_id = data_store_id or config.google_cloud.data_store_id
    if not data_store_id:
        raise ValueError(
            "No data store given. Pass one on the command line or set "
            "google_cloud.data_store_id in the config file."
        )
    return data_store_id


def _print_resource(resource: ApiModel) -> None:
    console.print_json(data=resource.to_api_dict())


def _print_poll_result(result: PollResult) -> None:
    if result.completed and result.operation is not None:
        if result.operation.error is not None:
            console.print(
                f"⚠️  Operation finished with error {result.operation.error.code}: "
                f"{result.operation.error.message}",
                style="yellow",
            )
        else:
            console.print(
                f"✅ Operation done after {result.attempts} checks", style="green"
            )
        _print_resource(result.operation)
        return

    if result.timed_out:
        console.print(
            f"⏱️  Operation {result.operation_name} still running after "
            f"{result.attempts} checks",
            style="yellow",
        )
        sys.exit(EXIT_POLL_TIMEOUT)

    # Failed fetch or cancellation
    result.raise_for_status()


async def _maybe_wait(
    clients: CliClients, operation: Operation, wait: bool
) -> Optional[PollResult]:
    if not wait or operation.done:
        return None
    polling = clients.config.polling
    return await clients.data_stores.poll_operation(
        operation,
        max_retries=polling.max_retries,
        interval_seconds=polling.interval_seconds,
        deadline_seconds=polling.deadline_seconds,
    )


def _report_operation(operation: Operation, poll_result: Optional[PollResult]) -> None:
    if poll_result is None:
        console.print(f"Started operation {operation.name}")
        _print_resource(operation)
    else:
        _print_poll_result(poll_result)


@click.group()
@click.option("--config", "-c", type=click.Path(exists=False), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="moni")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """Google Cloud Discovery Engine and Gemini client.

    \b
    CONFIGURATION:
      Config file: .moni/config.json (found by walking up from the current dir)
      Credentials: GOOGLE_APPLICATION_CREDENTIALS must point at a key file
      MONI_PROJECT_ID overrides the configured project id
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    if config:
        ctx.obj["config_manager"] = ConfigManager(Path(config))
    else:
        ctx.obj["config_manager"] = ConfigManager.create_with_backtrack()


# Data stores ------------------------------------------------------------


@cli.group("datastore")
def datastore_group():
    """Create, inspect and delete data stores."""


@datastore_group.command("create")
@click.argument("data_store_id")
@click.option("--display-name", help="Display name (defaults to the id)")
@click.option("--collection", help="Collection (defaults to config)")
@click.option(
    "--content-config",
    type=click.Choice([c.value for c in ContentConfig]),
    default=ContentConfig.CONTENT_REQUIRED.value,
    show_default=True,
)
@click.option(
    "--solution-type",
    type=click.Choice([s.value for s in SolutionType]),
    default=SolutionType.SOLUTION_TYPE_SEARCH.value,
    show_default=True,
)
@click.option("--advanced-site-search", is_flag=True, help="Enable advanced site search")
@click.option("--wait", is_flag=True, help="Poll the operation until it finishes")
@click.pass_context
@handle_api_errors
def datastore_create(
    ctx,
    data_store_id: str,
    display_name: Optional[str],
    collection: Optional[str],
    content_config: str,
    solution_type: str,
    advanced_site_search: bool,
    wait: bool,
):
    """Create DATA_STORE_ID."""
    config = _load_config(ctx)
    project_id = _require_project(config)
    request = CreateDataStoreRequest(
        project_id=project_id,
        collection=collection or config.google_cloud.collection,
        data_store_id=data_store_id,
        location=config.google_cloud.location,
        create_advanced_site_search=advanced_site_search,
        data_store=DataStore(
            display_name=display_name or data_store_id,
            industry_vertical=IndustryVertical.GENERIC,
            solution_types=[SolutionType(solution_type)],
            content_config=ContentConfig(content_config),
        ),
    )

    async def _run():
        async with CliClients(config) as clients:
            operation = await clients.data_stores.create_data_store(request)
            return operation, await _maybe_wait(clients, operation, wait)

    operation, poll_result = run_async(_run())
    _report_operation(operation, poll_result)


@datastore_group.command("get")
@click.argument("data_store_id", required=False)
@click.option("--collection", help="Collection (defaults to config)")
@click.pass_context
@handle_api_errors
def datastore_get(ctx, data_store_id: Optional[str], collection: Optional[str]):
    """Show DATA_STORE_ID (defaults to the configured data store)."""
    config = _load_config(ctx)
    request = GetDataStoreRequest(
        project_id=_require_project(config),
        collection=collection or config.google_cloud.collection,
        data_store_id=_require_data_store(config, data_store_id),
        location=config.google_cloud.location,
    )

    async def _run():
        async with CliClients(config) as clients:
            return await clients.data_stores.get_data_store(request)

    _print_resource(run_async(_run()))


@datastore_group.command("delete")
@click.argument("data_store_id")
@click.option("--collection", help="Collection (defaults to config)")
@click.option("--wait", is_flag=True, help="Poll the operation until it finishes")
@click.pass_context
@handle_api_errors
def datastore_delete(
    ctx, data_store_id: str, collection: Optional[str], wait: bool
):
    """Delete DATA_STORE_ID."""
    config = _load_config(ctx)
    request = DeleteDataStoreRequest(
        project_id=_require_project(config),
        collection=collection or config.google_cloud.collection,
        data_store_id=data_store_id,
        location=config.google_cloud.location,
    )

    async def _run():
        async with CliClients(config) as clients:
            operation = await clients.data_stores.delete_data_store(request)
            return operation, await _maybe_wait(clients, operation, wait)

    operation, poll_result = run_async(_run())
    _report_operation(operation, poll_result)


@datastore_group.command("connect")
@click.argument("collection_id")
@click.option("--display-name", required=True, help="Collection display name")
@click.option("--data-source", required=True, help="Connector source, e.g. gcs")
@click.option("--params", "params_json", help="Connector params as a JSON object")
@click.option(
    "--entity", "entities", multiple=True, help="Entity to sync (repeatable)"
)
@click.option("--refresh-interval", help="Sync interval, e.g. 86400s")
@click.option("--wait", is_flag=True, help="Poll the operation until it finishes")
@click.pass_context
@handle_api_errors
def datastore_connect(
    ctx,
    collection_id: str,
    display_name: str,
    data_source: str,
    params_json: Optional[str],
    entities: List[str],
    refresh_interval: Optional[str],
    wait: bool,
):
    """Create COLLECTION_ID with a data connector syncing into it."""
    config = _load_config(ctx)
    params: Optional[Dict[str, Any]] = None
    if params_json:
        try:
            params = json.loads(params_json)
        except json.JSONDecodeError as e:
            raise ValueError(f"--params is not valid JSON: {e}")

    request = SetupDataConnectorRequest(
        project_id=_require_project(config),
        collection_id=collection_id,
        collection_display_name=display_name,
        location=config.google_cloud.location,
        data_connector=DataConnector(
            data_source=data_source,
            params=params,
            refresh_interval=refresh_interval,
            entities=[ConnectorEntity(entity_name=name) for name in entities] or None,
        ),
    )

    async def _run():
        async with CliClients(config) as clients:
            operation = await clients.data_stores.setup_data_connector(request)
            return operation, await _maybe_wait(clients, operation, wait)

    operation, poll_result = run_async(_run())
    _report_operation(operation, poll_result)


# Chunks -----------------------------------------------------------------


@cli.group("chunks")
def chunks_group():
    """List and search document chunks."""


@chunks_group.command("list")
@click.argument("document_id")
@click.option("--data-store", help="Data store id (defaults to config)")
@click.option("--page-size", type=int, help="Chunks per page")
@click.option("--page-token", help="Token from a previous page")
@click.pass_context
@handle_api_errors
def chunks_list(
    ctx,
    document_id: str,
    data_store: Optional[str],
    page_size: Optional[int],
    page_token: Optional[str],
):
    """List the chunks of DOCUMENT_ID."""
    config = _load_config(ctx)
    gcp = config.google_cloud
    request = ListChunksRequest(
        project_id=_require_project(config),
        collection=gcp.collection,
        data_store_id=_require_data_store(config, data_store),
        branch=gcp.branch,
        document_id=document_id,
        page_size=page_size,
        page_token=page_token,
        location=gcp.location,
    )

    async def _run():
        async with CliClients(config) as clients:
            return await clients.data_stores.list_chunks(request)

    response = run_async(_run())
    table = Table(title=f"Chunks of {document_id}")
    table.add_column("Id")
    table.add_column("Pages")
    table.add_column("Content")
    for chunk in response.chunks:
        pages = ""
        if chunk.page_span is not None:
            pages = f"{chunk.page_span.page_start}-{chunk.page_span.page_end}"
        table.add_row(chunk.id or "", pages, (chunk.content or "")[:120])
    console.print(table)
    if response.next_page_token:
        console.print(f"Next page token: {response.next_page_token}")


@chunks_group.command("search")
@click.argument("query")
@click.option("--data-store", help="Data store id (defaults to config)")
@click.option("--serving-config", help="Serving config (defaults to config)")
@click.option("--page-size", type=int, help="Results per page")
@click.pass_context
@handle_api_errors
def chunks_search(
    ctx,
    query: str,
    data_store: Optional[str],
    serving_config: Optional[str],
    page_size: Optional[int],
):
    """Search chunks of a data store for QUERY."""
    config = _load_config(ctx)
    gcp = config.google_cloud
    request = SearchChunksRequest(
        project_id=_require_project(config),
        collection=gcp.collection,
        data_store_id=_require_data_store(config, data_store),
        serving_config=serving_config or gcp.serving_config,
        query=query,
        page_size=page_size,
        location=gcp.location,
    )

    async def _run():
        async with CliClients(config) as clients:
            return await clients.data_stores.search_chunks(request)

    response = run_async(_run())
    table = Table(title=f"Chunks matching {query!r}")
    table.add_column("Score", justify="right")
    table.add_column("Document")
    table.add_column("Content")
    for result in response.results or []:
        chunk = result.chunk
        if chunk is None:
            continue
        score = "" if chunk.relevance_score is None else f"{chunk.relevance_score:.3f}"
        title = chunk.document_metadata.title if chunk.document_metadata else ""
        table.add_row(score, title or "", (chunk.content or "")[:120])
    console.print(table)


# Operations -------------------------------------------------------------


@cli.group("operation")
def operation_group():
    """Inspect long-running operations."""


@operation_group.command("poll")
@click.argument("name")
@click.option("--max-retries", type=int, help="Maximum status fetches")
@click.option("--interval", type=float, help="Seconds between fetches")
@click.option("--deadline", type=float, help="Overall budget in seconds")
@click.pass_context
@handle_api_errors
def operation_poll(
    ctx,
    name: str,
    max_retries: Optional[int],
    interval: Optional[float],
    deadline: Optional[float],
):
    """Poll operation NAME until it is done."""
    config = _load_config(ctx)
    polling = config.polling

    def _progress(attempt: int, total: int, operation: Operation) -> None:
        console.print(f"⏳ {operation.operation_id} running ({attempt}/{total})")

    async def _run():
        async with CliClients(config) as clients:
            return await clients.data_stores.poll_operation(
                name,
                max_retries=max_retries or polling.max_retries,
                interval_seconds=(
                    interval if interval is not None else polling.interval_seconds
                ),
                deadline_seconds=(
                    deadline if deadline is not None else polling.deadline_seconds
                ),
                progress_callback=_progress,
            )

    _print_poll_result(run_async(_run()))


# Search and answer ------------------------------------------------------


@cli.command("search")
@click.argument("query")
@click.pass_context
@handle_api_errors
def search_command(ctx, query: str):
    """Search the configured engine for QUERY."""
    config = _load_config(ctx)
    _require_project(config)

    async def _run():
        async with CliClients(config) as clients:
            return await clients.insights.search_documents(query)

    result = run_async(_run())
    if result.summary:
        console.print(f"[bold]Summary:[/bold] {result.summary}\n")

    table = Table(title=f"Results for {query!r}")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Link")
    for i, item in enumerate(result.results, 1):
        if item.document is not None:
            table.add_row(str(i), item.document.title or "", item.document.link or "")
        elif item.chunk is not None:
            meta = item.chunk.document_metadata
            table.add_row(
                str(i),
                (meta.title if meta else None) or "",
                (meta.uri if meta else None) or "",
            )
    console.print(table)


@cli.command("answer")
@click.argument("query")
@click.option("--related", is_flag=True, help="Ask for related questions")
@click.pass_context
@handle_api_errors
def answer_command(ctx, query: str, related: bool):
    """Ask the configured engine a grounded QUERY."""
    config = _load_config(ctx)
    gcp = config.google_cloud
    body: Dict[str, Any] = {"query": AnswerQuery(text=query)}
    if related:
        body["related_questions_spec"] = {"enable": True}
    request = AnswerRequest(
        project_id=_require_project(config),
        collection=gcp.collection,
        engine_id=gcp.engine_id,
        serving_config=gcp.serving_config,
        location=gcp.location,
        answer_request=DiscoveryEngineAnswerRequest(**body),
    )

    async def _run():
        async with CliClients(config) as clients:
            return await clients.discovery.answer(request)

    response = run_async(_run())
    console.print(response.answer_text or "(no answer)")
    if response.answer is not None and response.answer.related_questions:
        console.print("\n[bold]Related questions:[/bold]")
        for question in response.answer.related_questions:
            console.print(f"• {question}")


# Generative -------------------------------------------------------------


@cli.command("generate")
@click.argument("prompt")
@click.pass_context
@handle_api_errors
def generate_command(ctx, prompt: str):
    """Generate text for PROMPT with the configured Gemini model."""
    config = _load_config(ctx)
    _require_project(config)

    async def _run():
        async with CliClients(config) as clients:
            return await clients.insights.generate_insight(prompt)

    console.print(run_async(_run()))


@cli.command("count-tokens")
@click.argument("text")
@click.pass_context
@handle_api_errors
def count_tokens_command(ctx, text: str):
    """Count the tokens of TEXT for the configured model."""
    config = _load_config(ctx)
    _require_project(config)

    async def _run():
        async with CliClients(config) as clients:
            return await clients.generative.count_tokens(
                CountTokensRequest(contents=[Content.user_text(text)])
            )

    response = run_async(_run())
    console.print(f"Total tokens: {response.total_tokens}")
    if response.total_billable_characters is not None:
        console.print(f"Billable characters: {response.total_billable_characters}")


@cli.command("embed")
@click.argument("texts", nargs=-1, required=True)
@click.option("--task-type", help="Embedding task type, e.g. RETRIEVAL_DOCUMENT")
@click.pass_context
@handle_api_errors
def embed_command(ctx, texts: List[str], task_type: Optional[str]):
    """Embed one or more TEXTS with the configured embedding model."""
    config = _load_config(ctx)
    _require_project(config)

    async def _run():
        async with CliClients(config) as clients:
            return await clients.generative.embed_texts(list(texts), task_type)

    for text, vector in zip(texts, run_async(_run())):
        preview = ", ".join(f"{v:.4f}" for v in vector[:4])
        console.print(f"{text[:40]!r}: dim={len(vector)} [{preview}, ...]")


# Configuration ----------------------------------------------------------


@cli.group("config")
def config_group():
    """Manage .moni/config.json."""


@config_group.command("init")
@click.option("--project-id", required=True, help="Google Cloud project id")
@click.option("--data-store-id", default="", help="Default data store id")
@click.option("--engine-id", default="", help="Search/answer engine id")
@click.option("--location", default="global", show_default=True)
@click.option("--force", is_flag=True, help="Overwrite an existing config")
@click.pass_context
def config_init(
    ctx,
    project_id: str,
    data_store_id: str,
    engine_id: str,
    location: str,
    force: bool,
):
    """Write a configuration file."""
    config_manager: ConfigManager = ctx.obj["config_manager"]
    if config_manager.config_path.exists() and not force:
        console.print(
            f"❌ {config_manager.config_path} already exists (use --force)",
            style="red",
        )
        sys.exit(1)
    config_manager.create_default_config(
        project_id=project_id,
        data_store_id=data_store_id,
        engine_id=engine_id,
        location=location,
    )
    console.print(f"✅ Wrote {config_manager.config_path}", style="green")


@config_group.command("show")
@click.pass_context
def config_show(ctx):
    """Print the effective configuration."""
    config_manager: ConfigManager = ctx.obj["config_manager"]
    try:
        config = config_manager.load()
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)
    console.print(f"Config file: {config_manager.config_path}")
    console.print_json(data=config.model_dump())


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
