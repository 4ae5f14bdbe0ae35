"""Authenticated HTTP client for Google Cloud REST APIs.

Provides session management, bearer-token attachment, and transport error
classification shared by every resource client.
"""

import asyncio
import logging
from typing import Any, Iterable, Optional

import httpx
from pydantic import BaseModel

from ..models.base import ApiModel
from ..remote.url_validator import QueryParams, build_request_url
from .credential_provider import CredentialProvider, normalize_scopes
from .network_error_handler import NetworkErrorHandler

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(connect=10.0, read=60.0, write=10.0, pool=5.0)
DEFAULT_LIMITS = httpx.Limits(
    max_connections=10, max_keepalive_connections=5, keepalive_expiry=30.0
)


def serialize_body(body: Any) -> Any:
    """JSON-ready form of a request body; models are dumped by alias without nulls."""
    if isinstance(body, ApiModel):
        return body.to_api_dict()
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return body


class AuthenticatedHttpClient:
    """HTTP client that attaches a bearer token to every request.

    Non-2xx responses are returned to the caller untouched; only URL, credential
    and transport failures raise.
    """

    def __init__(
        self,
        credential_provider: CredentialProvider,
        timeout: Optional[httpx.Timeout] = None,
        limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_concurrent_requests: int = 10,
    ):
        """Initialize client.

        Args:
            credential_provider: Shared provider for bearer credentials
            timeout: Transport timeouts; the only per-call timeout
            limits: Connection pool limits
            transport: Custom transport (tests use ``httpx.MockTransport``)
            max_concurrent_requests: Requests allowed in flight at once
        """
        self.credential_provider = credential_provider
        self.timeout = timeout or DEFAULT_TIMEOUT
        self.limits = limits or DEFAULT_LIMITS
        self._transport = transport
        self._session: Optional[httpx.AsyncClient] = None
        self._request_semaphore = asyncio.Semaphore(max_concurrent_requests)
        self._network_error_handler = NetworkErrorHandler()

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create the HTTP session."""
        if self._session is None or self._session.is_closed:
            self._session = httpx.AsyncClient(
                timeout=self.timeout,
                limits=self.limits,
                headers={"Content-Type": "application/json"},
                follow_redirects=True,
                transport=self._transport,
            )
        return self._session

    async def _authenticated_request(
        self,
        method: str,
        scopes: Iterable[str],
        url: str,
        query_params: Optional[QueryParams] = None,
        body: Any = None,
    ) -> httpx.Response:
        """Send one authenticated request.

        Returns:
            HTTP response object, whatever its status

        Raises:
            UrlParseError: If the URL is malformed (before any token work)
            AuthError: If no credential could be obtained
            TransportError: If the request never got a usable response
            ResponseDecodeError: If the body could not be content-decoded
        """
        request_url = build_request_url(url, query_params)
        scopes = normalize_scopes(scopes)

        async with self._request_semaphore:
            credential = await self.credential_provider.token(scopes)
            headers = {"Authorization": f"Bearer {credential.token}"}
            kwargs = {}
            if body is not None:
                kwargs["json"] = serialize_body(body)

            logger.debug(f"{method} {request_url}")
            try:
                response = await self.session.request(
                    method, request_url, headers=headers, **kwargs
                )
            except httpx.RequestError as e:
                logger.debug(f"{method} {request_url} failed: {e}")
                self._network_error_handler.classify_network_error(e)
                raise  # classify_network_error always raises

        if response.status_code == 401:
            # Token revoked or rotated remotely; next call acquires a fresh one.
            logger.debug("Received 401, invalidating cached credential")
            self.credential_provider.invalidate(scopes)

        logger.debug(f"{method} {request_url} -> {response.status_code}")
        return response

    async def post(
        self,
        scopes: Iterable[str],
        url: str,
        body: Any = None,
        query_params: Optional[QueryParams] = None,
    ) -> httpx.Response:
        return await self._authenticated_request(
            "POST", scopes, url, query_params=query_params, body=body
        )

    async def get(
        self,
        scopes: Iterable[str],
        url: str,
        query_params: Optional[QueryParams] = None,
    ) -> httpx.Response:
        return await self._authenticated_request(
            "GET", scopes, url, query_params=query_params
        )

    async def delete(
        self,
        scopes: Iterable[str],
        url: str,
        query_params: Optional[QueryParams] = None,
    ) -> httpx.Response:
        return await self._authenticated_request(
            "DELETE", scopes, url, query_params=query_params
        )

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.is_closed:
            await self._session.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
