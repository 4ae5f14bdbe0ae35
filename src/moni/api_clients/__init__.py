"""Google Cloud API clients.

``AuthenticatedHttpClient`` owns the HTTP session and bearer credentials; the
resource clients on top of it turn typed requests into REST calls and decode
the responses.
"""

from ..exceptions import (
    APIClientError,
    AuthError,
    DNSResolutionError,
    GoogleErrorStatus,
    HttpStatusError,
    NetworkConnectionError,
    NetworkTimeoutError,
    OperationCancelled,
    OperationTimeout,
    ResponseDecodeError,
    SSLCertificateError,
    TransportError,
    UrlParseError,
)
from .credential_provider import (
    CLOUD_PLATFORM_SCOPE,
    Credential,
    CredentialProvider,
    CredentialSource,
    GoogleCredentialSource,
)
from .base_client import AuthenticatedHttpClient
from .network_error_handler import NetworkErrorHandler, RetryConfig
from .data_store_client import DataStoreClient
from .discovery_engine_client import DiscoveryEngineClient
from .generative_client import GenerativeClient

__all__ = [
    # Errors
    "APIClientError",
    "AuthError",
    "DNSResolutionError",
    "GoogleErrorStatus",
    "HttpStatusError",
    "NetworkConnectionError",
    "NetworkTimeoutError",
    "OperationCancelled",
    "OperationTimeout",
    "ResponseDecodeError",
    "SSLCertificateError",
    "TransportError",
    "UrlParseError",
    # Credentials
    "CLOUD_PLATFORM_SCOPE",
    "Credential",
    "CredentialProvider",
    "CredentialSource",
    "GoogleCredentialSource",
    # HTTP
    "AuthenticatedHttpClient",
    "NetworkErrorHandler",
    "RetryConfig",
    # Resource clients
    "DataStoreClient",
    "DiscoveryEngineClient",
    "GenerativeClient",
]
