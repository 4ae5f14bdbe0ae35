"""Bearer credential acquisition and caching.

``CredentialProvider`` caches one ``Credential`` per normalized scope set and
hands out cached tokens until they come within the refresh threshold of their
expiry. Acquisition itself is delegated to a ``CredentialSource``; the default
source uses google-auth Application Default Credentials.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional, Protocol, Tuple

import google.auth
import google.auth.exceptions
import google.auth.transport.requests

from ..exceptions import AuthError

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
DEFAULT_CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"

Scopes = Tuple[str, ...]


def normalize_scopes(scopes: Iterable[str]) -> Scopes:
    """Ordered, de-duplicated scope tuple.

    Raises:
        ValueError: If no scope is given
    """
    if isinstance(scopes, str):
        scopes = [scopes]
    normalized = tuple(dict.fromkeys(s.strip() for s in scopes if s and s.strip()))
    if not normalized:
        raise ValueError("At least one OAuth scope is required")
    return normalized


@dataclass(frozen=True)
class Credential:
    """Bearer token plus the scopes it was granted for."""

    token: str = field(repr=False)
    scopes: Scopes
    expiry: Optional[datetime] = None

    def expires_soon(self, threshold_seconds: float = 120) -> bool:
        """True when the token expires within ``threshold_seconds``.

        A credential without an expiry never expires on its own; drop it with
        ``CredentialProvider.invalidate``.
        """
        if self.expiry is None:
            return False
        threshold_time = datetime.now(timezone.utc) + timedelta(
            seconds=threshold_seconds
        )
        return threshold_time >= self.expiry


class CredentialSource(Protocol):
    async def acquire(self, scopes: Scopes) -> Credential: ...


class GoogleCredentialSource:
    """Application Default Credentials via google-auth.

    The blocking discovery and refresh calls run in a worker thread.
    """

    def __init__(self, credentials_env_var: str = DEFAULT_CREDENTIALS_ENV_VAR):
        self.credentials_env_var = credentials_env_var

    async def acquire(self, scopes: Scopes) -> Credential:
        if not os.environ.get(self.credentials_env_var):
            raise AuthError(
                f"Environment variable {self.credentials_env_var} is not set; "
                "point it at a service account or user credentials file"
            )
        return await asyncio.to_thread(self._acquire_blocking, scopes)

    def _acquire_blocking(self, scopes: Scopes) -> Credential:
        try:
            credentials, project_id = google.auth.default(scopes=list(scopes))
            credentials.refresh(google.auth.transport.requests.Request())
        except google.auth.exceptions.GoogleAuthError as e:
            raise AuthError(f"Failed to obtain Google credentials: {e}") from e

        if not credentials.token:
            raise AuthError("Google credentials refreshed without an access token")

        expiry = credentials.expiry
        if expiry is not None and expiry.tzinfo is None:
            # google-auth reports naive UTC datetimes.
            expiry = expiry.replace(tzinfo=timezone.utc)

        logger.debug(f"Acquired Google credential for project {project_id}")
        return Credential(token=credentials.token, scopes=scopes, expiry=expiry)


class CredentialProvider:
    """Caches bearer credentials per scope set and refreshes them near expiry."""

    def __init__(
        self,
        source: Optional[CredentialSource] = None,
        refresh_threshold_seconds: float = 120,
        credentials_env_var: str = DEFAULT_CREDENTIALS_ENV_VAR,
    ):
        self._source = source
        self._credentials_env_var = credentials_env_var
        self.refresh_threshold_seconds = refresh_threshold_seconds
        self._cache: Dict[Scopes, Credential] = {}
        self._lock = asyncio.Lock()

    @property
    def source(self) -> CredentialSource:
        """Underlying source, created on first use."""
        if self._source is None:
            self._source = GoogleCredentialSource(self._credentials_env_var)
        return self._source

    async def token(self, scopes: Iterable[str]) -> Credential:
        """Return a credential valid for ``scopes``.

        Raises:
            ValueError: If ``scopes`` is empty
            AuthError: If the source cannot produce a credential
        """
        key = normalize_scopes(scopes)

        async with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                if not cached.expires_soon(self.refresh_threshold_seconds):
                    return cached
                logger.debug("Cached credential is near expiry, refreshing")
                del self._cache[key]

            logger.debug(f"Acquiring credential for scopes {key}")
            credential = await self.source.acquire(key)
            self._cache[key] = credential
            return credential

    def invalidate(self, scopes: Optional[Iterable[str]] = None) -> None:
        """Drop the cached credential for ``scopes``, or every cached credential."""
        if scopes is None:
            self._cache.clear()
            return
        self._cache.pop(normalize_scopes(scopes), None)
