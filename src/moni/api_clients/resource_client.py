"""Shared plumbing for typed resource clients."""

import logging
from typing import Type, TypeVar

import httpx
from pydantic import ValidationError

from ..exceptions import HttpStatusError, ResponseDecodeError
from ..models.base import ApiModel
from .base_client import AuthenticatedHttpClient
from .credential_provider import CLOUD_PLATFORM_SCOPE

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=ApiModel)


class ResourceClient:
    """Base class for clients that map one remote API to typed calls."""

    scopes = (CLOUD_PLATFORM_SCOPE,)

    def __init__(self, http_client: AuthenticatedHttpClient, base_url: str):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _expect_success(self, response: httpx.Response) -> None:
        """Raise ``HttpStatusError`` for any non-2xx response."""
        if response.is_success:
            return
        error = HttpStatusError.from_response(response)
        logger.warning(f"{error}")
        logger.debug(f"Error body: {error.body}")
        raise error

    def _decode(self, response: httpx.Response, model: Type[ModelT]) -> ModelT:
        """Status-check ``response`` and validate its JSON body into ``model``."""
        self._expect_success(response)
        body = response.text
        try:
            return model.model_validate_json(body or "{}")
        except ValidationError as e:
            logger.debug(f"Cannot decode {model.__name__} from: {body}")
            raise ResponseDecodeError(e, body, model.__name__) from e
