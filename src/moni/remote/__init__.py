"""Request plumbing shared by the API clients: URL composition and LRO polling."""

from .url_validator import build_request_url
from .polling import OperationPoller, PollResult, PollStatus

__all__ = ["build_request_url", "OperationPoller", "PollResult", "PollStatus"]
