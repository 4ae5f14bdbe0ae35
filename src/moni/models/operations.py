"""Long-running operation resources (google.longrunning.Operation)."""

from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import ApiModel


class OperationStatus(ApiModel):
    """Error status reported by a finished operation (google.rpc.Status)."""

    code: int = 0
    message: str = ""
    details: List[Dict[str, Any]] = Field(default_factory=list)


class Operation(ApiModel):
    """Snapshot of a remote asynchronous unit of work.

    Once ``done`` is true the ``response`` or ``error`` field is final and the
    operation will not change again.
    """

    name: str
    done: bool = False
    metadata: Optional[Dict[str, Any]] = None
    response: Optional[Dict[str, Any]] = None
    error: Optional[OperationStatus] = None

    @property
    def succeeded(self) -> bool:
        return self.done and self.error is None

    @property
    def failed(self) -> bool:
        return self.done and self.error is not None

    @property
    def operation_id(self) -> str:
        """Last path segment of the operation name."""
        return self.name.rsplit("/", 1)[-1]
