"""
FileSystemGate Pydantic models.

Defines the operation request, the actions it can name, and the response
envelope returned for every call.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Action(str, Enum):
    """Filesystem actions the dispatcher knows how to run."""
    LIST_FILES = "list_files"
    READ_FILE = "read_file"
    WRITE_FILE = "write_file"
    CREATE_FOLDER = "create_folder"


class Operation(BaseModel):
    """A single request to act on the filesystem."""

    model_config = ConfigDict(extra="ignore")

    action: str = Field(description="Action name, checked against the allowlist")
    parameters: Dict[str, str] = Field(default_factory=dict)
    timestamp: Optional[datetime] = Field(
        default=None,
        description="Client-side send time, informational only"
    )

    def param(self, name: str) -> Optional[str]:
        """Get a parameter value, or None if absent."""
        return self.parameters.get(name)


class ResponseStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class OperationResponse(BaseModel):
    """
    Uniform wire envelope.

    A success carries ``data`` and an empty ``message``; an error carries a
    ``message`` and no ``data``.
    """

    status: ResponseStatus
    data: Optional[Any] = None
    message: str = ""

    @model_validator(mode="after")
    def _check_shape(self) -> "OperationResponse":
        if self.status == ResponseStatus.SUCCESS and self.message:
            raise ValueError("Successful responses carry no message")
        if self.status == ResponseStatus.ERROR:
            if not self.message:
                raise ValueError("Error responses need a message")
            if self.data is not None:
                raise ValueError("Error responses carry no data")
        return self

    @classmethod
    def success(cls, data: Any) -> "OperationResponse":
        return cls(status=ResponseStatus.SUCCESS, data=data)

    @classmethod
    def error(cls, message: str) -> "OperationResponse":
        return cls(status=ResponseStatus.ERROR, message=message)

    @property
    def ok(self) -> bool:
        return self.status == ResponseStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return self.model_dump(mode="json")
