from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

HttpMethod = Literal["GET", "PUT", "POST", "DELETE"]


class Link(BaseModel):
    """A server-issued URL and the HTTP method that must be used with it."""

    model_config = ConfigDict(frozen=True)

    href: str
    method: HttpMethod
    templated: bool = False

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: object) -> object:
        if isinstance(value, str):
            return value.upper()
        return value


class ApiError(BaseModel):
    """Error body returned by the API for non-2xx responses."""

    model_config = ConfigDict(extra="ignore")

    error: str | None = None
    description: str | None = None
    message: str | None = None


class OperationState(str, Enum):
    IN_PROGRESS = "in-progress"
    SUCCESS = "success"
    FAILED = "failed"


class OperationBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str


@dataclass(frozen=True, slots=True)
class OperationStatus:
    """One snapshot of a long-running operation."""

    id: str
    state: OperationState

    @property
    def is_in_progress(self) -> bool:
        return self.state is OperationState.IN_PROGRESS

    @property
    def is_success(self) -> bool:
        return self.state is OperationState.SUCCESS

    @property
    def is_failed(self) -> bool:
        return self.state is OperationState.FAILED


__all__ = [
    "HttpMethod",
    "Link",
    "ApiError",
    "OperationState",
    "OperationBody",
    "OperationStatus",
]
