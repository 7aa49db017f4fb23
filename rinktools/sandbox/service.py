"""The service contract run inside the sandbox, and the responses it yields."""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Self, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, order=True)
class Response(Generic[T]):
    """A service result together with its resource statistics."""

    result: T
    memory_used: int = 0
    """Peak memory used while servicing the query, in bytes."""
    time_taken: float = 0.0
    """Time taken to service the query, in seconds."""
    stdout: str = ""
    """Logs collected while servicing the query."""

    def replace(self, result: U) -> Response[U]:
        """Return a copy carrying *result* instead."""
        return dataclasses.replace(self, result=result)

    def map(self, func: Callable[[T], U]) -> Response[U]:
        """Return a copy whose result is ``func(result)``."""
        return dataclasses.replace(self, result=func(self.result))


class Service(ABC):
    """Logic that can be run in a sandboxed child process.

    Requests, results and configs must be picklable, since they cross
    the process boundary.
    """

    @classmethod
    @abstractmethod
    def args(cls, config: Any) -> list[str]:
        """Command-line arguments that make the program become the child."""

    @classmethod
    @abstractmethod
    def timeout(cls, config: Any) -> float:
        """Seconds that may be spent servicing one request."""

    @classmethod
    @abstractmethod
    def create(cls, config: Any) -> Self:
        """Build the service from its config; raise OSError on failure."""

    @abstractmethod
    def handle(self, request: Any) -> Any:
        """Answer one request."""