"""Error types and the tagged outcome shared by pipeline stages.

Stages that may degrade (intent extraction, reasoning) report
``success``/``degraded``; retrieval reports ``success``/``failed``.
Callers can see from the status which paths can hard-fail.
"""

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

OutcomeStatus = Literal["success", "degraded", "failed"]


class CompletionError(Exception):
    """Completion provider call failed or returned unusable output."""

    pass


class EmbeddingError(Exception):
    """Embedding provider call failed."""

    pass


class VectorIndexError(Exception):
    """Vector index query or upsert failed."""

    pass


class RetrievalError(Exception):
    """Similarity retrieval could not produce results."""

    pass


class QueryFailedError(Exception):
    """A query could not be answered (retrieval failure)."""

    pass


class QueryCancelledError(Exception):
    """Caller cancelled the query."""

    pass


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Tagged result of a pipeline stage."""

    status: OutcomeStatus
    value: T | None = None
    error: Exception | None = None
    reason: str | None = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(status="success", value=value)

    @classmethod
    def degraded(cls, value: T, reason: str, error: Exception | None = None) -> "Outcome[T]":
        return cls(status="degraded", value=value, error=error, reason=reason)

    @classmethod
    def failed(cls, error: Exception, reason: str | None = None) -> "Outcome[T]":
        return cls(status="failed", error=error, reason=reason or str(error))

    @property
    def ok(self) -> bool:
        return self.status != "failed"

    def unwrap(self) -> T:
        """Return the value, re-raising the error of a failed outcome."""
        if self.status == "failed":
            assert self.error is not None
            raise self.error
        return self.value  # type: ignore[return-value]


@dataclass
class CancelToken:
    """Token for cancellation signaling."""

    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def throw_if_cancelled(self) -> None:
        """Raise QueryCancelledError if cancelled."""
        if self.cancelled:
            raise QueryCancelledError("query cancelled")
