"""Typed failure outcomes passed between pipeline stages."""

from dataclasses import dataclass, field
from enum import Enum


class FailureKind(str, Enum):
    """Failure categories the pipeline can report."""

    INVALID_REQUEST = "invalid_request"
    FETCH_FAILED = "fetch_failed"
    INGREDIENTS_NOT_FOUND = "ingredients_not_found"
    REASONING_FAILED = "reasoning_failed"
    PERSISTENCE_FAILED = "persistence_failed"


_STATUS_CODES: dict[FailureKind, int] = {
    FailureKind.INVALID_REQUEST: 400,
    FailureKind.FETCH_FAILED: 503,
    FailureKind.INGREDIENTS_NOT_FOUND: 503,
    FailureKind.REASONING_FAILED: 503,
    FailureKind.PERSISTENCE_FAILED: 500,
}

ACQUISITION_FAILURES = frozenset(
    {FailureKind.FETCH_FAILED, FailureKind.INGREDIENTS_NOT_FOUND}
)


@dataclass(frozen=True)
class Failure:
    """A stage result describing why the pipeline stopped."""

    kind: FailureKind
    message: str
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return status_code_for(self.kind)


def status_code_for(kind: FailureKind) -> int:
    """Map a failure kind to its HTTP status code."""
    return _STATUS_CODES[kind]
