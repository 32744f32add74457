"""Validation failures produced by indexer acceptance tests."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel


class ValidationFailure(BaseModel):
    """Outcome of one failed check.

    Warnings do not block activation of the indexer, errors do.
    """

    field: str = ""
    message: str
    is_warning: bool = False
    detailed_description: str | None = None


def has_errors(failures: Iterable[ValidationFailure]) -> bool:
    """True when at least one failure is error-level."""
    return any(not failure.is_warning for failure in failures)


def add_if_not_none(failures: list[ValidationFailure], failure: ValidationFailure | None) -> None:
    if failure is not None:
        failures.append(failure)
