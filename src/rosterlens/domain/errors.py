"""Errors raised when building interval-bearing records."""

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class FieldError:
    """A single problem with one field of a record."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ConstructionError(ValueError):
    """Raised when a record is built from invalid data.

    Attributes:
        record_type: Name of the record that failed (e.g. "StaffSlot").
        errors: Every field error found, in validation order.
    """

    def __init__(self, record_type: str, errors: Iterable[FieldError]):
        self.record_type = record_type
        self.errors = list(errors)
        joined = ", ".join(str(e) for e in self.errors)
        super().__init__(f"Invalid {record_type}: {joined}")

    @property
    def fields(self) -> list[str]:
        """Names of the offending fields."""
        return [e.field for e in self.errors]


def raise_if_invalid(record_type: str, errors: list[FieldError]) -> None:
    """Raise ConstructionError when any errors were collected."""
    if errors:
        raise ConstructionError(record_type, errors)
