from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class ValidationOutcome:
    expected: int
    actual: int
    is_valid: bool
    difference: int


def validate_count(expected: int, actual: int) -> ValidationOutcome:
    return ValidationOutcome(
        expected=expected,
        actual=actual,
        is_valid=actual == expected,
        difference=actual - expected,
    )


def validate_against(table: Mapping[str, int], contract: str, actual: int) -> Optional[ValidationOutcome]:
    """Validate ``actual`` against the table entry for ``contract``; None means skipped."""
    expected = table.get(contract.strip().lower())
    if expected is None:
        return None
    return validate_count(int(expected), actual)
