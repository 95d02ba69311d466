from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from models.taxpayer import FilingStatus

SUPPORTED_JURISDICTIONS = ("", "CA")
EARLIEST_TAX_YEAR = 1913


@dataclass
class ValidationIssue:
    field: str
    message: str
    severity: str = "error"  # "error" | "warning"


class TaxInputValidationError(ValueError):
    """Raised before the pipeline runs when filing parameters are invalid."""

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = issues
        message = "; ".join(f"{issue.field}: {issue.message}" for issue in issues)
        super().__init__(message)


def validate_filing_parameters(
    tax_year: int,
    filing_status: Optional[Union[str, FilingStatus]] = None,
    state: Optional[str] = None,
) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    if tax_year <= 0:
        issues.append(ValidationIssue("tax_year", "Tax year must be a positive integer."))
    elif tax_year < EARLIEST_TAX_YEAR:
        issues.append(ValidationIssue("tax_year", f"Tax year must be {EARLIEST_TAX_YEAR} or later."))

    if filing_status is not None and FilingStatus.parse(filing_status) is None:
        issues.append(
            ValidationIssue("filing_status", f"Unknown filing status: {filing_status!r}.")
        )

    if state is not None and state.upper() not in SUPPORTED_JURISDICTIONS:
        issues.append(
            ValidationIssue(
                "state",
                f"No bracket table is bundled for {state!r}; tax will compute as zero.",
                severity="warning",
            )
        )

    return issues


def ensure_valid_filing_parameters(
    tax_year: int,
    filing_status: Optional[Union[str, FilingStatus]] = None,
    state: Optional[str] = None,
) -> List[ValidationIssue]:
    """Raise TaxInputValidationError on any error; return the remaining warnings."""
    issues = validate_filing_parameters(tax_year, filing_status, state)
    errors = [issue for issue in issues if issue.severity == "error"]
    if errors:
        raise TaxInputValidationError(errors)
    return issues
