"""
Tests for filing-parameter validation run before the form pipeline.
"""

import pytest

from calculator.validation import (
    TaxInputValidationError,
    ensure_valid_filing_parameters,
    validate_filing_parameters,
)
from models.taxpayer import FilingStatus


class TestValidateFilingParameters:
    """Tests for validate_filing_parameters()."""

    def test_valid_parameters(self):
        """A normal federal return has no issues."""
        assert validate_filing_parameters(2024, "Single", "") == []

    @pytest.mark.parametrize("year", [0, -2024])
    def test_non_positive_year(self, year):
        """Zero and negative tax years are errors."""
        issues = validate_filing_parameters(year)
        assert len(issues) == 1
        assert issues[0].field == "tax_year"
        assert issues[0].severity == "error"

    def test_year_before_income_tax(self):
        """Years before 1913 are errors."""
        issues = validate_filing_parameters(1900)
        assert issues[0].field == "tax_year"

    @pytest.mark.parametrize("status", [
        "Single", "single", "married_joint", "Married Jointly",
        "Married Filing Separately", "head_of_household", FilingStatus.HEAD_OF_HOUSEHOLD,
    ])
    def test_known_filing_statuses(self, status):
        """Enum values and bracket labels are both accepted."""
        assert validate_filing_parameters(2024, status) == []

    def test_unknown_filing_status(self):
        """Unknown filing status strings are errors."""
        issues = validate_filing_parameters(2024, "Qualifying Widow")
        assert [i.field for i in issues] == ["filing_status"]
        assert issues[0].severity == "error"

    def test_unsupported_state_is_warning(self):
        """A state with no bundled table is only a warning."""
        issues = validate_filing_parameters(2024, "Single", "NY")
        assert len(issues) == 1
        assert issues[0].field == "state"
        assert issues[0].severity == "warning"

    def test_state_code_case_insensitive(self):
        """Lower-case state codes are accepted."""
        assert validate_filing_parameters(2024, "Single", "ca") == []


class TestEnsureValidFilingParameters:
    """Tests for ensure_valid_filing_parameters()."""

    def test_raises_with_all_errors(self):
        """Every error is carried on the exception."""
        with pytest.raises(TaxInputValidationError) as exc_info:
            ensure_valid_filing_parameters(-1, "Bogus")
        fields = [issue.field for issue in exc_info.value.issues]
        assert fields == ["tax_year", "filing_status"]
        assert "tax_year" in str(exc_info.value)

    def test_is_a_value_error(self):
        """Callers catching ValueError also catch validation failures."""
        with pytest.raises(ValueError):
            ensure_valid_filing_parameters(0)

    def test_returns_warnings(self):
        """Warnings do not raise and are returned to the caller."""
        warnings = ensure_valid_filing_parameters(2024, "Single", "TX")
        assert len(warnings) == 1
        assert warnings[0].severity == "warning"


class TestFilingStatus:
    """Tests for FilingStatus parsing."""

    def test_bracket_labels(self):
        """Each status maps to the label used in the bracket table."""
        assert FilingStatus.SINGLE.bracket_label == "Single"
        assert FilingStatus.MARRIED_JOINT.bracket_label == "Married Jointly"
        assert FilingStatus.MARRIED_SEPARATE.bracket_label == "Married Filing Separately"
        assert FilingStatus.HEAD_OF_HOUSEHOLD.bracket_label == "Head of Household"

    def test_parse_label(self):
        """Labels parse case-insensitively."""
        assert FilingStatus.parse("married jointly") == FilingStatus.MARRIED_JOINT

    def test_parse_unknown(self):
        """Unknown strings parse to None."""
        assert FilingStatus.parse("nope") is None
