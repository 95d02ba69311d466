from enum import Enum
from typing import Optional


class FilingStatus(str, Enum):
    """IRS filing status options"""
    SINGLE = "single"
    MARRIED_JOINT = "married_joint"
    MARRIED_SEPARATE = "married_separate"
    HEAD_OF_HOUSEHOLD = "head_of_household"

    @property
    def bracket_label(self) -> str:
        """Label used by the bundled bracket table (e.g. 'Married Jointly')."""
        return _BRACKET_LABELS[self]

    @classmethod
    def parse(cls, value: "str | FilingStatus") -> Optional["FilingStatus"]:
        """Resolve an enum value or a bracket-table label. Returns None if unknown."""
        if isinstance(value, FilingStatus):
            return value
        normalized = str(value).strip()
        for status in cls:
            if normalized == status.value or normalized.lower() == status.bracket_label.lower():
                return status
        return None


_BRACKET_LABELS = {
    FilingStatus.SINGLE: "Single",
    FilingStatus.MARRIED_JOINT: "Married Jointly",
    FilingStatus.MARRIED_SEPARATE: "Married Filing Separately",
    FilingStatus.HEAD_OF_HOUSEHOLD: "Head of Household",
}


class TaxEntityType(str, Enum):
    """Kind of taxpayer a Form 172 is prepared for."""
    INDIVIDUAL = "individual"
    ESTATE_OR_TRUST = "estate_or_trust"
