from .ebl_limitation import EBL_THRESHOLDS, ThresholdRow, excess_business_loss_limitation
from .tax_brackets import (
    BracketRow,
    BracketTax,
    MarginalTaxEvaluator,
    MarginalTaxResult,
    calculate_tax,
)
from .validation import (
    TaxInputValidationError,
    ValidationIssue,
    ensure_valid_filing_parameters,
    validate_filing_parameters,
)

__all__ = [
    "EBL_THRESHOLDS",
    "ThresholdRow",
    "excess_business_loss_limitation",
    "BracketRow",
    "BracketTax",
    "MarginalTaxEvaluator",
    "MarginalTaxResult",
    "calculate_tax",
    "TaxInputValidationError",
    "ValidationIssue",
    "ensure_valid_filing_parameters",
    "validate_filing_parameters",
]
