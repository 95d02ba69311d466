"""
Marginal tax bracket evaluator.

Applies a progressive bracket table to a taxable income amount and reports
the tax computed in each bracket the income reaches. The table is keyed by
jurisdiction (empty string = federal), year and filing status; the bundled
rows live in config/tax_parameters/tax_brackets.yaml. A row without a
max_income is open-ended and taxes all income above its min_income.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, Field

from calculator.decimal_math import ZERO, add, money, multiply, to_decimal, to_float, format_money
from config.tax_config_loader import get_config_loader
from models.taxpayer import FilingStatus

logger = logging.getLogger(__name__)

FEDERAL = ""


@dataclass(frozen=True)
class BracketRow:
    """One marginal bracket of a jurisdiction's table."""
    state: str
    year: int
    filing_status: str
    min_income: Decimal
    max_income: Optional[Decimal]
    rate: Decimal

    @property
    def width(self) -> Optional[Decimal]:
        """max_income - min_income; None for an open-ended top row."""
        if self.max_income is None:
            return None
        return self.max_income - self.min_income

    def contains(self, income: Decimal) -> bool:
        """True when income does not run past this row."""
        return self.max_income is None or income <= self.max_income

    def matches(self, state: str, year: int, filing_status: str) -> bool:
        return (
            self.state == state and
            self.year == year and
            self.filing_status == filing_status
        )


class BracketTax(BaseModel):
    """Tax computed within a single bracket."""
    model_config = {"frozen": True}

    bracket: float = Field(description="Marginal rate of the bracket")
    amount: float = Field(description="Income taxed in this bracket")
    tax: float = Field(description="Tax on the income in this bracket")


class MarginalTaxResult(BaseModel):
    """Bracket walk for one taxable income amount."""
    model_config = {"frozen": True}

    taxes: List[BracketTax] = Field(default_factory=list)
    total_tax: float = Field(default=0.0, ge=0)

    @property
    def marginal_rate(self) -> float:
        """Rate of the highest bracket reached (0 when no tax)."""
        return self.taxes[-1].bracket if self.taxes else 0.0

    @property
    def effective_rate(self) -> float:
        taxed = sum(t.amount for t in self.taxes)
        return round(self.total_tax / taxed, 4) if taxed else 0.0


def load_bracket_table() -> List[BracketRow]:
    """Build BracketRows from the configured YAML table."""
    return [
        BracketRow(
            state=row['state'].upper(),
            year=int(row['year']),
            filing_status=row['filing_status'],
            min_income=to_decimal(row['min_income']),
            max_income=None if row['max_income'] is None else to_decimal(row['max_income']),
            rate=to_decimal(row['rate']),
        )
        for row in get_config_loader().load_bracket_rows()
    ]


def _normalize_filing_status(filing_status: Union[str, FilingStatus]) -> str:
    status = FilingStatus.parse(filing_status)
    if status is None:
        return str(filing_status)
    return status.bracket_label


class MarginalTaxEvaluator:
    """
    Progressive tax calculator over a bracket table.

    Stateless apart from the table it was built with; safe to share.
    """

    def __init__(self, rows: Optional[Iterable[BracketRow]] = None):
        self._rows: List[BracketRow] = list(rows) if rows is not None else load_bracket_table()

    def brackets_for(
        self,
        year: Union[int, str],
        state: Optional[str],
        filing_status: Union[str, FilingStatus],
    ) -> List[BracketRow]:
        """Rows matching (state, year, filing status), ascending by min_income."""
        state_code = (state or FEDERAL).upper()
        status_label = _normalize_filing_status(filing_status)
        matching = [
            row for row in self._rows
            if row.matches(state_code, int(year), status_label)
        ]
        return sorted(matching, key=lambda row: row.min_income)

    def calculate(
        self,
        year: Union[int, str],
        state: Optional[str],
        taxable_income: Union[float, Decimal],
        filing_status: Union[str, FilingStatus],
    ) -> MarginalTaxResult:
        """
        Walk the brackets for taxable_income.

        Brackets entirely below the income are taxed at their full width; the
        bracket containing the income is taxed on the remainder and ends the
        walk. No matching table yields an empty result with zero tax.

        Args:
            year: Tax year (int or numeric string)
            state: Two-letter state code, or '' / None for federal
            taxable_income: Taxable income; negative amounts are treated as 0
            filing_status: FilingStatus or bracket label ('Single', ...)
        """
        income = to_decimal(taxable_income)
        if income < 0:
            logger.debug(f"Negative taxable income {income} clamped to 0")
            income = ZERO

        brackets = self.brackets_for(year, state, filing_status)
        if not brackets:
            logger.debug(
                f"No bracket table for state={state or 'federal'} year={year} "
                f"filing_status={filing_status}"
            )
            return MarginalTaxResult()

        taxes: List[BracketTax] = []
        for row in brackets:
            if not row.contains(income):
                taxed = row.width
            elif income > row.min_income:
                taxed = income - row.min_income
            else:
                break

            tax = money(multiply(taxed, row.rate))
            taxes.append(BracketTax(bracket=float(row.rate), amount=to_float(taxed), tax=float(tax)))

            if row.contains(income):
                break

        total = add(*(t.tax for t in taxes))
        result = MarginalTaxResult(taxes=taxes, total_tax=to_float(total))
        logger.debug(
            f"Marginal tax {state or 'federal'} {year} {filing_status}: "
            f"{format_money(income)} -> {format_money(total)} over {len(taxes)} brackets"
        )
        return result


_default_evaluator: Optional[MarginalTaxEvaluator] = None


def get_evaluator() -> MarginalTaxEvaluator:
    """Evaluator over the configured bracket table, built on first use."""
    global _default_evaluator
    if _default_evaluator is None:
        _default_evaluator = MarginalTaxEvaluator()
    return _default_evaluator


def reset_evaluator() -> None:
    """Drop the cached evaluator so the next call reloads the table."""
    global _default_evaluator
    _default_evaluator = None


def calculate_tax(
    year: Union[int, str],
    state: Optional[str],
    taxable_income: Union[float, Decimal],
    filing_status: Union[str, FilingStatus],
) -> MarginalTaxResult:
    """
    Convenience function to evaluate the configured bracket table.

    Example:
        >>> calculate_tax(2024, "", 50000, "Single").total_tax
        6053.0
    """
    return get_evaluator().calculate(year, state, taxable_income, filing_status)
