"""
Excess Business Loss threshold table - IRC Section 461(l)(3).

Known thresholds are published annually by the IRS (Rev. Proc. inflation
adjustments). Years after the last published row are projected from the
final row with a cost-of-living multiplier and rounded to the nearest $1,000.

P.L. 119-21 moves the inflation adjustment base year from 2017 to 2024 for
tax years beginning after December 31, 2025, so projections start from the
2025 row rather than from the 2018 statutory amounts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, Overflow, ROUND_HALF_UP, localcontext
from typing import Optional, Tuple

from calculator.decimal_math import to_decimal
from config.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThresholdRow:
    """Published EBL threshold for one tax year."""
    tax_year: int
    single_filers: float
    married_filing_jointly: float

    def amount(self, is_single: bool) -> float:
        return self.single_filers if is_single else self.married_filing_jointly


EBL_THRESHOLDS: Tuple[ThresholdRow, ...] = (
    ThresholdRow(2018, 250000.0, 500000.0),
    ThresholdRow(2019, 255000.0, 510000.0),
    ThresholdRow(2020, 259000.0, 518000.0),
    ThresholdRow(2021, 262000.0, 524000.0),
    ThresholdRow(2022, 270000.0, 540000.0),
    ThresholdRow(2023, 289000.0, 578000.0),
    ThresholdRow(2024, 305000.0, 610000.0),
    ThresholdRow(2025, 317000.0, 634000.0),
)

MINIMUM_PROJECTED_THRESHOLD = 1000.0
# Projections saturate here instead of growing without bound
MAXIMUM_PROJECTED_THRESHOLD = 1_000_000_000_000_000.0


def find_threshold_row(tax_year: int) -> Optional[ThresholdRow]:
    """Return the published row for tax_year, or None if the year is not tabulated."""
    for row in EBL_THRESHOLDS:
        if row.tax_year == tax_year:
            return row
    return None


def excess_business_loss_limitation(
    tax_year: int,
    is_single: bool = True,
    cost_of_living_adjustment: Optional[float] = None,
) -> float:
    """
    Maximum excess business loss (Form 461 line 15) for a tax year.

    Args:
        tax_year: Tax year being computed
        is_single: True for single filers, False for married filing jointly
        cost_of_living_adjustment: Annual multiplier for years after the table.
            Defaults to the configured value (1.03).

    Returns:
        Threshold in dollars. Years before the table use the first row; years
        after it are projected, never fall below $1,000 and never exceed
        MAXIMUM_PROJECTED_THRESHOLD.

    Examples:
        >>> excess_business_loss_limitation(2024)
        305000.0
        >>> excess_business_loss_limitation(2026, cost_of_living_adjustment=1.03)
        327000.0
    """
    known = find_threshold_row(tax_year)
    if known is not None:
        return known.amount(is_single)

    first, last = EBL_THRESHOLDS[0], EBL_THRESHOLDS[-1]

    if tax_year < first.tax_year:
        return first.amount(is_single)

    if cost_of_living_adjustment is None:
        cost_of_living_adjustment = get_settings().cost_of_living_adjustment

    years_since_base = tax_year - last.tax_year
    with localcontext() as ctx:
        # Far-future years overflow to Infinity and are capped below
        ctx.traps[Overflow] = False
        raw = to_decimal(last.amount(is_single)) * to_decimal(cost_of_living_adjustment) ** years_since_base
    raw = min(raw, to_decimal(MAXIMUM_PROJECTED_THRESHOLD))

    # Round to the nearest $1,000, halves away from zero
    thousands = (raw / Decimal(1000)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    projected = max(float(thousands * 1000), MINIMUM_PROJECTED_THRESHOLD)

    logger.debug(
        f"Projected EBL threshold for {tax_year} "
        f"({'single' if is_single else 'joint'}): {projected:,.0f} "
        f"from {last.tax_year} base at COLA {cost_of_living_adjustment}"
    )
    return projected
