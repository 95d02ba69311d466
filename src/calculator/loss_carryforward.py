"""
Multi-year Excess Business Loss / NOL carryforward projection.

An excess business loss disallowed by Form 461 in one year is treated as a
net operating loss carried to the next year (IRC 461(l)(2)). This module
chains Form 1040 computations year over year:

1. Compute a preliminary Form 1040 with no NOL deduction to find AGI.
2. Use as much of the carried NOL as positive AGI allows; for tax years from
   settings.nol_limitation_first_year onward the deduction is further capped
   at settings.nol_income_limitation_rate of that income (IRC 172(a)(2)).
3. Recompute Form 1040 with the NOL deduction.
4. Carry forward: unused NOL + excess business loss + any negative AGI.

Each projected year embeds its Form1040Result, so Form 461, Schedule 1 and
Schedule D are all available for review.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from calculator.decimal_math import ZERO, add, max_decimal, min_decimal, money, multiply, to_float
from config.settings import PipelineSettings, get_settings
from models.form_1040 import Form1040, Form1040Result
from services.logging_config import CalculationLogger, log_performance, projection_id_var

logger = logging.getLogger(__name__)


class ProjectionYear(BaseModel):
    """Income figures for one projected tax year."""
    year: int = Field(ge=1, description="Tax year")
    wages: float = Field(default=0.0, description="W-2 wages")
    personal_cap_gain: float = Field(default=0.0, description="Personal capital gain or (loss)")
    business_cap_gain: float = Field(default=0.0, description="Business capital gain or (loss)")
    business_net_income: float = Field(default=0.0, description="Net business income or (loss)")
    override_f461_line_15: Optional[float] = Field(
        default=None, ge=0,
        description="EBL threshold to use for this year only"
    )


class ProjectedYear(BaseModel):
    """Result of projecting one tax year."""
    model_config = {"frozen": True}

    year: int
    limit: float = Field(ge=0, description="Form 461 line 15 threshold used")
    starting_nol: float = Field(ge=0, description="NOL carried into the year")
    allowed_loss: float = Field(description="Net business result after the EBL limitation")
    disallowed_loss: float = Field(ge=0, description="Excess business loss (Form 461 line 16)")
    nol_used: float = Field(ge=0, description="NOL deducted on Schedule 1 line 8a")
    nol_income_limit: float = Field(ge=0, description="Most NOL this year's income could absorb")
    current_year_nol: float = Field(ge=0, description="Loss created by negative AGI")
    taxable_income: float = Field(ge=0, description="Form 1040 line 15")
    ending_nol: float = Field(ge=0, description="NOL carried to the following year")
    form_1040: Form1040Result

    @property
    def agi(self) -> float:
        return self.form_1040.line_11


def _form_1040_for(
    row: ProjectionYear,
    is_single: bool,
    nol_deduction: float,
    override_f461_line_15: Optional[float],
) -> Form1040:
    override = row.override_f461_line_15
    if override is None:
        override = override_f461_line_15
    return Form1040(
        tax_year=row.year,
        is_single=is_single,
        wages=row.wages,
        non_business_cap_gains=row.personal_cap_gain,
        business_cap_gains=row.business_cap_gain,
        business_income=row.business_net_income,
        nol_deduction_from_other_years=nol_deduction,
        override_f461_line_15=override,
    )


def nol_income_limit(
    tax_year: int,
    agi_before_nol: float,
    settings: Optional[PipelineSettings] = None,
) -> Decimal:
    """
    Most NOL deduction the year's income can absorb.

    Positive AGI before the NOL deduction, reduced to the NOL income
    limitation rate for years the limitation applies to.
    """
    settings = settings or get_settings()
    income = max_decimal(ZERO, agi_before_nol)
    if tax_year >= settings.nol_limitation_first_year:
        return money(multiply(income, settings.nol_income_limitation_rate))
    return money(income)


@log_performance("project_excess_business_losses")
def project_excess_business_losses(
    rows: Iterable[ProjectionYear],
    is_single: bool = True,
    override_f461_line_15: Optional[float] = None,
    starting_nol: float = 0.0,
    settings: Optional[PipelineSettings] = None,
) -> List[ProjectedYear]:
    """
    Project excess business losses and NOL carryforwards across years.

    Args:
        rows: Years in chronological order
        is_single: Single filer threshold column and capital loss limit
        override_f461_line_15: Threshold override for every year that does
            not set its own
        starting_nol: NOL carried into the first year
        settings: Pipeline settings (NOL limitation rate and first year)

    Returns:
        One ProjectedYear per input row, in the same order.
    """
    settings = settings or get_settings()
    rows = list(rows)
    results: List[ProjectedYear] = []
    if not rows:
        return results

    token = projection_id_var.set(uuid.uuid4().hex[:12])
    calc_log = CalculationLogger(projection_id_var.get())
    try:
        calc_log.start_projection(rows[0].year, rows[-1].year, is_single)
        carryforward = money(starting_nol)

        for row in rows:
            step_start = calc_log.log_step(f"year_{row.year}", starting_nol=to_float(carryforward))
            opening = carryforward

            preliminary = _form_1040_for(row, is_single, 0.0, override_f461_line_15).calculate()
            income_limit = nol_income_limit(row.year, preliminary.line_11, settings)
            nol_used = money(min_decimal(opening, income_limit))

            if nol_used > 0:
                calc_log.log_nol_usage(
                    row.year, to_float(opening), preliminary.line_11,
                    to_float(income_limit), to_float(nol_used),
                )
                form_1040 = _form_1040_for(
                    row, is_single, to_float(nol_used), override_f461_line_15
                ).calculate()
            else:
                form_1040 = preliminary

            form_461 = form_1040.schedule_1.form_461
            disallowed = money(form_461.line_16)
            if disallowed > 0:
                calc_log.log_excess_business_loss(
                    row.year, form_461.line_15, form_461.line_14, to_float(disallowed)
                )

            current_year_nol = money(max_decimal(ZERO, -money(form_1040.line_11)))
            carryforward = money(add(opening, -nol_used, disallowed, current_year_nol))

            result = ProjectedYear(
                year=row.year,
                limit=form_461.line_15,
                starting_nol=to_float(opening),
                allowed_loss=form_461.allowed_business_loss,
                disallowed_loss=to_float(disallowed),
                nol_used=to_float(nol_used),
                nol_income_limit=to_float(income_limit),
                current_year_nol=to_float(current_year_nol),
                taxable_income=form_1040.line_15,
                ending_nol=to_float(carryforward),
                form_1040=form_1040,
            )
            results.append(result)

            calc_log.complete_step(f"year_{row.year}", step_start, ending_nol=result.ending_nol)
            calc_log.log_year(row.year, form_1040.line_11, form_1040.line_15, result.ending_nol)

        calc_log.log_result(len(results), to_float(carryforward))
    finally:
        projection_id_var.reset(token)

    return results
