"""
Schedule 1 (Form 1040) - Additional Income and Adjustments to Income

Part I: Additional Income (Lines 1-10)
  - Business income (Schedule C), other gains (Form 4797), rental and
    pass-through income (Schedule E), farm income (Schedule F)
  - Line 8a: Net operating loss deduction (entered as a negative amount)
  - Line 8p: Section 461(l) excess business loss adjustment from Form 461

Part II: Adjustments to Income (Lines 11-26)
  - Deductible part of self-employment tax
  - Self-employed SEP, SIMPLE and qualified plans
  - Self-employed health insurance
  - Penalty on early withdrawal of savings

Schedule 1 totals flow to:
- Form 1040 Line 8 (line 10, additional income)
- Form 1040 Line 10 (line 26, adjustments to income)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from models._decimal_utils import dollars, money
from models.form_461 import Form461, Form461Result
from models.schedule_d import ScheduleDResult

logger = logging.getLogger(__name__)


class Schedule1(BaseModel):
    """Schedule 1 inputs. Form 461 is computed from the same business figures."""
    tax_year: int = Field(ge=1, description="Tax year")
    is_single: bool = Field(default=True, description="Single filer")

    schedule_d: Optional[ScheduleDResult] = Field(
        default=None,
        description="Schedule D result passed through to Form 461"
    )

    # Part I
    business_income: float = Field(default=0.0, description="Line 3: Business income or (loss)")
    other_gains: float = Field(default=0.0, description="Line 4: Other gains or (losses)")
    rental_income: float = Field(
        default=0.0,
        description="Line 5: Rental real estate, royalties, partnerships, S corps, trusts"
    )
    farm_income: float = Field(default=0.0, description="Line 6: Farm income or (loss)")
    unemployment_compensation: float = Field(default=0.0, ge=0, description="Line 7")
    net_operating_loss: float = Field(
        default=0.0, ge=0,
        description="NOL deduction carried from other years (positive; entered negative on line 8a)"
    )

    # Part II
    self_employment_tax: float = Field(
        default=0.0, ge=0,
        description="Line 15: Deductible part of self-employment tax"
    )
    sep_simple_qualified_plans: float = Field(
        default=0.0, ge=0,
        description="Line 16: Self-employed SEP, SIMPLE, and qualified plans"
    )
    self_employed_health_insurance: float = Field(
        default=0.0, ge=0,
        description="Line 17: Self-employed health insurance deduction"
    )
    early_withdrawal_penalty: float = Field(
        default=0.0, ge=0,
        description="Line 18: Penalty on early withdrawal of savings"
    )

    override_f461_line_15: Optional[float] = Field(
        default=None, ge=0,
        description="Optional override for the maximum excess business loss"
    )

    def build_form_461(self) -> Form461:
        """Form 461 fed from Schedule 1 lines 3-6 and Schedule D."""
        return Form461(
            tax_year=self.tax_year,
            is_single=self.is_single,
            schedule1_line_3=self.business_income,
            schedule1_line_4=self.other_gains,
            schedule1_line_5=self.rental_income,
            schedule1_line_6=self.farm_income,
            line_8=0.0,
            line_11=0.0,
            override_line_15=self.override_f461_line_15,
            schedule_d=self.schedule_d,
        )

    def calculate(self, form_461: Optional[Form461Result] = None) -> "Schedule1Result":
        """
        Compute Schedule 1.

        Args:
            form_461: Precomputed Form 461 result. When omitted, Form 461 is
                computed from this schedule's business figures.
        """
        if form_461 is None:
            form_461 = self.build_form_461().calculate()

        line_3 = self.business_income
        line_4 = self.other_gains
        line_5 = self.rental_income
        line_6 = self.farm_income
        line_7 = self.unemployment_compensation
        line_8a = -self.net_operating_loss if self.net_operating_loss else 0.0
        line_8p = form_461.line_16

        # Line 9: Total other income (lines 8a through 8z)
        line_9 = dollars(money(line_8a) + money(line_8p))

        # Line 10: Combine lines 1 through 7 and 9
        line_10 = dollars(
            money(line_3) + money(line_4) + money(line_5) +
            money(line_6) + money(line_7) + money(line_9)
        )

        line_15 = self.self_employment_tax
        line_16 = self.sep_simple_qualified_plans
        line_17 = self.self_employed_health_insurance
        line_18 = self.early_withdrawal_penalty
        line_25 = 0.0

        # Line 26: Add lines 11 through 23 and 25
        line_26 = dollars(
            money(line_15) + money(line_16) + money(line_17) +
            money(line_18) + money(line_25)
        )

        logger.debug(f"Schedule 1 {self.tax_year}: line 8p={line_8p}, line 10={line_10}, line 26={line_26}")

        return Schedule1Result(
            line_3=line_3,
            line_4=line_4,
            line_5=line_5,
            line_6=line_6,
            line_7=line_7,
            line_8a=line_8a,
            line_8p=line_8p,
            line_9=line_9,
            line_10=line_10,
            line_15=line_15,
            line_16=line_16,
            line_17=line_17,
            line_18=line_18,
            line_25=line_25,
            line_26=line_26,
            form_461=form_461,
        )


class Schedule1Result(BaseModel):
    """Computed Schedule 1 lines with the Form 461 it was built from."""
    model_config = {"frozen": True}

    # Part I
    line_3: float = Field(default=0.0, description="Business income or (loss)")
    line_4: float = Field(default=0.0, description="Other gains or (losses)")
    line_5: float = Field(default=0.0, description="Rental real estate, royalties, partnerships, S corps")
    line_6: float = Field(default=0.0, description="Farm income or (loss)")
    line_7: float = Field(default=0.0, description="Unemployment compensation")
    line_8a: float = Field(default=0.0, le=0, description="Net operating loss")
    line_8p: float = Field(default=0.0, ge=0, description="Section 461(l) excess business loss adjustment")
    line_9: float = Field(default=0.0, description="Total other income")
    line_10: float = Field(default=0.0, description="Additional income; Form 1040 line 8")

    # Part II
    line_15: float = Field(default=0.0, description="Deductible part of self-employment tax")
    line_16: float = Field(default=0.0, description="Self-employed SEP, SIMPLE, and qualified plans")
    line_17: float = Field(default=0.0, description="Self-employed health insurance deduction")
    line_18: float = Field(default=0.0, description="Penalty on early withdrawal of savings")
    line_25: float = Field(default=0.0, description="Total other adjustments")
    line_26: float = Field(default=0.0, description="Adjustments to income; Form 1040 line 10")

    form_461: Form461Result

    @property
    def form_1040_line_8(self) -> float:
        return self.line_10

    @property
    def form_1040_line_10(self) -> float:
        return self.line_26

    def is_required(self) -> bool:
        """Schedule 1 is filed when it reports any additional income or adjustments."""
        return self.line_10 != 0 or self.line_26 > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump()


def calculate_schedule_1(
    tax_year: int,
    is_single: bool = True,
    **inputs: Any,
) -> Schedule1Result:
    """Convenience function to create and calculate Schedule 1."""
    return Schedule1(tax_year=tax_year, is_single=is_single, **inputs).calculate()
