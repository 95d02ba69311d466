"""
Form 1040 - U.S. Individual Income Tax Return (income and AGI sections)

Composes the form chain Schedule D -> Form 461 -> Schedule 1 -> Form 1040:
- Schedule D nets personal and business capital gains and applies the loss limit
- Schedule 1 (with Form 461) adds business income and the EBL add-back
- Form 1040 totals income, subtracts adjustments (AGI) and deductions

The return stops at taxable income (line 15). Tax, credits and payments on
lines 16-38 are straight sums of caller-supplied amounts that default to
zero; the bracket tax for line 15 comes from calculator.tax_brackets.

Form 172 is computed alongside from the same inputs and embedded in the
result. Its NOL is not fed back into nol_deduction_from_other_years; a
carryforward from a prior year must be supplied explicitly.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from config.settings import get_settings
from models._decimal_utils import dollars, money
from models.form_172 import Form172, Form172Result
from models.schedule_1 import Schedule1, Schedule1Result
from models.schedule_d import ScheduleD, ScheduleDResult

logger = logging.getLogger(__name__)

STANDARD_DEDUCTION_2024_SINGLE = 14600.0


class Form1040(BaseModel):
    """Form 1040 inputs."""
    tax_year: int = Field(
        default_factory=lambda: get_settings().default_tax_year, ge=1,
        description="Tax year (defaults to the configured default_tax_year)"
    )
    is_single: bool = Field(default=True, description="Single filer")

    # Income
    wages: float = Field(default=0.0, description="Line 1z: Wages, salaries, tips")
    interest: float = Field(default=0.0, description="Line 2b: Taxable interest")
    dividends: float = Field(default=0.0, description="Line 3b: Ordinary dividends")
    ira_distributions: float = Field(default=0.0, description="Line 4b: Taxable IRA distributions")
    pensions: float = Field(default=0.0, description="Line 5b: Taxable pensions and annuities")
    social_security: float = Field(default=0.0, description="Line 6b: Taxable social security benefits")
    non_business_cap_gains: float = Field(default=0.0, description="Personal capital gain or (loss)")
    business_cap_gains: float = Field(default=0.0, description="Business capital gain or (loss) from pass-throughs")

    # Schedule 1
    business_income: float = Field(default=0.0, description="Schedule C business income or (loss)")
    other_gains: float = Field(default=0.0, description="Form 4797 other gains or (losses)")
    rental_income: float = Field(default=0.0, description="Schedule E income or (loss)")
    farm_income: float = Field(default=0.0, description="Schedule F income or (loss)")
    nol_deduction_from_other_years: float = Field(default=0.0, ge=0, description="NOL carried into this year")
    self_employment_tax: float = Field(default=0.0, ge=0, description="Deductible part of SE tax")
    sep_simple_qualified_plans: float = Field(default=0.0, ge=0)
    self_employed_health_insurance: float = Field(default=0.0, ge=0)
    early_withdrawal_penalty: float = Field(default=0.0, ge=0)

    # Deductions
    standard_deduction: float = Field(
        default=STANDARD_DEDUCTION_2024_SINGLE, ge=0,
        description="Line 12: Standard or itemized deduction"
    )
    qbi_deduction: float = Field(default=0.0, ge=0, description="Line 13: QBI deduction")

    # Tax, credits and payments (caller supplied)
    tax: float = Field(default=0.0, ge=0, description="Line 16: Tax")
    schedule_2_line_3: float = Field(default=0.0, ge=0, description="Line 17: Amount from Schedule 2, line 3")
    child_tax_credit: float = Field(default=0.0, ge=0, description="Line 19: Child tax credit")
    schedule_3_line_8: float = Field(default=0.0, ge=0, description="Line 20: Amount from Schedule 3, line 8")
    other_taxes: float = Field(default=0.0, ge=0, description="Line 23: Other taxes incl. SE tax")
    federal_withholding: float = Field(default=0.0, ge=0, description="Line 25d: Federal income tax withheld")
    estimated_tax_payments: float = Field(default=0.0, ge=0, description="Line 26: Estimated tax payments")
    other_payments_and_refundable_credits: float = Field(default=0.0, ge=0, description="Line 32")
    applied_to_next_year: float = Field(default=0.0, ge=0, description="Line 36: Overpayment applied to next year")
    estimated_tax_penalty: float = Field(default=0.0, ge=0, description="Line 38: Estimated tax penalty")

    override_f461_line_15: Optional[float] = Field(
        default=None, ge=0,
        description="Optional override for the maximum excess business loss"
    )

    def build_schedule_d(self) -> ScheduleD:
        return ScheduleD(
            line_1a_gain_loss=self.non_business_cap_gains,
            line_5=self.business_cap_gains,
            is_single=self.is_single,
        )

    def build_schedule_1(self, schedule_d: ScheduleDResult) -> Schedule1:
        return Schedule1(
            tax_year=self.tax_year,
            is_single=self.is_single,
            schedule_d=schedule_d,
            business_income=self.business_income,
            other_gains=self.other_gains,
            rental_income=self.rental_income,
            farm_income=self.farm_income,
            net_operating_loss=self.nol_deduction_from_other_years,
            self_employment_tax=self.self_employment_tax,
            sep_simple_qualified_plans=self.sep_simple_qualified_plans,
            self_employed_health_insurance=self.self_employed_health_insurance,
            early_withdrawal_penalty=self.early_withdrawal_penalty,
            override_f461_line_15=self.override_f461_line_15,
        )

    def build_form_172(self, agi: float) -> Form172:
        """Form 172 Part I for the current year, with no Part II carryover years."""
        return Form172(
            is_married_filing_separately=not self.is_single,
            agi=agi,
            standard_deduction=self.standard_deduction,
            nonbusiness_capital_losses=max(0.0, -self.non_business_cap_gains),
            nonbusiness_capital_gains=max(0.0, self.non_business_cap_gains),
            business_capital_losses=max(0.0, -self.business_cap_gains),
            business_capital_gains=max(0.0, self.business_cap_gains),
            nol_deduction_from_other_years=self.nol_deduction_from_other_years,
        )

    def calculate(self) -> "Form1040Result":
        schedule_d = self.build_schedule_d().calculate()
        schedule_1 = self.build_schedule_1(schedule_d).calculate()

        # Income
        line_1z = self.wages
        line_2b = self.interest
        line_3b = self.dividends
        line_4b = self.ira_distributions
        line_5b = self.pensions
        line_6b = self.social_security
        line_7 = schedule_d.line_21
        line_8 = schedule_1.line_10
        line_9 = dollars(
            money(line_1z) + money(line_2b) + money(line_3b) + money(line_4b) +
            money(line_5b) + money(line_6b) + money(line_7) + money(line_8)
        )

        # Adjusted gross income
        line_10 = schedule_1.line_26
        line_11 = dollars(money(line_9) - money(line_10))

        # Deductions and taxable income
        line_12 = self.standard_deduction
        line_13 = self.qbi_deduction
        line_14 = dollars(money(line_12) + money(line_13))
        line_15 = dollars(max(money(0), money(line_11) - money(line_14)))

        # Tax and credits
        line_16 = self.tax
        line_17 = self.schedule_2_line_3
        line_18 = dollars(money(line_16) + money(line_17))
        line_19 = self.child_tax_credit
        line_20 = self.schedule_3_line_8
        line_21 = dollars(money(line_19) + money(line_20))
        line_22 = dollars(max(money(0), money(line_18) - money(line_21)))
        line_23 = self.other_taxes
        line_24 = dollars(money(line_22) + money(line_23))

        # Payments
        line_25d = self.federal_withholding
        line_26 = self.estimated_tax_payments
        line_32 = self.other_payments_and_refundable_credits
        line_33 = dollars(money(line_25d) + money(line_26) + money(line_32))

        # Refund or amount owed
        line_34 = dollars(max(money(0), money(line_33) - money(line_24)))
        line_36 = min(self.applied_to_next_year, line_34)
        line_35a = dollars(money(line_34) - money(line_36))
        line_38 = self.estimated_tax_penalty
        line_37 = dollars(max(money(0), money(line_24) - money(line_33)) + money(line_38))

        form_172 = self.build_form_172(line_11).calculate()

        logger.debug(
            f"Form 1040 {self.tax_year}: total income {line_9}, AGI {line_11}, "
            f"taxable income {line_15}"
        )

        return Form1040Result(
            tax_year=self.tax_year,
            line_1z=line_1z, line_2b=line_2b, line_3b=line_3b, line_4b=line_4b,
            line_5b=line_5b, line_6b=line_6b, line_7=line_7, line_8=line_8,
            line_9=line_9, line_10=line_10, line_11=line_11, line_12=line_12,
            line_13=line_13, line_14=line_14, line_15=line_15,
            line_16=line_16, line_17=line_17, line_18=line_18, line_19=line_19,
            line_20=line_20, line_21=line_21, line_22=line_22, line_23=line_23,
            line_24=line_24, line_25d=line_25d, line_26=line_26, line_32=line_32,
            line_33=line_33, line_34=line_34, line_35a=line_35a, line_36=line_36,
            line_37=line_37, line_38=line_38,
            schedule_1=schedule_1,
            schedule_d=schedule_d,
            form_172=form_172,
        )


class Form1040Result(BaseModel):
    """Computed Form 1040 lines with the schedules they were built from."""
    model_config = {"frozen": True}

    tax_year: int

    # Income
    line_1z: float = 0.0
    line_2b: float = 0.0
    line_3b: float = 0.0
    line_4b: float = 0.0
    line_5b: float = 0.0
    line_6b: float = 0.0
    line_7: float = Field(default=0.0, description="Capital gain or (loss) from Schedule D line 21")
    line_8: float = Field(default=0.0, description="Additional income from Schedule 1 line 10")
    line_9: float = Field(default=0.0, description="Total income")
    line_10: float = Field(default=0.0, description="Adjustments to income from Schedule 1 line 26")
    line_11: float = Field(default=0.0, description="Adjusted gross income")
    line_12: float = Field(default=0.0, description="Standard or itemized deduction")
    line_13: float = Field(default=0.0, description="Qualified business income deduction")
    line_14: float = Field(default=0.0, description="Add lines 12 and 13")
    line_15: float = Field(default=0.0, ge=0, description="Taxable income")

    # Tax and credits
    line_16: float = 0.0
    line_17: float = 0.0
    line_18: float = 0.0
    line_19: float = 0.0
    line_20: float = 0.0
    line_21: float = 0.0
    line_22: float = 0.0
    line_23: float = 0.0
    line_24: float = Field(default=0.0, description="Total tax")

    # Payments
    line_25d: float = 0.0
    line_26: float = 0.0
    line_32: float = 0.0
    line_33: float = Field(default=0.0, description="Total payments")

    # Refund or amount owed
    line_34: float = Field(default=0.0, ge=0, description="Amount overpaid")
    line_35a: float = Field(default=0.0, ge=0, description="Amount refunded")
    line_36: float = Field(default=0.0, ge=0, description="Applied to next year's estimated tax")
    line_37: float = Field(default=0.0, ge=0, description="Amount owed")
    line_38: float = Field(default=0.0, ge=0, description="Estimated tax penalty")

    schedule_1: Schedule1Result
    schedule_d: ScheduleDResult
    form_172: Form172Result

    @property
    def adjusted_gross_income(self) -> float:
        return self.line_11

    @property
    def taxable_income(self) -> float:
        return self.line_15

    @property
    def excess_business_loss(self) -> float:
        return self.schedule_1.form_461.line_16

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump()


def calculate_form_1040(**inputs: Any) -> Form1040Result:
    """
    Convenience function to create and calculate Form 1040.

    Example:
        >>> calculate_form_1040(wages=100000, standard_deduction=14600).line_15
        85400.0
    """
    return Form1040(**inputs).calculate()
