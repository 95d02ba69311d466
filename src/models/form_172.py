"""
Form 172 - Net Operating Losses (NOLs) for Individuals, Estates, and Trusts
(Based on the December 2024 revision)

Part I figures the current-year NOL by starting from income after deductions
and adding back the nonbusiness deductions, capital losses and prior-year
NOL deductions that may not create an NOL.

Part II figures, for each year an NOL is carried to, the modified taxable
income the NOL absorbs and the carryover left for the following year. When
the taxpayer itemized in that year, lines 11-33 refigure the AGI-limited
itemized deductions under the modified AGI.

Amounts described on the form as "positive number" must be entered as
non-negative values.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from models._decimal_utils import dollars, money
from models.taxpayer import TaxEntityType

logger = logging.getLogger(__name__)

CAPITAL_LOSS_LIMIT = 3000.0
CAPITAL_LOSS_LIMIT_MFS = 1500.0
MEDICAL_EXPENSE_FLOOR_PCT = Decimal("0.075")
CASUALTY_LOSS_FLOOR_PCT = Decimal("0.10")


def _positive_difference(a: float, b: float) -> float:
    """a - b when a exceeds b, otherwise 0."""
    return dollars(max(money(0), money(a) - money(b)))


class Form172Part2Input(BaseModel):
    """Inputs for one carryover year (Part II)."""
    year_ended: str = Field(description="Tax year the NOL is carried to, e.g. '2025-12-31'")
    nol_deduction: float = Field(ge=0, description="NOL carried to this year")
    taxable_income_before_carryback: float = Field(default=0.0)
    net_capital_loss_deduction: float = Field(default=0.0, ge=0)
    section_1202_exclusion: float = Field(default=0.0, ge=0)
    qbi_deduction: float = Field(default=0.0, ge=0)
    adjustment_to_agi: float = Field(default=0.0)
    exemption_amount_estates_and_trusts: float = Field(default=0.0, ge=0)

    # Adjustment to itemized deductions (individuals only)
    itemized_deductions_were_made: bool = Field(default=False)
    agi_before_carryback: float = Field(default=0.0)
    medical_expenses_after_limit: float = Field(default=0.0, ge=0)
    medical_expenses_before_limit: float = Field(default=0.0, ge=0)
    mortgage_insurance_premiums: float = Field(default=0.0, ge=0)
    refigured_mortgage_insurance_premiums: float = Field(default=0.0, ge=0)
    prior_year_nol_carryback: float = Field(default=0.0, ge=0)
    total_charitable_contributions: float = Field(default=0.0, ge=0)
    refigured_charitable_contributions: float = Field(default=0.0, ge=0)
    casualty_theft_loss_deduction: float = Field(default=0.0, ge=0)
    casualty_theft_loss_before_limit: float = Field(default=0.0, ge=0)


class Form172(BaseModel):
    """Form 172 inputs (Part I plus any number of Part II carryover years)."""
    entity_type: TaxEntityType = Field(default=TaxEntityType.INDIVIDUAL)
    is_married_filing_separately: bool = Field(default=False)

    # Line 1 inputs
    agi: float = Field(default=0.0, description="Adjusted gross income (individuals)")
    itemized_deductions: float = Field(default=0.0, ge=0)
    standard_deduction: float = Field(default=0.0, ge=0)
    taxable_income_estates_and_trusts: float = Field(default=0.0)
    charitable_deduction_estates_and_trusts: float = Field(default=0.0, ge=0)
    income_distribution_deduction_estates_and_trusts: float = Field(default=0.0, ge=0)
    exemption_amount_estates_and_trusts: float = Field(default=0.0, ge=0)

    # Lines 2-23 inputs
    nonbusiness_capital_losses: float = Field(default=0.0, ge=0)
    nonbusiness_capital_gains: float = Field(default=0.0, ge=0)
    nonbusiness_deductions: float = Field(default=0.0, ge=0)
    nonbusiness_income_other_than_capital_gains: float = Field(default=0.0, ge=0)
    business_capital_losses: float = Field(default=0.0, ge=0)
    business_capital_gains: float = Field(default=0.0, ge=0)
    schedule_d_capital_loss: Optional[float] = Field(
        default=None, ge=0,
        description="Combined net capital loss from Schedule D (positive); None if no loss"
    )
    section_1202_exclusion: float = Field(default=0.0, ge=0)
    nol_deduction_from_other_years: float = Field(default=0.0, ge=0)

    part2_inputs: List[Form172Part2Input] = Field(default_factory=list)

    @property
    def is_individual(self) -> bool:
        return self.entity_type == TaxEntityType.INDIVIDUAL

    def calculate_part_1(self) -> "Form172Part1Result":
        """Part I - Net Operating Loss."""
        if self.is_individual:
            deductions = max(self.itemized_deductions, self.standard_deduction)
            line_1 = dollars(money(self.agi) - money(deductions))
        else:
            line_1 = dollars(
                money(self.taxable_income_estates_and_trusts) +
                money(self.charitable_deduction_estates_and_trusts) +
                money(self.income_distribution_deduction_estates_and_trusts) +
                money(self.exemption_amount_estates_and_trusts)
            )

        # Nonbusiness capital losses vs gains; at most one of 4/5 is non-zero
        line_2 = self.nonbusiness_capital_losses
        line_3 = self.nonbusiness_capital_gains
        line_4 = _positive_difference(line_2, line_3)
        line_5 = _positive_difference(line_3, line_2)

        # Nonbusiness deductions vs nonbusiness income
        line_6 = self.nonbusiness_deductions
        line_7 = self.nonbusiness_income_other_than_capital_gains
        line_8 = dollars(money(line_5) + money(line_7))
        line_9 = _positive_difference(line_6, line_8)
        line_10 = min(_positive_difference(line_8, line_6), line_5)

        # Business capital losses
        line_11 = self.business_capital_losses
        line_12 = self.business_capital_gains
        line_13 = dollars(money(line_10) + money(line_12))
        line_14 = _positive_difference(line_11, line_13)
        line_15 = dollars(money(line_4) + money(line_14))

        if self.schedule_d_capital_loss is None:
            line_16 = line_17 = line_18 = line_19 = line_20 = line_21 = 0.0
            line_22 = line_15
        else:
            line_16 = self.schedule_d_capital_loss
            line_17 = self.section_1202_exclusion
            line_18 = _positive_difference(line_16, line_17)
            limit = CAPITAL_LOSS_LIMIT_MFS if self.is_married_filing_separately else CAPITAL_LOSS_LIMIT
            line_19 = min(line_16, limit)
            line_20 = _positive_difference(line_18, line_19)
            line_21 = _positive_difference(line_19, line_18)
            line_22 = _positive_difference(line_15, line_20)

        line_23 = self.nol_deduction_from_other_years

        total = dollars(
            money(line_1) + money(line_9) + money(line_17) +
            money(line_21) + money(line_22) + money(line_23)
        )
        # A result of zero or more means there is no NOL
        line_24 = total if total < 0 else 0.0

        if line_24 < 0:
            logger.info(f"Form 172 Part I: net operating loss of {-line_24:,.2f}")

        return Form172Part1Result(
            line_1=line_1, line_2=line_2, line_3=line_3, line_4=line_4,
            line_5=line_5, line_6=line_6, line_7=line_7, line_8=line_8,
            line_9=line_9, line_10=line_10, line_11=line_11, line_12=line_12,
            line_13=line_13, line_14=line_14, line_15=line_15, line_16=line_16,
            line_17=line_17, line_18=line_18, line_19=line_19, line_20=line_20,
            line_21=line_21, line_22=line_22, line_23=line_23, line_24=line_24,
        )

    def calculate_part_2(self, p2: Form172Part2Input) -> "Form172Part2Result":
        """Part II - NOL carryover for a single carryover year."""
        line_1 = p2.nol_deduction
        line_2 = p2.taxable_income_before_carryback
        line_3 = p2.net_capital_loss_deduction
        line_4 = p2.section_1202_exclusion
        line_5 = p2.qbi_deduction
        line_6 = p2.adjustment_to_agi
        line_8 = p2.exemption_amount_estates_and_trusts

        itemized: Dict[str, float] = {f"line_{n}": 0.0 for n in range(11, 34)}
        if p2.itemized_deductions_were_made:
            itemized = _refigure_itemized_deductions(p2, line_3, line_4, line_5, line_6)
        line_7 = itemized["line_33"]

        # Modified taxable income
        line_9 = dollars(max(
            money(0),
            money(line_2) + money(line_3) + money(line_4) + money(line_5) +
            money(line_6) + money(line_7) + money(line_8)
        ))
        line_10 = _positive_difference(line_1, line_9)

        logger.debug(
            f"Form 172 Part II {p2.year_ended}: modified taxable income {line_9}, "
            f"carryover {line_10}"
        )

        return Form172Part2Result(
            year_ended=p2.year_ended,
            line_1=line_1, line_2=line_2, line_3=line_3, line_4=line_4,
            line_5=line_5, line_6=line_6, line_7=line_7, line_8=line_8,
            line_9=line_9, line_10=line_10,
            **itemized,
        )

    def calculate(self) -> "Form172Result":
        """Compute Part I and each requested Part II carryover year."""
        return Form172Result(
            part1=self.calculate_part_1(),
            part2=[self.calculate_part_2(p2) for p2 in self.part2_inputs],
        )


def _refigure_itemized_deductions(
    p2: Form172Part2Input,
    line_3: float,
    line_4: float,
    line_5: float,
    line_6: float,
) -> Dict[str, float]:
    """Lines 11-33: AGI-limited itemized deductions refigured under modified AGI."""
    line_11 = p2.agi_before_carryback
    line_12 = dollars(money(line_3) + money(line_4) + money(line_5) + money(line_6))
    line_13 = dollars(money(line_11) + money(line_12))

    # Medical and dental
    line_14 = p2.medical_expenses_after_limit
    line_15 = p2.medical_expenses_before_limit
    line_16 = dollars(money(line_13) * MEDICAL_EXPENSE_FLOOR_PCT)
    line_17 = _positive_difference(line_15, line_16)
    line_18 = dollars(money(line_14) - money(line_17))

    # Mortgage insurance premiums
    line_19 = p2.mortgage_insurance_premiums
    line_20 = p2.refigured_mortgage_insurance_premiums
    line_21 = dollars(money(line_19) - money(line_20))

    # Charitable contributions
    line_22 = line_13
    line_23 = p2.prior_year_nol_carryback
    line_24 = dollars(money(line_22) + money(line_23))
    line_25 = p2.total_charitable_contributions
    line_26 = p2.refigured_charitable_contributions
    line_27 = dollars(money(line_25) - money(line_26))

    # Casualty and theft losses
    line_28 = p2.casualty_theft_loss_deduction
    line_29 = p2.casualty_theft_loss_before_limit
    line_30 = dollars(money(line_22) * CASUALTY_LOSS_FLOOR_PCT)
    line_31 = _positive_difference(line_29, line_30)
    line_32 = dollars(money(line_28) - money(line_31))

    line_33 = dollars(money(line_18) + money(line_21) + money(line_27) + money(line_32))

    return {
        "line_11": line_11, "line_12": line_12, "line_13": line_13,
        "line_14": line_14, "line_15": line_15, "line_16": line_16,
        "line_17": line_17, "line_18": line_18, "line_19": line_19,
        "line_20": line_20, "line_21": line_21, "line_22": line_22,
        "line_23": line_23, "line_24": line_24, "line_25": line_25,
        "line_26": line_26, "line_27": line_27, "line_28": line_28,
        "line_29": line_29, "line_30": line_30, "line_31": line_31,
        "line_32": line_32, "line_33": line_33,
    }


class Form172Part1Result(BaseModel):
    """Computed Part I lines."""
    model_config = {"frozen": True}

    line_1: float = Field(default=0.0, description="Income after standard or itemized deductions")
    line_2: float = Field(default=0.0, description="Nonbusiness capital losses before limitation")
    line_3: float = Field(default=0.0, description="Nonbusiness capital gains")
    line_4: float = Field(default=0.0, ge=0, description="Excess of line 2 over line 3")
    line_5: float = Field(default=0.0, ge=0, description="Excess of line 3 over line 2")
    line_6: float = Field(default=0.0, description="Nonbusiness deductions")
    line_7: float = Field(default=0.0, description="Nonbusiness income other than capital gains")
    line_8: float = Field(default=0.0, description="Add lines 5 and 7")
    line_9: float = Field(default=0.0, ge=0, description="Excess of line 6 over line 8")
    line_10: float = Field(default=0.0, ge=0, description="Excess of line 8 over line 6, not more than line 5")
    line_11: float = Field(default=0.0, description="Business capital losses before limitation")
    line_12: float = Field(default=0.0, description="Business capital gains")
    line_13: float = Field(default=0.0, description="Add lines 10 and 12")
    line_14: float = Field(default=0.0, ge=0, description="Excess of line 11 over line 13")
    line_15: float = Field(default=0.0, description="Add lines 4 and 14")
    line_16: float = Field(default=0.0, description="Schedule D combined capital loss")
    line_17: float = Field(default=0.0, description="Section 1202 exclusion")
    line_18: float = Field(default=0.0, ge=0, description="Subtract line 17 from line 16")
    line_19: float = Field(default=0.0, description="Smaller of line 16 or the capital loss limit")
    line_20: float = Field(default=0.0, ge=0, description="Excess of line 18 over line 19")
    line_21: float = Field(default=0.0, ge=0, description="Excess of line 19 over line 18")
    line_22: float = Field(default=0.0, ge=0, description="Subtract line 20 from line 15")
    line_23: float = Field(default=0.0, description="NOL deduction for losses from other years")
    line_24: float = Field(default=0.0, le=0, description="Net operating loss (negative) or 0")

    @property
    def has_nol(self) -> bool:
        return self.line_24 < 0

    @property
    def net_operating_loss(self) -> float:
        """NOL as a positive magnitude, 0 when there is none."""
        return -self.line_24 if self.line_24 else 0.0


class Form172Part2Result(BaseModel):
    """Computed Part II lines for one carryover year."""
    model_config = {"frozen": True}

    year_ended: str
    line_1: float = Field(default=0.0, description="NOL deduction")
    line_2: float = Field(default=0.0, description="Taxable income before NOL carryback")
    line_3: float = Field(default=0.0, description="Net capital loss deduction")
    line_4: float = Field(default=0.0, description="Section 1202 exclusion")
    line_5: float = Field(default=0.0, description="Qualified business income deduction")
    line_6: float = Field(default=0.0, description="Adjustment to AGI")
    line_7: float = Field(default=0.0, description="Adjustment to itemized deductions (line 33)")
    line_8: float = Field(default=0.0, description="Estates and trusts exemption amount")
    line_9: float = Field(default=0.0, ge=0, description="Modified taxable income")
    line_10: float = Field(default=0.0, ge=0, description="NOL carryover to the subsequent year")

    # Adjustment to itemized deductions
    line_11: float = 0.0
    line_12: float = 0.0
    line_13: float = Field(default=0.0, description="Modified AGI")
    line_14: float = 0.0
    line_15: float = 0.0
    line_16: float = 0.0
    line_17: float = 0.0
    line_18: float = 0.0
    line_19: float = 0.0
    line_20: float = 0.0
    line_21: float = 0.0
    line_22: float = 0.0
    line_23: float = 0.0
    line_24: float = 0.0
    line_25: float = 0.0
    line_26: float = 0.0
    line_27: float = 0.0
    line_28: float = 0.0
    line_29: float = 0.0
    line_30: float = 0.0
    line_31: float = 0.0
    line_32: float = 0.0
    line_33: float = 0.0


class Form172Result(BaseModel):
    """Form 172 Part I and Part II results."""
    model_config = {"frozen": True}

    part1: Form172Part1Result
    part2: List[Form172Part2Result] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump()


def calculate_form_172(**inputs: Any) -> Form172Result:
    """Convenience function to create and calculate Form 172."""
    return Form172(**inputs).calculate()
