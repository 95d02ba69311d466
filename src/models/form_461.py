"""
Form 461 - Limitation on Business Losses (IRC Section 461(l))

Non-corporate taxpayers may not deduct a net business loss larger than the
annual threshold. The disallowed portion (line 16) is added back to income
on Schedule 1 line 8p and carries forward as a net operating loss.

Part I  (lines 1-9):   Total income/loss from trades or businesses
Part II (lines 10-12): Adjustment for non-business income and losses
Part III (lines 13-16): Excess business loss

Lines 1 and 7 are reserved and not modelled.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from calculator.ebl_limitation import excess_business_loss_limitation
from models._decimal_utils import dollars, money
from models.schedule_d import ScheduleDResult

logger = logging.getLogger(__name__)


class Form461(BaseModel):
    """
    Form 461 inputs.

    Capital gains come from a ScheduleDResult when one is given (preferred);
    otherwise from the legacy inputs f1040_line_7 or business/non-business
    capital gains.
    """
    tax_year: int = Field(ge=1, description="Tax year")
    is_single: bool = Field(default=True, description="Single filer threshold column")

    schedule1_line_3: float = Field(default=0.0, description="Business income or (loss) - Schedule C")
    schedule1_line_4: float = Field(default=0.0, description="Other gains or (losses) - Form 4797")
    schedule1_line_5: float = Field(default=0.0, description="Rental real estate, royalties, partnerships, S corps")
    schedule1_line_6: float = Field(default=0.0, description="Farm income or (loss) - Schedule F")
    line_8: float = Field(default=0.0, description="Other trade or business income, gain or (loss)")
    line_11: float = Field(
        default=0.0,
        description="Losses/deductions on lines 1-8 not attributable to a trade or business"
    )
    override_line_15: Optional[float] = Field(
        default=None, ge=0,
        description="Threshold to use instead of the published/projected amount"
    )

    schedule_d: Optional[ScheduleDResult] = Field(
        default=None,
        description="Schedule D result supplying the limited capital gain and its personal portion"
    )

    # Legacy capital gain inputs
    f1040_line_7: Optional[float] = Field(
        default=None,
        description="Limited capital gain or (loss) from Form 1040 line 7"
    )
    business_cap_gains: Optional[float] = Field(default=None, description="Business capital gains")
    non_business_cap_gains: Optional[float] = Field(default=None, description="Non-business capital gains")

    def _capital_gain_lines(self) -> tuple:
        """Return (line 3, non-business portion of line 3)."""
        if self.schedule_d is not None:
            return self.schedule_d.line_21, self.schedule_d.limited_personal_cap_gains

        if self.f1040_line_7 is not None:
            # A net capital loss on line 7 is entirely non-business; a gain is
            # non-business only up to the non-business gains supplied.
            if self.f1040_line_7 < 0:
                return self.f1040_line_7, self.f1040_line_7
            return self.f1040_line_7, min(self.f1040_line_7, self.non_business_cap_gains or 0.0)

        non_business = self.non_business_cap_gains or 0.0
        business = self.business_cap_gains or 0.0
        return dollars(money(non_business) + money(business)), non_business

    def calculate(self, cost_of_living_adjustment: Optional[float] = None) -> "Form461Result":
        """
        Compute lines 2-16.

        Args:
            cost_of_living_adjustment: Passed to the threshold projection for
                years after the published table.
        """
        if self.override_line_15 is not None:
            line_15 = self.override_line_15
        else:
            line_15 = excess_business_loss_limitation(
                self.tax_year, self.is_single, cost_of_living_adjustment
            )

        line_2 = self.schedule1_line_3
        line_3, non_business_capital = self._capital_gain_lines()
        line_4 = self.schedule1_line_4
        line_5 = self.schedule1_line_5
        line_6 = self.schedule1_line_6
        line_8 = self.line_8

        line_9 = dollars(
            money(line_2) + money(line_3) + money(line_4) +
            money(line_5) + money(line_6) + money(line_8)
        )

        # Part II
        line_10 = dollars(non_business_capital)
        line_11 = self.line_11
        line_12 = dollars(money(line_10) - money(line_11))

        # Part III: a net non-business loss is added back, a net gain removed
        line_13 = -line_12 if line_12 else 0.0
        line_14 = dollars(money(line_9) + money(line_13))
        line_16 = dollars(abs(min(money(0), money(line_14) + money(line_15))))

        if line_16 > 0:
            logger.info(
                f"Excess business loss for {self.tax_year}: {line_16:,.2f} disallowed "
                f"(business loss {line_14:,.2f}, threshold {line_15:,.2f})"
            )
        logger.debug(f"Form 461 {self.tax_year}: line 9={line_9}, line 14={line_14}, line 16={line_16}")

        return Form461Result(
            tax_year=self.tax_year,
            line_2=line_2,
            line_3=line_3,
            line_4=line_4,
            line_5=line_5,
            line_6=line_6,
            line_8=line_8,
            line_9=line_9,
            line_10=line_10,
            line_11=line_11,
            line_12=line_12,
            line_13=line_13,
            line_14=line_14,
            line_15=line_15,
            line_16=line_16,
        )


class Form461Result(BaseModel):
    """Computed Form 461 lines."""
    model_config = {"frozen": True}

    tax_year: int

    # Part I
    line_2: float = Field(default=0.0, description="Schedule 1 (Form 1040), line 3")
    line_3: float = Field(default=0.0, description="Form 1040, line 7")
    line_4: float = Field(default=0.0, description="Schedule 1 (Form 1040), line 4")
    line_5: float = Field(default=0.0, description="Schedule 1 (Form 1040), line 5")
    line_6: float = Field(default=0.0, description="Schedule 1 (Form 1040), line 6")
    line_8: float = Field(default=0.0, description="Other trade/business income, gain or (loss)")
    line_9: float = Field(default=0.0, description="Combine lines 1 through 8")

    # Part II
    line_10: float = Field(default=0.0, description="Income/gain not attributable to a trade or business")
    line_11: float = Field(default=0.0, description="Losses/deductions not attributable to a trade or business")
    line_12: float = Field(default=0.0, description="Subtract line 11 from line 10")

    # Part III
    line_13: float = Field(default=0.0, description="Line 12 with its sign reversed")
    line_14: float = Field(default=0.0, description="Add lines 9 and 13")
    line_15: float = Field(default=0.0, ge=0, description="Maximum business loss threshold")
    line_16: float = Field(
        default=0.0, ge=0,
        description="Excess business loss; enter on Schedule 1 line 8p"
    )

    @property
    def excess_business_loss(self) -> float:
        return self.line_16

    @property
    def allowed_business_loss(self) -> float:
        """Net business result after removing the disallowed portion."""
        if self.line_9 < 0:
            return dollars(money(self.line_9) + money(self.line_16))
        return self.line_9

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump()


def calculate_form_461(
    tax_year: int,
    is_single: bool = True,
    **inputs: Any,
) -> Form461Result:
    """
    Convenience function to create and calculate Form 461.

    Example:
        >>> calculate_form_461(2024, schedule1_line_3=-400000).line_16
        95000.0
    """
    return Form461(tax_year=tax_year, is_single=is_single, **inputs).calculate()
