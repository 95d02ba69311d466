"""
Schedule D (Form 1040) - Capital Gains and Losses

Nets short-term and long-term capital transactions and applies the capital
loss limitation. Amounts are signed: gains positive, losses negative. Carryovers
(lines 6 and 14) are normally entered as negative numbers and are added as given.

Key Rules:
- Net capital loss deduction limited to $3,000/year ($1,500 when not single)
- Lines 5 and 12 (pass-through gains from partnerships, S corps, etc.) are
  treated as business capital gains; everything else is personal
- When the loss limit applies, the limited amount is allocated to business
  and personal portions in proportion to each side's share of the unlimited
  total, so the personal cap cannot be avoided by characterizing losses as
  business losses on Form 461
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from pydantic import BaseModel, Field, model_validator

from calculator.decimal_math import divide, multiply
from models._decimal_utils import dollars, money

logger = logging.getLogger(__name__)

CAPITAL_LOSS_LIMIT_SINGLE = -3000.0
CAPITAL_LOSS_LIMIT_OTHER = -1500.0


def capital_loss_limit(is_single: bool) -> float:
    """Most negative capital loss allowed on Form 1040 line 7."""
    return CAPITAL_LOSS_LIMIT_SINGLE if is_single else CAPITAL_LOSS_LIMIT_OTHER


class ScheduleD(BaseModel):
    """
    Schedule D inputs.

    Only the gain/loss column of each transaction line is modelled; proceeds,
    cost and adjustments are reported on Form 8949 and not needed here.
    """
    # Part I: Short-Term Capital Gains and Losses
    line_1a_gain_loss: float = Field(
        default=0.0,
        description="Personal short-term transactions, basis reported, no adjustments"
    )
    line_1b_gain_loss: float = Field(default=0.0, description="Form 8949 Box A totals")
    line_2_gain_loss: float = Field(default=0.0, description="Form 8949 Box B totals")
    line_3_gain_loss: float = Field(default=0.0, description="Form 8949 Box C totals")
    line_4: float = Field(
        default=0.0,
        description="Short-term gain from Forms 6252, 4684, 6781 and 8824"
    )
    line_5: float = Field(
        default=0.0,
        description="Business short-term gain/loss from partnerships, S corps, estates, trusts"
    )
    line_6_carryover: float = Field(
        default=0.0,
        description="Short-term capital loss carryover (normally negative)"
    )

    # Part II: Long-Term Capital Gains and Losses
    line_8a_gain_loss: float = Field(
        default=0.0,
        description="Long-term transactions, basis reported, no adjustments"
    )
    line_8b_gain_loss: float = Field(default=0.0, description="Form 8949 Box D totals")
    line_9_gain_loss: float = Field(default=0.0, description="Form 8949 Box E totals")
    line_10_gain_loss: float = Field(default=0.0, description="Form 8949 Box F totals")
    line_11: float = Field(
        default=0.0,
        description="Gain from Form 4797 Part I and other long-term gains"
    )
    line_12: float = Field(
        default=0.0,
        description="Business long-term gain/loss from partnerships, S corps, estates, trusts"
    )
    line_13_capital_gain_distributions: float = Field(
        default=0.0,
        description="Capital gain distributions (Form 1099-DIV Box 2a)"
    )
    line_14_carryover: float = Field(
        default=0.0,
        description="Long-term capital loss carryover (normally negative)"
    )

    is_single: bool = Field(default=True, description="Single filer ($3,000 limit)")

    def calculate(self) -> "ScheduleDResult":
        """Compute Parts I-III and the business/personal split."""
        line_7 = dollars(
            money(self.line_1a_gain_loss) + money(self.line_1b_gain_loss) +
            money(self.line_2_gain_loss) + money(self.line_3_gain_loss) +
            money(self.line_4) + money(self.line_5) + money(self.line_6_carryover)
        )
        line_15 = dollars(
            money(self.line_8a_gain_loss) + money(self.line_8b_gain_loss) +
            money(self.line_9_gain_loss) + money(self.line_10_gain_loss) +
            money(self.line_11) + money(self.line_12) +
            money(self.line_13_capital_gain_distributions) + money(self.line_14_carryover)
        )

        # Part III
        line_16 = dollars(money(line_7) + money(line_15))
        loss_limit = capital_loss_limit(self.is_single)
        line_21 = max(line_16, loss_limit) if line_16 < 0 else line_16

        total_business = dollars(money(self.line_5) + money(self.line_12))
        total_personal = dollars(money(line_16) - money(total_business))

        if line_21 == line_16 or line_16 >= 0:
            limited_business = total_business
            limited_personal = total_personal
        else:
            business_ratio = divide(total_business, line_16, default=0)
            limited_business = dollars(multiply(line_21, business_ratio))
            # Derived so the two portions always add back to line 21
            limited_personal = dollars(money(line_21) - money(limited_business))
            logger.info(
                f"Capital loss of {line_16:,.2f} limited to {line_21:,.2f}: "
                f"business {limited_business:,.2f}, personal {limited_personal:,.2f}"
            )

        return ScheduleDResult(
            line_1a_gain_loss=self.line_1a_gain_loss,
            line_1b_gain_loss=self.line_1b_gain_loss,
            line_2_gain_loss=self.line_2_gain_loss,
            line_3_gain_loss=self.line_3_gain_loss,
            line_4=self.line_4,
            line_5=self.line_5,
            line_6=self.line_6_carryover,
            line_7=line_7,
            line_8a_gain_loss=self.line_8a_gain_loss,
            line_8b_gain_loss=self.line_8b_gain_loss,
            line_9_gain_loss=self.line_9_gain_loss,
            line_10_gain_loss=self.line_10_gain_loss,
            line_11=self.line_11,
            line_12=self.line_12,
            line_13=self.line_13_capital_gain_distributions,
            line_14=self.line_14_carryover,
            line_15=line_15,
            line_16=line_16,
            line_21=line_21,
            total_business_cap_gains=total_business,
            total_personal_cap_gains=total_personal,
            limited_business_cap_gains=limited_business,
            limited_personal_cap_gains=limited_personal,
        )


class ScheduleDResult(BaseModel):
    """Computed Schedule D lines with the business/personal breakdown used by Form 461."""
    model_config = {"frozen": True}

    # Part I
    line_1a_gain_loss: float = 0.0
    line_1b_gain_loss: float = 0.0
    line_2_gain_loss: float = 0.0
    line_3_gain_loss: float = 0.0
    line_4: float = 0.0
    line_5: float = 0.0
    line_6: float = 0.0
    line_7: float = Field(default=0.0, description="Net short-term capital gain or (loss)")

    # Part II
    line_8a_gain_loss: float = 0.0
    line_8b_gain_loss: float = 0.0
    line_9_gain_loss: float = 0.0
    line_10_gain_loss: float = 0.0
    line_11: float = 0.0
    line_12: float = 0.0
    line_13: float = 0.0
    line_14: float = 0.0
    line_15: float = Field(default=0.0, description="Net long-term capital gain or (loss)")

    # Part III
    line_16: float = Field(default=0.0, description="Combine lines 7 and 15")
    line_21: float = Field(default=0.0, description="Limited amount for Form 1040 line 7")

    # Breakdown for Form 461
    total_business_cap_gains: float = Field(default=0.0, description="Lines 5 + 12")
    total_personal_cap_gains: float = Field(default=0.0, description="Line 16 less business gains")
    limited_business_cap_gains: float = Field(default=0.0, description="Business portion of line 21")
    limited_personal_cap_gains: float = Field(default=0.0, description="Personal portion of line 21")

    @model_validator(mode="after")
    def _split_sums_to_limited_total(self) -> "ScheduleDResult":
        if money(self.limited_business_cap_gains) + money(self.limited_personal_cap_gains) != money(self.line_21):
            raise ValueError(
                "Business and personal portions must add up to line 21: "
                f"{self.limited_business_cap_gains} + {self.limited_personal_cap_gains} != {self.line_21}"
            )
        return self

    @property
    def loss_limitation_applied(self) -> bool:
        return self.line_21 != self.line_16

    @property
    def disallowed_capital_loss(self) -> float:
        """Loss not deductible this year (carries over to next year's Schedule D)."""
        return dollars(money(self.line_21) - money(self.line_16))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump()


def calculate_schedule_d(
    is_single: bool = True,
    **lines: float,
) -> ScheduleDResult:
    """
    Convenience function to create and calculate Schedule D.

    Args:
        is_single: Single filer ($3,000 loss limit) or not ($1,500)
        **lines: Any ScheduleD line field, e.g. line_1a_gain_loss=-5000, line_5=2000

    Returns:
        ScheduleDResult
    """
    return ScheduleD(is_single=is_single, **lines).calculate()
