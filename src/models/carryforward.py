"""
Loss limitation ledger records.

One LossLimitationRecord is kept per ownership interest per tax year. It holds
the at-risk (Form 6198), passive activity (Form 8582), excess business loss
(Form 461) and NOL (Form 172) amounts for the year and what carries to the
next. LossCarryforwardRecord tracks an individual suspended loss from the
year it arose until it is used up.

Records built from computed forms are proposals: they start with
confirmed=False and an operator confirms them before they are relied on for
the following year. Amounts typed in by an operator are taken as-is.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from config.settings import PipelineSettings, get_settings
from models._decimal_utils import dollars, money, to_decimal
from models.form_172 import Form172Part2Result
from models.form_461 import Form461Result

logger = logging.getLogger(__name__)


class CarryforwardType(str, Enum):
    AT_RISK = "at_risk"
    PASSIVE = "passive"
    EXCESS_BUSINESS_LOSS = "excess_business_loss"


class LossLimitationRecord(BaseModel):
    """Per-year loss limitation amounts for one ownership interest."""
    model_config = {"validate_assignment": True}

    ownership_interest_id: Optional[int] = Field(default=None)
    tax_year: int = Field(ge=1)

    # At-risk limitation (Form 6198)
    capital_at_risk: Optional[float] = Field(default=None)
    at_risk_deductible: Optional[float] = Field(default=None, ge=0)
    at_risk_carryover: Optional[float] = Field(default=None, ge=0)

    # Passive activity loss (Form 8582)
    passive_activity_loss: Optional[float] = Field(default=None, ge=0)
    passive_loss_allowed: Optional[float] = Field(default=None, ge=0)
    passive_loss_carryover: Optional[float] = Field(default=None, ge=0)

    # Excess business loss (Form 461)
    excess_business_loss: Optional[float] = Field(default=None, ge=0)
    excess_business_loss_carryover: Optional[float] = Field(default=None, ge=0)

    # Net operating loss (Form 172)
    nol_deduction_used: Optional[float] = Field(default=None, ge=0)
    nol_carryforward: Optional[float] = Field(default=None, ge=0)
    nol_80_percent_limit: Optional[float] = Field(default=None, ge=0)

    notes: Optional[str] = Field(default=None)
    confirmed: bool = Field(default=True, description="False until an operator accepts a computed proposal")

    def confirm(self) -> "LossLimitationRecord":
        """Return a confirmed copy of this record."""
        return self.model_copy(update={"confirmed": True})


class LossCarryforwardRecord(BaseModel):
    """A suspended loss carried forward from its origin year."""
    model_config = {"validate_assignment": True}

    ownership_interest_id: Optional[int] = Field(default=None)
    origin_year: int = Field(ge=1, description="Tax year the loss arose")
    carryforward_type: CarryforwardType
    source_ebl_year: Optional[int] = Field(
        default=None, ge=1,
        description="For an EBL-derived NOL, the year Form 461 disallowed the loss"
    )
    loss_character: Optional[str] = Field(default=None, description='e.g. "Ordinary", "Capital", "1231"')
    original_amount: float = Field(ge=0)
    remaining_amount: float = Field(ge=0)
    notes: Optional[str] = Field(default=None)

    @model_validator(mode="after")
    def _remaining_within_original(self) -> "LossCarryforwardRecord":
        if self.remaining_amount > self.original_amount:
            raise ValueError(
                f"remaining_amount {self.remaining_amount} exceeds original_amount {self.original_amount}"
            )
        return self

    @property
    def is_exhausted(self) -> bool:
        return self.remaining_amount == 0

    def apply(self, amount: float) -> "LossCarryforwardRecord":
        """
        Use up to `amount` of the remaining loss.

        Returns a new record; the amount used is the smaller of `amount` and
        what remains.
        """
        if amount < 0:
            raise ValueError(f"Cannot apply a negative amount: {amount}")
        used = min(money(amount), money(self.remaining_amount))
        return self.model_copy(
            update={"remaining_amount": dollars(money(self.remaining_amount) - used)}
        )


def ebl_carryforward_from(
    form_461: Form461Result,
    ownership_interest_id: Optional[int] = None,
) -> Optional[LossCarryforwardRecord]:
    """
    Carryforward entry for a year's excess business loss, or None if nothing was disallowed.

    The disallowed loss is ordinary in character and is used as an NOL from
    the following year.
    """
    if form_461.line_16 <= 0:
        return None
    return LossCarryforwardRecord(
        ownership_interest_id=ownership_interest_id,
        origin_year=form_461.tax_year,
        carryforward_type=CarryforwardType.EXCESS_BUSINESS_LOSS,
        source_ebl_year=form_461.tax_year,
        loss_character="Ordinary",
        original_amount=form_461.line_16,
        remaining_amount=form_461.line_16,
    )


def build_loss_limitation_record(
    form_461: Form461Result,
    ownership_interest_id: Optional[int] = None,
    prior_year: Optional[LossLimitationRecord] = None,
    nol_deduction_used: float = 0.0,
    form_172_part2: Optional[Form172Part2Result] = None,
    settings: Optional[PipelineSettings] = None,
) -> LossLimitationRecord:
    """
    Propose a ledger record for the year of `form_461`.

    Args:
        form_461: The year's Form 461 result (EBL on line 16)
        ownership_interest_id: Ledger key together with the tax year
        prior_year: Confirmed record for the previous year, whose NOL
            carryforward is the NOL available this year
        nol_deduction_used: NOL deducted this year (Schedule 1 line 8a)
        form_172_part2: Part II result for this year. When given, its line 10
            is the NOL carryover and line 9 sets the income limitation.
        settings: Pipeline settings (NOL limitation rate and first year)

    Returns:
        An unconfirmed LossLimitationRecord.
    """
    settings = settings or get_settings()
    tax_year = form_461.tax_year

    if prior_year is not None:
        if prior_year.tax_year != tax_year - 1:
            raise ValueError(
                f"Prior-year record is for {prior_year.tax_year}, expected {tax_year - 1}"
            )
        if not prior_year.confirmed:
            logger.warning(
                f"Building {tax_year} ledger record from an unconfirmed {prior_year.tax_year} record"
            )

    available = money(prior_year.nol_carryforward or 0) if prior_year is not None else money(0)
    used = money(nol_deduction_used)
    if used > available:
        raise ValueError(
            f"NOL deduction used ({used}) exceeds NOL available from {tax_year - 1} ({available})"
        )

    ebl = money(form_461.line_16)

    nol_80_percent_limit = None
    if form_172_part2 is not None:
        nol_carryforward = dollars(money(form_172_part2.line_10) + ebl)
        if tax_year >= settings.nol_limitation_first_year:
            nol_80_percent_limit = dollars(
                money(form_172_part2.line_9) * to_decimal(settings.nol_income_limitation_rate)
            )
    else:
        nol_carryforward = dollars(available - used + ebl)

    record = LossLimitationRecord(
        ownership_interest_id=ownership_interest_id,
        tax_year=tax_year,
        excess_business_loss=dollars(ebl),
        excess_business_loss_carryover=dollars(ebl),
        nol_deduction_used=dollars(used),
        nol_carryforward=nol_carryforward,
        nol_80_percent_limit=nol_80_percent_limit,
        notes=f"Proposed from Form 461 ({tax_year}); confirm before use",
        confirmed=False,
    )
    logger.debug(
        f"Proposed ledger record {tax_year}: EBL {record.excess_business_loss}, "
        f"NOL used {record.nol_deduction_used}, NOL carryforward {record.nol_carryforward}"
    )
    return record
