"""
Tests for the loss limitation ledger records.

Tests cover:
- Proposed records built from Form 461 (and Form 172 Part II)
- NOL available from the prior year's record
- Operator confirmation
- Individual carryforward entries and their usage
"""

import logging

import pytest
from pydantic import ValidationError

from config.settings import PipelineSettings
from models.carryforward import (
    CarryforwardType,
    LossCarryforwardRecord,
    LossLimitationRecord,
    build_loss_limitation_record,
    ebl_carryforward_from,
)
from models.form_172 import Form172Part2Input, calculate_form_172
from models.form_461 import calculate_form_461


@pytest.fixture
def form_461_2024():
    """2024 single filer with a $400,000 business loss ($95,000 EBL)."""
    return calculate_form_461(2024, schedule1_line_3=-400000.0)


class TestBuildLossLimitationRecord:
    """Tests for build_loss_limitation_record()."""

    def test_first_year_proposal(self, form_461_2024):
        """The EBL is recorded and carried forward as an NOL."""
        record = build_loss_limitation_record(form_461_2024, ownership_interest_id=7)

        assert record.ownership_interest_id == 7
        assert record.tax_year == 2024
        assert record.excess_business_loss == 95000.0
        assert record.excess_business_loss_carryover == 95000.0
        assert record.nol_deduction_used == 0.0
        assert record.nol_carryforward == 95000.0
        assert record.nol_80_percent_limit is None
        assert record.confirmed is False

    def test_at_risk_and_passive_left_for_operator(self, form_461_2024):
        """At-risk and passive amounts are not computed here."""
        record = build_loss_limitation_record(form_461_2024)
        assert record.capital_at_risk is None
        assert record.at_risk_carryover is None
        assert record.passive_loss_carryover is None

    def test_prior_year_nol_used(self, form_461_2024):
        """The NOL available comes from the prior year's carryforward."""
        prior = LossLimitationRecord(tax_year=2023, nol_carryforward=50000.0)
        record = build_loss_limitation_record(
            form_461_2024, prior_year=prior, nol_deduction_used=20000.0
        )
        assert record.nol_deduction_used == 20000.0
        assert record.nol_carryforward == 125000.0

    def test_using_more_than_available(self, form_461_2024):
        """Using more NOL than was carried in is an error."""
        prior = LossLimitationRecord(tax_year=2023, nol_carryforward=10000.0)
        with pytest.raises(ValueError, match="exceeds NOL available"):
            build_loss_limitation_record(form_461_2024, prior_year=prior, nol_deduction_used=10000.01)

    def test_prior_year_must_be_previous_year(self, form_461_2024):
        """The prior record must be for the immediately preceding year."""
        prior = LossLimitationRecord(tax_year=2022, nol_carryforward=10000.0)
        with pytest.raises(ValueError, match="expected 2023"):
            build_loss_limitation_record(form_461_2024, prior_year=prior)

    def test_unconfirmed_prior_year_warns(self, form_461_2024, caplog):
        """Chaining from an unconfirmed proposal is logged."""
        prior = LossLimitationRecord(tax_year=2023, nol_carryforward=0.0, confirmed=False)
        with caplog.at_level(logging.WARNING, logger="models.carryforward"):
            build_loss_limitation_record(form_461_2024, prior_year=prior)
        assert "unconfirmed" in caplog.text

    def test_with_form_172_part_2(self, form_461_2024, settings):
        """Part II supplies the NOL carryover and the 80% limit."""
        p2 = Form172Part2Input(
            year_ended="2024-12-31",
            nol_deduction=60000.0,
            taxable_income_before_carryback=40000.0,
        )
        part2 = calculate_form_172(part2_inputs=[p2]).part2[0]
        record = build_loss_limitation_record(form_461_2024, form_172_part2=part2, settings=settings)
        assert part2.line_10 == 20000.0
        assert record.nol_carryforward == 115000.0
        assert record.nol_80_percent_limit == 32000.0

    def test_no_80_percent_limit_before_2021(self, settings):
        """The income limitation is not recorded for earlier years."""
        form_461 = calculate_form_461(2020, schedule1_line_3=-300000.0)
        p2 = Form172Part2Input(year_ended="2020-12-31", nol_deduction=1.0,
                               taxable_income_before_carryback=40000.0)
        part2 = calculate_form_172(part2_inputs=[p2]).part2[0]
        record = build_loss_limitation_record(form_461, form_172_part2=part2, settings=settings)
        assert record.nol_80_percent_limit is None
        assert record.excess_business_loss == 41000.0

    def test_confirm(self, form_461_2024):
        """confirm() returns a confirmed copy and leaves the proposal alone."""
        proposal = build_loss_limitation_record(form_461_2024)
        confirmed = proposal.confirm()
        assert confirmed.confirmed is True
        assert proposal.confirmed is False
        assert confirmed.nol_carryforward == proposal.nol_carryforward

    def test_chained_years(self):
        """A confirmed record feeds the next year's proposal."""
        first = build_loss_limitation_record(
            calculate_form_461(2024, schedule1_line_3=-400000.0)
        ).confirm()
        second = build_loss_limitation_record(
            calculate_form_461(2025, schedule1_line_3=10000.0),
            prior_year=first,
            nol_deduction_used=80000.0,
        )
        assert second.excess_business_loss == 0.0
        assert second.nol_carryforward == 15000.0


class TestLossLimitationRecord:
    """Tests for operator-entered records."""

    def test_operator_entered_defaults_confirmed(self):
        """Records typed in by an operator are confirmed by default."""
        record = LossLimitationRecord(tax_year=2024, capital_at_risk=-5000.0, notes="per K-1")
        assert record.confirmed is True
        assert record.capital_at_risk == -5000.0

    def test_negative_carryover_rejected(self):
        """Carryovers cannot be negative."""
        with pytest.raises(ValidationError):
            LossLimitationRecord(tax_year=2024, nol_carryforward=-1.0)

    def test_assignment_validated(self):
        """Edits are validated too."""
        record = LossLimitationRecord(tax_year=2024)
        with pytest.raises(ValidationError):
            record.passive_loss_carryover = -10.0


class TestLossCarryforwardRecord:
    """Tests for individual carryforward entries."""

    def test_from_form_461(self, form_461_2024):
        """An EBL becomes an ordinary carryforward sourced from its year."""
        entry = ebl_carryforward_from(form_461_2024, ownership_interest_id=3)
        assert entry.carryforward_type == CarryforwardType.EXCESS_BUSINESS_LOSS
        assert entry.origin_year == 2024
        assert entry.source_ebl_year == 2024
        assert entry.loss_character == "Ordinary"
        assert entry.original_amount == 95000.0
        assert entry.remaining_amount == 95000.0

    def test_nothing_disallowed(self):
        """No EBL means no carryforward entry."""
        assert ebl_carryforward_from(calculate_form_461(2024, schedule1_line_3=-1000.0)) is None

    def test_apply(self, form_461_2024):
        """Applying usage reduces the remaining amount."""
        entry = ebl_carryforward_from(form_461_2024)
        used = entry.apply(80000.0)
        assert used.remaining_amount == 15000.0
        assert entry.remaining_amount == 95000.0
        assert not used.is_exhausted

    def test_apply_more_than_remaining(self, form_461_2024):
        """Usage is capped at what remains."""
        entry = ebl_carryforward_from(form_461_2024).apply(1e9)
        assert entry.remaining_amount == 0.0
        assert entry.is_exhausted

    def test_apply_negative(self, form_461_2024):
        """Negative usage is rejected."""
        with pytest.raises(ValueError):
            ebl_carryforward_from(form_461_2024).apply(-1.0)

    def test_remaining_above_original_rejected(self):
        """The remaining amount cannot exceed the original."""
        with pytest.raises(ValidationError):
            LossCarryforwardRecord(
                origin_year=2024,
                carryforward_type="passive",
                original_amount=100.0,
                remaining_amount=200.0,
            )

    def test_type_from_string(self):
        """Carryforward type accepts its stored string value."""
        entry = LossCarryforwardRecord(
            origin_year=2023, carryforward_type="at_risk", original_amount=10.0, remaining_amount=10.0
        )
        assert entry.carryforward_type == CarryforwardType.AT_RISK
