"""
Tests for the Excess Business Loss threshold table (IRC Section 461(l)(3)).

Tests cover:
- Published thresholds for single and joint filers
- Years before the table
- Projection past the table with a cost-of-living multiplier
- Rounding to the nearest $1,000 and the $1,000 floor
- Configured default multiplier
"""

import pytest

from calculator.ebl_limitation import (
    EBL_THRESHOLDS,
    MAXIMUM_PROJECTED_THRESHOLD,
    MINIMUM_PROJECTED_THRESHOLD,
    excess_business_loss_limitation,
    find_threshold_row,
)


class TestPublishedThresholds:
    """Tests for years present in the table."""

    @pytest.mark.parametrize("year,single,joint", [
        (2018, 250000.0, 500000.0),
        (2019, 255000.0, 510000.0),
        (2020, 259000.0, 518000.0),
        (2021, 262000.0, 524000.0),
        (2022, 270000.0, 540000.0),
        (2023, 289000.0, 578000.0),
        (2024, 305000.0, 610000.0),
        (2025, 317000.0, 634000.0),
    ])
    def test_published_amounts(self, year, single, joint):
        """Each tabulated year returns its published amounts."""
        assert excess_business_loss_limitation(year, is_single=True) == single
        assert excess_business_loss_limitation(year, is_single=False) == joint

    def test_2025_single(self):
        """2025 single filer threshold is $317,000."""
        assert excess_business_loss_limitation(2025, is_single=True) == 317000.0

    def test_table_is_ordered_by_year(self):
        """Rows are stored in ascending year order with no gaps."""
        years = [row.tax_year for row in EBL_THRESHOLDS]
        assert years == list(range(years[0], years[-1] + 1))

    def test_find_threshold_row_missing_year(self):
        """Untabulated years return None from the row lookup."""
        assert find_threshold_row(2030) is None
        assert find_threshold_row(2024).single_filers == 305000.0


class TestYearsBeforeTable:
    """Tests for years before the first published row."""

    @pytest.mark.parametrize("year", [2017, 2000, 1990])
    def test_earlier_year_uses_first_row(self, year):
        """Years before 2018 use the 2018 amounts."""
        assert excess_business_loss_limitation(year, is_single=True) == 250000.0
        assert excess_business_loss_limitation(year, is_single=False) == 500000.0


class TestProjection:
    """Tests for years after the last published row."""

    def test_2026_single_with_three_percent(self):
        """317,000 x 1.03 = 326,510, rounded to 327,000."""
        result = excess_business_loss_limitation(2026, is_single=True, cost_of_living_adjustment=1.03)
        assert result == round(317000 * 1.03 / 1000) * 1000
        assert result == 327000.0

    def test_2026_joint_with_three_percent(self):
        """634,000 x 1.03 = 653,020, rounded to 653,000."""
        result = excess_business_loss_limitation(2026, is_single=False, cost_of_living_adjustment=1.03)
        assert result == 653000.0

    def test_2027_compounds(self):
        """Two years out compounds the multiplier: 317,000 x 1.03^2 = 336,307.3."""
        result = excess_business_loss_limitation(2027, is_single=True, cost_of_living_adjustment=1.03)
        assert result == 336000.0

    def test_default_multiplier_from_settings(self):
        """Omitting the multiplier uses the configured 1.03."""
        assert excess_business_loss_limitation(2026) == 327000.0

    def test_multiplier_from_environment(self, monkeypatch):
        """TAX_PIPELINE_COST_OF_LIVING_ADJUSTMENT changes the default multiplier."""
        from config.settings import get_settings

        monkeypatch.setenv("TAX_PIPELINE_COST_OF_LIVING_ADJUSTMENT", "1.0")
        get_settings.cache_clear()
        assert excess_business_loss_limitation(2028) == 317000.0

    def test_explicit_multiplier_overrides_settings(self):
        """An explicit multiplier of 1.0 holds the last published amount."""
        assert excess_business_loss_limitation(2030, cost_of_living_adjustment=1.0) == 317000.0

    def test_projection_is_multiple_of_thousand(self):
        """Projected thresholds are whole thousands."""
        for year in range(2026, 2036):
            assert excess_business_loss_limitation(year, cost_of_living_adjustment=1.027) % 1000 == 0

    def test_floor_of_one_thousand(self):
        """A collapsing multiplier cannot push the threshold below $1,000."""
        result = excess_business_loss_limitation(2040, cost_of_living_adjustment=0.01)
        assert result == MINIMUM_PROJECTED_THRESHOLD


class TestFarFutureYears:
    """Tests for projections many years past the table."""

    @pytest.mark.parametrize("year", [30000, 10 ** 6, 10 ** 9])
    @pytest.mark.parametrize("is_single", [True, False])
    def test_growth_saturates_at_ceiling(self, year, is_single):
        """Runaway compounding stops at the ceiling as a whole number of thousands."""
        result = excess_business_loss_limitation(year, is_single=is_single, cost_of_living_adjustment=1.03)
        assert result == MAXIMUM_PROJECTED_THRESHOLD
        assert result % 1000 == 0
        assert result >= MINIMUM_PROJECTED_THRESHOLD

    def test_shrinking_multiplier_hits_floor(self):
        """A multiplier below 1.0 over a million years bottoms out at $1,000."""
        result = excess_business_loss_limitation(10 ** 6, cost_of_living_adjustment=0.5)
        assert result == MINIMUM_PROJECTED_THRESHOLD

    def test_form_461_far_future_year(self):
        """Form 461 computes with the saturated threshold."""
        from models.form_461 import calculate_form_461

        result = calculate_form_461(30000, schedule1_line_3=-400000.0)
        assert result.line_15 == MAXIMUM_PROJECTED_THRESHOLD
        assert result.line_16 == 0.0
