"""
Tests for the YAML bracket table loader and pipeline settings.
"""

import logging

import pytest
from pydantic import ValidationError

from config.settings import PipelineSettings, get_settings
from config.tax_config_loader import (
    BRACKETS_FILE_NAME,
    CONFIG_DIR,
    TaxConfigError,
    TaxConfigLoader,
    clear_config_cache,
    get_config_loader,
)


class TestBundledTable:
    """Tests for the bracket table shipped with the package."""

    def test_default_path(self):
        """Without overrides the bundled file is used."""
        assert TaxConfigLoader().brackets_file == CONFIG_DIR / BRACKETS_FILE_NAME

    def test_rows_are_flattened(self):
        """Each row carries its table key."""
        rows = TaxConfigLoader().load_bracket_rows()
        first = rows[0]
        assert set(first) == {"state", "year", "filing_status", "min_income", "max_income", "rate"}
        assert first["state"] == ""
        assert first["min_income"] == 0

    def test_metadata(self):
        """The _metadata block is exposed."""
        metadata = TaxConfigLoader().get_metadata()
        assert metadata is not None
        assert metadata.source == "IRS"
        assert metadata.tax_year == 2025

    def test_available_tables(self):
        """Federal and California tables are listed."""
        tables = TaxConfigLoader().available_tables()
        assert ("", 2024, "Single") in tables
        assert ("CA", 2024, "Single") in tables
        assert ("", 2025, "Head of Household") in tables

    def test_rows_cached(self):
        """A loader reads its file once."""
        loader = TaxConfigLoader()
        assert loader.load_bracket_rows() is loader.load_bracket_rows()

    def test_singleton_and_clear(self):
        """clear_config_cache() replaces the shared loader."""
        loader = get_config_loader()
        assert get_config_loader() is loader
        clear_config_cache()
        assert get_config_loader() is not loader


class TestFileResolution:
    """Tests for choosing the bracket file."""

    def test_explicit_path(self, brackets_yaml):
        """A path given to the constructor wins."""
        rows = TaxConfigLoader(brackets_yaml).load_bracket_rows()
        assert {row["year"] for row in rows} == {2030}

    def test_environment_variable(self, monkeypatch, brackets_yaml):
        """TAX_BRACKETS_FILE overrides the bundled file."""
        monkeypatch.setenv("TAX_BRACKETS_FILE", str(brackets_yaml))
        assert TaxConfigLoader().brackets_file == brackets_yaml

    def test_settings_brackets_file(self, monkeypatch, brackets_yaml):
        """TAX_PIPELINE_BRACKETS_FILE is honoured through settings."""
        monkeypatch.setenv("TAX_PIPELINE_BRACKETS_FILE", str(brackets_yaml))
        get_settings.cache_clear()
        assert TaxConfigLoader().brackets_file == brackets_yaml


class TestErrors:
    """Tests for missing and malformed files."""

    def test_missing_file(self, tmp_path):
        """A missing file raises TaxConfigError."""
        with pytest.raises(TaxConfigError, match="not found"):
            TaxConfigLoader(tmp_path / "missing.yaml").load_bracket_rows()

    def test_invalid_yaml(self, tmp_path):
        """Unparseable YAML raises TaxConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("brackets: [unclosed\n")
        with pytest.raises(TaxConfigError, match="Invalid YAML"):
            TaxConfigLoader(path).load_bracket_rows()

    def test_malformed_table(self, tmp_path):
        """A table without rows raises TaxConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("brackets:\n  - state: ''\n    filing_status: Single\n")
        with pytest.raises(TaxConfigError, match="Malformed"):
            TaxConfigLoader(path).load_bracket_rows()

    def test_gap_is_logged(self, tmp_path, caplog):
        """Non-contiguous rows load but are warned about."""
        path = tmp_path / "gap.yaml"
        path.write_text(
            "brackets:\n"
            "  - state: ''\n"
            "    year: 2030\n"
            "    filing_status: Single\n"
            "    rows:\n"
            "      - [0, 10000, 0.10]\n"
            "      - [10001, 999999999, 0.20]\n"
        )
        with caplog.at_level(logging.WARNING, logger="config.tax_config_loader"):
            rows = TaxConfigLoader(path).load_bracket_rows()
        assert len(rows) == 2
        assert "not contiguous" in caplog.text

    def test_open_ended_top_row(self, tmp_path):
        """A null max_income loads as an open-ended row."""
        path = tmp_path / "open.yaml"
        path.write_text(
            "brackets:\n"
            "  - state: ''\n"
            "    year: 2030\n"
            "    filing_status: Single\n"
            "    rows:\n"
            "      - [0, 10000, 0.10]\n"
            "      - [10000, null, 0.20]\n"
        )
        rows = TaxConfigLoader(path).load_bracket_rows()
        assert rows[-1]["max_income"] is None
        assert rows[-1]["min_income"] == 10000

    def test_open_ended_row_below_others_is_logged(self, tmp_path, caplog):
        """An open-ended row that is not the top row is warned about."""
        path = tmp_path / "open_middle.yaml"
        path.write_text(
            "brackets:\n"
            "  - state: ''\n"
            "    year: 2030\n"
            "    filing_status: Single\n"
            "    rows:\n"
            "      - [0, null, 0.10]\n"
            "      - [10000, null, 0.20]\n"
        )
        with caplog.at_level(logging.WARNING, logger="config.tax_config_loader"):
            TaxConfigLoader(path).load_bracket_rows()
        assert "open-ended row below 10000" in caplog.text


class TestPipelineSettings:
    """Tests for PipelineSettings."""

    def test_defaults(self, settings):
        """Defaults match current law."""
        assert settings.cost_of_living_adjustment == 1.03
        assert settings.default_tax_year == 2024
        assert settings.nol_income_limitation_rate == 0.80
        assert settings.nol_limitation_first_year == 2021
        assert settings.brackets_file is None
        assert settings.log_level == "INFO"
        assert settings.log_json is False

    def test_environment_prefix(self, monkeypatch):
        """Settings read TAX_PIPELINE_ variables."""
        monkeypatch.setenv("TAX_PIPELINE_NOL_LIMITATION_FIRST_YEAR", "2018")
        monkeypatch.setenv("TAX_PIPELINE_LOG_JSON", "true")
        settings = PipelineSettings(_env_file=None)
        assert settings.nol_limitation_first_year == 2018
        assert settings.log_json is True

    def test_log_level_normalized(self):
        """Log levels are upper-cased."""
        assert PipelineSettings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        """Unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            PipelineSettings(_env_file=None, log_level="chatty")

    def test_cost_of_living_must_be_positive(self):
        """A zero multiplier is rejected."""
        with pytest.raises(ValidationError):
            PipelineSettings(_env_file=None, cost_of_living_adjustment=0)

    def test_get_settings_cached(self):
        """get_settings() returns the same instance until cleared."""
        assert get_settings() is get_settings()
