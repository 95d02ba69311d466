"""Pytest configuration and fixtures for test suite."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


def _reset_cached_config():
    """Drop cached settings, bracket tables and the shared evaluator."""
    from config.tax_config_loader import clear_config_cache
    from calculator.tax_brackets import reset_evaluator

    clear_config_cache()
    reset_evaluator()


@pytest.fixture(autouse=True)
def clean_pipeline_environment(monkeypatch):
    """Run every test against default settings and the bundled bracket table."""
    for name in (
        "TAX_BRACKETS_FILE",
        "TAX_PIPELINE_COST_OF_LIVING_ADJUSTMENT",
        "TAX_PIPELINE_BRACKETS_FILE",
        "TAX_PIPELINE_NOL_INCOME_LIMITATION_RATE",
        "TAX_PIPELINE_NOL_LIMITATION_FIRST_YEAR",
        "TAX_PIPELINE_DEFAULT_TAX_YEAR",
        "TAX_PIPELINE_LOG_LEVEL",
        "TAX_PIPELINE_LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    _reset_cached_config()
    yield
    _reset_cached_config()


@pytest.fixture
def settings():
    """Default pipeline settings, independent of any .env file."""
    from config.settings import PipelineSettings
    return PipelineSettings(_env_file=None)


@pytest.fixture
def evaluator():
    """Marginal tax evaluator over the bundled bracket table."""
    from calculator.tax_brackets import MarginalTaxEvaluator
    return MarginalTaxEvaluator()


@pytest.fixture
def brackets_yaml(tmp_path):
    """Write a small bracket table and return its path."""
    path = tmp_path / "brackets.yaml"
    path.write_text(
        "_metadata:\n"
        "  version: test\n"
        "  tax_year: 2030\n"
        "  effective_date: '2030-01-01'\n"
        "  source: custom\n"
        "brackets:\n"
        "  - state: ''\n"
        "    year: 2030\n"
        "    filing_status: Single\n"
        "    rows:\n"
        "      - [0, 10000, 0.10]\n"
        "      - [10000, 999999999, 0.20]\n"
    )
    return path
