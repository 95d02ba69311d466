"""
Tax Configuration Loader.

Loads bracket tables from YAML configuration files, enabling:
- Annual bracket updates without code changes
- Environment-specific overrides of the table file
- Metadata describing the source of each table
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from config.settings import get_settings

logger = logging.getLogger(__name__)

# Default config directory
CONFIG_DIR = Path(__file__).parent / "tax_parameters"
BRACKETS_FILE_NAME = "tax_brackets.yaml"


class TaxConfigError(Exception):
    """Raised when a tax parameter file is missing or malformed."""
    pass


@dataclass
class ConfigMetadata:
    """Metadata about a configuration file."""
    version: str
    tax_year: int
    effective_date: str
    source: str  # "IRS", "state", "custom"
    irs_references: List[str] = field(default_factory=list)
    last_updated: str = ""
    updated_by: str = ""
    notes: str = ""


class TaxConfigLoader:
    """
    Loads and caches bracket tables from YAML files.

    The file is resolved in order:
    1. Explicit path passed to the constructor
    2. TAX_BRACKETS_FILE environment variable
    3. PipelineSettings.brackets_file
    4. Bundled src/config/tax_parameters/tax_brackets.yaml
    """

    def __init__(self, brackets_file: Optional[Path] = None):
        self._explicit_file = brackets_file
        self._rows: Optional[List[Dict[str, Any]]] = None
        self._metadata: Optional[ConfigMetadata] = None

    @property
    def brackets_file(self) -> Path:
        if self._explicit_file is not None:
            return Path(self._explicit_file)
        env_file = os.environ.get("TAX_BRACKETS_FILE")
        if env_file:
            return Path(env_file)
        settings_file = get_settings().brackets_file
        if settings_file is not None:
            return Path(settings_file)
        return CONFIG_DIR / BRACKETS_FILE_NAME

    def load_bracket_rows(self) -> List[Dict[str, Any]]:
        """
        Load the flattened bracket rows.

        Returns:
            List of dicts with state, year, filing_status, min_income,
            max_income and rate keys, in file order.
        """
        if self._rows is not None:
            return self._rows

        path = self.brackets_file
        if not path.exists():
            raise TaxConfigError(f"Bracket table not found: {path}")

        logger.info(f"Loading tax brackets from {path}")
        with open(path, 'r') as f:
            try:
                document = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise TaxConfigError(f"Invalid YAML in {path}: {e}") from e

        if '_metadata' in document:
            try:
                self._metadata = ConfigMetadata(**document.pop('_metadata'))
            except TypeError as e:
                raise TaxConfigError(f"Invalid _metadata block in {path}: {e}") from e

        self._rows = self._flatten(document.get('brackets') or [], path)
        self._validate_rows(self._rows)
        return self._rows

    def _flatten(self, tables: List[Dict[str, Any]], path: Path) -> List[Dict[str, Any]]:
        """Expand grouped tables into one dict per bracket row."""
        rows: List[Dict[str, Any]] = []
        for table in tables:
            try:
                state = str(table.get('state') or '')
                year = int(table['year'])
                filing_status = str(table['filing_status'])
                for min_income, max_income, rate in table['rows']:
                    rows.append({
                        'state': state,
                        'year': year,
                        'filing_status': filing_status,
                        'min_income': min_income,
                        'max_income': max_income,
                        'rate': rate,
                    })
            except (KeyError, TypeError, ValueError) as e:
                raise TaxConfigError(f"Malformed bracket table in {path}: {table!r}") from e
        return rows

    def _validate_rows(self, rows: List[Dict[str, Any]]) -> None:
        """Warn about overlapping or gapped brackets; these still load."""
        tables: Dict[tuple, List[Dict[str, Any]]] = {}
        for row in rows:
            key = (row['state'], row['year'], row['filing_status'])
            tables.setdefault(key, []).append(row)

        for key, table in tables.items():
            ordered = sorted(table, key=lambda r: r['min_income'])
            for lower, upper in zip(ordered, ordered[1:]):
                if lower['max_income'] is None:
                    logger.warning(f"Bracket table {key} has an open-ended row below {upper['min_income']}")
                elif upper['min_income'] != lower['max_income']:
                    logger.warning(
                        f"Bracket table {key} is not contiguous at "
                        f"{lower['max_income']} -> {upper['min_income']}"
                    )

    def get_metadata(self) -> Optional[ConfigMetadata]:
        """Get metadata for the loaded bracket table."""
        self.load_bracket_rows()
        return self._metadata

    def available_tables(self) -> List[tuple]:
        """Distinct (state, year, filing_status) keys present in the table."""
        seen = []
        for row in self.load_bracket_rows():
            key = (row['state'], row['year'], row['filing_status'])
            if key not in seen:
                seen.append(key)
        return seen


# Global singleton
_config_loader: Optional[TaxConfigLoader] = None


def get_config_loader() -> TaxConfigLoader:
    """Get the global config loader instance."""
    global _config_loader
    if _config_loader is None:
        _config_loader = TaxConfigLoader()
    return _config_loader


def clear_config_cache() -> None:
    """Clear the configuration cache (useful for testing)."""
    global _config_loader
    _config_loader = None
    get_settings.cache_clear()
