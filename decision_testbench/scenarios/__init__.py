"""Scenarios domain - evaluation, CSV reports, and CSV regression runs."""

from .csv_codec import (
    BOM,
    SCENARIO_HEADER,
    MATCH_HEADER,
    INPUT_PREFIX,
    EXPECTED_PREFIX,
    RESULT_PREFIX,
    ERROR_HEADER,
    format_cell,
    to_csv,
    parse_csv,
    extract_keys,
    format_value,
    format_variables,
    from_csv,
)
from .service import ScenarioService
from .runner import CsvFilesForRule, RuleStats, CsvTestRunner

__all__ = [
    # CSV codec
    "BOM",
    "SCENARIO_HEADER",
    "MATCH_HEADER",
    "INPUT_PREFIX",
    "EXPECTED_PREFIX",
    "RESULT_PREFIX",
    "ERROR_HEADER",
    "format_cell",
    "to_csv",
    "parse_csv",
    "extract_keys",
    "format_value",
    "format_variables",
    "from_csv",
    # Service
    "ScenarioService",
    # Runner
    "CsvFilesForRule",
    "RuleStats",
    "CsvTestRunner",
]
