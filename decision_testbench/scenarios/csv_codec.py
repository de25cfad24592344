"""CSV rendering of scenario results and decoding of scenario uploads.

Report layout (one row per scenario):

    Scenario, Results Match Expected (Pass/Fail), Input: <key>...,
    Expected Result: <key>..., Result: <key>..., Error?

Uploads use the same headers; only the ``Input: `` and ``Expected Result: ``
columns are read back.
"""

from __future__ import annotations

import csv
import io
import json
import re
from typing import Any, Mapping

from decision_testbench.core.errors import EmptyCsvError
from decision_testbench.core.ontology.scenario import RunReport, Scenario, ScenarioResult, Variable
from decision_testbench.shared.helpers import extract_unique_keys

BOM = "\ufeff"

SCENARIO_HEADER = "Scenario"
MATCH_HEADER = "Results Match Expected (Pass/Fail)"
INPUT_PREFIX = "Input: "
EXPECTED_PREFIX = "Expected Result: "
RESULT_PREFIX = "Result: "
ERROR_HEADER = "Error?"

_INDEXED_KEY = re.compile(r"^(.+)\[(\d+)\]$")
_INTEGER = re.compile(r"^[+-]?\d+$")
_DECIMAL = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")


# =============================================================================
# Encoding
# =============================================================================


def format_cell(value: Any) -> str:
    """Text for one report cell.

    Lists of primitives render as ``[a,b]``; lists holding objects render as
    their length; objects render as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        if any(isinstance(item, (Mapping, list, tuple)) for item in value):
            return str(len(value))
        return "[" + ",".join(format_cell(item) for item in value) + "]"
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), default=str)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_csv(
    results: RunReport | Mapping[str, ScenarioResult],
    include_bom: bool = True,
) -> str:
    """Render scenario results as CSV text.

    Input, expected and result columns are the union of keys across all
    scenarios; keys a scenario lacks render as empty cells.
    """
    if isinstance(results, RunReport):
        results = results.results

    input_keys = extract_unique_keys(results, "inputs")
    expected_keys = extract_unique_keys(results, "expected_results")
    result_keys = extract_unique_keys(results, "result")

    headers = [
        SCENARIO_HEADER,
        MATCH_HEADER,
        *(INPUT_PREFIX + key for key in input_keys),
        *(EXPECTED_PREFIX + key for key in expected_keys),
        *(RESULT_PREFIX + key for key in result_keys),
        ERROR_HEADER,
    ]

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)

    for title, scenario in results.items():
        writer.writerow([
            title,
            "Pass" if scenario.result_match else "Fail",
            *(format_cell(scenario.inputs.get(key)) for key in input_keys),
            *(format_cell(scenario.expected_results.get(key)) for key in expected_keys),
            *(format_cell(scenario.result.get(key)) for key in result_keys),
            scenario.error or "",
        ])

    content = buffer.getvalue().rstrip("\n")
    return BOM + content if include_bom else content


# =============================================================================
# Decoding
# =============================================================================


def parse_csv(data: bytes | str) -> list[list[str]]:
    """Split CSV text into rows of trimmed cells, skipping blank lines."""
    if isinstance(data, bytes):
        data = data.decode("utf-8-sig")
    data = data.lstrip(BOM)

    rows = []
    for row in csv.reader(io.StringIO(data)):
        cells = [cell.strip() for cell in row]
        if any(cells):
            rows.append(cells)
    return rows


def extract_keys(headers: list[str], prefix: str) -> list[str]:
    """Header names that start with prefix, with the prefix removed."""
    return [header[len(prefix):] for header in headers if header.startswith(prefix)]


def format_value(text: str) -> Any:
    """Infer a typed value from cell text.

    ``true``/``false`` (any case) become booleans, ``[a, b]`` a list of
    trimmed strings, unambiguous numbers int or float, empty text None.
    Everything else, ISO dates included, stays a string.
    """
    text = text.strip()
    if text == "":
        return None
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if text.startswith("[") and text.endswith("]"):
        inner = text[1:-1].strip()
        return [item.strip() for item in inner.split(",")] if inner else []
    if _INTEGER.match(text):
        return int(text)
    if _DECIMAL.match(text):
        return float(text)
    return text


def format_variables(cells: list[str], keys: list[str], filter_empty: bool = False) -> list[Variable]:
    """Variables from the cells of one row, aligned with their keys.

    A key like ``items[1]`` collapses to ``items`` with its value wrapped in a
    list; several indexed columns sharing a base key merge into one list.
    """
    variables: dict[str, Variable] = {}

    for key, cell in zip(keys, cells):
        if filter_empty and cell.strip() == "":
            continue
        value = format_value(cell)

        match = _INDEXED_KEY.match(key)
        if match:
            base = match.group(1)
            existing = variables.get(base)
            if existing is not None and existing.type == "array":
                existing.value.append(value)
            else:
                variables[base] = Variable(name=base, value=[value], type="array")
            continue

        variables[key] = Variable(name=key, value=value)

    return list(variables.values())


def from_csv(rows: list[list[str]], filepath: str) -> list[Scenario]:
    """Decode parsed CSV rows into scenarios for the rule at filepath.

    Raises:
        EmptyCsvError: If there is no data row after the header row.
    """
    if len(rows) < 2:
        raise EmptyCsvError()

    headers = [header.strip().lstrip(BOM) for header in rows[0]]
    input_columns = [
        (index, header[len(INPUT_PREFIX):])
        for index, header in enumerate(headers) if header.startswith(INPUT_PREFIX)
    ]
    expected_columns = [
        (index, header[len(EXPECTED_PREFIX):])
        for index, header in enumerate(headers) if header.startswith(EXPECTED_PREFIX)
    ]

    scenarios = []
    for row in rows[1:]:
        if not any(cell.strip() for cell in row):
            continue

        def cells(columns: list[tuple[int, str]]) -> list[str]:
            return [row[index] if index < len(row) else "" for index, _ in columns]

        scenario = Scenario(
            title=row[0].strip(),
            rule_id="",
            filepath=filepath,
            variables=format_variables(cells(input_columns), [key for _, key in input_columns]),
            expected_results=format_variables(
                cells(expected_columns), [key for _, key in expected_columns], filter_empty=True
            ),
        )
        scenario.ensure_id()
        scenarios.append(scenario)

    return scenarios
