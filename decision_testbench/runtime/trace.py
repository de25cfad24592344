"""
Execution trace mapping.

The decision engine reports one trace entry per executed node, keyed by
internal node id. This module maps those entries back onto a rule schema so
results can be reported by field name:
- Inputs are matched against the schema's inputs
- Outputs are matched against the schema's final outputs
- Anything else is an intermediate value and is dropped
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from decision_testbench.rule_mapping.schemas import RuleSchema, SchemaField
from decision_testbench.shared.helpers import replace_special_characters

logger = logging.getLogger(__name__)

Direction = Literal["input", "output"]


class TraceEntry(BaseModel):
    """What flowed through one node during an evaluation."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    """Node identifier."""

    name: str | None = None
    """Node name as shown in the graph editor."""

    input: Any = None
    """Values the node received."""

    output: Any = None
    """Values the node produced."""

    performance: str | None = None
    """Engine-reported execution time."""

    trace_data: Any = Field(None, alias="traceData")
    """Node-specific detail (matched rule row, expression values, ...)."""


TraceObject = dict[str, TraceEntry]


def _schema_fields(schema: RuleSchema, direction: Direction) -> list[SchemaField]:
    return schema.inputs if direction == "input" else schema.final_outputs


def get_property_by_id(field_id: Any, schema: RuleSchema, direction: Direction) -> str | None:
    """Property name of the schema field with the given id.

    Returns:
        The field's property, or None if no field has that id
    """
    for field in _schema_fields(schema, direction):
        if field.id is not None and str(field.id) == str(field_id):
            return field.property
    return None


def map_trace_to_result(
    values: Mapping[str, Any],
    schema: RuleSchema,
    direction: Direction,
) -> dict[str, Any]:
    """Rename one node's input or output values to sanitized schema properties.

    Keys are first looked up as field ids, then compared directly against
    sanitized properties. Unmatched keys are dropped.
    """
    fields = _schema_fields(schema, direction)
    result: dict[str, Any] = {}

    for key, value in values.items():
        prop = get_property_by_id(key, schema, direction)
        if prop:
            result[replace_special_characters(prop, "")] = value
            continue

        for field in fields:
            if field.property is None:
                continue
            clean = replace_special_characters(field.property, "")
            if clean == key:
                result[clean] = value
                break

    return result


def map_traces(
    trace: Mapping[str, TraceEntry | Mapping[str, Any]] | None,
    schema: RuleSchema,
    direction: Direction,
) -> dict[str, Any]:
    """Flatten a whole trace into one field-keyed object.

    Entries are merged in iteration order; later entries overwrite earlier
    ones on key collision. Entries that do not validate are skipped.
    """
    result: dict[str, Any] = {}
    if not trace:
        return result

    for node_id, entry in trace.items():
        if not isinstance(entry, TraceEntry):
            try:
                entry = TraceEntry.model_validate(entry)
            except ValidationError as exc:
                logger.warning("Skipping malformed trace entry %s: %s", node_id, exc)
                continue
        payload = entry.input if direction == "input" else entry.output
        if isinstance(payload, Mapping):
            result.update(map_trace_to_result(payload, schema, direction))

    return result
