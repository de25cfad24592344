"""Derives a rule's input/output schema from its node/edge graph."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

from decision_testbench.core.errors import MissingOutputNodeError, SchemaError
from decision_testbench.core.ontology.graph import Edge, Node, NodeType, RuleContent, RuleField
from .schemas import RuleSchema, SchemaField

logger = logging.getLogger(__name__)


def _field_record(field: RuleField) -> SchemaField:
    data = field.model_dump(by_alias=True, exclude_none=True)
    data["property"] = field.field
    return SchemaField.model_validate(data)


def _as_nodes(nodes: Iterable[Node | dict[str, Any]]) -> list[Node]:
    return [n if isinstance(n, Node) else Node.model_validate(n) for n in nodes]


def _as_edges(edges: Iterable[Edge | dict[str, Any]]) -> list[Edge]:
    return [e if isinstance(e, Edge) else Edge.model_validate(e) for e in edges]


def extract_inputs(nodes: Iterable[Node]) -> list[SchemaField]:
    """Input records from declared node inputs and expression mappings."""
    inputs: list[SchemaField] = []
    for node in nodes:
        content = node.structured_content
        if content is None:
            continue
        for field in content.inputs or []:
            inputs.append(_field_record(field))
        if node.type == NodeType.EXPRESSION.value:
            for expr in content.expressions or []:
                inputs.append(SchemaField(key=expr.key, property=expr.value))
    return inputs


def extract_outputs(nodes: Iterable[Node]) -> list[SchemaField]:
    """Output records; expressions are read from the opposite side to inputs."""
    outputs: list[SchemaField] = []
    for node in nodes:
        content = node.structured_content
        if content is None:
            continue
        for field in content.outputs or []:
            outputs.append(_field_record(field))
        if node.type == NodeType.EXPRESSION.value:
            for expr in content.expressions or []:
                outputs.append(SchemaField(key=expr.value, property=expr.key))
    return outputs


def extract_final_outputs(nodes: list[Node], edges: list[Edge]) -> list[SchemaField]:
    """Outputs of the nodes that feed directly into the output node.

    Raises:
        MissingOutputNodeError: If the graph has no output node.
    """
    output_node = next((n for n in nodes if n.type == NodeType.OUTPUT.value), None)
    if output_node is None:
        raise MissingOutputNodeError()

    by_id = {node.id: node for node in nodes}
    sources = []
    for edge in edges:
        if edge.target_id != output_node.id:
            continue
        source = by_id.get(edge.source_id)
        if source is None:
            logger.debug("Edge %s references unknown source node %s", edge.id, edge.source_id)
            continue
        sources.append(source)
    return extract_outputs(sources)


def find_unique_fields(fields: list[SchemaField], other_properties: set[str | None]) -> list[SchemaField]:
    """Fields whose property is not among other_properties, one per property."""
    unique: dict[str | None, SchemaField] = {}
    for field in fields:
        if field.property not in other_properties:
            unique[field.property] = field
    return list(unique.values())


def extract_unique_inputs(nodes: list[Node]) -> list[SchemaField]:
    """Inputs that originate from the caller rather than being computed."""
    inputs = extract_inputs(nodes)
    output_properties = {output.property for output in extract_outputs(nodes)}
    return find_unique_fields(inputs, output_properties)


def rule_schema(
    nodes: Iterable[Node | dict[str, Any]],
    edges: Iterable[Edge | dict[str, Any]],
) -> RuleSchema:
    """Build the schema of a rule graph.

    General outputs exclude anything already reported as a final output.
    """
    nodes = _as_nodes(nodes)
    edges = _as_edges(edges)

    inputs = extract_unique_inputs(nodes)
    general_outputs = extract_outputs(nodes)
    final_outputs = extract_final_outputs(nodes, edges)

    outputs = [
        output for output in general_outputs
        if not any(final.same_entry(output) for final in final_outputs)
    ]

    return RuleSchema(inputs=inputs, outputs=outputs, final_outputs=final_outputs)


def _trace_payload(entry: Any, direction: str) -> Mapping[str, Any]:
    payload = entry.get(direction) if isinstance(entry, Mapping) else getattr(entry, direction, None)
    return payload if isinstance(payload, Mapping) else {}


def evaluate_rule_schema(trace: Mapping[str, Any]) -> RuleSchema:
    """Build the schema of a rule from the trace of one of its runs.

    Every key a node received becomes an input and every key it produced
    becomes an output. Keys a node passes through unchanged (input and output
    nodes echo their values) are not counted as produced. Inputs that some
    node produced are dropped, leaving the values the caller supplied.
    """
    inputs: list[SchemaField] = []
    outputs: dict[str, SchemaField] = {}
    for entry in trace.values():
        received = _trace_payload(entry, "input")
        for key in received:
            inputs.append(SchemaField(field=key, property=key))
        for key, value in _trace_payload(entry, "output").items():
            if key in received and received[key] == value:
                continue
            outputs.setdefault(key, SchemaField(field=key, property=key))

    unique_inputs = find_unique_fields(inputs, set(outputs))
    return RuleSchema(inputs=unique_inputs, outputs=list(outputs.values()))


class RuleMappingService:
    """Schema extraction for rules given by content or by path."""

    def __init__(self, documents=None):
        self.documents = documents

    def rule_schema(self, content: RuleContent | dict[str, Any]) -> RuleSchema:
        if not isinstance(content, RuleContent):
            content = RuleContent.model_validate(content)
        return rule_schema(content.nodes, content.edges)

    def rule_schema_file(self, filepath: str) -> RuleSchema:
        """Schema of the rule stored at filepath under the rules directory."""
        if self.documents is None:
            raise RuntimeError("RuleMappingService has no documents service configured")
        raw = self.documents.get_file_content(filepath)
        return self.rule_schema(json.loads(raw))

    def evaluate_rule_schema(self, trace: Mapping[str, Any]) -> RuleSchema:
        """Unique inputs and all outputs of a rule, read from a run trace.

        Raises:
            SchemaError: If the trace is empty or not an object.
        """
        if not isinstance(trace, Mapping) or not trace:
            raise SchemaError("Trace must be a non-empty object keyed by node id")
        return evaluate_rule_schema(trace)
