"""Core ontology - rule graphs and scenarios."""

from .graph import (
    NodeType,
    FieldKind,
    RuleField,
    Expression,
    NodeContent,
    Node,
    Edge,
    RuleContent,
)
from .scenario import (
    infer_type,
    Variable,
    Scenario,
    ScenarioResult,
    RunReport,
    CsvReport,
)

__all__ = [
    # Graph
    "NodeType",
    "FieldKind",
    "RuleField",
    "Expression",
    "NodeContent",
    "Node",
    "Edge",
    "RuleContent",
    # Scenario
    "infer_type",
    "Variable",
    "Scenario",
    "ScenarioResult",
    "RunReport",
    "CsvReport",
]
