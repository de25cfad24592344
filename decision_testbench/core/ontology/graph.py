"""Pydantic models for rule graphs.

A rule graph is a set of nodes joined by directed edges. Nodes carry
input/output field declarations and expression mappings; edges are only
used to find which nodes feed the designated output node.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NodeType(str, Enum):
    """Node types that schema extraction cares about."""

    INPUT = "inputNode"
    OUTPUT = "outputNode"
    EXPRESSION = "expressionNode"
    DECISION_TABLE = "decisionTableNode"
    FUNCTION = "functionNode"
    DECISION = "decisionNode"


class FieldKind(str, Enum):
    """Declared field types that select a value-space generator."""

    NUMBER = "number-input"
    DATE = "date"
    TEXT = "text-input"
    BOOLEAN = "true-false"
    OBJECT_ARRAY = "object-array"
    UNKNOWN = "unknown"

    @classmethod
    def from_declared(cls, declared: str | None) -> FieldKind:
        if not declared:
            return cls.UNKNOWN
        try:
            return cls(declared)
        except ValueError:
            return cls.UNKNOWN


class RuleField(BaseModel):
    """A field declared on a node, possibly with nested child fields."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | int | None = None
    name: str | None = None
    type: str | None = None
    data_type: str | None = Field(None, alias="dataType")
    field: str | None = None
    label: str | None = None
    description: str | None = None
    validation_type: str | None = Field(None, alias="validationType")
    validation_criteria: str | None = Field(None, alias="validationCriteria")
    # Older graphs spell this in snake_case; populate_by_name accepts both
    child_fields: list[RuleField] = Field(default_factory=list, alias="childFields")

    @property
    def declared_type(self) -> str | None:
        return self.type or self.data_type

    @property
    def kind(self) -> FieldKind:
        return FieldKind.from_declared(self.declared_type)

    def path_name(self) -> str:
        """Name under which this field's value appears in a context object."""
        if self.field:
            return self.field
        if self.name:
            return self.name
        return str(self.id)


class Expression(BaseModel):
    """A key/value mapping on an expression node."""

    model_config = ConfigDict(extra="allow")

    key: str
    value: str


class NodeContent(BaseModel):
    """Declared content of a node. Unknown keys are kept as extras."""

    model_config = ConfigDict(extra="allow")

    inputs: list[RuleField] | None = None
    outputs: list[RuleField] | None = None
    expressions: list[Expression] | None = None


class Node(BaseModel):
    """A vertex in the rule graph."""

    model_config = ConfigDict(extra="allow")

    id: Any
    type: str
    content: NodeContent | str | None = None
    name: str | None = None

    @property
    def structured_content(self) -> NodeContent | None:
        """Content when it is a declaration block rather than source code."""
        return self.content if isinstance(self.content, NodeContent) else None


class Edge(BaseModel):
    """A directed connection between two nodes."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    type: str | None = None
    source_id: str = Field(..., alias="sourceId")
    target_id: str = Field(..., alias="targetId")
    source_handle: str | None = Field(None, alias="sourceHandle")
    target_handle: str | None = Field(None, alias="targetHandle")


class RuleContent(BaseModel):
    """A complete rule graph."""

    model_config = ConfigDict(extra="allow")

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
