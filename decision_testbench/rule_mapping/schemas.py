"""Schema records derived from a rule graph."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from decision_testbench.core.ontology.graph import RuleField


class SchemaField(RuleField):
    """A field as it appears in a rule schema.

    Node fields contribute ``property`` from their ``field`` attribute;
    expressions contribute ``key`` and ``property`` from their two sides.
    """

    key: str | None = None
    property: str | None = None

    def path_name(self) -> str:
        if self.property:
            return self.property
        return super().path_name()

    def same_entry(self, other: SchemaField) -> bool:
        """Match by id, or by (key, property) when ids are not reliable."""
        if self.id is not None and self.id == other.id:
            return True
        return self.key == other.key and self.property == other.property


class RuleSchema(BaseModel):
    """Inputs, general outputs and final outputs of a rule.

    Derived from the graph, never stored.
    """

    model_config = ConfigDict(populate_by_name=True)

    inputs: list[SchemaField] = Field(default_factory=list)
    outputs: list[SchemaField] = Field(default_factory=list)
    final_outputs: list[SchemaField] = Field(default_factory=list, alias="finalOutputs")
