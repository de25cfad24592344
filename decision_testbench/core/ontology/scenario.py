"""Scenario models for rule verification runs."""

from __future__ import annotations

from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


def infer_type(value: Any) -> str:
    """Name the runtime type of a value the way scenario variables record it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"


class Variable(BaseModel):
    """A named value supplied to, or expected from, a rule.

    Example:
        {"name": "numberOfChildren", "value": 4, "type": "number"}
    """

    name: str
    value: Any = None
    type: str = ""

    @model_validator(mode="after")
    def _impute_type(self) -> Variable:
        if not self.type:
            self.type = infer_type(self.value)
        return self


class Scenario(BaseModel):
    """One concrete input assignment plus optional expected results."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(None, alias="_id")
    title: str
    rule_id: str = Field("", alias="ruleID")
    filepath: str = ""
    variables: list[Variable] = Field(default_factory=list)
    expected_results: list[Variable] = Field(default_factory=list, alias="expectedResults")

    def ensure_id(self) -> str:
        """Assign a generated identifier if the scenario has none."""
        if not self.id:
            self.id = uuid4().hex
        return self.id

    @classmethod
    def from_values(
        cls,
        title: str,
        values: dict[str, Any],
        filepath: str = "",
        expected: dict[str, Any] | None = None,
    ) -> Scenario:
        """Build a scenario from plain name/value mappings."""
        return cls(
            title=title,
            filepath=filepath,
            variables=[Variable(name=k, value=v) for k, v in values.items()],
            expected_results=[Variable(name=k, value=v) for k, v in (expected or {}).items()],
        )


class ScenarioResult(BaseModel):
    """Verification outcome for one scenario."""

    model_config = ConfigDict(populate_by_name=True)

    inputs: dict[str, Any] = Field(default_factory=dict)
    outputs: dict[str, Any] = Field(default_factory=dict)
    expected_results: dict[str, Any] = Field(default_factory=dict, alias="expectedResults")
    result: dict[str, Any] = Field(default_factory=dict)
    result_match: bool = Field(False, alias="resultMatch")
    error: str | None = None


class RunReport(BaseModel):
    """Results of one scenario batch, keyed by scenario title."""

    results: dict[str, ScenarioResult] = Field(default_factory=dict)

    @property
    def all_tests_passed(self) -> bool:
        return not any(r.result_match is not True for r in self.results.values())


class CsvReport(BaseModel):
    """Rendered CSV report plus the out-of-band pass flag."""

    all_tests_passed: bool
    csv_content: str
