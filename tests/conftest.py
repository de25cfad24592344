"""Pytest fixtures for test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from decision_testbench.decisions import DecisionService
from decision_testbench.documents import DocumentsService
from decision_testbench.rule_mapping import RuleSchema, SchemaField, rule_schema
from decision_testbench.scenarios import ScenarioService
from decision_testbench.synthetic_data import CombinationGenerator


# =============================================================================
# Fake decision engine
# =============================================================================


class FakeDecision:
    """Evaluates the winter supplement rule in plain Python.

    A family composition of ``explode`` makes the evaluation fail, ``odd``
    reports a numeric performance on one trace entry and ``garbled`` returns
    a trace that is not an object.
    """

    def __init__(self, content: dict[str, Any]):
        self.content = content

    async def evaluate(self, context: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
        if context.get("familyComposition") == "explode":
            raise ValueError("engine exploded")

        children = context.get("numberOfChildren") or 0
        base_amount = children * 60
        result = {"isEligible": children > 0, "supplementAmount": base_amount}

        trace = {
            "in1": {"id": "in1", "name": "Request", "input": dict(context), "output": dict(context)},
            "dt1": {
                "id": "dt1",
                "name": "Eligibility",
                "input": {"numberOfChildren": children},
                "output": {"isEligible": children > 0, "baseAmount": base_amount},
            },
            "ex1": {
                "id": "ex1",
                "name": "Amount",
                "input": {"baseAmount": base_amount},
                "output": {"supplementAmount": base_amount},
            },
            "out1": {"id": "out1", "name": "Response", "input": result, "output": result},
        }
        if context.get("familyComposition") == "odd":
            trace["dt1"]["performance"] = 0.25
        if context.get("familyComposition") == "garbled":
            return {"result": result, "trace": "unavailable"}

        return {
            "result": result,
            "trace": trace if options.get("trace") else None,
            "performance": "0.1ms",
        }


class FakeDecisionEngine:
    """Records every graph it is asked to load."""

    def __init__(self, rules_directory: Path | None = None):
        self.rules_directory = rules_directory
        self.created: list[dict[str, Any]] = []

    def create_decision(self, content: dict[str, Any]) -> FakeDecision:
        self.created.append(content)
        return FakeDecision(content)


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to a rules repository laid out as rules/ and tests/."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def rules_dir(fixtures_dir: Path) -> Path:
    return fixtures_dir / "rules"


@pytest.fixture
def winter_rule(rules_dir: Path) -> dict[str, Any]:
    """The winter supplement rule graph as raw JSON."""
    return json.loads((rules_dir / "supplements" / "winter.json").read_text(encoding="utf-8"))


@pytest.fixture
def winter_schema(winter_rule: dict[str, Any]) -> RuleSchema:
    return rule_schema(winter_rule["nodes"], winter_rule["edges"])


@pytest.fixture
def age_schema() -> RuleSchema:
    """One number input ``age >= 18`` and one boolean output ``eligible``."""
    return RuleSchema(
        inputs=[
            SchemaField(
                id="age",
                name="Age",
                field="age",
                property="age",
                type="number-input",
                validationType=">=",
                validationCriteria="18",
            )
        ],
        final_outputs=[
            SchemaField(id="eligible", name="Eligible", field="eligible", property="eligible", type="true-false")
        ],
    )


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def fake_engine() -> FakeDecisionEngine:
    return FakeDecisionEngine()


@pytest.fixture
def engine_factory() -> Callable[[Path], FakeDecisionEngine]:
    """Builds a fake engine per rules directory, as the CLI and runner expect."""
    return FakeDecisionEngine


@pytest.fixture
def documents(rules_dir: Path) -> DocumentsService:
    return DocumentsService(rules_dir)


@pytest.fixture
def decision_service(fake_engine: FakeDecisionEngine, documents: DocumentsService) -> DecisionService:
    return DecisionService(fake_engine, documents)


@pytest.fixture
def scenario_service(decision_service: DecisionService) -> ScenarioService:
    """Scenario service with a seeded generator."""
    return ScenarioService(decision_service, generator=CombinationGenerator(seed=42))
