"""Scenario evaluation: run scenarios through a rule and verify the results."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from decision_testbench.core.config import get_settings
from decision_testbench.core.errors import DocumentError, EvaluationError
from decision_testbench.core.ontology.graph import RuleContent
from decision_testbench.core.ontology.scenario import (
    CsvReport,
    RunReport,
    Scenario,
    ScenarioResult,
)
from decision_testbench.decisions import DecisionService
from decision_testbench.rule_mapping import RuleMappingService, RuleSchema
from decision_testbench.runtime.trace import map_traces
from decision_testbench.shared.helpers import (
    derive_name_from_filepath,
    is_equal,
    reduce_to_clean_obj,
)
from decision_testbench.synthetic_data import CombinationGenerator
from .csv_codec import from_csv, parse_csv, to_csv

logger = logging.getLogger(__name__)

TRACE_OPTIONS = {"trace": True}


class ScenarioService:
    """Runs scenarios against a rule and renders verification reports."""

    def __init__(
        self,
        decisions: DecisionService,
        rule_mapping: RuleMappingService | None = None,
        generator: CombinationGenerator | None = None,
    ):
        self.decisions = decisions
        self.rule_mapping = rule_mapping or RuleMappingService(decisions.documents)
        self.generator = generator or CombinationGenerator()

    def _schema_for(self, filepath: str, rule_content: RuleContent | dict[str, Any] | None) -> RuleSchema:
        if rule_content:
            return self.rule_mapping.rule_schema(rule_content)
        return self.rule_mapping.rule_schema_file(filepath)

    async def _evaluate_scenario(
        self,
        filepath: str,
        rule_content: RuleContent | dict[str, Any] | None,
        schema: RuleSchema,
        scenario: Scenario,
    ) -> ScenarioResult:
        variables = reduce_to_clean_obj(scenario.variables, "name", "value")
        expected = reduce_to_clean_obj(scenario.expected_results, "name", "value")

        try:
            evaluation = await self.decisions.run_decision(
                rule_content, filepath, variables, TRACE_OPTIONS
            )
        except (EvaluationError, DocumentError) as exc:
            logger.warning("Error running decision for scenario %s: %s", scenario.title, exc)
            return ScenarioResult(
                inputs=variables,
                expected_results=expected,
                result={},
                result_match=False,
                error=str(exc),
            )

        result = evaluation.result if isinstance(evaluation.result, Mapping) else {}
        result_match = is_equal(dict(result), expected) if expected else True

        return ScenarioResult(
            inputs=map_traces(evaluation.trace, schema, "input"),
            outputs=map_traces(evaluation.trace, schema, "output"),
            expected_results=expected,
            result=dict(result),
            result_match=result_match,
        )

    async def run_decisions_for_scenarios(
        self,
        filepath: str,
        rule_content: RuleContent | dict[str, Any] | None,
        scenarios: list[Scenario],
    ) -> dict[str, ScenarioResult]:
        """Evaluate every scenario concurrently.

        A failing scenario is recorded with its error instead of aborting the
        batch. Results are keyed by scenario title.
        """
        schema = self._schema_for(filepath, rule_content)
        outcomes = await asyncio.gather(*(
            self._evaluate_scenario(filepath, rule_content, schema, scenario)
            for scenario in scenarios
        ))
        return {scenario.title: outcome for scenario, outcome in zip(scenarios, outcomes)}

    async def run_scenarios(
        self,
        filepath: str,
        rule_content: RuleContent | dict[str, Any] | None,
        scenarios: list[Scenario],
    ) -> RunReport:
        results = await self.run_decisions_for_scenarios(filepath, rule_content, scenarios)
        return RunReport(results=results)

    def run_scenarios_sync(
        self,
        filepath: str,
        rule_content: RuleContent | dict[str, Any] | None,
        scenarios: list[Scenario],
    ) -> RunReport:
        """Synchronous wrapper for run_scenarios."""
        return asyncio.run(self.run_scenarios(filepath, rule_content, scenarios))

    async def get_csv_for_rule_run(
        self,
        filepath: str,
        rule_content: RuleContent | dict[str, Any] | None,
        scenarios: list[Scenario],
    ) -> CsvReport:
        """CSV report of a scenario run plus whether every scenario passed."""
        report = await self.run_scenarios(filepath, rule_content, scenarios)
        return CsvReport(
            all_tests_passed=report.all_tests_passed,
            csv_content=to_csv(report),
        )

    def process_provided_scenarios(self, filepath: str, csv_content: bytes | str) -> list[Scenario]:
        """Scenarios decoded from an uploaded CSV file.

        Raises:
            EmptyCsvError: If the upload has no data rows.
        """
        return from_csv(parse_csv(csv_content), filepath)

    def generate_test_scenarios(
        self,
        filepath: str,
        rule_content: RuleContent | dict[str, Any] | None,
        simulation_context: Mapping[str, Any] | None = None,
        count: int | None = None,
    ) -> list[Scenario]:
        """Synthesize scenarios from the rule's input schema."""
        if count is None or count <= 0:
            count = get_settings().default_scenario_count

        schema = self._schema_for(filepath, rule_content)
        combinations = self.generator.generate(schema, simulation_context, count)
        name = derive_name_from_filepath(filepath)

        return [
            Scenario.from_values(f"Testing {name} Scenario {index}", values, filepath=filepath)
            for index, values in enumerate(combinations, start=1)
        ]

    async def generate_test_csv_scenarios(
        self,
        filepath: str,
        rule_content: RuleContent | dict[str, Any] | None,
        simulation_context: Mapping[str, Any] | None = None,
        count: int | None = None,
    ) -> str:
        """Generate scenarios, run them, and render the CSV report."""
        scenarios = self.generate_test_scenarios(filepath, rule_content, simulation_context, count)
        report = await self.get_csv_for_rule_run(filepath, rule_content, scenarios)
        return report.csv_content
