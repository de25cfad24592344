"""Tests for scenario evaluation, reports and generation."""

from __future__ import annotations

import asyncio

import pytest

from decision_testbench.core.errors import DocumentNotFoundError
from decision_testbench.core.ontology import Scenario
from decision_testbench.scenarios import from_csv, parse_csv

RULE_PATH = "supplements/winter.json"


def _scenario(title: str, family: str, children: int, expected: dict | None = None) -> Scenario:
    return Scenario.from_values(
        title,
        {"familyComposition": family, "numberOfChildren": children},
        filepath=RULE_PATH,
        expected=expected,
    )


class TestRunScenarios:
    def test_matching_expected_results(self, scenario_service):
        scenario = _scenario("Single two", "single", 2, {"isEligible": True, "supplementAmount": 120})
        report = scenario_service.run_scenarios_sync(RULE_PATH, None, [scenario])

        result = report.results["Single two"]
        assert result.result_match is True
        assert result.result == {"isEligible": True, "supplementAmount": 120}
        assert result.inputs == {"familyComposition": "single", "numberOfChildren": 2}
        assert result.outputs == {"supplementAmount": 120}
        assert result.error is None
        assert report.all_tests_passed

    def test_mismatch(self, scenario_service):
        scenario = _scenario("Wrong", "single", 2, {"isEligible": True, "supplementAmount": 100})
        report = scenario_service.run_scenarios_sync(RULE_PATH, None, [scenario])

        assert report.results["Wrong"].result_match is False
        assert not report.all_tests_passed

    def test_without_expected_results_passes(self, scenario_service):
        report = scenario_service.run_scenarios_sync(RULE_PATH, None, [_scenario("Any", "couple", 0)])
        assert report.results["Any"].result_match is True

    def test_by_content(self, scenario_service, winter_rule, fake_engine):
        scenario = _scenario("Inline", "couple", 1, {"isEligible": True, "supplementAmount": 60})
        report = scenario_service.run_scenarios_sync("unsaved.json", winter_rule, [scenario])

        assert report.results["Inline"].result_match is True
        assert fake_engine.created == [winter_rule]

    def test_one_failure_does_not_block_the_batch(self, scenario_service):
        scenarios = [
            _scenario("Broken", "explode", 1),
            _scenario("Fine", "single", 1, {"isEligible": True, "supplementAmount": 60}),
        ]
        report = scenario_service.run_scenarios_sync(RULE_PATH, None, scenarios)

        broken = report.results["Broken"]
        assert broken.result == {}
        assert broken.result_match is False
        assert "engine exploded" in broken.error
        assert broken.inputs == {"familyComposition": "explode", "numberOfChildren": 1}

        assert report.results["Fine"].result_match is True

    def test_malformed_trace_does_not_block_the_batch(self, scenario_service):
        scenarios = [
            _scenario("Good", "single", 2, {"isEligible": True, "supplementAmount": 120}),
            _scenario("Odd", "odd", 1, {"isEligible": True, "supplementAmount": 60}),
        ]
        report = scenario_service.run_scenarios_sync(RULE_PATH, None, scenarios)

        assert report.results["Good"].result_match is True
        odd = report.results["Odd"]
        assert odd.result_match is True
        assert odd.inputs == {"familyComposition": "odd", "numberOfChildren": 1}
        assert odd.outputs == {"supplementAmount": 60}

    def test_malformed_response_is_reported_as_error(self, scenario_service):
        scenarios = [_scenario("Garbled", "garbled", 1), _scenario("Fine", "couple", 0)]
        report = scenario_service.run_scenarios_sync(RULE_PATH, None, scenarios)

        assert "Malformed decision response" in report.results["Garbled"].error
        assert report.results["Fine"].result_match is True

    def test_results_keyed_by_title_in_submission_order(self, scenario_service):
        scenarios = [_scenario(f"S{i}", "single", i) for i in range(3)]
        report = scenario_service.run_scenarios_sync(RULE_PATH, None, scenarios)
        assert list(report.results) == ["S0", "S1", "S2"]

    def test_missing_rule_file(self, scenario_service):
        with pytest.raises(DocumentNotFoundError):
            scenario_service.run_scenarios_sync("missing.json", None, [_scenario("S", "single", 1)])


class TestCsvReports:
    def test_report_flags_failures(self, scenario_service):
        scenarios = [
            _scenario("Pass", "single", 2, {"isEligible": True, "supplementAmount": 120}),
            _scenario("Fail", "single", 2, {"isEligible": False}),
        ]
        report = asyncio.run(scenario_service.get_csv_for_rule_run(RULE_PATH, None, scenarios))

        assert report.all_tests_passed is False
        lines = report.csv_content.split("\n")
        assert lines[1].startswith("Pass,Pass,")
        assert lines[2].startswith("Fail,Fail,")

    def test_provided_csv(self, scenario_service, fixtures_dir):
        csv_bytes = (fixtures_dir / "tests" / "supplements" / "winter" / "basic.csv").read_bytes()
        scenarios = scenario_service.process_provided_scenarios(RULE_PATH, csv_bytes)

        assert [s.title for s in scenarios] == ["Single with two children", "Couple with no children"]

        report = asyncio.run(scenario_service.get_csv_for_rule_run(RULE_PATH, None, scenarios))
        assert report.all_tests_passed is True

    def test_report_round_trips(self, scenario_service):
        scenario = _scenario("Round", "couple", 3, {"isEligible": True, "supplementAmount": 180})
        report = asyncio.run(scenario_service.get_csv_for_rule_run(RULE_PATH, None, [scenario]))

        [decoded] = from_csv(parse_csv(report.csv_content), RULE_PATH)
        assert {v.name: v.value for v in decoded.variables} == {"familyComposition": "couple", "numberOfChildren": 3}
        assert {v.name: v.value for v in decoded.expected_results} == {"isEligible": True, "supplementAmount": 180}


class TestGenerateScenarios:
    def test_titles_and_variables(self, scenario_service):
        scenarios = scenario_service.generate_test_scenarios(RULE_PATH, None)

        assert len(scenarios) == 8
        assert scenarios[0].title == "Testing winter Scenario 1"
        assert scenarios[-1].title == "Testing winter Scenario 8"
        for scenario in scenarios:
            assert {v.name for v in scenario.variables} == {"familyComposition", "numberOfChildren"}
            assert scenario.filepath == RULE_PATH

    def test_count_and_context(self, scenario_service):
        scenarios = scenario_service.generate_test_scenarios(RULE_PATH, None, {"familyComposition": "single"}, 2)

        assert len(scenarios) == 2
        assert all(
            {v.name: v.value for v in s.variables}["familyComposition"] == "single" for s in scenarios
        )

    def test_generated_csv(self, scenario_service):
        content = asyncio.run(scenario_service.generate_test_csv_scenarios(RULE_PATH, None))
        lines = content.split("\n")

        assert len(lines) == 9
        assert "Result: supplementAmount" in lines[0]
        # scenarios without expected results always pass
        assert all(",Pass," in line for line in lines[1:])
