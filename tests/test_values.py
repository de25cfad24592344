"""Tests for value-space generation and validation criteria parsing."""

from __future__ import annotations

from datetime import date

import pytest

from decision_testbench.core.ontology import RuleField
from decision_testbench.synthetic_data import (
    CriteriaOperator,
    ValueCache,
    ValueGenerator,
    combinations_with_limit,
    generate_values,
    parse_validation_rule,
)
from decision_testbench.synthetic_data.criteria import resolve_number_range


def _field(type_: str, validation_type: str | None = None, criteria: str | None = None, **extra) -> RuleField:
    return RuleField(
        field=extra.pop("field", "value"),
        type=type_,
        validationType=validation_type,
        validationCriteria=criteria,
        **extra,
    )


@pytest.fixture
def generator() -> ValueGenerator:
    return ValueGenerator(seed=7, today=date(2024, 1, 1))


class TestParseValidationRule:
    def test_operator_and_literals(self):
        rule = parse_validation_rule("[num]", " 0, 3 ,")
        assert rule.operator == CriteriaOperator.NUMBER_RANGE
        assert rule.literals == ["0", "3"]

    def test_unknown_operator(self):
        rule = parse_validation_rule("between", "1,2")
        assert rule.operator is None
        assert rule.numeric_bounds() == (1.0, 2.0)

    def test_lone_bound_for_upper_operators(self):
        assert parse_validation_rule("<=", "10").numeric_bounds() == (None, 10.0)
        assert parse_validation_rule(">=", "18").numeric_bounds() == (18.0, None)

    def test_today_keyword(self):
        today = date(2024, 6, 1)
        rule = parse_validation_rule("[date]", "today,2024-12-31")
        assert rule.date_bounds(today) == (today, date(2024, 12, 31))

    def test_resolve_number_range(self):
        assert resolve_number_range(None, None, 20) == (0, 20)
        assert resolve_number_range(None, -5, 20) == (-25, -5)
        assert resolve_number_range(10, 5, 20) == (5, 5)


class TestNumbers:
    def test_greater_or_equal(self, generator):
        values = generator.generate(_field("number-input", ">=", "18"))

        assert len(values) == 10
        assert len(set(values)) == 10
        assert values == sorted(values)
        assert all(isinstance(v, int) and 18 <= v <= 38 for v in values)

    def test_strictly_greater_excludes_bound(self, generator):
        values = generator.generate(_field("number-input", ">", "18"))
        assert min(values) >= 19

    def test_less_or_equal(self, generator):
        values = generator.generate(_field("number-input", "<=", "10"))
        assert all(0 <= v <= 10 for v in values)

    def test_negative_upper_bound(self, generator):
        values = generator.generate(_field("number-input", "<", "-5"))
        assert all(-25 <= v <= -6 for v in values)

    def test_small_range_is_enumerated(self, generator):
        assert generator.generate(_field("number-input", "[num]", "0,3")) == [0, 1, 2, 3]

    def test_open_range_excludes_both_ends(self, generator):
        assert generator.generate(_field("number-input", "(num)", "0,3")) == [1, 2]

    def test_inverted_range_collapses(self, generator):
        assert generator.generate(_field("number-input", "[num]", "10,5")) == [5]

    def test_no_criteria(self, generator):
        values = generator.generate(_field("number-input"))
        assert all(0 <= v <= 20 for v in values)

    def test_literal_values(self, generator):
        assert generator.generate(_field("number-input", "[=num]", "1,5")) == ["1", "5"]
        assert generator.generate(_field("number-input", "[=nums]", "1,5")) == [["1", "5"]]

    def test_range_override_from_context(self, generator):
        values = generator.generate(_field("number-input", ">=", "18"), {"minValue": 5, "maxValue": 7})
        assert values == [5, 6, 7]


class TestDates:
    def test_closed_range(self, generator):
        values = generator.generate(_field("date", "[date]", "2024-01-01,2024-01-03"))
        assert values == ["2024-01-01", "2024-01-02", "2024-01-03"]

    def test_open_range(self, generator):
        assert generator.generate(_field("date", "(date)", "2024-01-01,2024-01-03")) == ["2024-01-02"]

    def test_default_span_starts_today(self, generator):
        values = generator.generate(_field("date"))
        assert len(values) == 10
        assert all("2024-01-01" <= v <= "2024-12-31" for v in values)

    def test_literal_dates(self, generator):
        assert generator.generate(_field("date", "[=dates]", "2024-01-01,2024-02-01")) == [["2024-01-01", "2024-02-01"]]


class TestTextAndBooleans:
    def test_text_values(self, generator):
        assert generator.generate(_field("text-input", "[=text]", "single,couple")) == ["single", "couple"]

    def test_text_lists(self, generator):
        values = generator.generate(_field("text-input", "[=texts]", "a,b,c"))
        assert values == [["a"], ["b"], ["c"], ["a", "b"], ["a", "c"], ["b", "c"], ["a", "b", "c"]]

    def test_free_text(self, generator):
        values = generator.generate(_field("text-input"))
        assert len(values) == 10
        assert all(len(v) == 8 and v.isalnum() for v in values)

    def test_true_false_yields_both(self, generator):
        values = generator.generate(_field("true-false"))
        assert sorted(values) == [False, True]

    def test_data_type_alias(self, generator):
        field = RuleField(field="flag", dataType="true-false")
        assert sorted(generator.generate(field)) == [False, True]


class TestObjectArrays:
    @pytest.fixture
    def household(self) -> RuleField:
        return RuleField.model_validate({
            "field": "members",
            "type": "object-array",
            "childFields": [
                {"field": "age", "type": "number-input", "validationType": "[num]", "validationCriteria": "0,4"},
                {"field": "student", "type": "true-false"},
            ],
        })

    def test_instances(self, generator, household):
        values = generator.generate(household)

        assert len(values) == 10
        for instance in values:
            assert 1 <= len(instance) <= 4
            for item in instance:
                assert set(item) == {"age", "student"}
                assert 0 <= item["age"] <= 4

    def test_template_fills_nulls(self, generator, household):
        [filled] = generator.generate(household, [{"age": None, "student": True}])

        assert filled[0]["student"] is True
        assert filled[0]["age"] in range(0, 5)


class TestContextDefaults:
    def test_plain_value_short_circuits(self, generator):
        assert generator.generate(_field("number-input", ">=", "18"), 42) == [42]

    def test_unsupported_type_yields_nothing(self, generator, caplog):
        assert generator.generate(_field("color-picker")) == []
        assert "No values generated" in caplog.text

    def test_range_without_whole_numbers_is_logged(self, generator, caplog):
        field = _field("number-input", "[num]", "0.1,0.9")

        assert generator.generate(field) == []
        assert generator.generate(field, {"minValue": 0.5, "maxValue": 0.7}) == []
        assert "no whole numbers between 0.1 and 0.9" in caplog.text
        assert "no whole numbers between 0.5 and 0.7" in caplog.text


class TestCache:
    def test_results_are_memoized(self, generator):
        field = _field("number-input", ">=", "18")
        first = generator.generate(field)
        second = generator.generate(field)

        assert first == second
        assert len(generator.cache) == 1

    def test_clear(self, generator):
        generator.generate(_field("true-false"))
        generator.cache.clear()
        assert len(generator.cache) == 0

    def test_caller_owned_cache(self):
        cache = ValueCache()
        generate_values(_field("text-input", "[=text]", "a,b"), cache=cache)
        assert len(cache) == 1

    def test_key_depends_on_context_default(self):
        field = _field("true-false")
        assert ValueCache.key_for(field, None) != ValueCache.key_for(field, True)


class TestCombinationsWithLimit:
    def test_smallest_first(self):
        assert combinations_with_limit([1, 2, 3], 4) == [[1], [2], [3], [1, 2]]

    def test_duplicates_removed(self):
        assert combinations_with_limit(["a", "a"], 10) == [["a"]]
