"""Synthetic scenario generation for rule testing.

This package provides generators for:
- Values: representative candidate values per schema field
- Combinations: complete input objects built from those values

Usage:
    from decision_testbench.synthetic_data import CombinationGenerator

    inputs = CombinationGenerator(seed=42).generate(schema, count=10)
"""

from .base import BaseGenerator
from .config import (
    SAMPLE_SIZE,
    DEFAULT_SCENARIO_COUNT,
    MAX_COMBINATIONS,
    EXHAUSTIVE_RANGE_LIMIT,
)
from .criteria import CriteriaOperator, ValidationRule, parse_validation_rule
from .values import ValueCache, ValueGenerator, combinations_with_limit, generate_values
from .combinations import (
    CombinationGenerator,
    cartesian_product,
    expand_dotted_keys,
    unique_objects,
    generate_combinations,
)

__all__ = [
    # Base
    "BaseGenerator",
    # Config
    "SAMPLE_SIZE",
    "DEFAULT_SCENARIO_COUNT",
    "MAX_COMBINATIONS",
    "EXHAUSTIVE_RANGE_LIMIT",
    # Criteria
    "CriteriaOperator",
    "ValidationRule",
    "parse_validation_rule",
    # Values
    "ValueCache",
    "ValueGenerator",
    "combinations_with_limit",
    "generate_values",
    # Combinations
    "CombinationGenerator",
    "cartesian_product",
    "expand_dotted_keys",
    "unique_objects",
    "generate_combinations",
]
