"""Value-space generation for rule input fields.

Given one field's declared type and validation rule, produce a small,
representative set of candidate values. Results are memoized in a
``ValueCache`` owned by a single generation run.

Usage:
    from decision_testbench.synthetic_data import ValueGenerator

    values = ValueGenerator(seed=42).generate(field)
"""

from __future__ import annotations

import logging
import math
import random
import string
from datetime import date, timedelta
from itertools import combinations
from typing import Any, Callable, Mapping

from decision_testbench.core.errors import GenerationError
from decision_testbench.core.ontology.graph import FieldKind, RuleField
from decision_testbench.shared.helpers import structural_key
from .base import BaseGenerator
from .config import (
    SAMPLE_SIZE,
    EXHAUSTIVE_RANGE_LIMIT,
    MIN_ARRAY_ITEMS,
    MAX_ARRAY_ITEMS,
    DEFAULT_NUMBER_SPAN,
    DEFAULT_DATE_SPAN_DAYS,
    TEXT_LENGTH,
)
from .criteria import (
    CriteriaOperator,
    ValidationRule,
    parse_date,
    parse_validation_rule,
    resolve_date_range,
    resolve_number_range,
)

logger = logging.getLogger(__name__)

_ALPHANUMERIC = string.ascii_letters + string.digits


def is_range_default(value: Any) -> bool:
    """A context default of the form ``{"minValue": ..., "maxValue": ...}``."""
    return isinstance(value, Mapping) and ("minValue" in value or "maxValue" in value)


def combinations_with_limit(items: list[Any], limit: int) -> list[list[Any]]:
    """Non-empty sub-combinations of items, smallest first, at most ``limit``."""
    unique = list(dict.fromkeys(items))
    result: list[list[Any]] = []
    for size in range(1, len(unique) + 1):
        for combo in combinations(unique, size):
            if len(result) >= limit:
                return result
            result.append(list(combo))
    return result


class ValueCache:
    """Memo of generated value sets for one generation run.

    Not shared between runs: call ``clear()`` before a run starts.
    """

    def __init__(self):
        self._values: dict[str, list[Any]] = {}

    @staticmethod
    def key_for(field: RuleField, context_default: Any = None) -> str:
        return structural_key({
            "field": field.model_dump(mode="json", by_alias=True),
            "validationType": field.validation_type,
            "validationCriteria": field.validation_criteria,
            "contextDefault": context_default,
        })

    def get(self, key: str) -> list[Any] | None:
        return self._values.get(key)

    def put(self, key: str, values: list[Any]) -> None:
        self._values[key] = values

    def clear(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)


class ValueGenerator(BaseGenerator):
    """Produces candidate values for one field at a time."""

    def __init__(
        self,
        seed: int | None = None,
        rng: random.Random | None = None,
        cache: ValueCache | None = None,
        today: date | None = None,
    ):
        super().__init__(seed, rng)
        self.cache = cache if cache is not None else ValueCache()
        self.today = today
        self._handlers: dict[FieldKind, Callable[[RuleField, ValidationRule, Mapping | None], list[Any]]] = {
            FieldKind.NUMBER: self._numbers,
            FieldKind.DATE: self._dates,
            FieldKind.TEXT: self._texts,
            FieldKind.BOOLEAN: self._booleans,
            FieldKind.OBJECT_ARRAY: self._object_arrays,
        }

    def generate(self, field: RuleField, context_default: Any = None) -> list[Any]:
        """Candidate values for a field.

        Args:
            field: The field to generate values for.
            context_default: Optional example value. A plain value is returned
                as-is; ``{minValue, maxValue}`` overrides declared bounds; a
                non-empty list is an object-array template to fill.

        Returns:
            List of candidate values, empty for unsupported field types.
        """
        key = ValueCache.key_for(field, context_default)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        try:
            values = self._generate(field, context_default)
        except GenerationError as exc:
            logger.warning("No values generated for %s: %s", field.path_name(), exc)
            values = []

        self.cache.put(key, values)
        return list(values)

    def pick(self, field: RuleField, context_default: Any = None) -> Any:
        """One random candidate value, or None when the field yields none."""
        values = self.generate(field, context_default)
        return self.rng.choice(values) if values else None

    def fill_template(self, field: RuleField, template: list[Any]) -> list[Any]:
        """Fill null entries of an object-array template from the field's children."""
        children = {child.path_name(): child for child in field.child_fields}
        filled = []
        for item in template:
            if not isinstance(item, Mapping):
                filled.append(item)
                continue
            entry = {}
            for name, value in item.items():
                child = children.get(name)
                if value is None and child is not None:
                    entry[name] = self.pick(child)
                else:
                    entry[name] = value
            filled.append(entry)
        return filled

    def _generate(self, field: RuleField, context_default: Any) -> list[Any]:
        override = None
        if is_range_default(context_default):
            override = context_default
        elif isinstance(context_default, list):
            if context_default:
                return [self.fill_template(field, context_default)]
        elif context_default is not None:
            return [context_default]

        handler = self._handlers.get(field.kind)
        if handler is None:
            raise GenerationError(f"unsupported field type {field.declared_type!r}")

        rule = parse_validation_rule(field.validation_type, field.validation_criteria)
        return handler(field, rule, override)

    # -------------------------------------------------------------------------
    # Per-type generators
    # -------------------------------------------------------------------------

    def _sample_range(self, size: int) -> list[int]:
        """Offsets into a range of the given size: all of them, or a sample."""
        if size <= 0:
            return []
        if size <= EXHAUSTIVE_RANGE_LIMIT:
            return list(range(size))
        return sorted(self.rng.sample(range(size), min(SAMPLE_SIZE, size)))

    def _literals(self, rule: ValidationRule) -> list[Any] | None:
        if rule.is_literal:
            return list(rule.literals)
        if rule.is_literal_list:
            return [list(rule.literals)]
        return None

    def _numbers(self, field: RuleField, rule: ValidationRule, override: Mapping | None) -> list[Any]:
        literals = self._literals(rule)
        if literals is not None:
            return literals

        lower, upper = rule.numeric_bounds()
        if override:
            if override.get("minValue") is not None:
                lower = float(override["minValue"])
            if override.get("maxValue") is not None:
                upper = float(override["maxValue"])
        lower, upper = resolve_number_range(lower, upper, DEFAULT_NUMBER_SPAN)

        low = math.floor(lower) + 1 if rule.excludes_lower else math.ceil(lower)
        high = math.ceil(upper) - 1 if rule.excludes_upper else math.floor(upper)
        if high < low:
            raise GenerationError(f"no whole numbers between {lower:g} and {upper:g}")
        return [low + offset for offset in self._sample_range(high - low + 1)]

    def _dates(self, field: RuleField, rule: ValidationRule, override: Mapping | None) -> list[Any]:
        literals = self._literals(rule)
        if literals is not None:
            return literals

        today = self.today or date.today()
        lower, upper = rule.date_bounds(today)
        if override:
            if override.get("minValue") is not None:
                lower = parse_date(str(override["minValue"]), today) or lower
            if override.get("maxValue") is not None:
                upper = parse_date(str(override["maxValue"]), today) or upper
        lower, upper = resolve_date_range(lower, upper, DEFAULT_DATE_SPAN_DAYS, today)

        if rule.excludes_lower:
            lower += timedelta(days=1)
        if rule.excludes_upper:
            upper -= timedelta(days=1)
        days = (upper - lower).days + 1
        return [(lower + timedelta(days=offset)).isoformat() for offset in self._sample_range(days)]

    def _texts(self, field: RuleField, rule: ValidationRule, override: Mapping | None) -> list[Any]:
        if rule.operator == CriteriaOperator.TEXT_LIST:
            return combinations_with_limit(rule.literals, SAMPLE_SIZE)
        if rule.operator == CriteriaOperator.TEXT_VALUES:
            return list(rule.literals)
        return [
            "".join(self.rng.choices(_ALPHANUMERIC, k=TEXT_LENGTH))
            for _ in range(SAMPLE_SIZE)
        ]

    def _booleans(self, field: RuleField, rule: ValidationRule, override: Mapping | None) -> list[Any]:
        first = self.rng.random() < 0.5
        return [first, not first]

    def _object_arrays(self, field: RuleField, rule: ValidationRule, override: Mapping | None) -> list[Any]:
        instances = []
        for _ in range(SAMPLE_SIZE):
            size = self.rng.randint(MIN_ARRAY_ITEMS, MAX_ARRAY_ITEMS)
            instances.append([self._object_item(field) for _ in range(size)])
        return instances

    def _object_item(self, field: RuleField) -> dict[str, Any]:
        item = {}
        for child in field.child_fields:
            values = self.generate(child)
            if values:
                item[child.path_name()] = self.rng.choice(values)
        return item


def generate_values(
    field: RuleField,
    context_default: Any = None,
    *,
    cache: ValueCache | None = None,
    rng: random.Random | None = None,
) -> list[Any]:
    """Candidate values for one field using a caller-owned cache and random source."""
    return ValueGenerator(rng=rng, cache=cache).generate(field, context_default)
