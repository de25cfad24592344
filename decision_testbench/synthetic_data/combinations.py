"""Combination of per-field value sets into complete rule inputs.

Small value spaces are enumerated as an exact, bounded cartesian product.
Value spaces larger than ``MAX_COMBINATIONS`` are randomly sampled instead,
so the work done is proportional to the requested count.
"""

from __future__ import annotations

import logging
import math
import random
from itertools import islice, product
from typing import Any, Iterable, Mapping, Sequence

from decision_testbench.core.ontology.graph import FieldKind, RuleField
from decision_testbench.rule_mapping.schemas import RuleSchema
from decision_testbench.shared.helpers import structural_key
from .base import BaseGenerator
from .config import DEFAULT_SCENARIO_COUNT, MAX_COMBINATIONS
from .values import ValueGenerator

logger = logging.getLogger(__name__)


def cartesian_product(value_sets: Sequence[Sequence[Any]], limit: int | None = None) -> list[list[Any]]:
    """Cartesian product of value sets in lexicographic order.

    Empty value sets are ignored. Stops after ``limit`` results without
    building the rest of the product.
    """
    sets = [list(values) for values in value_sets if len(values) > 0]
    if not sets:
        return []
    return [list(combo) for combo in islice(product(*sets), limit)]


def expand_dotted_keys(flat: Mapping[str, Any]) -> dict[str, Any]:
    """Turn ``{"a.b": 1, "c": 2}`` into ``{"a": {"b": 1}, "c": 2}``."""
    nested: dict[str, Any] = {}
    for path, value in flat.items():
        parts = path.split(".")
        target = nested
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = target[part] = {}
            target = child
        target[parts[-1]] = value
    return nested


def unique_objects(objects: Iterable[Any]) -> list[Any]:
    """Drop structural duplicates, keeping first occurrences in order."""
    seen: set[str] = set()
    unique = []
    for obj in objects:
        key = structural_key(obj)
        if key not in seen:
            seen.add(key)
            unique.append(obj)
    return unique


class CombinationGenerator(BaseGenerator):
    """Generates complete input objects for a rule schema.

    Each call to ``generate`` is one generation run and starts by clearing
    the value cache, so one instance must not serve overlapping runs.
    """

    def __init__(
        self,
        seed: int | None = None,
        rng: random.Random | None = None,
        values: ValueGenerator | None = None,
    ):
        super().__init__(seed, rng)
        self.values = values if values is not None else ValueGenerator(rng=self.rng)

    def generate(
        self,
        schema: RuleSchema,
        context: Mapping[str, Any] | None = None,
        count: int = DEFAULT_SCENARIO_COUNT,
        template: list[Mapping[str, Any]] | None = None,
    ) -> list[dict[str, Any]]:
        """Generate up to ``count`` distinct input objects.

        Args:
            schema: Rule schema whose inputs are combined.
            context: Optional per-field defaults keyed by property (nested
                mappings for fields with children).
            count: Maximum number of objects returned.
            template: Explicit input objects; null fields are filled and no
                combinatorics are performed.

        Returns:
            List of input objects with nested paths expanded.
        """
        self.values.cache.clear()

        if template:
            return [self.fill_template(schema.inputs, entry) for entry in template]

        paths, value_sets = self.flatten_fields(schema.inputs, context or {})
        if not value_sets:
            return []

        total = math.prod(len(values) for values in value_sets)
        if total > MAX_COMBINATIONS:
            logger.info(
                "%d possible combinations exceeds %d, sampling %d at random",
                total, MAX_COMBINATIONS, count,
            )
            return self._sample(paths, value_sets, count)

        flat = unique_objects(
            dict(zip(paths, combo))
            for combo in cartesian_product(value_sets, limit=MAX_COMBINATIONS)
        )
        expanded = unique_objects(expand_dotted_keys(obj) for obj in flat)
        return expanded[:count]

    def flatten_fields(
        self,
        fields: Sequence[RuleField],
        context: Mapping[str, Any],
        prefix: str = "",
    ) -> tuple[list[str], list[list[Any]]]:
        """Leaf field paths and their value sets.

        Fields with children recurse with dotted paths; object-arrays are
        generated whole. Fields that yield no values are skipped.
        """
        paths: list[str] = []
        value_sets: list[list[Any]] = []

        for field in fields:
            name = field.path_name()
            path = f"{prefix}.{name}" if prefix else name
            default = context.get(name) if isinstance(context, Mapping) else None

            if field.child_fields and field.kind != FieldKind.OBJECT_ARRAY:
                sub_context = default if isinstance(default, Mapping) else {}
                sub_paths, sub_sets = self.flatten_fields(field.child_fields, sub_context, path)
                paths.extend(sub_paths)
                value_sets.extend(sub_sets)
                continue

            values = self.values.generate(field, default)
            if not values:
                continue
            paths.append(path)
            value_sets.append(values)

        return paths, value_sets

    def fill_template(self, fields: Sequence[RuleField], entry: Mapping[str, Any]) -> dict[str, Any]:
        """Copy of a template entry with its null fields generated."""
        by_name = {field.path_name(): field for field in fields}
        filled = {}
        for name, value in entry.items():
            field = by_name.get(name)
            if field is None:
                filled[name] = value
            elif value is None:
                filled[name] = self.values.pick(field)
            elif isinstance(value, list) and field.kind == FieldKind.OBJECT_ARRAY:
                filled[name] = self.values.generate(field, value)[0]
            else:
                filled[name] = value
        return filled

    def _sample(self, paths: list[str], value_sets: list[list[Any]], count: int) -> list[dict[str, Any]]:
        seen: set[str] = set()
        results = []
        for _ in range(2 * count):
            if len(results) >= count:
                break
            combo = expand_dotted_keys({
                path: self.rng.choice(values) for path, values in zip(paths, value_sets)
            })
            key = structural_key(combo)
            if key not in seen:
                seen.add(key)
                results.append(combo)
        return results


def generate_combinations(
    schema: RuleSchema,
    context: Mapping[str, Any] | None = None,
    count: int = DEFAULT_SCENARIO_COUNT,
    template: list[Mapping[str, Any]] | None = None,
    *,
    rng: random.Random | None = None,
) -> list[dict[str, Any]]:
    """One generation run with a fresh cache."""
    return CombinationGenerator(rng=rng).generate(schema, context, count, template)
