"""Parsing of field validation rules.

A field declares a ``validationType`` operator (``>=``, ``[num]``,
``[=texts]``, ...) and a comma separated ``validationCriteria`` string. Both
are parsed once into a ``ValidationRule`` so generators never re-read the
raw strings.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum

from pydantic import BaseModel, Field


class CriteriaOperator(str, Enum):
    """Validation operators understood by the value generators."""

    GE = ">="
    LE = "<="
    GT = ">"
    LT = "<"
    NUMBER_RANGE = "[num]"
    NUMBER_OPEN_RANGE = "(num)"
    NUMBER_VALUES = "[=num]"
    NUMBER_LIST = "[=nums]"
    DATE_RANGE = "[date]"
    DATE_OPEN_RANGE = "(date)"
    DATE_VALUES = "[=date]"
    DATE_LIST = "[=dates]"
    TEXT_VALUES = "[=text]"
    TEXT_LIST = "[=texts]"


EXCLUDES_LOWER = {CriteriaOperator.GT, CriteriaOperator.NUMBER_OPEN_RANGE, CriteriaOperator.DATE_OPEN_RANGE}
EXCLUDES_UPPER = {CriteriaOperator.LT, CriteriaOperator.NUMBER_OPEN_RANGE, CriteriaOperator.DATE_OPEN_RANGE}
UPPER_BOUND_ONLY = {CriteriaOperator.LE, CriteriaOperator.LT}
LITERAL_VALUES = {CriteriaOperator.NUMBER_VALUES, CriteriaOperator.DATE_VALUES, CriteriaOperator.TEXT_VALUES}
LITERAL_LISTS = {CriteriaOperator.NUMBER_LIST, CriteriaOperator.DATE_LIST, CriteriaOperator.TEXT_LIST}


def _parse_number(token: str) -> float | None:
    try:
        return float(token)
    except ValueError:
        return None


def parse_date(token: str, today: date | None = None) -> date | None:
    """ISO date or the keyword ``today``."""
    token = token.strip()
    if token.lower() == "today":
        return today or date.today()
    try:
        return date.fromisoformat(token[:10])
    except ValueError:
        return None


class ValidationRule(BaseModel):
    """Parsed validation operator plus the literal criteria tokens."""

    operator: CriteriaOperator | None = None
    literals: list[str] = Field(default_factory=list)

    @property
    def excludes_lower(self) -> bool:
        return self.operator in EXCLUDES_LOWER

    @property
    def excludes_upper(self) -> bool:
        return self.operator in EXCLUDES_UPPER

    @property
    def is_literal(self) -> bool:
        return self.operator in LITERAL_VALUES

    @property
    def is_literal_list(self) -> bool:
        return self.operator in LITERAL_LISTS

    def _bounds(self, parsed: list) -> tuple:
        if not parsed:
            return None, None
        if len(parsed) == 1:
            if self.operator in UPPER_BOUND_ONLY:
                return None, parsed[0]
            return parsed[0], None
        return parsed[0], parsed[-1]

    def numeric_bounds(self) -> tuple[float | None, float | None]:
        """First and last numeric tokens; a lone token is min, or max for <=/<."""
        parsed = [n for n in (_parse_number(t) for t in self.literals) if n is not None]
        return self._bounds(parsed)

    def date_bounds(self, today: date | None = None) -> tuple[date | None, date | None]:
        """Same as numeric_bounds over ISO dates."""
        parsed = [d for d in (parse_date(t, today) for t in self.literals) if d is not None]
        return self._bounds(parsed)


def parse_validation_rule(validation_type: str | None, validation_criteria: str | None) -> ValidationRule:
    """Parse a field's raw validation strings.

    Unknown operators parse to ``None`` and behave as an inclusive range.
    """
    operator = None
    if validation_type:
        try:
            operator = CriteriaOperator(validation_type.strip())
        except ValueError:
            operator = None

    literals = []
    if validation_criteria:
        literals = [t.strip() for t in str(validation_criteria).split(",") if t.strip()]

    return ValidationRule(operator=operator, literals=literals)


def resolve_date_range(
    lower: date | None,
    upper: date | None,
    span_days: int,
    today: date | None = None,
) -> tuple[date, date]:
    """Fill in missing date bounds; an inverted range collapses to the earlier date."""
    if lower is None and upper is None:
        lower = today or date.today()
    if lower is None:
        lower = upper - timedelta(days=span_days)
    if upper is None:
        upper = lower + timedelta(days=span_days)
    if lower > upper:
        lower = upper = min(lower, upper)
    return lower, upper


def resolve_number_range(
    lower: float | None,
    upper: float | None,
    span: float,
) -> tuple[float, float]:
    """Fill in missing numeric bounds; an inverted range collapses to the lower value."""
    if lower is None and upper is None:
        lower = 0
    if lower is None:
        lower = 0 if upper >= 0 else upper - span
    if upper is None:
        upper = lower + span
    if lower > upper:
        lower = upper = min(lower, upper)
    return lower, upper
