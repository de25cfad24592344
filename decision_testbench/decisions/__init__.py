"""Decisions domain - the external engine contract and how it is driven."""

from .engine import (
    EvaluationResult,
    Decision,
    DecisionEngine,
    ZenDecision,
    ZenDecisionEngine,
)
from .service import DecisionService

__all__ = [
    # Engine
    "EvaluationResult",
    "Decision",
    "DecisionEngine",
    "ZenDecision",
    "ZenDecisionEngine",
    # Service
    "DecisionService",
]
