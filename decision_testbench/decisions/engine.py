"""Decision engine contract and adapters.

The engine that executes rule graphs is an external collaborator. This
module only fixes the narrow contract the testbench relies on:

    decision = engine.create_decision(content)
    response = await decision.evaluate(context, {"trace": True})

and adapts the ``zen-engine`` bindings to it when they are installed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Awaitable, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from decision_testbench.core.config import get_settings
from decision_testbench.core.ontology.graph import RuleContent
from decision_testbench.documents import read_file_safely


class EvaluationResult(BaseModel):
    """Result of one rule evaluation."""

    result: Any = Field(default_factory=dict)
    trace: dict[str, Any] | None = None
    performance: str | None = None


@runtime_checkable
class Decision(Protocol):
    """A rule graph loaded into an engine."""

    def evaluate(self, context: dict[str, Any], options: dict[str, Any]) -> Awaitable[dict[str, Any]]:
        ...


@runtime_checkable
class DecisionEngine(Protocol):
    """Creates evaluable decisions from rule graphs."""

    def create_decision(self, content: dict[str, Any]) -> Decision:
        ...


class ZenDecision:
    """Async wrapper around a ``zen.ZenDecision``."""

    def __init__(self, decision):
        self._decision = decision

    async def evaluate(self, context: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
        return await self._decision.async_evaluate(context, options)


class ZenDecisionEngine:
    """Adapter for the optional ``zen-engine`` package.

    Sub-decisions referenced from a graph are loaded from ``rules_directory``.
    """

    def __init__(self, rules_directory: str | Path | None = None):
        try:
            import zen
        except ImportError as exc:
            raise ImportError(
                "zen-engine is not installed; install decision-testbench[engine]"
            ) from exc

        if rules_directory is None:
            rules_directory = get_settings().rules_directory
        self.rules_directory = Path(rules_directory)
        self._engine = zen.ZenEngine({"loader": self._load})

    def _load(self, key: str) -> str:
        return read_file_safely(self.rules_directory, key).decode("utf-8")

    def create_decision(self, content: dict[str, Any] | RuleContent) -> ZenDecision:
        if isinstance(content, RuleContent):
            content = content.model_dump(mode="json", by_alias=True)
        return ZenDecision(self._engine.create_decision(json.dumps(content)))
