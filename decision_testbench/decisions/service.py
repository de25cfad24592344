"""Running rule graphs through the decision engine."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from decision_testbench.core.errors import DocumentReadError, EvaluationError
from decision_testbench.core.ontology.graph import RuleContent
from decision_testbench.documents import DocumentsService
from .engine import DecisionEngine, EvaluationResult

logger = logging.getLogger(__name__)


def _as_dict(content: RuleContent | dict[str, Any]) -> dict[str, Any]:
    if isinstance(content, RuleContent):
        return content.model_dump(mode="json", by_alias=True, exclude_none=True)
    return content


class DecisionService:
    """Evaluates contexts against rules given by content or by path."""

    def __init__(self, engine: DecisionEngine, documents: DocumentsService | None = None):
        self.engine = engine
        self.documents = documents or DocumentsService()

    async def run_decision_by_content(
        self,
        rule_content: RuleContent | dict[str, Any],
        context: dict[str, Any],
        options: dict[str, Any] | None = None,
    ) -> EvaluationResult:
        """Evaluate a context against an in-memory rule graph.

        Raises:
            EvaluationError: If the engine rejects the graph or the evaluation fails.
        """
        try:
            decision = self.engine.create_decision(_as_dict(rule_content))
            response = await decision.evaluate(context, options or {})
        except Exception as exc:
            logger.warning("Decision evaluation failed: %s", exc)
            raise EvaluationError(f"Failed to run decision: {exc}") from exc

        if isinstance(response, EvaluationResult):
            return response
        try:
            return EvaluationResult.model_validate(response)
        except ValidationError as exc:
            logger.warning("Decision engine returned a malformed response: %s", exc)
            raise EvaluationError(f"Malformed decision response: {exc}") from exc

    async def run_decision_by_file(
        self,
        filepath: str,
        context: dict[str, Any],
        options: dict[str, Any] | None = None,
    ) -> EvaluationResult:
        """Evaluate a context against the rule stored at filepath.

        Raises:
            DocumentNotFoundError: If the rule file does not exist.
            DocumentReadError: If the rule file cannot be read or parsed.
            EvaluationError: If the evaluation fails.
        """
        raw = self.documents.get_file_content(filepath)
        try:
            content = json.loads(raw)
        except ValueError as exc:
            raise DocumentReadError(f"Invalid rule document {filepath}: {exc}") from exc
        return await self.run_decision_by_content(content, context, options)

    async def run_decision(
        self,
        rule_content: RuleContent | dict[str, Any] | None,
        filepath: str,
        context: dict[str, Any],
        options: dict[str, Any] | None = None,
    ) -> EvaluationResult:
        """Run by content if supplied, otherwise by file."""
        if rule_content:
            return await self.run_decision_by_content(rule_content, context, options)
        return await self.run_decision_by_file(filepath, context, options)
