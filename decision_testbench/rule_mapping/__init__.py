"""Rule mapping domain - schema extraction from rule graphs."""

from .schemas import SchemaField, RuleSchema
from .service import (
    extract_inputs,
    extract_outputs,
    extract_final_outputs,
    find_unique_fields,
    extract_unique_inputs,
    rule_schema,
    evaluate_rule_schema,
    RuleMappingService,
)

__all__ = [
    # Schemas
    "SchemaField",
    "RuleSchema",
    # Service
    "extract_inputs",
    "extract_outputs",
    "extract_final_outputs",
    "find_unique_fields",
    "extract_unique_inputs",
    "rule_schema",
    "evaluate_rule_schema",
    "RuleMappingService",
]
