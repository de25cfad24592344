"""Core domain - configuration, errors, and ontology."""

from .config import Settings, get_settings, engine_available
from .errors import (
    TestbenchError,
    SchemaError,
    MissingOutputNodeError,
    GenerationError,
    EvaluationError,
    CsvFormatError,
    EmptyCsvError,
    DocumentError,
    DocumentNotFoundError,
    DocumentReadError,
    TestsFailedError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "engine_available",
    # Errors
    "TestbenchError",
    "SchemaError",
    "MissingOutputNodeError",
    "GenerationError",
    "EvaluationError",
    "CsvFormatError",
    "EmptyCsvError",
    "DocumentError",
    "DocumentNotFoundError",
    "DocumentReadError",
    "TestsFailedError",
]
