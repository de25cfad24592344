"""Exception hierarchy for schema extraction, generation, evaluation and CSV handling."""


class TestbenchError(Exception):
    """Base class for all decision testbench errors."""

    __test__ = False


class SchemaError(TestbenchError):
    """The rule graph cannot be described as an input/output schema."""


class MissingOutputNodeError(SchemaError):
    """The rule graph has no output node."""

    def __init__(self, message: str = "No outputNode found in the nodes array"):
        super().__init__(message)


class GenerationError(TestbenchError):
    """A field cannot be turned into candidate values."""


class EvaluationError(TestbenchError):
    """The decision engine failed to evaluate a scenario."""


class CsvFormatError(TestbenchError):
    """CSV input cannot be decoded into scenarios."""


class EmptyCsvError(CsvFormatError):
    """CSV input has no data rows."""

    def __init__(self, message: str = "CSV content is empty or invalid"):
        super().__init__(message)


class DocumentError(TestbenchError):
    """A rule document could not be retrieved."""


class DocumentNotFoundError(DocumentError):
    """The requested document does not exist or lies outside the rules directory."""


class DocumentReadError(DocumentError):
    """The requested document exists but could not be read."""


class TestsFailedError(TestbenchError):
    """One or more CSV test files did not pass."""

    def __init__(self, failed_tests: list[str]):
        self.failed_tests = failed_tests
        super().__init__(f"Tests failed: {', '.join(failed_tests)}")
