"""Retrieval of rule documents from the rules directory."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from decision_testbench.core.config import get_settings
from decision_testbench.core.errors import DocumentNotFoundError, DocumentReadError
from decision_testbench.core.ontology.graph import RuleContent

logger = logging.getLogger(__name__)


def read_file_safely(root_dir: str | Path, filename: str) -> bytes:
    """Read a file that must live inside root_dir.

    Raises:
        DocumentNotFoundError: Path escapes root_dir, or the file does not exist.
        DocumentReadError: Any other failure reading the file.
    """
    root = Path(root_dir).resolve()
    target = (root / filename).resolve()

    if target != root and root not in target.parents:
        raise DocumentNotFoundError("Path traversal detected")
    if not target.is_file():
        raise DocumentNotFoundError("File not found")

    try:
        return target.read_bytes()
    except OSError as exc:
        raise DocumentReadError(f"Failed to read {filename}: {exc}") from exc


class DocumentsService:
    """Access to rule graph files below a base directory."""

    def __init__(self, rules_directory: str | Path | None = None):
        if rules_directory is None:
            rules_directory = get_settings().rules_directory
        self.rules_directory = Path(rules_directory)

    def get_file_content(self, filepath: str) -> bytes:
        logger.debug("Reading rule document %s", filepath)
        return read_file_safely(self.rules_directory, filepath)

    def get_rule_content(self, filepath: str) -> RuleContent:
        """Parsed rule graph stored at filepath."""
        raw = self.get_file_content(filepath)
        try:
            return RuleContent.model_validate(json.loads(raw))
        except ValueError as exc:
            raise DocumentReadError(f"Invalid rule document {filepath}: {exc}") from exc

    def get_all_json_files(self, rule_dir: str = "") -> list[str]:
        """Relative paths of every JSON file below rule_dir."""
        directory = self.rules_directory / rule_dir
        if not directory.is_dir():
            raise DocumentReadError(f"Error reading directory {directory}")
        return sorted(
            path.relative_to(directory).as_posix()
            for path in directory.rglob("*")
            if path.is_file() and path.suffix.lower() == ".json"
        )
