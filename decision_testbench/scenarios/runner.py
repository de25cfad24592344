"""CSV-based regression tests for a rules repository.

A rules repository keeps each rule at ``rules/<path>.json`` and its CSV test
files in ``tests/<path>/``. Every CSV file is decoded into scenarios, run
against its rule, and reported as passed, passed with warning (some
scenarios declare no expected results), or failed.
"""

from __future__ import annotations

import asyncio
import logging
import textwrap
from pathlib import Path
from typing import Callable

import typer
from pydantic import BaseModel, Field

from decision_testbench.core.errors import CsvFormatError, DocumentError, SchemaError, TestsFailedError
from decision_testbench.decisions import DecisionEngine, DecisionService
from decision_testbench.documents import DocumentsService
from .csv_codec import from_csv, parse_csv
from .service import ScenarioService

logger = logging.getLogger(__name__)


class CsvFilesForRule(BaseModel):
    """CSV test files found in one rule's test directory."""

    test_file_path: Path
    test_files: list[str] = Field(default_factory=list)


class RuleStats(BaseModel):
    """Counters for one runner session."""

    rule_count: int = 0
    test_count: int = 0
    failed_count: int = 0


class CsvTestRunner:
    """Runs the CSV test files of one or more rules repositories."""

    __test__ = False

    def __init__(self, engine_factory: Callable[[Path], DecisionEngine]):
        self.engine_factory = engine_factory
        self.stats = RuleStats()
        self.failed_tests: list[str] = []
        self._services: dict[Path, ScenarioService] = {}

    def service_for(self, repo_dir: Path) -> ScenarioService:
        """Scenario service reading rules from the repository's rules directory."""
        repo_dir = Path(repo_dir)
        if repo_dir not in self._services:
            rules_dir = repo_dir / "rules"
            decisions = DecisionService(self.engine_factory(rules_dir), DocumentsService(rules_dir))
            self._services[repo_dir] = ScenarioService(decisions)
        return self._services[repo_dir]

    def get_test_files_at_rule_path(self, test_file_path: Path) -> CsvFilesForRule:
        """CSV files directly inside test_file_path; none if the directory is missing."""
        test_file_path = Path(test_file_path)
        if not test_file_path.is_dir():
            logger.warning("No test directory at %s", test_file_path)
            return CsvFilesForRule(test_file_path=test_file_path)
        files = sorted(
            entry.name for entry in test_file_path.iterdir()
            if entry.is_file() and entry.suffix.lower() == ".csv"
        )
        return CsvFilesForRule(test_file_path=test_file_path, test_files=files)

    def get_test_paths_and_files(self, tests_dir: Path) -> list[CsvFilesForRule]:
        """Every directory below tests_dir that holds CSV test files."""
        tests_dir = Path(tests_dir)
        directories = sorted({path.parent for path in tests_dir.rglob("*.csv") if path.is_file()})
        return [self.get_test_files_at_rule_path(directory) for directory in directories]

    async def run_scenarios_for_csv_test_file(self, repo_dir: Path, test_file_path: Path, test_file: str) -> bool:
        """Run one CSV test file against its rule.

        Returns:
            True if every scenario in the file passed
        """
        self.stats.test_count += 1
        repo_dir = Path(repo_dir)
        relative = Path(test_file_path).relative_to(repo_dir / "tests").as_posix()
        rule_path = f"{relative}.json"
        full_path = Path(test_file_path) / test_file

        try:
            scenarios = from_csv(parse_csv(full_path.read_bytes()), relative)
            has_no_expected_results = any(not s.expected_results for s in scenarios)
            if has_no_expected_results:
                typer.secho(f"\tMissing expected results for file {test_file}", fg=typer.colors.YELLOW)
            report = await self.service_for(repo_dir).get_csv_for_rule_run(rule_path, None, scenarios)
        except (CsvFormatError, DocumentError, SchemaError) as exc:
            typer.secho(f"\tScenarios for file {test_file}: FAILED ({exc})", fg=typer.colors.RED)
            self._record_failure(full_path)
            return False

        if not report.all_tests_passed:
            typer.secho(f"\tScenarios for file {test_file}: FAILED", fg=typer.colors.RED)
            typer.echo(f"\t\tFailed CSV Content:\n{textwrap.indent(report.csv_content, ' ' * 20)}", err=True)
            self._record_failure(full_path)
            return False

        if has_no_expected_results:
            typer.secho(f"\tScenarios for file {test_file}: PASSED WITH WARNING", fg=typer.colors.YELLOW)
        else:
            typer.secho(f"\tScenarios for file {test_file}: PASSED", fg=typer.colors.GREEN)
        return True

    def _record_failure(self, path: Path) -> None:
        self.stats.failed_count += 1
        self.failed_tests.append(path.as_posix())

    async def run_tests_for_rule(self, repo_dir: Path, test_file_path: Path, files: list[str]) -> list[bool]:
        """Run all CSV files of one rule concurrently."""
        typer.secho(f"Running csv tests for rule {test_file_path}...", fg=typer.colors.BLUE)
        self.stats.rule_count += 1
        return await asyncio.gather(*(
            self.run_scenarios_for_csv_test_file(repo_dir, test_file_path, test_file)
            for test_file in files
        ))

    async def run_tests_for_specified_rule_path(self, repo_dir: Path, rule_path: str) -> None:
        """Run the tests of one rule, given as ``rules/a/b.json`` or ``a/b``."""
        rule_path = rule_path.strip()
        if rule_path.startswith("rules/"):
            rule_path = rule_path[len("rules/"):]
        if rule_path.endswith(".json"):
            rule_path = rule_path[: -len(".json")]

        found = self.get_test_files_at_rule_path(Path(repo_dir) / "tests" / rule_path)
        if not found.test_files:
            return
        await self.run_tests_for_rule(repo_dir, found.test_file_path, found.test_files)

    async def run_tests_for_specified_rule_paths(self, repo_dir: Path, rule_paths: list[str]) -> None:
        for rule_path in rule_paths:
            await self.run_tests_for_specified_rule_path(repo_dir, rule_path)

    async def run_all_rules(self, repo_dir: Path) -> None:
        """Run every CSV test file in the repository."""
        for found in self.get_test_paths_and_files(Path(repo_dir) / "tests"):
            await self.run_tests_for_rule(repo_dir, found.test_file_path, found.test_files)

    def show_final_test_results(self) -> None:
        """Print the session summary.

        Raises:
            TestsFailedError: If any CSV test file failed.
        """
        summary = (
            f"{self.stats.rule_count} rules tested, "
            f"{self.stats.test_count} tests run, "
            f"{self.stats.failed_count} failed"
        )
        color = typer.colors.RED if self.stats.failed_count else typer.colors.GREEN
        typer.secho(summary, fg=typer.colors.WHITE, bg=color)
        if self.stats.failed_count:
            raise TestsFailedError(self.failed_tests)
