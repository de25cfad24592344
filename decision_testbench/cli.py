"""Decision Testbench command line interface.

Entry point for the decision-testbench CLI tool.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import NoReturn

import typer

from decision_testbench import __version__
from decision_testbench.core.config import get_settings
from decision_testbench.core.errors import CsvFormatError, DocumentError, SchemaError, TestsFailedError
from decision_testbench.decisions import DecisionEngine, DecisionService, ZenDecisionEngine
from decision_testbench.documents import DocumentsService
from decision_testbench.rule_mapping import RuleMappingService
from decision_testbench.scenarios import CsvTestRunner, ScenarioService

__all__ = ["app", "build_engine"]

app = typer.Typer(
    name="decision-testbench",
    help="Generate, run and verify test scenarios for decision graphs.",
    no_args_is_help=True,
)


def build_engine(rules_directory: Path) -> DecisionEngine:
    """Decision engine that loads sub-decisions from rules_directory."""
    return ZenDecisionEngine(rules_directory)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"decision-testbench version {__version__}")
        raise typer.Exit()


def _fail(message: str) -> NoReturn:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _scenario_service(rule_file: Path) -> tuple[ScenarioService, str]:
    """Scenario service rooted at the rule file's directory, plus the rule's relative path."""
    rule_file = rule_file.expanduser()
    if not rule_file.is_file():
        _fail(f"Rule file not found: {rule_file}")
    rules_dir = rule_file.parent
    try:
        engine = build_engine(rules_dir)
    except ImportError as exc:
        _fail(str(exc))
    documents = DocumentsService(rules_dir)
    return ScenarioService(DecisionService(engine, documents)), rule_file.name


def _write_output(content: str, output: Path | None) -> None:
    if output is None:
        typer.echo(content)
        return
    output.write_text(content, encoding="utf-8")
    typer.secho(f"Wrote {output}", fg=typer.colors.GREEN, err=True)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
) -> None:
    """Generate, run and verify test scenarios for decision graphs."""
    log_level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("run-csv-tests")
def run_csv_tests(
    repositories: list[Path] = typer.Argument(
        None,
        help="Rules repositories to test. Defaults to RULES_REPOSITORIES (comma separated).",
    ),
    rules: str | None = typer.Option(
        None,
        "--rules",
        "-r",
        help="Comma separated rule paths to test, e.g. rules/a/b.json. Tests every rule if omitted.",
    ),
) -> None:
    """Run the CSV test files of one or more rules repositories."""
    if not repositories:
        configured = get_settings().rules_repositories or ""
        repositories = [Path(repo.strip()) for repo in configured.split(",") if repo.strip()]
    if not repositories:
        _fail("No rules repositories given")

    rule_paths = [path.strip() for path in rules.split(",") if path.strip()] if rules else []
    try:
        runner = CsvTestRunner(build_engine)
        for repo in repositories:
            if not repo.is_dir():
                _fail(f"Repository not found: {repo}")
            if rule_paths:
                asyncio.run(runner.run_tests_for_specified_rule_paths(repo, rule_paths))
            else:
                asyncio.run(runner.run_all_rules(repo))
        runner.show_final_test_results()
    except ImportError as exc:
        _fail(str(exc))
    except TestsFailedError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from None


@app.command()
def schema(
    rule_file: Path = typer.Argument(..., help="Path to a rule graph JSON file."),
    from_trace: bool = typer.Option(
        False,
        "--from-trace",
        help="Read RULE_FILE as the trace of a rule run, or a decision response carrying one.",
    ),
) -> None:
    """Print the input/output schema of a rule graph."""
    service = RuleMappingService()
    try:
        content = json.loads(rule_file.expanduser().read_text(encoding="utf-8"))
        if from_trace:
            if not isinstance(content, dict):
                _fail(f"Trace file {rule_file} must hold a JSON object")
            rule_schema = service.evaluate_rule_schema(content.get("trace", content))
        else:
            rule_schema = service.rule_schema(content)
    except FileNotFoundError:
        _fail(f"Rule file not found: {rule_file}")
    except ValueError as exc:
        _fail(f"Invalid rule file {rule_file}: {exc}")
    except SchemaError as exc:
        _fail(str(exc))

    typer.echo(rule_schema.model_dump_json(by_alias=True, exclude_none=True, indent=2))


@app.command()
def generate(
    rule_file: Path = typer.Argument(..., help="Path to a rule graph JSON file."),
    count: int | None = typer.Option(
        None,
        "--count",
        "-n",
        help="Number of scenarios to generate.",
    ),
    context: str | None = typer.Option(
        None,
        "--context",
        "-c",
        help="JSON object of per-field defaults or {minValue, maxValue} ranges.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the CSV report here instead of stdout.",
    ),
) -> None:
    """Generate scenarios for a rule, run them, and print the CSV report."""
    simulation_context = None
    if context:
        try:
            simulation_context = json.loads(context)
        except ValueError as exc:
            _fail(f"Invalid --context JSON: {exc}")
        if not isinstance(simulation_context, dict):
            _fail("--context must be a JSON object")

    service, filepath = _scenario_service(rule_file)
    try:
        csv_content = asyncio.run(
            service.generate_test_csv_scenarios(filepath, None, simulation_context, count)
        )
    except (DocumentError, SchemaError) as exc:
        _fail(str(exc))

    _write_output(csv_content, output)


@app.command()
def evaluate(
    rule_file: Path = typer.Argument(..., help="Path to a rule graph JSON file."),
    csv_file: Path = typer.Argument(..., help="CSV file of scenarios with expected results."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the CSV report here instead of stdout.",
    ),
) -> None:
    """Run the scenarios of a CSV file against a rule.

    Exits with status 1 when any scenario does not match its expected results.
    """
    if not csv_file.is_file():
        _fail(f"CSV file not found: {csv_file}")

    service, filepath = _scenario_service(rule_file)
    try:
        scenarios = service.process_provided_scenarios(filepath, csv_file.read_bytes())
        report = asyncio.run(service.get_csv_for_rule_run(filepath, None, scenarios))
    except (CsvFormatError, DocumentError, SchemaError) as exc:
        _fail(str(exc))

    _write_output(report.csv_content, output)
    if not report.all_tests_passed:
        typer.secho("Some scenarios did not match their expected results", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
