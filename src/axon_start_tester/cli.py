"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from axon_start_tester.configuration import (
    DEFAULT_CONFIG_FILENAME,
    write_placeholder_configuration,
)
from axon_start_tester.run_execution import (
    RunExecutionError,
    RunRequest,
    check_cluster_liveness,
    execute_smoke_test_run,
    tear_down_cluster,
    verdict_exit_code,
    verdict_message,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class CliError(Exception):
    """Custom CLI error."""


_config_option = click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help="Path to the YAML run configuration (built-in defaults when omitted)",
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="axon-start-tester")
@click.option(
    "--log-level",
    default="INFO",
    show_default=True,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Verbosity of progress logging on stderr",
)
def cli(log_level: str) -> None:
    """Build, deploy and health-check a multi-node Axon cluster."""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT, stream=sys.stderr)


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML run configuration to write",
)
def generate_config(output_path: str) -> None:
    """Generate a run configuration populated with the default values."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="run")
@_config_option
@click.option(
    "--skip-build",
    is_flag=True,
    default=False,
    help="Reuse the already published image instead of logging in, building and pushing.",
)
@click.option(
    "--report",
    "report_path",
    required=False,
    type=click.Path(path_type=str),
    help="Optional path for an xlsx report with per-node liveness results",
)
@click.pass_context
def run_smoke_test(
    ctx: click.Context, config_path: str | None, skip_build: bool, report_path: str | None
) -> None:
    """Build and publish the image, start the cluster and check node liveness."""
    try:
        outcome = execute_smoke_test_run(
            RunRequest(
                config_path=config_path,
                skip_build=skip_build,
                report_path=report_path,
            )
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    if outcome.report_path is not None:
        click.echo(f"report written: {outcome.report_path}", err=True)
    click.echo(outcome.message)
    ctx.exit(outcome.exit_code)


@cli.command(name="check")
@_config_option
@click.option(
    "--workspace",
    required=False,
    type=click.Path(path_type=str),
    help="Deployment directory to inspect instead of the configured one",
)
@click.pass_context
def check(ctx: click.Context, config_path: str | None, workspace: str | None) -> None:
    """Inspect node log tails of an existing deployment for the liveness marker."""
    try:
        report = check_cluster_liveness(config_path, workspace=workspace)
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc
    for result in report.results:
        click.echo(f"{result.node_name}: {result.status.value}", err=True)
    click.echo(verdict_message(report))
    ctx.exit(verdict_exit_code(report))


@cli.command(name="down")
@_config_option
@click.option(
    "--workspace",
    required=False,
    type=click.Path(path_type=str),
    help="Deployment directory to tear down instead of the configured one",
)
@click.option(
    "--project-name",
    required=False,
    type=str,
    help="Compose project of an ephemeral run, e.g. axon-start-test-<run_id>",
)
def down(config_path: str | None, workspace: str | None, project_name: str | None) -> None:
    """Stop and remove the cluster of an existing deployment."""
    try:
        tear_down_cluster(config_path, workspace=workspace, project_name=project_name)
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        result = cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return result if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
