"""CLI entry point for prdigest.

- serve: scheduler plus health endpoint, the long-running mode
- run-once: a single fetch-and-notify cycle
- preview: print the digest without posting it
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from prdigest.config import Config, ConfigError, load_config
from prdigest.logging import get_logger, setup_logging
from prdigest.scheduler import RunStatus, ScheduleError
from prdigest.service import build_service

env_file_option = click.option(
    "-e",
    "--env-file",
    "env_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to a .env file (default: ./.env if present)",
)
verbose_option = click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)


def _load(env_file: Path | None, verbose: bool) -> Config:
    """Load configuration and set up logging, exiting on invalid settings."""
    try:
        config = load_config(env_file)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    setup_logging(
        log_dir=config.log_dir,
        level="DEBUG" if verbose else config.log_level,
    )
    get_logger("cli").info("Loaded configuration: %s", config.redacted())
    return config


@click.group()
@click.version_option(package_name="prdigest")
def main() -> None:
    """prdigest - open pull request digest for DingTalk."""
    pass


@main.command()
@env_file_option
@verbose_option
def serve(env_file: Path | None, verbose: bool) -> None:
    """Run the scheduler and the health endpoint until interrupted."""
    import uvicorn  # noqa: PLC0415

    from prdigest.api import create_app  # noqa: PLC0415

    config = _load(env_file, verbose)
    try:
        service = build_service(config)
    except ScheduleError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    app = create_app(service, run_on_startup=config.run_on_startup)
    click.echo(f"Serving on {config.host}:{config.port} (schedule: {config.schedule})")
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


@main.command("run-once")
@env_file_option
@verbose_option
def run_once(env_file: Path | None, verbose: bool) -> None:
    """Fetch open pull requests and post the digest once."""
    config = _load(env_file, verbose)
    service = build_service(config)
    try:
        report = service.job.run()
    finally:
        service.close()

    if report.status != RunStatus.COMPLETED:
        click.echo(f"Digest run {report.status.value}: {report.error}", err=True)
        sys.exit(1)

    if report.result is not None:
        for digest in report.result:
            line = f"  {digest.repository_name}: {len(digest.pull_requests)} open"
            if digest.error:
                line += f" (error: {digest.error})"
            click.echo(line)

    if not report.delivered:
        error = report.delivery.error if report.delivery else "not sent"
        click.echo(f"Delivery failed: {error}", err=True)
        sys.exit(1)
    click.echo("Digest delivered.")


@main.command()
@env_file_option
@verbose_option
@click.option(
    "--details",
    is_flag=True,
    help="Also list author, branches and dates of every pull request",
)
def preview(env_file: Path | None, verbose: bool, details: bool) -> None:
    """Print the digest that would be posted, without posting it."""
    from prdigest.notifier import format_digest  # noqa: PLC0415

    config = _load(env_file, verbose)
    service = build_service(config)
    try:
        result = service.aggregator.aggregate(config.repositories)
    finally:
        service.close()

    click.echo(format_digest(result))
    if details:
        for digest in result:
            for pr in digest.pull_requests:
                click.echo(
                    f"{digest.repository_name} {pr.id} by {pr.author}: "
                    f"{pr.source_branch} -> {pr.destination_branch}, "
                    f"created {pr.created_label}, merged {pr.merged_label}"
                )
    for digest in result.failed:
        click.echo(f"Warning: {digest.repository_name}: {digest.error}", err=True)


if __name__ == "__main__":
    main()
