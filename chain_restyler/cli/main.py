"""Command-line interface for chain-restyler."""

import json
import sys
from pathlib import Path
from typing import Any

import click

from .. import __version__
from ..batch import DEFAULT_MAX_WORKERS, restyle_many
from ..errors import RestylerError
from ..restyler_logging import LogCategory, get_category_logger, setup_logging
from ..rules.catalog import load_default_catalog
from ..rules.config import StyleConfig, StyleConfigLoader
from .errors import EXIT_CHANGED, CLIError, InputFileError, handle_exception

logger = get_category_logger(LogCategory.CLI)

STDIN_NAME = "<stdin>"


def common_options(f: Any) -> Any:
    """Options shared by every command."""
    f = click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")(f)
    f = click.option("--quiet", "-q", is_flag=True, help="Only report errors")(f)
    f = click.option(
        "--log-format",
        type=click.Choice(["text", "json"]),
        default="text",
        show_default=True,
        help="Log output format",
    )(f)
    f = click.option(
        "--log-file", type=click.Path(path_type=Path), help="Also write DEBUG logs here"
    )(f)
    return f


def config_options(f: Any) -> Any:
    """Options selecting the style configuration."""
    f = click.option(
        "--project",
        "-p",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=None,
        help="Project root whose .restyler/ config is used (default: CWD)",
    )(f)
    f = click.option(
        "--config",
        "config_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Configuration file applied last",
    )(f)
    return f


def _fail(error: Exception, verbose: bool) -> None:
    message, exit_code = handle_exception(
        error, use_color=sys.stderr.isatty(), verbose=verbose
    )
    click.echo(message, err=True)
    sys.exit(exit_code)


def _prepare(
    quiet: bool,
    verbose: bool,
    log_format: str,
    log_file: Path | None,
    project: Path | None,
    config_file: Path | None,
) -> StyleConfig:
    if quiet and verbose:
        raise click.UsageError("--quiet and --verbose are mutually exclusive")
    setup_logging(quiet=quiet, verbose=verbose, log_file=log_file, log_format=log_format)
    return StyleConfigLoader(project).load(config_file)


def _read_inputs(files: tuple[Path, ...]) -> list[tuple[str, str]]:
    if not files:
        return [(STDIN_NAME, click.get_text_stream("stdin").read())]
    inputs = []
    for path in files:
        try:
            inputs.append((str(path), path.read_text(encoding="utf-8")))
        except OSError as e:
            raise InputFileError(str(path), e.strerror or str(e)) from e
    return inputs


@click.group()
@click.version_option(version=__version__, prog_name="chain-restyler")
def cli() -> None:
    """Restyle fluent UI-builder method chains."""


@cli.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--write", "-w", is_flag=True, help="Rewrite files in place")
@click.option("--check", is_flag=True, help="Exit 1 if any file would change")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.option(
    "--max-passes",
    type=click.IntRange(1, 1000),
    default=None,
    help="Pass cap (default: from config)",
)
@click.option(
    "--workers",
    type=click.IntRange(1, 64),
    default=DEFAULT_MAX_WORKERS,
    show_default=True,
    help="Fragments processed concurrently",
)
@config_options
@common_options
def apply(
    files: tuple[Path, ...],
    write: bool,
    check: bool,
    as_json: bool,
    max_passes: int | None,
    workers: int,
    project: Path | None,
    config_file: Path | None,
    verbose: bool,
    quiet: bool,
    log_format: str,
    log_file: Path | None,
) -> None:
    """Restyle FILES (or stdin) and print the result."""
    try:
        if write and not files:
            raise click.UsageError("--write needs at least one file")
        if write and check:
            raise click.UsageError("--write and --check are mutually exclusive")

        config = _prepare(quiet, verbose, log_format, log_file, project, config_file)
        catalog = load_default_catalog(config)
        inputs = _read_inputs(files)

        batch = restyle_many(
            [text for _, text in inputs],
            catalog=catalog,
            config=config,
            max_workers=workers,
            max_passes=max_passes,
        )
    except (RestylerError, CLIError) as e:
        _fail(e, verbose)

    failed = False
    changed = False
    for (name, _), result in zip(inputs, batch.results, strict=True):
        if result.syntax_error is not None:
            failed = True
            click.echo(f"{name}: {result.syntax_error}", err=True)
        changed = changed or result.changed

        if not quiet and not as_json:
            for warning in result.warnings:
                rule = f" {warning.rule_id}" if warning.rule_id else ""
                click.echo(f"{name}: [{warning.kind.value}]{rule}: {warning.message}", err=True)

        if write:
            if result.changed:
                try:
                    Path(name).write_text(result.text, encoding="utf-8")
                except OSError as e:
                    _fail(InputFileError(name, e.strerror or str(e)), verbose)
                logger.info(f"Restyled {name}", extra={"file_path": name})
                if not quiet:
                    click.echo(f"restyled {name}", err=True)
        elif check:
            if result.changed and not quiet:
                click.echo(f"would restyle {name}")
        elif not as_json:
            click.echo(result.text, nl=False)

    if as_json:
        payload = [
            {"file": name, **result.to_dict()}
            for (name, _), result in zip(inputs, batch.results, strict=True)
        ]
        click.echo(json.dumps(payload, indent=2))

    if failed or (check and changed):
        sys.exit(EXIT_CHANGED)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the catalog as JSON")
@config_options
@common_options
def rules(
    as_json: bool,
    project: Path | None,
    config_file: Path | None,
    verbose: bool,
    quiet: bool,
    log_format: str,
    log_file: Path | None,
) -> None:
    """List the rules of the active catalog in registration order."""
    try:
        config = _prepare(quiet, verbose, log_format, log_file, project, config_file)
        catalog = load_default_catalog(config)
    except (RestylerError, CLIError) as e:
        _fail(e, verbose)

    entries = [rule.to_dict() for rule in catalog]
    if as_json:
        click.echo(json.dumps(entries, indent=2))
        return

    for entry in entries:
        flags = []
        if entry["idempotent"]:
            flags.append("idempotent")
        if entry["advisory"]:
            flags.append("advisory")
        click.echo(
            f"{entry['rule_id']:<36} prio {entry['priority']:>3}  "
            f"{'/'.join(entry['target']):<26} {', '.join(flags)}"
        )
        if verbose:
            click.echo(f"    {entry['description']}")


@cli.command(name="config")
@config_options
@common_options
def show_config(
    project: Path | None,
    config_file: Path | None,
    verbose: bool,
    quiet: bool,
    log_format: str,
    log_file: Path | None,
) -> None:
    """Print the effective merged configuration as JSON."""
    try:
        config = _prepare(quiet, verbose, log_format, log_file, project, config_file)
    except (RestylerError, CLIError) as e:
        _fail(e, verbose)

    click.echo(json.dumps(config.to_dict(), indent=2))


if __name__ == "__main__":
    cli()
