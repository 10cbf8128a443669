"""CLI entrypoint for diff-review."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer

from diff_review import __version__
from diff_review.collector import changeset_from_text, collect_changes
from diff_review.config import (
    CONFIG_FILENAMES,
    FAIL_ON_CHOICES,
    AppConfig,
    default_config_template,
    load_app_config,
)
from diff_review.diff_parser import ChangeSet
from diff_review.errors import BaselineNotFoundError, EmptyChangeSetError, RenderError
from diff_review.git import GitError
from diff_review.output import FORMATS, render
from diff_review.review import review_changeset
from diff_review.rules import RuleRegistry, build_registry, list_rule_info
from diff_review.severity import parse_threshold

logger = logging.getLogger(__name__)

EXIT_BLOCKING = 1
EXIT_FATAL = 2

app = typer.Typer(
    name="diff-review",
    no_args_is_help=True,
    help="Review git diffs against severity-ranked checklist rules.",
)

RepoOption = Annotated[Path, typer.Option(help="Repository to review.")]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Config TOML file (default: repository lookup)."),
]
TextFormatOption = Annotated[str, typer.Option(help="Output format: human|json.")]


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
) -> None:
    """Root command callback."""
    _ = version


@app.command("review")
def review_command(
    baseline: Annotated[
        str | None,
        typer.Option(
            "--baseline",
            "-b",
            help="working-tree, staged, a revision, or a range like main..HEAD.",
            show_default="working-tree",
        ),
    ] = None,
    repo: RepoOption = Path("."),
    diff_file: Annotated[
        Path | None, typer.Option(help="Review a saved unified diff instead of git.")
    ] = None,
    stdin: Annotated[bool, typer.Option(help="Review a unified diff read from stdin.")] = False,
    format: Annotated[
        str | None,
        typer.Option(help="Output format: human|markdown|json.", show_default="human"),
    ] = None,
    fail_on: Annotated[
        str | None,
        typer.Option(
            "--fail-on",
            help="Exit 1 when a finding is at or above this tier (critical|high|medium|low|none).",
            show_default="high",
        ),
    ] = None,
    include: Annotated[
        list[str] | None, typer.Option(help="Only review paths matching this glob.")
    ] = None,
    exclude: Annotated[
        list[str] | None, typer.Option(help="Skip paths matching this glob.")
    ] = None,
    jobs: Annotated[
        int | None, typer.Option("--jobs", "-j", min=1, help="Parallel rule workers.")
    ] = None,
    prompt: Annotated[
        bool | None,
        typer.Option(
            "--prompt/--no-prompt",
            help="Ask for a wider baseline when nothing changed (default: when interactive).",
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
    config_file: ConfigOption = None,
) -> None:
    """Review a diff and print findings, Critical first."""
    _configure_logging(verbose)
    app_config = _load_config_or_raise(repo, config_file)
    output_format = _choice_or_default(
        value=format, default=app_config.format, allowed=set(FORMATS), field_name="--format"
    )
    threshold = parse_threshold(
        _choice_or_default(
            value=fail_on,
            default=app_config.fail_on,
            allowed=set(FAIL_ON_CHOICES),
            field_name="--fail-on",
        )
    )

    if diff_file and stdin:
        raise typer.BadParameter("Use either --diff-file or --stdin, not both.")
    if baseline is not None and (diff_file or stdin):
        raise typer.BadParameter("--baseline cannot be combined with --diff-file or --stdin.")

    registry = _build_registry_or_raise(app_config)
    include_patterns = include if include is not None else app_config.include
    exclude_patterns = exclude if exclude is not None else app_config.exclude
    worker_count = jobs if jobs is not None else app_config.jobs
    reads_diff_text = diff_file is not None or stdin
    interactive = (prompt if prompt is not None else sys.stdin.isatty()) and not reads_diff_text

    current_baseline = baseline or app_config.baseline
    while True:
        try:
            changeset = _collect(
                repo=repo,
                baseline=current_baseline,
                diff_file=diff_file,
                stdin=stdin,
                include=include_patterns,
                exclude=exclude_patterns,
            )
            break
        except EmptyChangeSetError as exc:
            if not interactive:
                typer.echo(
                    f"{exc}. Nothing to review; widen the scope, for example "
                    "--baseline main or --baseline HEAD~5..HEAD.",
                    err=True,
                )
                raise typer.Exit(code=0) from exc
            wider = typer.prompt(
                f"{exc}. Enter a wider baseline (blank to stop)",
                default="",
                show_default=False,
            ).strip()
            if not wider:
                raise typer.Exit(code=0) from exc
            current_baseline = wider
        except (BaselineNotFoundError, GitError) as exc:
            _fail(str(exc))
        except (OSError, ValueError) as exc:
            _fail(f"could not read diff: {exc}")

    try:
        report = review_changeset(changeset, registry, jobs=worker_count)
        outcome = render(report, output_format)
    except RenderError as exc:
        _fail(f"internal report error: {exc}")

    typer.echo(outcome.text)
    if outcome.issues:
        typer.echo(
            f"warning: {len(outcome.issues)} finding(s) could not be rendered; "
            "rerun with --verbose for details.",
            err=True,
        )
    if report.blocking(threshold):
        raise typer.Exit(code=EXIT_BLOCKING)


@app.command("rules")
def rules_command(
    repo: RepoOption = Path("."),
    path: Annotated[
        str | None, typer.Option("--path", help="Only list rules that apply to this file path.")
    ] = None,
    format: TextFormatOption = "human",
    config_file: ConfigOption = None,
) -> None:
    """List the checklist rules and the rule set each belongs to."""
    output_format = _text_format(format)
    app_config = _load_config_or_raise(repo, config_file)
    registry = _build_registry_or_raise(app_config)
    catalog = list_rule_info(registry)
    if path is not None:
        applicable = {rule.rule_id for rule in registry.rules_for(path)}
        catalog = [item for item in catalog if item.rule_id in applicable]

    if output_format == "json":
        _echo_json(
            {
                "rules": [
                    {
                        "rule_id": item.rule_id,
                        "description": item.description,
                        "severity": item.severity.label,
                        "category": item.category,
                        "rule_set": item.rule_set,
                        "enabled": item.enabled,
                    }
                    for item in catalog
                ],
                "meta": {"config_source": app_config.source, "path": path},
            }
        )
        return

    heading = "Available rules:" if path is None else f"Rules applied to {path}:"
    rows = [
        f"- {item.rule_id} [{item.severity.label}, {item.rule_set}, "
        f"{'enabled' if item.enabled else 'disabled'}] - {item.description}"
        for item in catalog
    ]
    typer.echo("\n".join([heading, *rows]))


@app.command("config")
def config_command(
    repo: RepoOption = Path("."),
    format: TextFormatOption = "human",
    config_file: ConfigOption = None,
) -> None:
    """Show the configuration a review would run with."""
    output_format = _text_format(format)
    app_config = _load_config_or_raise(repo, config_file)
    registry = _build_registry_or_raise(app_config)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = [rule.rule_id for rule in registry.rules]

    if output_format == "json":
        _echo_json(payload)
        return

    rules = payload.pop("rules")
    source = payload.pop("source") or "defaults"
    rows = [f"- {key}: {value}" for key, value in payload.items()]
    rows.extend(f"- rules.{key}: {value}" for key, value in rules.items())
    typer.echo("\n".join([f"Resolved configuration (from {source}):", *rows]))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Where to write the starter config.")] = Path(
        CONFIG_FILENAMES[0]
    ),
    force: Annotated[bool, typer.Option("--force", help="Replace an existing file.")] = False,
) -> None:
    """Write a starter .diff-review.toml."""
    target = out.resolve()
    if target.exists() and not force:
        raise typer.BadParameter(f"{target} already exists; pass --force to replace it.")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote {target}")


@app.command("config-validate")
def config_validate_command(
    repo: RepoOption = Path("."),
    config_file: Annotated[
        Path,
        typer.Option("--config", help="Config TOML file to check."),
    ] = Path(CONFIG_FILENAMES[0]),
    format: TextFormatOption = "human",
) -> None:
    """Check a config file and print the rules it leaves active."""
    output_format = _text_format(format)
    app_config = _load_config_or_raise(repo, config_file)
    active = [rule.rule_id for rule in _build_registry_or_raise(app_config).rules]

    if output_format == "json":
        _echo_json({"ok": True, "source": app_config.source, "active_rule_ids": active})
        return
    typer.echo(f"{app_config.source} is valid; {len(active)} rule(s) active:")
    typer.echo("\n".join(f"- {rule_id}" for rule_id in active))


def main() -> None:
    """Console script entrypoint."""
    app()


def _collect(
    *,
    repo: Path,
    baseline: str,
    diff_file: Path | None,
    stdin: bool,
    include: list[str],
    exclude: list[str],
) -> ChangeSet:
    if diff_file is not None:
        return changeset_from_text(
            diff_file.read_text(encoding="utf-8", errors="replace"),
            source=f"diff_file:{diff_file}",
            include=include,
            exclude=exclude,
        )
    if stdin:
        return changeset_from_text(
            sys.stdin.buffer.read().decode("utf-8", errors="replace"),
            source="stdin",
            include=include,
            exclude=exclude,
        )
    return collect_changes(repo, baseline, include=include, exclude=exclude)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _fail(message: str) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=EXIT_FATAL)


def _load_config_or_raise(repo: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(repo, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_registry_or_raise(app_config: AppConfig) -> RuleRegistry:
    try:
        return build_registry(
            enabled_rule_ids=app_config.rule_enable,
            disabled_rule_ids=app_config.rule_disable,
            severity_overrides=app_config.severity_overrides,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc


def _choice_or_default(
    *,
    value: str | None,
    default: str,
    allowed: set[str],
    field_name: str,
) -> str:
    resolved = (value or default).lower()
    if resolved not in allowed:
        choices = ", ".join(sorted(allowed))
        raise typer.BadParameter(f"{field_name} must be one of: {choices}", param_hint=field_name)
    return resolved


def _text_format(value: str) -> str:
    resolved = value.lower()
    if resolved not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")
    return resolved


def _echo_json(payload: dict[str, Any]) -> None:
    typer.echo(json.dumps(payload, sort_keys=True))
