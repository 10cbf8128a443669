"""CLI smoke tests."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from diff_review import __version__
from diff_review.cli import app
from diff_review.config import default_config_template

runner = CliRunner()


def test_root_help_works() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Review git diffs" in result.stdout
    assert "review" in result.stdout
    assert "rules" in result.stdout
    assert "config-init" in result.stdout
    assert "config-validate" in result.stdout


def test_review_help_works() -> None:
    result = runner.invoke(app, ["review", "--help"])
    assert result.exit_code == 0
    assert "--baseline" in result.stdout
    assert "--diff-file" in result.stdout
    assert "--fail-on" in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_rules_json_lists_builtin_rules(tmp_path) -> None:
    result = runner.invoke(app, ["rules", "--repo", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0

    payload = json.loads(result.stdout)
    rules = {item["rule_id"]: item for item in payload["rules"]}
    assert rules["hardcoded-secret"]["severity"] == "critical"
    assert rules["hardcoded-secret"]["rule_set"] == "base"
    assert set(rules["hardcoded-secret"]) == {
        "rule_id",
        "description",
        "severity",
        "category",
        "rule_set",
        "enabled",
    }


def test_rules_for_path_filters_by_file_type(tmp_path) -> None:
    result = runner.invoke(app, ["rules", "--repo", str(tmp_path), "--path", "web/app.ts"])
    assert result.exit_code == 0
    assert result.stdout.startswith("Rules applied to web/app.ts:")
    assert "ts-any-type" in result.stdout
    assert "python-eval-exec" not in result.stdout


def test_config_init_and_validate(tmp_path) -> None:
    config_path = tmp_path / ".diff-review.toml"

    init_result = runner.invoke(app, ["config-init", "--out", str(config_path)])
    assert init_result.exit_code == 0
    assert config_path.exists()

    again = runner.invoke(app, ["config-init", "--out", str(config_path)])
    assert again.exit_code != 0
    assert config_path.read_text(encoding="utf-8") == default_config_template()

    validate = runner.invoke(
        app,
        ["config-validate", "--repo", str(tmp_path), "--config", str(config_path)]
        + ["--format", "json"],
    )
    assert validate.exit_code == 0
    payload = json.loads(validate.stdout)
    assert payload["ok"] is True
    assert "todo-marker" not in payload["active_rule_ids"]


def test_config_shows_resolved_values(tmp_path) -> None:
    (tmp_path / ".diff-review.toml").write_text('fail_on = "critical"\n', encoding="utf-8")
    result = runner.invoke(app, ["config", "--repo", str(tmp_path), "--format", "json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["fail_on"] == "critical"
    assert "hardcoded-secret" in payload["active_rule_ids"]


def test_invalid_config_is_a_usage_error(tmp_path) -> None:
    (tmp_path / ".diff-review.toml").write_text(
        '[rules]\ndisable = ["no-such-rule"]\n', encoding="utf-8"
    )
    result = runner.invoke(app, ["config", "--repo", str(tmp_path)])
    assert result.exit_code == 2
    assert "Unknown rule ids: no-such-rule" in result.output
