"""Tests for the typer CLI with a fake analyst and tmp-path stores."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from cv_match.cli import app
from cv_match.config import AppConfig, StorageConfig, UsageConfig
from cv_match.errors import AnalysisFailure
from cv_match.logging.models import UsageLog
from cv_match.logging.usage_store import UsageStore
from cv_match.session.controller import SessionController
from cv_match.storage.account_store import AccountStore
from cv_match.storage.history_store import HistoryStore
from cv_match.storage.preferences import PreferenceStore

runner = CliRunner()


class FakeAnalyst:
    model = "claude-sonnet-4-5-20250929"

    def __init__(self, result):
        self.result = result
        self.error: Exception | None = None

    async def analyze(self, cv_text: str, jd_text: str):
        if self.error is not None:
            raise self.error
        return self.result

    def token_summary(self) -> dict:
        return {"input": 10, "output": 5, "calls": [(self.model, 10, 5)]}


@pytest.fixture
def analyst(sample_result) -> FakeAnalyst:
    return FakeAnalyst(sample_result)


@pytest.fixture
def cli_env(kv, analyst):
    """Each command gets a fresh controller over the same store, like separate runs."""
    ids = iter(f"run-{n}" for n in range(1, 100))

    def _make() -> SessionController:
        return SessionController(
            analyst,
            AccountStore(kv),
            HistoryStore(kv),
            PreferenceStore(kv),
            id_factory=lambda: next(ids),
        )

    with patch("cv_match.cli._controller", _make):
        yield _make


@pytest.fixture
def inputs(tmp_path: Path) -> tuple[Path, Path]:
    cv = tmp_path / "cv.txt"
    jd = tmp_path / "jd.txt"
    cv.write_text("5 years Python backend...", encoding="utf-8")
    jd.write_text("Seeking Python engineer, 3+ years", encoding="utf-8")
    return cv, jd


class TestAnalyzeCommand:
    def test_prints_result(self, cli_env, inputs):
        cv, jd = inputs
        result = runner.invoke(app, ["analyze", "--cv", str(cv), "--jd", str(jd)])
        assert result.exit_code == 0
        assert "78/100" in result.output
        assert "Key Strengths" in result.output

    def test_writes_report(self, cli_env, inputs, tmp_path):
        cv, jd = inputs
        out = tmp_path / "out" / "report.md"
        result = runner.invoke(app, ["analyze", "--cv", str(cv), "--jd", str(jd), "-o", str(out)])
        assert result.exit_code == 0
        assert out.read_text(encoding="utf-8").startswith("# CV Match Analysis Report")

    def test_missing_file(self, cli_env, tmp_path, inputs):
        _, jd = inputs
        result = runner.invoke(app, ["analyze", "--cv", str(tmp_path / "nope.txt"), "--jd", str(jd)])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_empty_input_fails(self, cli_env, tmp_path, inputs):
        _, jd = inputs
        empty = tmp_path / "empty.txt"
        empty.write_text("  \n", encoding="utf-8")
        result = runner.invoke(app, ["analyze", "--cv", str(empty), "--jd", str(jd)])
        assert result.exit_code == 1
        assert "Please paste both" in result.output

    def test_analysis_failure(self, cli_env, inputs, analyst):
        analyst.error = AnalysisFailure("bad")
        cv, jd = inputs
        result = runner.invoke(app, ["analyze", "--cv", str(cv), "--jd", str(jd)])
        assert result.exit_code == 1
        assert "Analysis failed" in result.output

    def test_history_save_failure_is_reported(self, cli_env, inputs, history_store, monkeypatch):
        runner.invoke(app, ["signup", "a@x.com", "Ana"])
        monkeypatch.setattr(HistoryStore, "save_analysis", lambda self, email, item: 1 / 0)
        cv, jd = inputs
        result = runner.invoke(app, ["analyze", "--cv", str(cv), "--jd", str(jd)])
        assert result.exit_code == 0
        assert "78/100" in result.output
        assert "could not be saved" in result.output

    def test_saves_history_when_logged_in(self, cli_env, inputs, history_store):
        runner.invoke(app, ["signup", "a@x.com", "Ana"])
        cv, jd = inputs
        result = runner.invoke(app, ["analyze", "--cv", str(cv), "--jd", str(jd)])
        assert result.exit_code == 0
        assert "Saved to history" in result.output
        assert [i.id for i in history_store.get_history("a@x.com")] == ["run-1"]


class TestAccountCommands:
    def test_signup_login_whoami_logout(self, cli_env):
        assert runner.invoke(app, ["signup", "a@x.com", "Ana"]).exit_code == 0
        assert "Ana <a@x.com>" in runner.invoke(app, ["whoami"]).output

        assert runner.invoke(app, ["logout"]).exit_code == 0
        assert "Not logged in" in runner.invoke(app, ["whoami"]).output

        result = runner.invoke(app, ["login", "a@x.com"])
        assert result.exit_code == 0
        assert "Logged in as Ana" in result.output

    def test_login_unknown(self, cli_env):
        result = runner.invoke(app, ["login", "nobody@x.com"])
        assert result.exit_code == 1
        assert "Account not found" in result.output

    def test_signup_twice(self, cli_env):
        runner.invoke(app, ["signup", "a@x.com", "Ana"])
        result = runner.invoke(app, ["signup", "a@x.com", "Other"])
        assert result.exit_code == 1
        assert "Account already exists" in result.output


class TestHistoryCommands:
    @pytest.fixture
    def saved(self, cli_env, accounts, history_store, make_history_item):
        accounts.signup("a@x.com", "Ana")
        history_store.save_analysis("a@x.com", make_history_item("abc"))

    def test_history_requires_login(self, cli_env):
        result = runner.invoke(app, ["history"])
        assert result.exit_code == 1
        assert "Not logged in" in result.output

    def test_history_empty(self, cli_env, accounts):
        accounts.signup("a@x.com", "Ana")
        result = runner.invoke(app, ["history"])
        assert result.exit_code == 0
        assert "No saved analyses" in result.output

    def test_history_lists_items(self, saved):
        result = runner.invoke(app, ["history"])
        assert result.exit_code == 0
        assert "abc" in result.output

    def test_show(self, saved):
        result = runner.invoke(app, ["show", "abc"])
        assert result.exit_code == 0
        assert "78/100" in result.output

    def test_show_unknown(self, saved):
        assert runner.invoke(app, ["show", "zzz"]).exit_code == 1

    def test_export(self, saved, tmp_path):
        out = tmp_path / "r.md"
        result = runner.invoke(app, ["export", "abc", "-o", str(out)])
        assert result.exit_code == 0
        assert "## Requirements Matrix" in out.read_text(encoding="utf-8")

    def test_delete_with_yes(self, saved, history_store):
        result = runner.invoke(app, ["delete", "abc", "--yes"])
        assert "Deleted." in result.output
        assert history_store.get_history("a@x.com") == []

    def test_delete_declined(self, saved, history_store):
        result = runner.invoke(app, ["delete", "abc"], input="n\n")
        assert "Nothing deleted." in result.output
        assert len(history_store.get_history("a@x.com")) == 1

    def test_delete_confirmed_interactively(self, saved, history_store):
        runner.invoke(app, ["delete", "abc"], input="y\n")
        assert history_store.get_history("a@x.com") == []


class TestThemeCommand:
    def test_show_default(self, cli_env):
        assert runner.invoke(app, ["theme"]).output.strip() == "light"

    def test_set_dark(self, cli_env, preferences):
        result = runner.invoke(app, ["theme", "dark"])
        assert result.exit_code == 0
        assert preferences.get_theme() == "dark"

    def test_set_same_is_noop(self, cli_env, preferences):
        runner.invoke(app, ["theme", "light"])
        assert preferences.get_theme() == "light"

    def test_invalid(self, cli_env):
        assert runner.invoke(app, ["theme", "purple"]).exit_code == 1


class TestUsageCommand:
    def test_usage_reads_configured_store(self, tmp_path):
        config = AppConfig(
            storage=StorageConfig(db_path=str(tmp_path / "store.db")),
            usage=UsageConfig(db_path=str(tmp_path / "usage.db")),
        )
        with patch("cv_match.cli.load_config", return_value=config):
            result = runner.invoke(app, ["usage"])
        assert result.exit_code == 0
        assert "Runs: 0" in result.output
        assert UsageStore(tmp_path / "usage.db").get_logs() == []

    def test_usage_lists_recent_runs(self, tmp_path):
        config = AppConfig(
            storage=StorageConfig(db_path=str(tmp_path / "store.db")),
            usage=UsageConfig(db_path=str(tmp_path / "usage.db")),
        )
        store = UsageStore(config.usage.resolved_db_path)
        store.save_log(UsageLog(model="m", user_email="a@x.com", overall_score=81, estimated_cost_usd=0.02))
        store.save_log(UsageLog(model="m", user_email="b@x.com", success=False, error_message="boom"))

        with patch("cv_match.cli.load_config", return_value=config):
            result = runner.invoke(app, ["usage", "--list", "5"])
            filtered = runner.invoke(app, ["usage", "-n", "5", "--user", "b@x.com"])

        assert result.exit_code == 0
        assert "Runs: 2" in result.output
        assert "all time $0.0200" in result.output
        assert "81" in result.output
        assert "boom" in result.output
        assert "boom" in filtered.output
        assert "81" not in filtered.output.split("Recent runs")[1]

    def test_usage_list_empty(self, tmp_path):
        config = AppConfig(usage=UsageConfig(db_path=str(tmp_path / "usage.db")))
        with patch("cv_match.cli.load_config", return_value=config):
            result = runner.invoke(app, ["usage", "--list", "3"])
        assert "No runs recorded." in result.output
