"""Tests for the typer CLI (rule-based analyzers only, no API calls)."""

import pytest
from typer.testing import CliRunner

from writing_annotator.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    config = tmp_path / "config.yaml"
    config.write_text(
        f"cache:\n  db_path: {tmp_path / 'cache.db'}\n"
        f"usage:\n  db_path: {tmp_path / 'usage.db'}\n"
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


@pytest.fixture
def essay(tmp_path):
    path = tmp_path / "essay.txt"
    path.write_text("Their are many resons. I beleive it was very good.", encoding="utf-8")
    return path


class TestCli:
    def test_analyze_json(self, essay):
        result = runner.invoke(app, ["analyze", str(essay), "--no-ai", "--json"])
        assert result.exit_code == 0, result.output
        assert '"resons"' in result.output
        assert '"reasons"' in result.output

    def test_analyze_missing_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "nope.txt"), "--no-ai"])
        assert result.exit_code == 1

    def test_analyze_unknown_analyzer(self, essay):
        result = runner.invoke(app, ["analyze", str(essay), "--only", "tone"])
        assert result.exit_code == 1

    def test_apply_to_output(self, essay, tmp_path):
        out = tmp_path / "fixed.txt"
        result = runner.invoke(app, ["apply", str(essay), "--no-ai", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text(encoding="utf-8") == "There are many reasons. I believe it was good."
        assert essay.read_text(encoding="utf-8").startswith("Their are")

    def test_apply_errors_in_place(self, essay):
        result = runner.invoke(app, ["apply", str(essay), "--no-ai", "--errors"])
        assert result.exit_code == 0, result.output
        assert essay.read_text(encoding="utf-8") == "Their are many reasons. I believe it was very good."

    def test_stats(self, essay):
        result = runner.invoke(app, ["stats", str(essay)])
        assert result.exit_code == 0
        assert "Words" in result.output

    def test_stats_shows_tone(self, tmp_path):
        path = tmp_path / "hedged.txt"
        path.write_text(
            "Maybe I could possibly study biology. I think it might suit me, perhaps.",
            encoding="utf-8",
        )
        result = runner.invoke(app, ["stats", str(path)])
        assert result.exit_code == 0
        assert "Tone: uncertain" in result.output

    def test_stats_short_text_skips_tone(self, tmp_path):
        path = tmp_path / "short.txt"
        path.write_text("A short note.", encoding="utf-8")
        result = runner.invoke(app, ["stats", str(path)])
        assert result.exit_code == 0
        assert "too short" in result.output

    def test_usage_after_run(self, essay):
        runner.invoke(app, ["analyze", str(essay), "--no-ai"])
        result = runner.invoke(app, ["usage"])
        assert result.exit_code == 0
        assert "analyze" in result.output
