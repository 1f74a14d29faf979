"""Tests for CLI commands using Click's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from aisast.cli import main


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    # No user config file and no credentials leak into CLI runs
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for var in ("AISAST_API_KEY", "GROQ_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "AISAST_PROVIDER"):
        monkeypatch.delenv(var, raising=False)


def test_main_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "aisast" in result.output
    assert "scan" in result.output
    assert "fix" in result.output


def test_main_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_scan_help():
    runner = CliRunner()
    result = runner.invoke(main, ["scan", "--help"])
    assert result.exit_code == 0
    assert "PATH" in result.output


def test_scan_clean_directory(tmp_path: Path):
    (tmp_path / "ok.py").write_text("x = 1\n")
    runner = CliRunner()
    result = runner.invoke(main, ["scan", str(tmp_path)])
    assert result.exit_code == 0


def test_scan_critical_exits_1(tmp_path: Path):
    (tmp_path / "app.js").write_text("const d = eval(input);\n")
    runner = CliRunner()
    result = runner.invoke(main, ["scan", str(tmp_path)])
    assert result.exit_code == 1


def test_scan_json(tmp_path: Path):
    path = tmp_path / "util.py"
    path.write_text("cfg = yaml.load(stream)\n")
    runner = CliRunner()
    result = runner.invoke(main, ["scan", str(path), "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["filesScanned"] == 1
    assert data["vulnerabilities"][0]["ruleId"] == "python:yaml-load"


def test_scan_language_override(tmp_path: Path):
    path = tmp_path / "snippet.txt"
    path.write_text("obj = pickle.loads(data)\n")
    runner = CliRunner()
    result = runner.invoke(main, ["scan", str(path), "--language", "python", "--json"])
    data = json.loads(result.stdout)
    assert data["vulnerabilities"][0]["ruleId"] == "python:pickle"


def test_scan_enrich_without_provider(tmp_path: Path):
    (tmp_path / "a.py").write_text("x = 1\n")
    runner = CliRunner()
    result = runner.invoke(main, ["scan", str(tmp_path), "--enrich"])
    assert result.exit_code == 0
    assert "Enrichment unavailable" in result.output


def test_fix_writes_file(tmp_path: Path):
    path = tmp_path / "app.js"
    path.write_text("const a = eval(x);\ndocument.write(y);\n")
    runner = CliRunner()
    result = runner.invoke(main, ["fix", str(path), "--write"])
    assert result.exit_code == 0
    content = path.read_text()
    assert "JSON.parse(x)" in content
    assert "// AISAST:" in content


def test_fix_prints_diff(tmp_path: Path):
    path = tmp_path / "app.py"
    path.write_text("digest = hashlib.md5(data)\n")
    runner = CliRunner()
    result = runner.invoke(main, ["fix", str(path)])
    assert result.exit_code == 0
    assert "+digest = hashlib.sha256(data)" in result.stdout
    assert path.read_text() == "digest = hashlib.md5(data)\n"


def test_catalog_lists_rules():
    runner = CliRunner()
    result = runner.invoke(main, ["catalog", "python"])
    assert result.exit_code == 0
    assert "python:eval" in result.output
    assert "javascript:eval" not in result.output


def test_status():
    runner = CliRunner()
    result = runner.invoke(main, ["status"])
    assert result.exit_code == 0
    assert "no credentials" in result.output


def test_config_option(tmp_path: Path):
    path = tmp_path / "aisast.yaml"
    path.write_text("llm:\n  enabled: false\n")
    runner = CliRunner()
    result = runner.invoke(main, ["--config", str(path), "status"])
    assert result.exit_code == 0
    assert "disabled" in result.output


def test_bad_config(tmp_path: Path):
    path = tmp_path / "aisast.yaml"
    path.write_text("- not\n- a mapping\n")
    runner = CliRunner()
    result = runner.invoke(main, ["--config", str(path), "status"])
    assert result.exit_code != 0
    assert "mapping" in result.output


def test_bad_env_value(monkeypatch):
    monkeypatch.setenv("AISAST_MAX_CONCURRENCY", "lots")
    runner = CliRunner()
    result = runner.invoke(main, ["status"])
    assert result.exit_code == 1
    assert "AISAST_MAX_CONCURRENCY" in result.output
    assert "Traceback" not in result.output
