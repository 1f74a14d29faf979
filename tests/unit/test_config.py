"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from aisast.config import AisastConfig, load_config_file
from aisast.errors import ConfigError


def test_defaults():
    config = AisastConfig()
    assert config.llm.provider == "groq"
    assert config.llm.resolved_model == "llama3-70b-8192"
    assert config.llm.resolved_base_url == "https://api.groq.com/openai/v1"
    assert config.web.port == 8480
    assert config.validate() == []


def test_load_yaml(tmp_path: Path, monkeypatch):
    for var in ("AISAST_PROVIDER", "AISAST_API_KEY", "OPENAI_API_KEY", "AISAST_ENRICH"):
        monkeypatch.delenv(var, raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(
        "llm:\n"
        "  provider: openai\n"
        "  timeout: 5\n"
        "scan:\n"
        "  exclude_patterns: [vendor]\n"
        "web:\n"
        "  port: 9000\n"
    )
    config = AisastConfig.load(path)
    assert config.llm.provider == "openai"
    assert config.llm.timeout == 5
    assert config.scan.exclude_patterns == ["vendor"]
    assert config.web.port == 9000


def test_env_overrides_file(tmp_path: Path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("llm:\n  provider: openai\n")
    monkeypatch.setenv("AISAST_PROVIDER", "anthropic")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ak")
    config = AisastConfig.load(path)
    assert config.llm.provider == "anthropic"
    assert config.llm.api_key == "ak"


def test_apply_env():
    config = AisastConfig()
    config.apply_env(
        {
            "GROQ_API_KEY": "gk",
            "AISAST_TIMEOUT": "7.5",
            "AISAST_MAX_CONCURRENCY": "2",
            "AISAST_ENRICH": "false",
            "SONARQUBE_URL": "http://sonar.local:9000",
            "SONARQUBE_TOKEN": "st",
        }
    )
    assert config.llm.api_key == "gk"
    assert config.llm.timeout == 7.5
    assert config.llm.max_concurrency == 2
    assert config.llm.enabled is False
    assert config.sonarqube.url == "http://sonar.local:9000"
    assert config.sonarqube.token == "st"


def test_unknown_keys_ignored(caplog):
    config = AisastConfig()
    config.merge({"llm": {"provider": "openai", "bogus": 1}})
    assert config.llm.provider == "openai"
    assert "bogus" in caplog.text


def test_section_must_be_mapping():
    with pytest.raises(ConfigError, match="mapping"):
        AisastConfig().merge({"llm": ["not", "a", "mapping"]})


def test_yaml_must_be_mapping(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config_file(path)


def test_invalid_yaml(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("llm: [unclosed\n")
    with pytest.raises(ConfigError):
        load_config_file(path)


def test_empty_yaml(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config_file(path) == {}


def test_missing_file():
    with pytest.raises(ConfigError):
        load_config_file("/nonexistent/aisast.yaml")


@pytest.mark.parametrize(
    "section,key,value,fragment",
    [
        ("llm", "timeout", 0.5, "timeout"),
        ("llm", "confidence_threshold", 150, "confidence"),
        ("llm", "max_tokens", 50, "tokens"),
        ("llm", "temperature", 3.0, "temperature"),
        ("llm", "provider", "mystery", "provider"),
        ("sonarqube", "url", "not a url", "URL"),
        ("sonarqube", "timeout", 1000, "SonarQube timeout"),
    ],
)
def test_validate(section, key, value, fragment):
    config = AisastConfig()
    setattr(getattr(config, section), key, value)
    errors = config.validate()
    assert any(fragment in e for e in errors)


def test_yaml_values_coerced(tmp_path: Path, monkeypatch):
    for var in ("AISAST_TIMEOUT", "AISAST_ENRICH", "AISAST_MAX_CONCURRENCY", "SONARQUBE_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    path = tmp_path / "config.yaml"
    path.write_text('llm:\n  timeout: "12"\n  enabled: "no"\n  max_concurrency: 3\nsonarqube:\n  token: 12345\n')
    config = AisastConfig.load(path)
    assert config.llm.timeout == 12.0
    assert config.llm.enabled is False
    assert config.llm.max_concurrency == 3
    assert config.sonarqube.token == "12345"


@pytest.mark.parametrize(
    "data,name",
    [
        ({"llm": {"timeout": "abc"}}, "llm.timeout"),
        ({"llm": {"max_concurrency": 2.5}}, "llm.max_concurrency"),
        ({"llm": {"enabled": "maybe"}}, "llm.enabled"),
        ({"scan": {"exclude_patterns": "vendor"}}, "scan.exclude_patterns"),
        ({"web": {"port": True}}, "web.port"),
    ],
)
def test_bad_yaml_value_is_config_error(data, name):
    with pytest.raises(ConfigError, match=name):
        AisastConfig().merge(data)


def test_bad_env_value_is_config_error():
    with pytest.raises(ConfigError, match="AISAST_TIMEOUT"):
        AisastConfig().apply_env({"AISAST_TIMEOUT": "soon"})
