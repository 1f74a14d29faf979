"""Configuration — XDG paths, YAML file, env vars, defaults."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from urllib.parse import urlparse

import yaml

from aisast.errors import ConfigError

logger = logging.getLogger(__name__)

PROVIDERS = ("openai", "groq", "anthropic", "ollama")

_DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "groq": "llama3-70b-8192",
    "anthropic": "claude-3-5-haiku-latest",
    "ollama": "llama3",
}

_DEFAULT_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "groq": "https://api.groq.com/openai/v1",
    "anthropic": "https://api.anthropic.com",
    "ollama": "http://127.0.0.1:11434",
}

_KEY_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "groq": "GROQ_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "aisast"
    return Path.home() / ".config" / "aisast"


@dataclass
class LLMConfig:
    """External completion service settings."""

    provider: str = "groq"
    model: str = ""
    api_key: str = ""
    base_url: str = ""
    enabled: bool = True
    timeout: float = 20.0  # per call, seconds
    deadline: float = 60.0  # whole scan, seconds
    max_concurrency: int = 4
    max_tokens: int = 1000
    temperature: float = 0.2
    confidence_threshold: int = 85

    @property
    def resolved_model(self) -> str:
        return self.model or _DEFAULT_MODELS.get(self.provider, "")

    @property
    def resolved_base_url(self) -> str:
        return (self.base_url or _DEFAULT_BASE_URLS.get(self.provider, "")).rstrip("/")

    @property
    def needs_api_key(self) -> bool:
        return self.provider != "ollama"


@dataclass
class ScanConfig:
    """Scanner and fix applier settings."""

    default_language: str = "generic"
    exclude_patterns: list[str] = field(default_factory=list)
    max_file_size: int = 1_048_576


@dataclass
class SonarQubeConfig:
    """SonarQube boundary adapter settings."""

    url: str = "http://localhost:9000"
    token: str = ""
    project_key: str = "sast-integration"
    timeout: float = 30.0


@dataclass
class WebConfig:
    """Dashboard API settings."""

    host: str = "127.0.0.1"
    port: int = 8480
    max_sessions: int = 100


@dataclass
class AisastConfig:
    """Application-wide configuration, passed explicitly to each pipeline."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    sonarqube: SonarQubeConfig = field(default_factory=SonarQubeConfig)
    web: WebConfig = field(default_factory=WebConfig)
    config_dir: Path = field(default_factory=_default_config_dir)
    verbose: bool = False

    @classmethod
    def load(cls, path: str | Path | None = None) -> AisastConfig:
        """Load config: YAML file (explicit or XDG default), then env overrides."""
        config = cls()

        if path is not None:
            config.merge(load_config_file(path))
        else:
            default_file = config.config_dir / "config.yaml"
            if default_file.is_file():
                config.merge(load_config_file(default_file))

        config.apply_env(os.environ)
        return config

    def merge(self, data: dict) -> None:
        """Overlay a nested mapping (as read from YAML) onto this config."""
        for section_name, section in (
            ("llm", self.llm),
            ("scan", self.scan),
            ("sonarqube", self.sonarqube),
            ("web", self.web),
        ):
            values = data.get(section_name) or {}
            if not isinstance(values, dict):
                raise ConfigError(f"Config section '{section_name}' must be a mapping")
            known = {f.name: f for f in fields(section)}
            for key, value in values.items():
                if key not in known:
                    logger.warning("Ignoring unknown config key %s.%s", section_name, key)
                    continue
                setattr(
                    section, key, _coerce(f"{section_name}.{key}", value, getattr(section, key))
                )

    def apply_env(self, env: Mapping[str, str]) -> None:
        """Apply environment variable overrides."""
        provider = env.get("AISAST_PROVIDER")
        if provider:
            self.llm.provider = provider.lower()
        if env.get("AISAST_MODEL"):
            self.llm.model = env["AISAST_MODEL"]
        if env.get("AISAST_BASE_URL"):
            self.llm.base_url = env["AISAST_BASE_URL"]

        api_key = env.get("AISAST_API_KEY") or env.get(
            _KEY_ENV_VARS.get(self.llm.provider, ""), ""
        )
        if api_key:
            self.llm.api_key = api_key

        for var, section, key in (
            ("AISAST_ENRICH", self.llm, "enabled"),
            ("AISAST_TIMEOUT", self.llm, "timeout"),
            ("AISAST_DEADLINE", self.llm, "deadline"),
            ("AISAST_MAX_CONCURRENCY", self.llm, "max_concurrency"),
            ("AISAST_WEB_PORT", self.web, "port"),
        ):
            if env.get(var):
                setattr(section, key, _coerce(var, env[var], getattr(section, key)))
        if env.get("SONARQUBE_URL"):
            self.sonarqube.url = env["SONARQUBE_URL"]
        if env.get("SONARQUBE_TOKEN"):
            self.sonarqube.token = env["SONARQUBE_TOKEN"]

    def validate(self) -> list[str]:
        """Return a list of human-readable problems (empty when valid)."""
        errors: list[str] = []

        if self.llm.provider not in PROVIDERS:
            errors.append(
                f"Unknown LLM provider '{self.llm.provider}' "
                f"(expected one of: {', '.join(PROVIDERS)})"
            )
        if not 1 <= self.llm.timeout <= 300:
            errors.append("LLM timeout must be between 1 and 300 seconds")
        if self.llm.deadline < self.llm.timeout:
            errors.append("Scan deadline must not be shorter than the per-call timeout")
        if self.llm.max_concurrency < 1:
            errors.append("LLM max concurrency must be at least 1")
        if not 0 <= self.llm.confidence_threshold <= 100:
            errors.append("AI confidence threshold must be between 0 and 100")
        if not 100 <= self.llm.max_tokens <= 8000:
            errors.append("AI max tokens must be between 100 and 8000")
        if not 0 <= self.llm.temperature <= 2:
            errors.append("AI temperature must be between 0 and 2")
        if self.llm.base_url and not _is_valid_url(self.llm.base_url):
            errors.append("LLM base URL is not valid")

        if not _is_valid_url(self.sonarqube.url):
            errors.append("SonarQube URL is not valid")
        if not 1 <= self.sonarqube.timeout <= 300:
            errors.append("SonarQube timeout must be between 1 and 300 seconds")

        return errors


def load_config_file(path: str | Path) -> dict:
    """Read a YAML config file into a mapping."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")
    return data


def _is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _coerce(name: str, value, current):
    """Convert ``value`` to the type of the field's current value. Raises ConfigError."""
    expected = type(current)
    try:
        if expected is bool:
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.strip().lower() in _TRUE + _FALSE:
                return value.strip().lower() in _TRUE
        elif expected is int:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
            if isinstance(value, str):
                return int(value.strip())
        elif expected is float:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
            if isinstance(value, str):
                return float(value.strip())
        elif expected is list:
            if isinstance(value, list) and all(isinstance(v, str) for v in value):
                return list(value)
        elif value is None:
            return ""
        elif isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return str(value)
    except ValueError:
        pass
    raise ConfigError(f"Config value {name} must be {expected.__name__}, got {value!r}")
