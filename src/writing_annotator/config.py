"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


def _check_range(name: str, value: float, low: float, high: float) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-haiku-4-5-20251001"
    max_retries: int = 3
    timeout: int = 120
    max_concurrency: int = 4

    def __post_init__(self):
        _check_range("max_retries", self.max_retries, 1, 10)
        _check_range("timeout", self.timeout, 1, 600)
        _check_range("max_concurrency", self.max_concurrency, 1, 32)


@dataclass(frozen=True)
class AnalysisConfig:
    analyzers: tuple[str, ...] = (
        "spelling", "word-usage", "style",
        "grammar", "conciseness", "vocabulary", "goal-alignment",
    )
    analyzer_timeout: float = 60.0
    spelling_dictionary: str | None = None

    def __post_init__(self):
        # YAML gives lists; keep the frozen config hashable
        object.__setattr__(self, "analyzers", tuple(self.analyzers))
        if not self.analyzers:
            raise ValueError("analyzers must name at least one analyzer")
        _check_range("analyzer_timeout", self.analyzer_timeout, 1, 600)


@dataclass(frozen=True)
class CacheConfig:
    enabled: bool = True
    ttl_days: int = 7
    db_path: str = "~/.writing-annotator/cache.db"

    def __post_init__(self):
        _check_range("ttl_days", self.ttl_days, 1, 365)

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class UsageConfig:
    enabled: bool = True
    db_path: str = "~/.writing-annotator/usage.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    usage: UsageConfig = field(default_factory=UsageConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        analysis=AnalysisConfig(**raw.get("analysis", {})),
        cache=CacheConfig(**raw.get("cache", {})),
        usage=UsageConfig(**raw.get("usage", {})),
    )
