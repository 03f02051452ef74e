"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from review_suggest.models.request import Tone


def _check_range(name: str, value: float, low: float, high: float | None = None) -> None:
    if value < low or (high is not None and value > high):
        bound = f">= {low}" if high is None else f"between {low} and {high}"
        raise ValueError(f"{name} must be {bound}, got {value}")


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-haiku-4-5-20251001"
    temperature: float = 0.8
    max_tokens: int = 1500
    timeout: float = 10.0  # seconds, per upstream request

    def __post_init__(self) -> None:
        _check_range("temperature", self.temperature, 0.0, 1.0)
        _check_range("max_tokens", self.max_tokens, 64)
        _check_range("timeout", self.timeout, 1)


@dataclass(frozen=True)
class GeneratorConfig:
    max_attempts: int = 3
    overall_timeout: float = 8.0  # seconds, whole generate() call
    backoff_multiplier: float = 0.5
    backoff_max: float = 2.0
    default_count: int = 3
    default_tone: str = Tone.PROFESSIONAL.value
    default_language: str = "English"
    avoid_recent: int = 5

    def __post_init__(self) -> None:
        _check_range("max_attempts", self.max_attempts, 1, 5)
        if self.overall_timeout <= 0:
            raise ValueError(f"overall_timeout must be > 0, got {self.overall_timeout}")
        _check_range("backoff_multiplier", self.backoff_multiplier, 0)
        _check_range("backoff_max", self.backoff_max, 0)
        _check_range("default_count", self.default_count, 1, 10)
        _check_range("avoid_recent", self.avoid_recent, 0, 20)
        tones = [t.value for t in Tone]
        if self.default_tone not in tones:
            raise ValueError(f"default_tone must be one of {tones}, got {self.default_tone!r}")


@dataclass(frozen=True)
class RateLimitConfig:
    max_per_minute: int = 10
    max_per_hour: int = 100
    cache_duration_ms: int = 3_600_000

    def __post_init__(self) -> None:
        _check_range("max_per_minute", self.max_per_minute, 1)
        _check_range("max_per_hour", self.max_per_hour, 1)
        _check_range("cache_duration_ms", self.cache_duration_ms, 1000)

    @property
    def cache_duration_seconds(self) -> float:
        return self.cache_duration_ms / 1000


@dataclass(frozen=True)
class DedupConfig:
    max_entries_per_key: int = 20
    fingerprint_length: int = 60

    def __post_init__(self) -> None:
        _check_range("max_entries_per_key", self.max_entries_per_key, 1, 1000)
        _check_range("fingerprint_length", self.fingerprint_length, 8)


@dataclass(frozen=True)
class LogConfig:
    enabled: bool = False
    db_path: str = "~/.review-suggest/generations.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    log: LogConfig = field(default_factory=LogConfig)


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
        generator=GeneratorConfig(**raw.get("generator", {})),
        rate_limit=RateLimitConfig(**raw.get("rate_limit", {})),
        dedup=DedupConfig(**raw.get("dedup", {})),
        log=LogConfig(**raw.get("log", {})),
    )
