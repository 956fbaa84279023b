"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

THEMES = ("light", "dark")


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-sonnet-4-5-20250929"
    temperature: float = 0.4
    max_tokens: int = 8192
    timeout: int = 120

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 1.0:
            raise ValueError(f"llm.temperature must be between 0 and 1, got {self.temperature}")
        if self.timeout < 1:
            raise ValueError(f"llm.timeout must be >= 1, got {self.timeout}")
        if self.max_tokens < 1:
            raise ValueError(f"llm.max_tokens must be >= 1, got {self.max_tokens}")


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "~/.cv-match/store.db"
    user_prefix: str = "cv_analyzer_user_"
    history_prefix: str = "cv_analyzer_history_"
    active_user_key: str = "cv_analyzer_active_user"
    theme_key: str = "theme"
    default_theme: str = "light"

    def __post_init__(self) -> None:
        for name in ("user_prefix", "history_prefix", "active_user_key", "theme_key"):
            if not getattr(self, name):
                raise ValueError(f"storage.{name} must not be empty")
        if self.user_prefix == self.history_prefix:
            raise ValueError("storage.user_prefix and storage.history_prefix must differ")
        if self.default_theme not in THEMES:
            raise ValueError(f"storage.default_theme must be one of {THEMES}, got {self.default_theme!r}")

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class UsageConfig:
    enabled: bool = True
    db_path: str = "~/.cv-match/usage.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    usage: UsageConfig = field(default_factory=UsageConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
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
        storage=StorageConfig(**raw.get("storage", {})),
        usage=UsageConfig(**raw.get("usage", {})),
    )
