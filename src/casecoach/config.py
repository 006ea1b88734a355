"""Runtime settings resolved from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

DEFAULT_HOME = ".casecoach"
DEFAULT_API_URL = "https://chat-api.tamu.ai/v1/chat/completions"
DEFAULT_MODEL = "protected.gemini-2.0-flash-lite"
DEFAULT_TEMPERATURE = 0.8
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_LOG_LEVEL = "INFO"

DB_FILENAME = "casecoach.db"
LOG_FILENAME = "casecoach.log"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup."""

    data_dir: Path
    catalog_path: Path | None
    api_url: str
    model: str
    temperature: float
    timeout_seconds: float
    log_level: str

    @property
    def db_path(self) -> Path:
        return self.data_dir / DB_FILENAME

    @property
    def log_path(self) -> Path:
        return self.data_dir / LOG_FILENAME

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``CASECOACH_*`` variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        catalog = env.get("CASECOACH_CATALOG", "").strip()
        return cls(
            data_dir=Path(env.get("CASECOACH_HOME", "").strip() or DEFAULT_HOME),
            catalog_path=Path(catalog) if catalog else None,
            api_url=env.get("CASECOACH_API_URL", "").strip() or DEFAULT_API_URL,
            model=env.get("CASECOACH_MODEL", "").strip() or DEFAULT_MODEL,
            temperature=_float_setting(env, "CASECOACH_TEMPERATURE", DEFAULT_TEMPERATURE),
            timeout_seconds=_float_setting(env, "CASECOACH_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            log_level=(env.get("CASECOACH_LOG_LEVEL", "").strip() or DEFAULT_LOG_LEVEL).upper(),
        )

    def with_overrides(
        self,
        *,
        data_dir: Path | str | None = None,
        catalog_path: Path | str | None = None,
        log_level: str | None = None,
    ) -> Settings:
        """Return a copy with command-line overrides applied."""
        updated = self
        if data_dir is not None:
            updated = replace(updated, data_dir=Path(data_dir))
        if catalog_path is not None:
            updated = replace(updated, catalog_path=Path(catalog_path))
        if log_level is not None:
            updated = replace(updated, log_level=log_level.upper())
        return updated


def _float_setting(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}.") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}.")
    return value
