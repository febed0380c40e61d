from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, TypeVar

from dotenv import load_dotenv

from printcheck.core.errors import ConfigError
from printcheck.core.models import AssessmentConfig

T = TypeVar("T", int, float)

ENV_PREFIX = "PRINTCHECK_"


@dataclass(frozen=True)
class Settings:
    """
    Process-wide settings, read once at startup and never mutated.

    assessment:
        Thresholds handed to the assessor.
    max_upload_mb:
        Upload cap enforced by the HTTP layer before bytes reach the assessor.
    """
    assessment: AssessmentConfig = field(default_factory=AssessmentConfig)
    max_upload_mb: int = 5
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def _positive_number(env: Mapping[str, str], name: str, default: T, cast: Callable[[str], T]) -> T:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw.strip())
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from e
    if not value > 0:
        raise ConfigError(f"{ENV_PREFIX}{name} must be > 0, got {raw!r}")
    return value


def settings_from_env(env: Mapping[str, str]) -> Settings:
    defaults = Settings()
    base = defaults.assessment
    assessment = AssessmentConfig(
        default_target_dpi=_positive_number(env, "DEFAULT_TARGET_DPI", base.default_target_dpi, int),
        min_pct=_positive_number(env, "MIN_PCT", base.min_pct, float),
        max_blur_variance=_positive_number(env, "MAX_BLUR_VARIANCE", base.max_blur_variance, float),
    )
    return Settings(
        assessment=assessment,
        max_upload_mb=_positive_number(env, "MAX_UPLOAD_MB", defaults.max_upload_mb, int),
        host=env.get(ENV_PREFIX + "HOST", defaults.host),
        port=_positive_number(env, "PORT", defaults.port, int),
        log_level=env.get(ENV_PREFIX + "LOG_LEVEL", defaults.log_level).upper(),
    )


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Load a .env file (if present) into the environment, then build Settings from it."""
    load_dotenv(dotenv_path)
    return settings_from_env(os.environ)
