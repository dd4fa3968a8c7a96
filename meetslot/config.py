"""
Centralized configuration with environment variable overrides.

Slot granularity, offered durations, booking field limits and the copy-forward
window are all configurable here. Nothing is hardcoded in scheduling logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_int_list(env_var: str, default: str) -> tuple[int, ...]:
    """Parse a comma-separated list of integers, e.g. ``"15,30,45,60"``."""
    raw = os.getenv(env_var, default)
    try:
        return tuple(int(part) for part in raw.split(",") if part.strip())
    except (ValueError, TypeError, AttributeError):
        raise ValueError(
            f"Invalid integer list for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class SchedulingConfig:
    """Slot resolution and admission settings."""

    occupancy_step_minutes: int = _safe_int("OCCUPANCY_STEP_MINUTES", "15")
    default_buffer_minutes: int = _safe_int("DEFAULT_BUFFER_MINUTES", "0")
    duration_options: tuple[int, ...] = _safe_int_list("DURATION_OPTIONS", "15,30,45,60")
    copy_forward_offset_days: int = _safe_int("COPY_FORWARD_OFFSET_DAYS", "7")
    copy_forward_window_days: int = _safe_int("COPY_FORWARD_WINDOW_DAYS", "14")
    admission_attempts: int = _safe_int("ADMISSION_ATTEMPTS", "3")


@dataclass(frozen=True)
class BookingLimits:
    """Upper bounds on requester-supplied booking fields."""

    max_name_length: int = _safe_int("MAX_NAME_LENGTH", "100")
    max_subject_length: int = _safe_int("MAX_SUBJECT_LENGTH", "200")
    max_location_length: int = _safe_int("MAX_LOCATION_LENGTH", "200")
    max_invitees: int = _safe_int("MAX_INVITEES", "10")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    limits: BookingLimits = field(default_factory=BookingLimits)
    app_base_url: str = os.getenv("APP_BASE_URL", "http://localhost:3000")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    step = config.scheduling.occupancy_step_minutes
    if step < 1 or 60 % step != 0:
        raise ValueError(
            f"OCCUPANCY_STEP_MINUTES must be >= 1 and divide 60, got {step}"
        )
    if config.scheduling.default_buffer_minutes < 0:
        raise ValueError(
            "DEFAULT_BUFFER_MINUTES must be >= 0, "
            f"got {config.scheduling.default_buffer_minutes}"
        )
    if not config.scheduling.duration_options:
        raise ValueError("DURATION_OPTIONS must list at least one duration")
    for duration in config.scheduling.duration_options:
        if not 15 <= duration <= 480:
            raise ValueError(
                f"DURATION_OPTIONS entries must be between 15 and 480, got {duration}"
            )

    for name, value in [
        ("COPY_FORWARD_OFFSET_DAYS", config.scheduling.copy_forward_offset_days),
        ("COPY_FORWARD_WINDOW_DAYS", config.scheduling.copy_forward_window_days),
        ("ADMISSION_ATTEMPTS", config.scheduling.admission_attempts),
        ("MAX_NAME_LENGTH", config.limits.max_name_length),
        ("MAX_SUBJECT_LENGTH", config.limits.max_subject_length),
        ("MAX_LOCATION_LENGTH", config.limits.max_location_length),
        ("MAX_INVITEES", config.limits.max_invitees),
    ]:
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")

    if not config.app_base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"APP_BASE_URL must be an http(s) URL, got {config.app_base_url!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded (base URL '%s')", config.app_base_url)
    return config


# Singleton instance
settings = load_config()
