from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path

from cuesync.core.exporter import EXPORT_FILENAME
from cuesync.core.session import DEFAULT_CUE_DURATION

MVP_OUTPUT_FORMAT = "srt"
SUPPORTED_OUTPUT_FORMATS = {MVP_OUTPUT_FORMAT}
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_OUTPUT_DIR = Path("./outputs")


@dataclass(frozen=True)
class AppConfig:
    default_cue_duration: float
    export_filename: str
    output_format: str
    output_dir: Path
    log_level: str


def normalize_output_format(value: str) -> str:
    fmt = value.strip().lower()
    if fmt not in SUPPORTED_OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format '{value}'. Allowed: {sorted(SUPPORTED_OUTPUT_FORMATS)}")
    return fmt


def normalize_log_level(value: str | None = None) -> str:
    raw = value if value is not None else os.getenv("CUESYNC_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    level = raw.strip().upper()
    if level not in SUPPORTED_LOG_LEVELS:
        raise ValueError(
            f"Unsupported log level '{raw}'. Allowed: {', '.join(SUPPORTED_LOG_LEVELS)}"
        )
    return level


def normalize_default_duration(value: float) -> float:
    duration = float(value)
    if not math.isfinite(duration) or duration <= 0:
        raise ValueError(f"default cue duration must be > 0, got {value}")
    return duration


def resolve_output_dir(custom_path: Path | None = None) -> Path:
    if custom_path is not None:
        return custom_path.expanduser().resolve()
    env_path = os.getenv("CUESYNC_OUTPUT_DIR")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return DEFAULT_OUTPUT_DIR.resolve()


def build_app_config(
    *,
    default_cue_duration: float = DEFAULT_CUE_DURATION,
    output_format: str = MVP_OUTPUT_FORMAT,
    output_dir: Path | None = None,
    log_level: str | None = None,
) -> AppConfig:
    return AppConfig(
        default_cue_duration=normalize_default_duration(default_cue_duration),
        export_filename=EXPORT_FILENAME,
        output_format=normalize_output_format(output_format),
        output_dir=resolve_output_dir(output_dir),
        log_level=normalize_log_level(log_level),
    )
