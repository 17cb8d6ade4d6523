"""Configuration loading for sigscan (.sigscan.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .collector import DEFAULT_MIN_SIGNATURE_SIZE

CONFIG_FILENAME = ".sigscan.yml"

REPORT_FORMATS = ("text", "json")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ReportConfig:
    """How results are rendered."""

    format: str = "text"
    limit: Optional[int] = None


@dataclass
class SigScanConfig:
    """Represents the settings defined in .sigscan.yml."""

    root: Path
    min_signature_size: int = DEFAULT_MIN_SIGNATURE_SIZE
    input_format: Optional[str] = None
    report: ReportConfig = field(default_factory=ReportConfig)
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> SigScanConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SigScanConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = SigScanConfig(root=root)

    signatures_data = _as_dict(data.get("signatures"))
    if "min_size" in signatures_data:
        min_size = _as_int(signatures_data.get("min_size"))
        if min_size is None or min_size < 0:
            raise ConfigError("signatures.min_size must be a non-negative integer")
        config.min_signature_size = min_size

    input_data = _as_dict(data.get("input"))
    input_format = _as_str(input_data.get("format"))
    if input_format:
        config.input_format = input_format.lower()

    report_data = _as_dict(data.get("report"))
    if report_data:
        report_format = (_as_str(report_data.get("format")) or "text").lower()
        if report_format not in REPORT_FORMATS:
            raise ConfigError(
                f"report.format must be one of {', '.join(REPORT_FORMATS)}"
            )
        limit = _as_int(report_data.get("limit"))
        if limit is not None and limit < 1:
            raise ConfigError("report.limit must be a positive integer")
        config.report = ReportConfig(format=report_format, limit=limit)

    log_file = _as_str(data.get("log_file"))
    if log_file:
        config.log_file = root / log_file

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None
