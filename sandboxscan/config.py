"""Configuration loading for sandboxscan (.sandboxscan.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".sandboxscan.yml"

DEFAULT_PRUNED_DIRS = ("node_modules", ".git", "dist", "build")
DEFAULT_EXTENSIONS = (".jsx", ".js", ".tsx", ".ts", ".css", ".json")
DEFAULT_STRUCTURE_EXCLUDES = ("node_modules", ".git")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LogConfig:
    """Where the dev server leaves its logs and how much of them to read."""

    error_snapshot: str = "/tmp/vite-errors.json"
    directory: str = "/tmp"
    name_pattern: str = "*vite*"
    max_error_files: int = 3
    max_status_files: int = 2
    max_process_lines: int = 3
    tail_lines: int = 10


@dataclass
class ScanConfig:
    """Settings for discovery, retrieval and log mining."""

    root: str = "."
    size_threshold: int = 10_000
    structure_limit: int = 50
    pruned_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_PRUNED_DIRS))
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    structure_excludes: List[str] = field(
        default_factory=lambda: list(DEFAULT_STRUCTURE_EXCLUDES)
    )
    stat_args: List[str] = field(default_factory=lambda: ["-c", "%s"])
    logs: LogConfig = field(default_factory=LogConfig)


def load_config(config_path: Path) -> ScanConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    if not config_file.exists():
        return ScanConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = ScanConfig()
    root = _as_str(data.get("root"))
    if root:
        config.root = root
    config.size_threshold = _as_positive_int(
        data.get("size_threshold"), config.size_threshold, "size_threshold"
    )
    config.structure_limit = _as_positive_int(
        data.get("structure_limit"), config.structure_limit, "structure_limit"
    )
    if "pruned_dirs" in data:
        config.pruned_dirs = _as_str_list(data.get("pruned_dirs"))
    if "extensions" in data:
        config.extensions = [_as_extension(item) for item in _as_str_list(data.get("extensions"))]
    if "structure_excludes" in data:
        config.structure_excludes = _as_str_list(data.get("structure_excludes"))
    stat_args = _as_str_list(data.get("stat_args"))
    if stat_args:
        config.stat_args = stat_args

    log_data = _as_dict(data.get("logs"))
    if log_data:
        logs = config.logs
        logs.error_snapshot = _as_str(log_data.get("error_snapshot")) or logs.error_snapshot
        logs.directory = _as_str(log_data.get("directory")) or logs.directory
        logs.name_pattern = _as_str(log_data.get("name_pattern")) or logs.name_pattern
        logs.max_error_files = _as_positive_int(
            log_data.get("max_error_files"), logs.max_error_files, "logs.max_error_files"
        )
        logs.max_status_files = _as_positive_int(
            log_data.get("max_status_files"), logs.max_status_files, "logs.max_status_files"
        )
        logs.max_process_lines = _as_positive_int(
            log_data.get("max_process_lines"), logs.max_process_lines, "logs.max_process_lines"
        )
        logs.tail_lines = _as_positive_int(
            log_data.get("tail_lines"), logs.tail_lines, "logs.tail_lines"
        )

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
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


def _as_positive_int(value: Any, default: int, name: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a positive integer")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a positive integer") from exc
    if number <= 0:
        raise ConfigError(f"{name} must be a positive integer")
    return number


def _as_extension(value: str) -> str:
    value = value.strip()
    return value if value.startswith(".") else f".{value}"


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "LogConfig", "ScanConfig", "load_config"]
