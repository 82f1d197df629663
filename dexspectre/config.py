"""Configuration system for DexSpectre.
Supports TOML configuration files with project-level and user-level settings.
"""
from __future__ import annotations
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from dexspectre.core.context import DEFAULT_CALL_DEPTH
from dexspectre.logging import DexSpectreLogger, LogLevel
CONFIG_FILES = [
    "dexspectre.toml",
    ".dexspectre.toml",
    "pyproject.toml",
]
@dataclass
class LimitsConfig:
    """Resource limits for analysis."""
    max_call_depth: int = DEFAULT_CALL_DEPTH
    def to_dict(self) -> dict[str, Any]:
        return {"max_call_depth": self.max_call_depth}
@dataclass
class AnalysisConfig:
    """Configuration for call-site handling."""
    emulation: bool = True
    cache_mutability: bool = True
    cache_size: int = 1024
    final_classes: list[str] = field(default_factory=list)
    non_final_classes: list[str] = field(default_factory=list)
    def to_dict(self) -> dict[str, Any]:
        return {
            "emulation": self.emulation,
            "cache_mutability": self.cache_mutability,
            "cache_size": self.cache_size,
            "final_classes": self.final_classes,
            "non_final_classes": self.non_final_classes,
        }
@dataclass
class OutputConfig:
    """Configuration for diagnostics output."""
    level: str = "info"
    color: bool = True
    log_file: str | None = None
    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level, "color": self.color, "log_file": self.log_file}
    def create_logger(self) -> DexSpectreLogger:
        """Build a logger honouring these settings."""
        return DexSpectreLogger(
            level=LogLevel.parse(self.level),
            color=self.color,
            file_path=Path(self.log_file) if self.log_file else None,
        )
@dataclass
class DexSpectreConfig:
    """Main configuration for DexSpectre."""
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    project_root: Path | None = None
    config_file: Path | None = None
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "limits": self.limits.to_dict(),
            "analysis": self.analysis.to_dict(),
            "output": self.output.to_dict(),
        }
    def to_toml(self) -> str:
        """Generate TOML configuration string."""
        lines = ["[tool.dexspectre]"]
        for section, values in self.to_dict().items():
            lines.append("")
            lines.append(f"[tool.dexspectre.{section}]")
            for key, value in values.items():
                if value is None:
                    continue
                lines.append(f"{key} = {_toml_value(value)}")
        return "\n".join(lines) + "\n"
def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(v) for v in value) + "]"
    return str(value)
def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find configuration file by walking up directory tree."""
    if start_dir is None:
        start_dir = Path.cwd()
    current = start_dir.resolve()
    while current != current.parent:
        for config_name in CONFIG_FILES:
            config_path = current / config_name
            if config_path.exists():
                return config_path
        current = current.parent
    home = Path.home()
    for config_name in [".dexspectre.toml", "dexspectre.toml"]:
        config_path = home / config_name
        if config_path.exists():
            return config_path
    return None
def load_config(
    config_path: Path | None = None,
    start_dir: Path | None = None,
) -> DexSpectreConfig:
    """Load configuration from file or use defaults.
    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching for config
    Returns:
        Loaded configuration
    Raises:
        ValueError: If the file is not valid TOML or a value has the wrong type.
    """
    config = DexSpectreConfig()
    if config_path is None:
        config_path = find_config_file(start_dir)
    if config_path is None or not config_path.exists():
        return config
    config.config_file = config_path
    config.project_root = config_path.parent
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Failed to parse config file {config_path}: {e}") from e
    if config_path.name == "pyproject.toml":
        section = data.get("tool", {}).get("dexspectre", {})
    else:
        section = data.get("tool", {}).get("dexspectre", data)
    _apply_config(config, section)
    return config
_FIELD_TYPES: dict[str, dict[str, type | tuple[type, ...]]] = {
    "limits": {"max_call_depth": int},
    "analysis": {
        "emulation": bool,
        "cache_mutability": bool,
        "cache_size": int,
        "final_classes": list,
        "non_final_classes": list,
    },
    "output": {"level": str, "color": bool, "log_file": str},
}
def _apply_config(config: DexSpectreConfig, data: dict[str, Any]) -> None:
    """Apply configuration data to config object."""
    for section, fields in _FIELD_TYPES.items():
        values = data.get(section, {})
        target = getattr(config, section)
        for key, expected in fields.items():
            if key not in values:
                continue
            value = values[key]
            if expected is int and isinstance(value, bool) or not isinstance(value, expected):
                raise ValueError(f"{section}.{key} must be {expected.__name__}, got {value!r}")
            setattr(target, key, list(value) if expected is list else value)
    if config.limits.max_call_depth < 0:
        raise ValueError("limits.max_call_depth must not be negative")
    if config.analysis.cache_size <= 0:
        raise ValueError("analysis.cache_size must be positive")
    LogLevel.parse(config.output.level)
def generate_default_config() -> str:
    """Generate default configuration file content."""
    return DexSpectreConfig().to_toml()
def init_config(directory: Path | None = None) -> Path:
    """Initialize a new configuration file in the given directory.
    Args:
        directory: Directory to create config in (default: current)
    Returns:
        Path to created config file
    """
    if directory is None:
        directory = Path.cwd()
    config_path = directory / "dexspectre.toml"
    if config_path.exists():
        raise FileExistsError(f"Config file already exists: {config_path}")
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path
__all__ = [
    "DexSpectreConfig",
    "LimitsConfig",
    "AnalysisConfig",
    "OutputConfig",
    "load_config",
    "find_config_file",
    "generate_default_config",
    "init_config",
]
