"""Configuration management for alchemy-shuffle.

Two config groups:
- randomizer: mode, uniform/weighted toggle, retry budget, seed
- output: patch file name, ESL flag, log files

Config resolution order (highest priority first):
1. Programmatic (AlchemyShuffleConfig constructed in code, CLI flags)
2. Environment variables (ALCHEMY_RAND_TYPE, ALCHEMY_SET_ESL, etc.)
3. Config file (~/.config/alchemy-shuffle/config.json, managed by `alchemy-shuffle config`)
4. Hardcoded defaults
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "alchemy-shuffle"
CONFIG_FILE = CONFIG_DIR / "config.json"


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_bool(value: str) -> bool:
    """Parse a boolean from an env var or CLI string.

    Raises:
        ValueError: If the string is not a recognized boolean.
    """
    text = value.strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


# =============================================================================
# Config dataclasses
# =============================================================================


@dataclass
class RandomizerConfig:
    """How effects are redistributed.

    - rand_type: groups, dist, inclusion, no_inclusion (alias: random)
    - ignore_dist: uniform picks over distinct effects instead of
      frequency-weighted picks (not used by groups or dist)
    """

    rand_type: str = "groups"
    ignore_dist: bool = False
    max_retries: int = 1000
    seed: int | None = None


@dataclass
class OutputConfig:
    """Patch and log file settings."""

    patch_file_name: str = "RandomAlchemyPatch.esp"
    set_esl: bool = True
    write_logs: bool = True
    log_dir: str = "./logs"


# =============================================================================
# Main config class
# =============================================================================


@dataclass
class AlchemyShuffleConfig:
    """Top-level alchemy-shuffle configuration.

    Examples:
        # Package use: no files needed
        config = AlchemyShuffleConfig(
            randomizer=RandomizerConfig(rand_type="dist"),
        )

        # CLI use: loads from ~/.config/alchemy-shuffle/config.json
        config = AlchemyShuffleConfig.load()
    """

    randomizer: RandomizerConfig = field(default_factory=RandomizerConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def load(cls) -> "AlchemyShuffleConfig":
        """Load config from file + env vars.

        Priority: env var values > config.json values > defaults.
        """
        config = cls()

        # Layer 1: Load from config file if it exists
        if CONFIG_FILE.exists():
            try:
                with open(CONFIG_FILE) as f:
                    data = json.load(f)
                _apply_dict(config, data)
            except (json.JSONDecodeError, OSError, ValueError) as exc:
                logger.warning("Failed to load config from %s: %s", CONFIG_FILE, exc)

        # Layer 2: Env var overrides
        if val := os.environ.get("ALCHEMY_RAND_TYPE"):
            config.randomizer.rand_type = val
        if val := os.environ.get("ALCHEMY_IGNORE_DIST"):
            try:
                config.randomizer.ignore_dist = parse_bool(val)
            except ValueError:
                logger.warning("Invalid ALCHEMY_IGNORE_DIST=%r, ignoring", val)
        if val := os.environ.get("ALCHEMY_MAX_RETRIES"):
            try:
                config.randomizer.max_retries = int(val)
            except ValueError:
                logger.warning("Invalid ALCHEMY_MAX_RETRIES=%r, ignoring", val)
        if val := os.environ.get("ALCHEMY_SEED"):
            try:
                config.randomizer.seed = int(val)
            except ValueError:
                logger.warning("Invalid ALCHEMY_SEED=%r, ignoring", val)
        if val := os.environ.get("ALCHEMY_PATCH_FILE"):
            config.output.patch_file_name = val
        if val := os.environ.get("ALCHEMY_SET_ESL"):
            try:
                config.output.set_esl = parse_bool(val)
            except ValueError:
                logger.warning("Invalid ALCHEMY_SET_ESL=%r, ignoring", val)
        if val := os.environ.get("ALCHEMY_WRITE_LOGS"):
            try:
                config.output.write_logs = parse_bool(val)
            except ValueError:
                logger.warning("Invalid ALCHEMY_WRITE_LOGS=%r, ignoring", val)
        if val := os.environ.get("ALCHEMY_LOG_DIR"):
            config.output.log_dir = val

        return config

    def save(self) -> None:
        """Save config to ~/.config/alchemy-shuffle/config.json."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for display."""
        return {
            "randomizer": asdict(self.randomizer),
            "output": asdict(self.output),
        }

    @property
    def log_dir_resolved(self) -> Path:
        """Resolve the log directory, creating it if needed."""
        path = Path(self.output.log_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path


# =============================================================================
# Config dict application
# =============================================================================

INT_FIELDS = {"max_retries", "seed"}
BOOL_FIELDS = {"ignore_dist", "set_esl", "write_logs"}


def coerce_field(field_name: str, value: Any) -> Any:
    """Coerce a raw config value to the type of its field.

    Raises:
        ValueError: If the value cannot be converted.
    """
    if value is None:
        return None
    if field_name in INT_FIELDS:
        return int(value)
    if field_name in BOOL_FIELDS:
        if isinstance(value, bool):
            return value
        return parse_bool(str(value))
    return value


def _apply_dict(config: AlchemyShuffleConfig, data: dict) -> None:
    """Apply a dict of values onto an AlchemyShuffleConfig."""
    if "randomizer" in data and isinstance(data["randomizer"], dict):
        for k, v in data["randomizer"].items():
            if hasattr(config.randomizer, k):
                setattr(config.randomizer, k, coerce_field(k, v))
    if "output" in data and isinstance(data["output"], dict):
        for k, v in data["output"].items():
            if hasattr(config.output, k):
                setattr(config.output, k, coerce_field(k, v))


# =============================================================================
# Global config singleton
# =============================================================================

_config: AlchemyShuffleConfig | None = None


def get_config() -> AlchemyShuffleConfig:
    """Get the global AlchemyShuffleConfig instance.

    First call loads from file + env vars. Subsequent calls return cached instance.
    Use configure() to replace the global config programmatically.
    """
    global _config
    if _config is None:
        _config = AlchemyShuffleConfig.load()
    return _config


def configure(config: AlchemyShuffleConfig) -> None:
    """Set the global AlchemyShuffleConfig programmatically."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global config (forces reload on next get_config())."""
    global _config
    _config = None
