"""
Runtime Configuration

Central configuration for tree shape, build parallelism and logging.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from solvency.crypto.hashing import MAX_CURRENCIES
from solvency.merkle.bounds import validate_tree_parameters
from solvency.schemas.errors import ParameterException

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "SOLVENCY_"


@dataclass
class TreeConfig:
    """Shape of the tree and width of leaf balances."""
    n_currencies: int = 2
    byte_width: int = 14
    depth: Optional[int] = None  # None: derived from the entry count


@dataclass
class BuildConfig:
    """Configuration for tree construction."""
    workers: int = 0  # 0 or 1 builds in the calling process


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ParameterException(
            f"Environment variable {name} must be an integer, got {raw!r}",
            parameter=name,
        ) from e


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration for building and verifying sum trees.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    tree: TreeConfig = field(default_factory=TreeConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - SOLVENCY_N_CURRENCIES: Balances per entry
        - SOLVENCY_BYTE_WIDTH: Byte width of leaf balances
        - SOLVENCY_TREE_DEPTH: Fixed tree depth
        - SOLVENCY_WORKERS: Worker processes per build
        - SOLVENCY_LOG_LEVEL: Log level
        - SOLVENCY_LOG_FILE: Optional log file
        """
        overrides: dict[str, Any] = {}

        for key, name in (
            ("n_currencies", "N_CURRENCIES"),
            ("byte_width", "BYTE_WIDTH"),
            ("depth", "TREE_DEPTH"),
        ):
            value = _env_int(f"{ENV_PREFIX}{name}")
            if value is not None:
                overrides.setdefault("tree", {})[key] = value

        workers = _env_int(f"{ENV_PREFIX}WORKERS")
        if workers is not None:
            overrides.setdefault("build", {})["workers"] = workers

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration from environment variables over the defaults."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        if not isinstance(data, dict):
            raise ParameterException(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )
        # An empty YAML section ("tree:") loads as None
        sections = {name: data.get(name) or {} for name in ("tree", "build", "logging", "extra")}
        for name, section in sections.items():
            if not isinstance(section, dict):
                raise ParameterException(
                    f"Configuration section '{name}' must be a mapping, "
                    f"got {type(section).__name__}",
                    parameter=name,
                )

        try:
            tree = TreeConfig(**sections["tree"])
            build = BuildConfig(**sections["build"])
            logging_config = LoggingConfig(**sections["logging"])
        except TypeError as e:
            raise ParameterException(f"Unknown configuration key: {e}") from e

        return cls(
            tree=tree,
            build=build,
            logging=logging_config,
            extra=sections["extra"],
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section, values in overrides.items():
            target = getattr(new_config, section)
            for key, value in values.items():
                setattr(target, key, value)
        return new_config

    def validate(self) -> None:
        """
        Check every parameter, then the overflow bound when a depth is fixed.

        Raises:
            ParameterException: On out-of-range parameters
            BalanceOverflowException: If the configured depth and byte width
                let the root sum wrap the field
        """
        tree = self.tree
        if not isinstance(tree.n_currencies, int) or not 1 <= tree.n_currencies <= MAX_CURRENCIES:
            raise ParameterException(
                f"n_currencies must be between 1 and {MAX_CURRENCIES}, got {tree.n_currencies}",
                parameter="n_currencies",
            )
        if not isinstance(tree.byte_width, int) or tree.byte_width < 1:
            raise ParameterException(
                f"byte_width must be a positive integer, got {tree.byte_width}",
                parameter="byte_width",
            )
        if tree.depth is not None and (not isinstance(tree.depth, int) or tree.depth < 0):
            raise ParameterException(
                f"depth must be a non-negative integer, got {tree.depth}",
                parameter="depth",
            )
        if not isinstance(self.build.workers, int) or self.build.workers < 0:
            raise ParameterException(
                f"workers must be a non-negative integer, got {self.build.workers}",
                parameter="workers",
            )
        if tree.depth is not None:
            validate_tree_parameters(tree.byte_width, tree.depth)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "tree": {
                "n_currencies": self.tree.n_currencies,
                "byte_width": self.tree.byte_width,
                "depth": self.tree.depth,
            },
            "build": {
                "workers": self.build.workers,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "extra": self.extra,
        }


def get_default_config_template() -> str:
    """YAML template written by `solvency config --init`."""
    return """\
# Merkle sum tree configuration
# Every value can be overridden with a SOLVENCY_* environment variable.

tree:
  # Balances per user entry (1-6)
  n_currencies: 2
  # Byte width of a leaf balance; bounds every aggregate
  byte_width: 14
  # Fixed depth (leaf count 2^depth); omit to derive it from the entries
  # depth: 10

build:
  # Worker processes per build; 0 or 1 builds in-process
  workers: 0

logging:
  level: INFO
  # file: solvency.log
"""


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
