"""
Configuration system for Nativize

Provides configuration management with support for files and environment variables.
Values are layered: defaults, then a configuration file, then the environment.
"""

import os
import json
import yaml
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from .errors import NativizeError
from .safety.members import DEFAULT_FACTORY_NAMES, DEFAULT_TRANSFORMABLE_MEMBERS

logger = logging.getLogger(__name__)

RULE_GROUPS = ("jquery", "legacy")


class ProcessingStrategy(Enum):
    """How a batch of files is processed."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class ConfigurationError(NativizeError):
    """Raised when configuration validation fails."""

    pass


class ConfigurationManager:
    """Manages configuration loading, validation, and merging."""

    DEFAULT_CONFIG_PATHS = [
        "nativize.json",
        "nativize.yaml",
        "nativize.yml",
        ".nativize.json",
        ".nativize.yaml",
        ".nativize.yml",
        os.path.expanduser("~/.nativize.json"),
        os.path.expanduser("~/.nativize.yaml"),
        os.path.expanduser("~/.nativize.yml"),
    ]

    @staticmethod
    def find_config_file(search_paths: Optional[List[str]] = None) -> Optional[str]:
        """Find the first existing configuration file."""
        paths = search_paths or ConfigurationManager.DEFAULT_CONFIG_PATHS

        for path in paths:
            if os.path.exists(path):
                return path
        return None

    @staticmethod
    def load_config_file(config_path: str) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if config_path.endswith((".yaml", ".yml")):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration file must contain a mapping")
        return data

    @staticmethod
    def _env_list(name: str) -> Optional[List[str]]:
        value = os.getenv(name)
        if not value:
            return None
        return [item.strip() for item in value.split(",") if item.strip()]

    @staticmethod
    def _env_int(name: str) -> Optional[int]:
        value = os.getenv(name)
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Invalid {name} value, using default")
            return None

    @staticmethod
    def load_env_config() -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        analysis = {}
        factory_names = ConfigurationManager._env_list("NATIVIZE_FACTORY_NAMES")
        if factory_names:
            analysis["factory_names"] = factory_names
        if analysis:
            config["analysis"] = analysis

        rules: Dict[str, Any] = {}
        enabled_groups = ConfigurationManager._env_list("NATIVIZE_ENABLED_GROUPS")
        if enabled_groups:
            rules["enabled_groups"] = enabled_groups
        disabled_rules = ConfigurationManager._env_list("NATIVIZE_DISABLED_RULES")
        if disabled_rules:
            rules["disabled_rules"] = disabled_rules
        max_passes = ConfigurationManager._env_int("NATIVIZE_MAX_PASSES")
        if max_passes is not None:
            rules["max_passes"] = max_passes
        if rules:
            config["rules"] = rules

        processing = {}
        jobs = ConfigurationManager._env_int("NATIVIZE_JOBS")
        if jobs is not None:
            processing["jobs"] = jobs
        max_file_size = ConfigurationManager._env_int("NATIVIZE_MAX_FILE_SIZE")
        if max_file_size is not None:
            processing["max_file_size"] = max_file_size
        if processing:
            config["processing"] = processing

        return config

    @staticmethod
    def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge multiple configuration dictionaries, with later ones taking precedence."""
        result: Dict[str, Any] = {}

        for config in configs:
            if not config:
                continue

            for key, value in config.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = ConfigurationManager.merge_configs(result[key], value)
                else:
                    result[key] = value

        return result

    @staticmethod
    def validate_config(config_data: Dict[str, Any]) -> None:
        """Validate configuration data."""
        for section in ("analysis", "rules", "processing"):
            if section in config_data and not isinstance(config_data[section], dict):
                raise ConfigurationError(f"{section} must be a mapping")

        analysis = config_data.get("analysis", {})
        for key in ("factory_names", "transformable_members", "extra_transformable_members"):
            value = analysis.get(key)
            # transformable_members may be null: keep the built-in set.
            if value is not None:
                if not isinstance(value, list) or not all(
                    isinstance(item, str) and item for item in value
                ):
                    raise ConfigurationError(f"{key} must be a list of non-empty strings")
        if "factory_names" in analysis and not analysis["factory_names"]:
            raise ConfigurationError("factory_names must not be empty")

        rules = config_data.get("rules", {})
        if "enabled_groups" in rules:
            groups = rules["enabled_groups"]
            if not isinstance(groups, list) or any(g not in RULE_GROUPS for g in groups):
                raise ConfigurationError(f"enabled_groups must be a subset of: {list(RULE_GROUPS)}")
        if "disabled_rules" in rules and not isinstance(rules["disabled_rules"], list):
            raise ConfigurationError("disabled_rules must be a list")
        if "max_passes" in rules:
            max_passes = rules["max_passes"]
            if not isinstance(max_passes, int) or max_passes <= 0:
                raise ConfigurationError("max_passes must be a positive integer")

        processing = config_data.get("processing", {})
        if "max_file_size" in processing:
            size = processing["max_file_size"]
            if not isinstance(size, int) or size <= 0:
                raise ConfigurationError("max_file_size must be positive")
        if "jobs" in processing:
            jobs = processing["jobs"]
            if not isinstance(jobs, int) or jobs <= 0:
                raise ConfigurationError("jobs must be a positive integer")
        if "strategy" in processing:
            valid = [s.value for s in ProcessingStrategy]
            if processing["strategy"] not in valid:
                raise ConfigurationError(f"strategy must be one of: {valid}")
        if "extensions" in processing:
            extensions = processing["extensions"]
            if not isinstance(extensions, list) or not all(
                isinstance(e, str) and e.startswith(".") for e in extensions
            ):
                raise ConfigurationError("extensions must be a list like ['.js', '.mjs']")


@dataclass
class AnalysisConfig:
    """Configuration for the safety analysis."""

    factory_names: List[str] = field(default_factory=lambda: sorted(DEFAULT_FACTORY_NAMES))
    # None keeps the built-in allow-set.
    transformable_members: Optional[List[str]] = None
    extra_transformable_members: List[str] = field(default_factory=list)

    def effective_transformable_members(self) -> frozenset:
        base = (
            DEFAULT_TRANSFORMABLE_MEMBERS
            if self.transformable_members is None
            else frozenset(self.transformable_members)
        )
        return base | frozenset(self.extra_transformable_members)


@dataclass
class RulesConfig:
    """Configuration for rule selection."""

    enabled_groups: List[str] = field(default_factory=lambda: list(RULE_GROUPS))
    disabled_rules: List[str] = field(default_factory=list)
    max_passes: int = 20


@dataclass
class ProcessingConfig:
    """Configuration for file discovery and batch processing."""

    extensions: List[str] = field(default_factory=lambda: [".js", ".mjs", ".cjs", ".jsx"])
    excluded_patterns: List[str] = field(
        default_factory=lambda: [
            "node_modules",
            ".git",
            "*.min.js",
            "dist",
            "build",
            "vendor",
        ]
    )
    max_file_size: int = 1024 * 1024  # 1MB
    jobs: int = 1
    strategy: ProcessingStrategy = ProcessingStrategy.SEQUENTIAL


@dataclass
class NativizeConfig:
    """Main configuration class for Nativize."""

    analysis_settings: AnalysisConfig = field(default_factory=AnalysisConfig)
    rules_settings: RulesConfig = field(default_factory=RulesConfig)
    processing_settings: ProcessingConfig = field(default_factory=ProcessingConfig)

    @classmethod
    def default(cls) -> "NativizeConfig":
        """Create default configuration."""
        return cls()

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        use_env: bool = True,
        validate: bool = True,
    ) -> "NativizeConfig":
        """
        Load configuration from multiple sources with precedence:
        1. Default values
        2. Configuration file
        3. Environment variables (if use_env=True)

        Args:
            config_path: Path to configuration file. If None, searches for default files.
            use_env: Whether to load environment variables
            validate: Whether to validate the configuration

        Raises:
            ConfigurationError: If a file cannot be read or a value is invalid.
        """
        configs_to_merge = []

        file_config: Dict[str, Any] = {}
        if config_path:
            file_config = ConfigurationManager.load_config_file(config_path)
        else:
            found_config = ConfigurationManager.find_config_file()
            if found_config:
                file_config = ConfigurationManager.load_config_file(found_config)
                logger.info(f"Loaded configuration from: {found_config}")
        configs_to_merge.append(file_config)

        if use_env:
            configs_to_merge.append(ConfigurationManager.load_env_config())

        merged_config = ConfigurationManager.merge_configs(*configs_to_merge)

        if validate:
            ConfigurationManager.validate_config(merged_config)

        return cls.from_dict(merged_config)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NativizeConfig":
        """Build a configuration from a (validated) dictionary, ignoring unknown keys."""
        analysis_config = AnalysisConfig()
        for key, value in data.get("analysis", {}).items():
            if hasattr(analysis_config, key):
                setattr(analysis_config, key, value)

        rules_config = RulesConfig()
        for key, value in data.get("rules", {}).items():
            if hasattr(rules_config, key):
                setattr(rules_config, key, value)

        processing_config = ProcessingConfig()
        for key, value in data.get("processing", {}).items():
            if hasattr(processing_config, key):
                if key == "strategy" and isinstance(value, str):
                    value = ProcessingStrategy(value)
                setattr(processing_config, key, value)

        return cls(
            analysis_settings=analysis_config,
            rules_settings=rules_config,
            processing_settings=processing_config,
        )

    @classmethod
    def from_file(cls, config_path: str) -> "NativizeConfig":
        """Load configuration from a JSON or YAML file only."""
        return cls.load(config_path=config_path, use_env=False)

    @classmethod
    def from_env(cls) -> "NativizeConfig":
        """Load configuration from default files and environment variables."""
        return cls.load(config_path=None, use_env=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "analysis": asdict(self.analysis_settings),
            "rules": asdict(self.rules_settings),
            "processing": {
                **asdict(self.processing_settings),
                "strategy": self.processing_settings.strategy.value,
            },
        }

    def to_file(self, config_path: str, format: str = "json") -> None:
        """
        Save configuration to file.

        Args:
            config_path: Path to save configuration
            format: File format ('json' or 'yaml')
        """
        config_data = self.to_dict()

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                if format.lower() in ("yaml", "yml"):
                    yaml.safe_dump(config_data, f, default_flow_style=False, indent=2)
                else:
                    json.dump(config_data, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration file: {e}") from e

    def validate(self) -> None:
        """Validate the current configuration."""
        ConfigurationManager.validate_config(self.to_dict())

    def get_config_summary(self) -> str:
        """Get a human-readable summary of the configuration."""
        analysis = self.analysis_settings
        members = sorted(analysis.effective_transformable_members())
        return f"""Nativize Configuration Summary:
Analysis:
  - Factory names: {", ".join(analysis.factory_names)}
  - Transformable members: {len(members)} ({", ".join(members)})

Rules:
  - Enabled groups: {", ".join(self.rules_settings.enabled_groups)}
  - Disabled rules: {len(self.rules_settings.disabled_rules)} rules
  - Max passes: {self.rules_settings.max_passes}

Processing:
  - Extensions: {", ".join(self.processing_settings.extensions)}
  - Excluded patterns: {len(self.processing_settings.excluded_patterns)} patterns
  - Max file size: {self.processing_settings.max_file_size} bytes
  - Jobs: {self.processing_settings.jobs}
  - Strategy: {self.processing_settings.strategy.value}
"""


def load_config(config_path: Optional[str] = None, use_env: bool = True) -> NativizeConfig:
    """
    Load configuration from file and/or environment variables.

    Args:
        config_path: Path to configuration file
        use_env: Whether to load environment variables

    Returns:
        NativizeConfig: Loaded configuration
    """
    return NativizeConfig.load(config_path=config_path, use_env=use_env)
