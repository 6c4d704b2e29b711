"""Configuration management for terraplan.

Settings:
- planner: expansion limits applied when building plans
- cli: output mode (human or agent)

Settings are resolved in this order, first match wins:
1. Programmatic (TerraplanConfig constructed in code, installed with configure())
2. Environment variables (TERRAPLAN_MAX_INSTANCES, TERRAPLAN_CLI_MODE)
3. Config file (~/.config/terraplan/config.json, managed by `terraplan config`)
4. Hardcoded defaults
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .engine import DEFAULT_MAX_INSTANCES

logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "terraplan"
CONFIG_FILE = CONFIG_DIR / "config.json"

CLI_MODES = ("human", "agent")


# =============================================================================
# Config dataclasses
# =============================================================================


@dataclass
class PlannerConfig:
    """Planner limits.

    max_instances caps how many instances one declaration may expand into;
    0 or a negative value disables the cap.
    """

    max_instances: int = DEFAULT_MAX_INSTANCES


@dataclass
class CliConfig:
    """CLI behavior.

    - human: rich terminal output
    - agent: JSON output, suitable for scripts and AI tools
    """

    mode: str = "human"


@dataclass
class TerraplanConfig:
    """Top-level terraplan configuration.

    Examples:
        # Package use, no files needed
        config = TerraplanConfig(planner=PlannerConfig(max_instances=500))

        # CLI use, loads from ~/.config/terraplan/config.json
        config = TerraplanConfig.load()
    """

    planner: PlannerConfig = field(default_factory=PlannerConfig)
    cli: CliConfig = field(default_factory=CliConfig)

    @classmethod
    def load_file(cls) -> "TerraplanConfig":
        """Defaults overlaid with the config file, ignoring the environment.

        An unreadable or malformed file is logged and treated as absent.
        """
        config = cls()
        if not CONFIG_FILE.exists():
            return config
        try:
            _apply_dict(config, json.loads(CONFIG_FILE.read_text()))
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            logger.warning("Failed to load config from %s: %s", CONFIG_FILE, exc)
            return cls()
        return config

    @classmethod
    def load(cls) -> "TerraplanConfig":
        """Settings file with TERRAPLAN_* environment variables applied on top."""
        config = cls.load_file()

        if val := os.environ.get("TERRAPLAN_MAX_INSTANCES"):
            try:
                config.planner.max_instances = int(val)
            except ValueError:
                logger.warning("Invalid TERRAPLAN_MAX_INSTANCES=%r, ignoring", val)
        if val := os.environ.get("TERRAPLAN_CLI_MODE"):
            if val in CLI_MODES:
                config.cli.mode = val
            else:
                logger.warning("Invalid TERRAPLAN_CLI_MODE=%r, ignoring", val)

        return config

    def save(self) -> None:
        """Write these settings to the config file."""
        CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form, as stored in the config file."""
        return {
            "planner": asdict(self.planner),
            "cli": asdict(self.cli),
        }

    def resolve_max_instances(self) -> int | None:
        """Expansion limit to pass to the engine (None = unlimited)."""
        if self.planner.max_instances <= 0:
            return None
        return self.planner.max_instances


# =============================================================================
# Config file parsing
# =============================================================================


def _apply_dict(config: TerraplanConfig, data: dict) -> None:
    """Copy recognised settings from parsed config-file data onto config.

    Raises:
        ValueError, TypeError: If max_instances is not an integer
    """
    planner = data.get("planner") or {}
    if "max_instances" in planner:
        config.planner.max_instances = int(planner["max_instances"])

    cli = data.get("cli") or {}
    if isinstance(cli, dict):
        mode = cli.get("mode")
        if mode in CLI_MODES:
            config.cli.mode = mode
        elif mode is not None:
            logger.warning("Ignoring unknown cli.mode %r in %s", mode, CONFIG_FILE)


# =============================================================================
# Global config singleton
# =============================================================================

_config: TerraplanConfig | None = None


def get_config() -> TerraplanConfig:
    """Process-wide settings, loaded from file and environment on first use."""
    global _config
    if _config is None:
        _config = TerraplanConfig.load()
    return _config


def configure(config: TerraplanConfig) -> None:
    """Set the global TerraplanConfig programmatically.

    Use this when terraplan is used as a package:
        from terraplan.config import configure, TerraplanConfig, PlannerConfig
        configure(TerraplanConfig(planner=PlannerConfig(max_instances=100)))
    """
    global _config
    _config = config


def reset_config() -> None:
    """Drop the process-wide settings; the next get_config() reloads them."""
    global _config
    _config = None
