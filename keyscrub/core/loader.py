# keyscrub/core/loader.py

"""Configuration loader for indicators, the ignore list, and banners."""

import yaml
import logging
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Union

from keyscrub.core.domain import Indicator
from keyscrub.core.exceptions import ConfigurationError
from keyscrub.logic.templates import validate_template

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "indicators.yaml"


class IndicatorLoader:
    """Loads and validates rule data from a YAML file.

    Every indicator pattern is compiled and every banner template checked
    when the loader is constructed, so a bad rule surfaces before any file is
    scouted. Loaded data is immutable and safe to share across threads.
    """

    _instance: Optional["IndicatorLoader"] = None

    def __init__(self, config_path: Optional[Union[str, Path]] = None) -> None:
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._indicators: List[Indicator] = []
        self._ignore: FrozenSet[str] = frozenset()
        self._banner: str = ""
        self._keylist_banner: str = ""
        self._load_config()

    def _load_config(self) -> None:
        """Loads the YAML file and builds the rule data.

        Raises:
            ConfigurationError: If the file is missing, invalid, or empty.
        """
        try:
            if not self.config_path.exists():
                error_msg = f"Configuration file not found: {self.config_path}"
                logger.error(error_msg)
                raise ConfigurationError(error_msg)

            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)

            if not config or not isinstance(config, dict):
                raise ConfigurationError("Configuration file is empty or invalid")

            self._validate_config(config)
            self._build(config)

            logger.info(
                "Configuration loaded successfully",
                extra={
                    "config_path": str(self.config_path),
                    "indicator_count": len(self._indicators),
                    "ignore_count": len(self._ignore),
                },
            )

        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}", exc_info=True)
            raise ConfigurationError(f"Failed to parse {self.config_path.name}: {e}") from e
        except OSError as e:
            logger.error(f"Configuration loading failed: {e}", exc_info=True)
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validates required configuration sections exist.

        Raises:
            ConfigurationError: If required sections are missing or mistyped.
        """
        required_sections = ["indicators"]
        missing = [s for s in required_sections if s not in config]

        if missing:
            error_msg = f"Missing required configuration sections: {missing}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)

        if not isinstance(config["indicators"], list):
            raise ConfigurationError("'indicators' must be a list of {label, pattern}")

        if not isinstance(config.get("ignore") or [], list):
            raise ConfigurationError("'ignore' must be a list of literal values")

    def _build(self, config: Dict[str, Any]) -> None:
        indicators = []
        for position, item in enumerate(config["indicators"]):
            if not isinstance(item, dict) or "label" not in item or "pattern" not in item:
                raise ConfigurationError(
                    f"Indicator #{position + 1} must define 'label' and 'pattern'"
                )
            indicators.append(Indicator.compile(item["pattern"], item["label"]))

        self._indicators = indicators
        self._ignore = frozenset(str(v) for v in config.get("ignore") or [])
        self._banner = validate_template(config.get("banner") or "")
        self._keylist_banner = validate_template(config.get("keylist_banner") or "")

    @classmethod
    def get_instance(cls) -> "IndicatorLoader":
        """Returns the shared loader for the packaged default configuration."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get_indicators(self) -> List[Indicator]:
        """Returns the ordered indicator set."""
        return list(self._indicators)

    def get_ignore_list(self) -> FrozenSet[str]:
        """Returns literal values exempt from tokenization."""
        return self._ignore

    def get_labels(self) -> List[str]:
        """Returns distinct labels in first-seen order."""
        return list(dict.fromkeys(i.label for i in self._indicators))

    def get_banner(self) -> str:
        """Returns the unexpanded banner for sanitized files."""
        return self._banner

    def get_keylist_banner(self) -> str:
        """Returns the unexpanded banner for the keylist artifact."""
        return self._keylist_banner
