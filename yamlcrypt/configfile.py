"""
Configuration file loading, validation, and normalization.

This module answers one question:
    "Which named keys (and which editor) did the user configure?"

Responsibilities:
- Find and load the configuration YAML file
- Validate the key entries
- Expose a clean Python representation

This module does NOT:
- Resolve key specifiers given on the command line
- Encrypt or decrypt data
- Write new keys to the configuration file
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config import CONFIG_FILENAMES, config_home
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConfigKey:
    key: str
    name: str = ""


@dataclass
class Configuration:
    keys: List[ConfigKey] = field(default_factory=list)
    editor: Optional[str] = None
    path: Optional[Path] = None

    # ------------------------------------------------------------------
    # Loading API
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str | Path) -> "Configuration":
        """
        Load and validate a configuration file.

        Args:
            path: Path to the configuration YAML file

        Raises:
            yaml.YAMLError: if the file is not valid YAML
            ConfigurationError: if the content is invalid

        Returns:
            Configuration
        """

        path = Path(path)
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

        config = cls.from_dict(raw)
        config.path = path
        logger.debug("loaded %d key(s) from %s", len(config.keys), path)
        return config

    @classmethod
    def discover(cls, home: Optional[Path] = None) -> "Configuration":
        """
        Load config.yaml or config.yml from the configuration directory.

        Returns an empty configuration when neither file exists.
        """

        directory = config_home(home)
        for filename in CONFIG_FILENAMES:
            candidate = directory / filename
            if candidate.is_file():
                return cls.load(candidate)

        logger.debug("no configuration file found in %s", directory)
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        if not isinstance(data, dict):
            raise ConfigurationError("configuration must be a mapping")

        keys = cls._parse_keys(data.get("keys"))

        editor = data.get("editor")
        if editor is not None and not isinstance(editor, str):
            raise ConfigurationError(
                f"editor is not a string: {type(editor).__name__}"
            )

        return cls(keys=keys, editor=editor or None)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_keys(data: Any) -> List[ConfigKey]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise ConfigurationError("attribute keys must be a list!")

        keys: List[ConfigKey] = []
        for entry in data:
            if not isinstance(entry, dict):
                raise ConfigurationError("key entry is not a mapping!")

            raw = entry.get("key")
            if not raw:
                raise ConfigurationError("attribute key missing for key entry!")
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            if not isinstance(raw, str):
                raise ConfigurationError(
                    f"key entry is not a string: {type(raw).__name__}"
                )

            name = entry.get("name") or ""
            keys.append(ConfigKey(key=raw.strip(), name=str(name)))

        seen = set()
        for key in keys:
            if not key.name:
                continue
            if key.name in seen:
                raise ConfigurationError(f"non-unique key name: {key.name}")
            seen.add(key.name)

        return keys
