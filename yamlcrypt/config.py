"""
Global constants and environment handling.

This module is responsible for:
- Defining tool-wide constants and defaults
- Locating the configuration directory
- Choosing the external editor

Nothing in this file should depend on:
- YAML parsing
- key resolution
- CLI arguments
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final, Mapping, Optional

# ---------------------------------------------------------------------------
# Tool versioning
# ---------------------------------------------------------------------------

TOOL_NAME: Final[str] = "yaml-crypt"
TOOL_VERSION: Final[str] = "0.7.2"

# ---------------------------------------------------------------------------
# Configuration file location
# ---------------------------------------------------------------------------

CONFIG_DIR_NAME: Final[str] = ".yaml-crypt"
CONFIG_FILENAMES: Final[tuple] = ("config.yaml", "config.yml")

# ---------------------------------------------------------------------------
# File naming conventions
# ---------------------------------------------------------------------------

PLAINTEXT_SUFFIXES: Final[tuple] = (".yaml", ".yml")
ENCRYPTED_SUFFIXES: Final[tuple] = (".yaml-crypt", ".yml-crypt")
CRYPT_SUFFIX: Final[str] = "-crypt"
EDIT_TEMP_SUFFIX: Final[str] = ".yaml"

# ---------------------------------------------------------------------------
# Environment variable names / defaults
# ---------------------------------------------------------------------------

ENV_EDITOR: Final[str] = "EDITOR"
DEFAULT_EDITOR: Final[str] = "vim"

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_OK: Final[int] = 0
EXIT_FAILURE: Final[int] = 1
EXIT_USAGE: Final[int] = 5
EXIT_CONFIG: Final[int] = 6
EXIT_INTERRUPTED: Final[int] = 130

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def config_home(home: Optional[Path] = None) -> Path:
    """Return the directory holding the configuration file."""
    return Path(home or Path.home()) / CONFIG_DIR_NAME


def get_editor(
    configured: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Return the editor command used by --edit.

    The configuration file wins over $EDITOR, which wins over vim.
    """

    if configured:
        return configured
    environ = os.environ if environ is None else environ
    return environ.get(ENV_EDITOR) or DEFAULT_EDITOR
