"""Small helper to build a TinyPM app context for the TUI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging
import os

from tinypm.core.vault import Vault, VaultPaths
from tinypm.frontend.cli.logging_config import configure_logging

DEFAULT_HOME = Path.home() / ".password-manager"
DEFAULT_EXPORT_DIR = Path.home() / "Downloads"


@dataclass
class AppContext:
    """Container for runtime objects the UI needs."""

    vault: Vault
    paths: VaultPaths
    first_run: bool = False


def _resolve_level(value: Optional[str]) -> int:
    # Accept names ("DEBUG") or numbers ("10"); fall back to INFO.
    if not value:
        return logging.INFO
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.INFO


def build_context(
    base_dir: Optional[str | Path] = None,
    export_dir: Optional[str | Path] = None,
    setup_logging: bool = True,
) -> AppContext:
    """
    Resolve configuration and open the vault.

    Configuration comes from arguments first, then environment variables:

    - ``TINYPM_HOME``: vault directory (default ``~/.password-manager``),
      holding the ``vault`` SQLite file, the ``lockfile`` canary and
      ``tinypm.log``.
    - ``TINYPM_EXPORT_DIR``: where CSV exports land (default ``~/Downloads``).
    - ``TINYPM_LOG_LEVEL``: logging level name or number (default ``INFO``).

    First-run behaviour: when no lockfile exists the context is returned with
    ``first_run=True`` and the UI prompts for a new master password.
    """
    home = Path(base_dir or os.getenv("TINYPM_HOME") or DEFAULT_HOME).expanduser()
    exports = Path(export_dir or os.getenv("TINYPM_EXPORT_DIR") or DEFAULT_EXPORT_DIR).expanduser()

    home.mkdir(parents=True, exist_ok=True)
    paths = VaultPaths(base_dir=home)

    if setup_logging:
        configure_logging(paths.log_file, _resolve_level(os.getenv("TINYPM_LOG_LEVEL")))

    vault = Vault(paths, export_dir=exports)
    return AppContext(vault=vault, paths=paths, first_run=vault.first_run)
