"""Lightweight logging setup for the TUI."""

from __future__ import annotations

import logging
from pathlib import Path


def configure_logging(log_file: Path, level: int | str = logging.INFO) -> None:
    # The TUI owns the terminal, so log records go to a file in the vault dir.
    # Never log secrets; core modules only log ids and counts.
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        filename=str(log_file),
        encoding="utf-8",
    )
