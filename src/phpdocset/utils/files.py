"""Utility helpers for working with files."""

from __future__ import annotations

import shutil
from pathlib import Path

IGNORED_NAMES = {".DS_Store"}


def copy_documents(source: Path, target: Path) -> None:
    """Replace ``target`` with a copy of the rendered ``source`` tree."""
    if target.exists():
        shutil.rmtree(target)
    shutil.copytree(source, target, ignore=shutil.ignore_patterns(*IGNORED_NAMES))
