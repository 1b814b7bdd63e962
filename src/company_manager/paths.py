"""
Path resolution helpers for Company Manager.

Provides consistent path resolution relative to the repository root,
regardless of the current working directory.
"""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Cache for the repository root
_repo_root: Optional[Path] = None

# Default database location, relative to the repository root
DEFAULT_DB_PATH = Path("data/db/companies.db")

# State directory for local-only files (web secret)
STATE_DIR_NAME = ".cmgr"


def get_repo_root() -> Path:
    """
    Get the repository root directory.

    Walks up from this file looking for ``pyproject.toml`` or
    ``company_manager.toml`` and falls back to the current directory.

    Returns:
        Path to the repository root.
    """
    global _repo_root

    if _repo_root is not None:
        return _repo_root

    current = Path(__file__).resolve()
    markers = ["pyproject.toml", "company_manager.toml"]

    for parent in [current] + list(current.parents):
        for marker in markers:
            if (parent / marker).exists():
                _repo_root = parent
                return _repo_root

    _repo_root = Path.cwd().resolve()
    return _repo_root


def get_db_path(db_path: Optional[str | os.PathLike] = None, repo_root: Optional[Path] = None) -> Path:
    """
    Get the database path.

    Args:
        db_path: Explicit database path. If None, uses the default location.
        repo_root: Repository root used to resolve the default.

    Returns:
        Path to the database file.
    """
    if db_path is not None:
        return Path(db_path)
    if repo_root is None:
        repo_root = get_repo_root()
    return repo_root / DEFAULT_DB_PATH


def get_state_dir(base: Optional[Path] = None) -> Path:
    """Directory holding local state such as the web secret key."""
    return (base or Path.cwd()) / STATE_DIR_NAME
