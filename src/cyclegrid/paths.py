"""Default locations for exported corpora, plus git provenance for manifests.

Environment variables win; otherwise paths resolve under the repository root
(nearest parent holding .git) or, when installed elsewhere, the CWD.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Dict, Optional


def _find_git_root(start: Path) -> Optional[Path]:
    for cur in [start, *start.parents][:6]:
        if (cur / ".git").exists():
            return cur
    return None


def repo_root() -> Path:
    env = os.getenv("CYCLEGRID_REPO_ROOT")
    if env:
        return Path(env)
    git_root = _find_git_root(Path(__file__).resolve())
    return git_root if git_root is not None else Path.cwd()


def data_dir() -> Path:
    p = os.getenv("CYCLEGRID_DATA")
    return Path(p) if p else repo_root() / "data"


def corpus_dir() -> Path:
    p = os.getenv("CYCLEGRID_CORPUS")
    return Path(p) if p else data_dir() / "corpus"


def _git(*args: str) -> Optional[str]:
    try:
        return subprocess.check_output(
            ["git", "-C", str(repo_root()), *args],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=2.0,
        )
    except (OSError, subprocess.SubprocessError):
        return None


def _head_from_files(root: Path) -> Optional[str]:
    head = root / ".git" / "HEAD"
    if not head.exists():
        return None
    txt = head.read_text().strip()
    if txt.startswith("ref:"):
        ref_file = root / ".git" / txt.split()[1]
        return ref_file.read_text().strip() if ref_file.exists() else None
    return txt or None


def get_git_commit() -> Optional[str]:
    out = _git("rev-parse", "HEAD")
    if out is not None:
        return out.strip()
    return _head_from_files(repo_root())


def get_git_is_dirty() -> Optional[bool]:
    """True with uncommitted changes, False when clean, None outside a repo."""
    out = _git("status", "--porcelain")
    return None if out is None else bool(out.strip())


def git_provenance() -> Dict[str, object]:
    return {"git_commit": get_git_commit(), "git_is_dirty": get_git_is_dirty()}
