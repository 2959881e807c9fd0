from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path


@lru_cache(maxsize=1)
def get_repo_root() -> Path:
    """Best-effort repository root detection.

    Walk up from this file and return the first directory holding the
    project's ``pyproject.toml``. Falls back to the package's parent.
    """
    here = Path(__file__).resolve()
    for p in list(here.parents)[:6]:
        if (p / "pyproject.toml").exists() and (p / "comicfuse").exists():
            return p
    # comicfuse/core/paths.py -> repo root is parents[2]
    return here.parents[2]


@lru_cache(maxsize=1)
def get_artifacts_root() -> Path:
    path = os.getenv("ARTIFACTS_ROOT")
    return Path(path) if path else (get_repo_root() / "artifacts")


def get_job_dir(job_id: str) -> Path:
    return get_artifacts_root() / "jobs" / job_id
