from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path


def user_data_dir(env: Mapping[str, str] | None = None) -> Path:
    """Return the per-user data directory (`$XDG_DATA_HOME`, else `~/.local/share`).

    A relative `XDG_DATA_HOME` is ignored, as the XDG base directory spec requires.
    """
    env = os.environ if env is None else env
    xdg = env.get("XDG_DATA_HOME", "").strip()
    if xdg and Path(xdg).is_absolute():
        return Path(xdg)
    return Path.home() / ".local" / "share"


def user_icc_dir(env: Mapping[str, str] | None = None) -> Path:
    return user_data_dir(env) / "icc"


def ensure_icc_dir(icc_dir: Path) -> Path:
    icc_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    return icc_dir
