"""Locate the Elm package manager's home directory."""

import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Optional


def find_elm_home(environ: Optional[Mapping[str, str]] = None, platform: Optional[str] = None) -> Path:
    """Get the directory where Elm keeps downloaded packages.

    ELM_HOME wins when set. Otherwise Elm uses %APPDATA%\\elm on Windows
    and ~/.elm everywhere else.

    Args:
        environ: Environment to read (defaults to os.environ)
        platform: Platform name as in sys.platform (defaults to current)

    Returns:
        Path to the Elm home directory (may not exist yet)
    """
    env = os.environ if environ is None else environ
    platform = platform or sys.platform

    if env.get("ELM_HOME"):
        return Path(env["ELM_HOME"])

    home = env.get("HOME") or env.get("USERPROFILE")
    home_dir = Path(home) if home else Path.home()

    if platform == "win32":
        appdata = env.get("APPDATA")
        base = Path(appdata) if appdata else home_dir / "AppData" / "Roaming"
        return base / "elm"

    return home_dir / ".elm"
