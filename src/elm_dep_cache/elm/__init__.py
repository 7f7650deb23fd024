"""Elm toolchain collaborators: home directory lookup and dependency install."""

from .home import find_elm_home
from .installer import TEMP_MODULE_NAME, ElmInstaller

__all__ = [
    "ElmInstaller",
    "TEMP_MODULE_NAME",
    "find_elm_home",
]
