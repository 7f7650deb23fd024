"""Dependency installation through the Elm compiler."""

import json
import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Union

from ..errors import FetchFailedError, ManifestUnreadableError

logger = logging.getLogger(__name__)

# Throwaway module compiled to make Elm download every dependency
TEMP_MODULE_NAME = "__elm_deps_temp__.elm"

APPLICATION_MODULE = 'module Main exposing (main)\nimport Html\nmain = Html.text ""'
PACKAGE_MODULE = 'module Temp exposing (..)\ntemp = ""'


class ElmInstaller:
    """Download a project's dependencies into ELM_HOME.

    Elm has no "install everything" command, so this compiles a minimal
    module against elm.json and lets the compiler fetch what it needs.
    """

    def __init__(
        self,
        project_dir: Union[str, Path] = ".",
        elm_binary: str = "elm",
        elm_home: Optional[Path] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize installer.

        Args:
            project_dir: Directory containing elm.json
            elm_binary: Elm executable name or path
            elm_home: ELM_HOME to export to the compiler (None = inherit)
            timeout: Seconds before the compiler is killed (None = no limit)
        """
        self.project_dir = Path(project_dir)
        self.elm_binary = elm_binary
        self.elm_home = elm_home
        self.timeout = timeout

    @property
    def manifest_path(self) -> Path:
        return self.project_dir / "elm.json"

    def is_available(self) -> bool:
        """Check if the Elm binary can be found on PATH."""
        return shutil.which(self.elm_binary) is not None

    def _project_type(self) -> Optional[str]:
        try:
            data = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ManifestUnreadableError(self.manifest_path, e.strerror or str(e)) from e
        except ValueError as e:
            raise ManifestUnreadableError(self.manifest_path, f"invalid JSON ({e})") from e
        return data.get("type") if isinstance(data, dict) else None

    def _environment(self) -> dict[str, str]:
        env = dict(os.environ)
        if self.elm_home is not None:
            env["ELM_HOME"] = str(self.elm_home)
        return env

    @staticmethod
    def _remove_temp_module(temp_file: Path) -> None:
        try:
            temp_file.unlink(missing_ok=True)
        except OSError as e:
            # A leftover module does not affect the installed packages
            logger.warning(f"Could not remove {temp_file}: {e}")

    def install(self) -> None:
        """Fetch dependencies by compiling a throwaway module.

        Raises:
            ManifestUnreadableError: If elm.json is missing or not valid JSON
            FetchFailedError: If the compiler is missing, times out, or fails
        """
        logger.info("Installing Elm dependencies...")

        if not self.manifest_path.exists():
            raise ManifestUnreadableError(self.manifest_path, "No elm.json found in current directory")

        is_app = self._project_type() == "application"
        temp_file = self.project_dir / TEMP_MODULE_NAME
        try:
            temp_file.write_text(APPLICATION_MODULE if is_app else PACKAGE_MODULE, encoding="utf-8")
        except OSError as e:
            raise FetchFailedError(f"Could not write {temp_file}: {e.strerror or e}") from e

        try:
            result = subprocess.run(
                [self.elm_binary, "make", TEMP_MODULE_NAME, f"--output={os.devnull}"],
                cwd=self.project_dir,
                env=self._environment(),
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise FetchFailedError(f"Elm binary not found: {self.elm_binary}") from e
        except subprocess.TimeoutExpired as e:
            raise FetchFailedError(f"elm make timed out after {self.timeout}s") from e
        except OSError as e:
            raise FetchFailedError(f"Could not run {self.elm_binary}: {e}") from e
        finally:
            self._remove_temp_module(temp_file)

        if result.returncode != 0:
            raise FetchFailedError(
                f"elm make exited with status {result.returncode}",
                returncode=result.returncode,
            )

        logger.info("Successfully installed Elm dependencies")
