"""Pydantic configuration models for elm-dep-cache."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..elm.home import find_elm_home

# Name of the cache root directory under the working directory
DEFAULT_CACHE_DIRECTORY = ".elm-dep-cache"


class CacheConfig(BaseModel):
    """Configuration for where cache slots live."""

    directory: str = Field(
        DEFAULT_CACHE_DIRECTORY,
        min_length=1,
        description="Name of the cache root directory",
    )
    root: Path = Field(Path("."), description="Directory the cache root is created in")

    model_config = {"extra": "forbid"}

    @field_validator("directory")
    @classmethod
    def _single_component(cls, v: str) -> str:
        # Slots must sit one level below a single directory
        if Path(v).name != v or v in (".", ".."):
            raise ValueError(f"Cache directory must be a plain directory name, got: {v!r}")
        return v


class ElmConfig(BaseModel):
    """Configuration for the Elm toolchain."""

    home: Optional[Path] = Field(None, description="ELM_HOME override (None = ELM_HOME or OS default)")
    binary: str = Field("elm", description="Elm executable name or path")
    timeout: Optional[float] = Field(None, gt=0, description="Seconds before elm make is killed")

    model_config = {"extra": "forbid"}


class ElmDepCacheConfig(BaseModel):
    """
    Root configuration model for elm-dep-cache.

    Example:
        config = ElmDepCacheConfig(
            manifest=Path("elm.json"),
            cache={"directory": ".elm-dep-cache"},
            elm={"home": Path("/tmp/elm-home")},
        )

    YAML format:
        manifest: elm.json
        cache:
          directory: .elm-dep-cache
        elm:
          binary: elm
          timeout: 600
    """

    manifest: Path = Field(Path("elm.json"), description="Manifest file hashed into the cache key")
    cache: CacheConfig = Field(default_factory=CacheConfig)
    elm: ElmConfig = Field(default_factory=ElmConfig)

    clean: bool = Field(False, description="Prune stale cache slots instead of restoring")
    dry_run: bool = Field(False, description="Report actions without copying, installing or deleting")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    @property
    def cache_root(self) -> Path:
        """Directory holding one slot per cache key."""
        return self.cache.root / self.cache.directory

    @property
    def project_dir(self) -> Path:
        """Directory containing the manifest."""
        return self.manifest.parent

    def resolved_elm_home(self) -> Path:
        """Get the configured ELM_HOME, falling back to the environment and OS default."""
        return self.elm.home if self.elm.home is not None else find_elm_home()

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ElmDepCacheConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ElmDepCacheConfig":
        """Load config from YAML file."""
        return cls.from_yaml(Path(path).read_text(encoding="utf-8"))
