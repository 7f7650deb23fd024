"""Diagnostic tool for verifying an elm-dep-cache setup."""

import sys
from importlib import import_module
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from .cache import CacheStore, derive_key, is_valid_key
from .elm import ElmInstaller
from .errors import ManifestUnreadableError
from .models.config import ElmDepCacheConfig


def check_dependency(
    module_name: str, package_name: Optional[str] = None, optional: bool = False
) -> tuple[bool, str]:
    """
    Check if a Python module is importable.

    Args:
        module_name: Name of the module to import
        package_name: Display name of the package (defaults to module_name)
        optional: Whether this is an optional dependency

    Returns:
        Tuple of (success: bool, message: str)
    """
    display_name = package_name or module_name

    try:
        import_module(module_name)
        return True, f"[OK] {display_name}"
    except ImportError:
        if optional:
            return False, f"[WARN] {display_name} (optional - not installed)"
        else:
            return False, f"[MISSING] {display_name}"


def check_manifest(manifest: Path) -> tuple[bool, str]:
    """Check that the manifest can be hashed into a cache key."""
    try:
        key = derive_key(manifest)
    except ManifestUnreadableError as e:
        return False, f"[FAIL] Manifest - {e.reason} ({manifest})"
    return True, f"[OK] Manifest {manifest} (key {key[:12]}...)"


def check_elm_binary(binary: str) -> tuple[bool, str]:
    """Check that the Elm compiler is on PATH."""
    if ElmInstaller(elm_binary=binary).is_available():
        return True, f"[OK] Elm binary ({binary})"
    return False, f"[WARN] Elm binary not found ({binary}) - cache misses cannot install"


def check_elm_home(elm_home: Path) -> tuple[bool, str]:
    """Report where ELM_HOME is and whether it exists yet."""
    if elm_home.is_dir():
        return True, f"[OK] ELM_HOME exists ({elm_home})"
    return False, f"[WARN] ELM_HOME does not exist yet ({elm_home})"


def check_cache_root(store: CacheStore) -> tuple[bool, str]:
    """
    Check if the cache root is writable and summarize its slots.

    The directory is created if missing, since populate would create it too.
    """
    try:
        store.cache_root.mkdir(parents=True, exist_ok=True)
        test_file = store.cache_root / ".elm_dep_cache_test"
        test_file.write_text("test")
        test_file.unlink()
    except PermissionError:
        return False, f"[FAIL] Cache directory - permission denied ({store.cache_root})"
    except OSError as e:
        return False, f"[FAIL] Cache directory - {e} ({store.cache_root})"

    slots = store.list_slots()
    foreign = [name for name in slots if not is_valid_key(name)]
    message = f"[OK] Cache directory writable ({store.cache_root}, {len(slots)} slots)"
    if foreign:
        message += f" - {len(foreign)} not named like a cache key"
    return True, message


def run_doctor(config: Optional[ElmDepCacheConfig] = None) -> int:
    """
    Run diagnostic checks and display results.

    Args:
        config: Configuration to check (defaults to ElmDepCacheConfig())

    Returns:
        Exit code (0 if core dependencies and the manifest are OK, 1 otherwise)
    """
    config = config or ElmDepCacheConfig()
    console = Console()

    console.print("Running elm-dep-cache diagnostics...\n")

    core_checks = [
        ("pydantic", "pydantic"),
        ("rich", "rich"),
    ]
    optional_checks = [
        ("yaml", "pyyaml", True),
    ]

    core_results = [check_dependency(mod, pkg) for mod, pkg in core_checks]
    optional_results = [check_dependency(mod, pkg, opt) for mod, pkg, opt in optional_checks]
    manifest_result = check_manifest(config.manifest)
    project_results = [
        manifest_result,
        check_elm_binary(config.elm.binary),
        check_elm_home(config.resolved_elm_home()),
        check_cache_root(CacheStore.from_config(config)),
    ]

    all_checks = {
        "Core Dependencies": core_results,
        "Optional Dependencies": optional_results,
        "Project": project_results,
    }

    for category, results in all_checks.items():
        table = Table(title=category, show_header=False, box=None)
        table.add_column("Status", style="bold")

        for success, message in results:
            style = "green" if success else ("yellow" if "[WARN]" in message else "red")
            table.add_row(message, style=style)

        console.print(table)
        console.print()

    core_failed = any(not success for success, _ in core_results)

    if core_failed:
        console.print("WARNING: Some core dependencies are missing!")
        console.print("  Reinstall with: pip install --upgrade --force-reinstall elm-dep-cache")
        return 1
    if not manifest_result[0]:
        console.print("No readable elm.json - run from the project directory or pass --manifest")
        return 1

    console.print("All checks passed.")
    return 0


if __name__ == "__main__":
    sys.exit(run_doctor())
