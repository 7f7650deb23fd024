"""Tests for the cache store."""

import os
import sys
from unittest.mock import patch

import pytest

from elm_dep_cache.cache import CacheStore
from elm_dep_cache.errors import PopulateFailedError, PruneEntryFailedError, RestoreFailedError
from elm_dep_cache.models.config import ElmDepCacheConfig

KEY_A = "a" * 64
KEY_B = "b" * 64
KEY_C = "c" * 64


def make_home(root):
    """Create a fake ELM_HOME tree."""
    pkg = root / "0.19.1" / "packages" / "elm" / "html" / "1.0.0"
    pkg.mkdir(parents=True)
    (pkg / "elm.json").write_text('{"type": "package"}')
    (pkg / "docs.json").write_bytes(b"[]")
    (root / "0.19.1" / "packages" / "registry.dat").write_bytes(bytes(range(256)))
    (root / "0.19.1" / "repl").mkdir()
    return root


def snapshot(root):
    """Map relative paths to file bytes (None for directories)."""
    result = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames:
            result[os.path.relpath(os.path.join(dirpath, name), root)] = None
        for name in filenames:
            path = os.path.join(dirpath, name)
            with open(path, "rb") as f:
                result[os.path.relpath(path, root)] = f.read()
    return result


@pytest.fixture
def store(tmp_path):
    """Store with a cache root that does not exist yet."""
    return CacheStore(tmp_path / ".elm-dep-cache")


class TestCacheStoreBasics:
    """Tests for store construction and lookups."""

    def test_from_config(self, tmp_path):
        """Test building the root from config."""
        config = ElmDepCacheConfig(cache={"root": tmp_path, "directory": ".cache-x"})
        store = CacheStore.from_config(config)
        assert store.cache_root == tmp_path / ".cache-x"

    def test_slot_path(self, store):
        """Test that slots sit directly under the root."""
        assert store.slot_path(KEY_A) == store.cache_root / KEY_A

    def test_exists_missing_root(self, store):
        """Test that a missing root means no slot."""
        assert store.exists(KEY_A) is False

    def test_exists_after_populate(self, store, tmp_path):
        """Test existence right after a successful populate."""
        home = make_home(tmp_path / "home")

        assert store.populate(KEY_A, home).ok
        assert store.exists(KEY_A) is True
        assert store.exists(KEY_B) is False

    def test_exists_ignores_files(self, store):
        """Test that a file named like a key is not a slot."""
        store.cache_root.mkdir()
        (store.cache_root / KEY_A).write_text("not a slot")
        assert store.exists(KEY_A) is False

    def test_list_slots(self, store):
        """Test listing slots."""
        assert store.list_slots() == []
        for key in (KEY_B, KEY_A):
            (store.cache_root / key).mkdir(parents=True)
        (store.cache_root / "README").write_text("ignored")

        assert store.list_slots() == [KEY_A, KEY_B]


class TestPopulate:
    """Tests for populate."""

    def test_creates_root_and_slot(self, store, tmp_path):
        """Test that the root is created lazily."""
        home = make_home(tmp_path / "home")
        assert not store.cache_root.exists()

        result = store.populate(KEY_A, home)

        assert result.ok
        assert bool(result) is True
        assert result.error is None
        assert result.files_copied == 3
        assert result.source == home
        assert result.destination == store.slot_path(KEY_A)
        assert snapshot(store.slot_path(KEY_A)) == snapshot(home)

    def test_missing_home_fails(self, store, tmp_path):
        """Test that there is nothing to cache without a home directory."""
        result = store.populate(KEY_A, tmp_path / "no-home")

        assert not result.ok
        assert isinstance(result.error, PopulateFailedError)
        assert not store.exists(KEY_A)

    def test_copy_error_is_reported(self, store, tmp_path):
        """Test that I/O errors become a failed result, not an exception."""
        home = make_home(tmp_path / "home")

        with patch("elm_dep_cache.cache.tree.shutil.copyfile", side_effect=PermissionError(13, "Permission denied")):
            result = store.populate(KEY_A, home)

        assert not result.ok
        assert isinstance(result.error, PopulateFailedError)
        assert isinstance(result.error.__cause__, PermissionError)

    def test_partial_slot_is_left_in_place(self, store, tmp_path):
        """Test that a failed populate does not roll back."""
        home = make_home(tmp_path / "home")
        calls = []

        def flaky_copy(src, dst):
            if calls:
                raise OSError(5, "Input/output error")
            calls.append(src)
            with open(src, "rb") as fin, open(dst, "wb") as fout:
                fout.write(fin.read())

        with patch("elm_dep_cache.cache.tree.shutil.copyfile", side_effect=flaky_copy):
            result = store.populate(KEY_A, home)

        assert not result.ok
        assert result.files_copied == 1
        assert store.exists(KEY_A)

    def test_repopulate_overwrites(self, store, tmp_path):
        """Test that a later populate for the same key overwrites files."""
        home = make_home(tmp_path / "home")
        store.populate(KEY_A, home)
        (home / "0.19.1" / "packages" / "registry.dat").write_bytes(b"updated")

        store.populate(KEY_A, home)

        slot_registry = store.slot_path(KEY_A) / "0.19.1" / "packages" / "registry.dat"
        assert slot_registry.read_bytes() == b"updated"


class TestRestore:
    """Tests for restore."""

    def test_round_trip(self, store, tmp_path):
        """Test populate then restore into an empty directory."""
        home = make_home(tmp_path / "home")
        store.populate(KEY_A, home)
        target = tmp_path / "fresh-home"

        result = store.restore(KEY_A, target)

        assert result.ok
        assert snapshot(target) == snapshot(home)

    def test_idempotent(self, store, tmp_path):
        """Test that restoring twice equals restoring once."""
        home = make_home(tmp_path / "home")
        store.populate(KEY_A, home)
        target = tmp_path / "target"

        store.restore(KEY_A, target)
        once = snapshot(target)
        store.restore(KEY_A, target)

        assert snapshot(target) == once

    def test_merge_not_mirror(self, store, tmp_path):
        """Test that pre-existing destination files are preserved."""
        home = make_home(tmp_path / "home")
        store.populate(KEY_A, home)
        target = tmp_path / "target"
        (target / "0.19.1").mkdir(parents=True)
        (target / "0.19.1" / "d.dat").write_text("local state")
        (target / "0.19.1" / "packages").mkdir()
        (target / "0.19.1" / "packages" / "registry.dat").write_text("stale")

        store.restore(KEY_A, target)

        assert (target / "0.19.1" / "d.dat").read_text() == "local state"
        registry = target / "0.19.1" / "packages" / "registry.dat"
        assert registry.read_bytes() == bytes(range(256))

    def test_creates_destination(self, store, tmp_path):
        """Test that a missing ELM_HOME is created before copying."""
        store.populate(KEY_A, make_home(tmp_path / "home"))
        target = tmp_path / "a" / "b" / "elm-home"

        assert store.restore(KEY_A, target).ok
        assert target.is_dir()

    def test_missing_slot_fails(self, store, tmp_path):
        """Test that a vanished slot is a recoverable failure."""
        result = store.restore(KEY_A, tmp_path / "target")

        assert not result.ok
        assert isinstance(result.error, RestoreFailedError)
        assert isinstance(result.error.__cause__, FileNotFoundError)

    def test_copy_error_is_reported(self, store, tmp_path):
        """Test that copy errors do not raise."""
        store.populate(KEY_A, make_home(tmp_path / "home"))

        with patch("elm_dep_cache.cache.tree.shutil.copyfile", side_effect=OSError(28, "No space left on device")):
            result = store.restore(KEY_A, tmp_path / "target")

        assert not result.ok
        assert "No space left" in str(result.error)


class TestPrune:
    """Tests for prune."""

    def _make_slots(self, store, *keys):
        for key in keys:
            slot = store.slot_path(key)
            (slot / "0.19.1").mkdir(parents=True)
            (slot / "0.19.1" / "file.dat").write_text(key)

    def test_keeps_only_current(self, store):
        """Test that exactly the current slot survives."""
        self._make_slots(store, KEY_A, KEY_B, KEY_C)

        result = store.prune(KEY_B)

        assert result.counts == (2, 1)
        assert result.removed == 2
        assert result.kept == 1
        assert result.ok
        assert sorted(result.removed_keys) == [KEY_A, KEY_C]
        assert store.list_slots() == [KEY_B]

    def test_current_slot_absent(self, store):
        """Test pruning when the current key has no slot."""
        self._make_slots(store, KEY_A, KEY_C)

        result = store.prune(KEY_B)

        assert result.counts == (2, 0)
        assert store.list_slots() == []
        assert store.cache_root.is_dir()

    def test_missing_root(self, store):
        """Test that pruning a missing root is a no-op."""
        result = store.prune(KEY_A)

        assert result.counts == (0, 0)
        assert result.ok
        assert not store.cache_root.exists()

    def test_ignores_plain_files(self, store):
        """Test that non-directory entries in the root are left alone."""
        self._make_slots(store, KEY_A)
        (store.cache_root / ".gitignore").write_text("*")

        result = store.prune(KEY_B)

        assert result.counts == (1, 0)
        assert (store.cache_root / ".gitignore").exists()

    def test_continues_after_failure(self, store):
        """Test best-effort pruning: one failure does not stop the scan."""
        self._make_slots(store, KEY_A, KEY_B, KEY_C)

        from elm_dep_cache.cache import tree

        real_remove = tree.remove_tree

        def fail_on_a(path):
            if path.name == KEY_A:
                raise PermissionError(13, "Permission denied")
            return real_remove(path)

        with patch("elm_dep_cache.cache.store.remove_tree", side_effect=fail_on_a):
            result = store.prune(KEY_B)

        assert result.counts == (1, 1)
        assert not result.ok
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert isinstance(failure, PruneEntryFailedError)
        assert failure.key == KEY_A
        assert failure.reason == "Permission denied"
        assert store.list_slots() == [KEY_A, KEY_B]

    def test_listing_error_is_reported(self, store):
        """Test that an unreadable cache root is a failure, not an exception."""
        self._make_slots(store, KEY_A)

        with patch("elm_dep_cache.cache.store.os.scandir", side_effect=PermissionError(13, "Permission denied")):
            result = store.prune(KEY_B)

        assert result.counts == (0, 0)
        assert not result.ok
        assert len(result.failures) == 1
        assert result.failures[0].reason == "Permission denied"
        assert isinstance(result.failures[0].__cause__, PermissionError)
        assert store.list_slots() == [KEY_A]

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
    def test_symlinked_slot_not_followed(self, store, tmp_path):
        """Test that a symlink in the root is not treated as a slot."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "keep.txt").write_text("keep")
        store.cache_root.mkdir()
        (store.cache_root / KEY_C).symlink_to(outside, target_is_directory=True)

        result = store.prune(KEY_A)

        assert result.counts == (0, 0)
        assert (outside / "keep.txt").exists()

    def test_to_dict(self, store):
        """Test serializing a prune result."""
        self._make_slots(store, KEY_A)
        data = store.prune(KEY_B).to_dict()
        assert data == {"removed": 1, "kept": 0, "removed_keys": [KEY_A], "failures": []}
