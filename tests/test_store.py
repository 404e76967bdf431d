import json

import pytest

from prek.store import (
    CacheBucket,
    HomeNotFoundError,
    Store,
    StoreError,
    ToolBucket,
    store_home,
)


def test_bucket_directories(tmp_path):
    store = Store(tmp_path)
    assert [store.tools_path(b).name for b in ToolBucket] == ["uv", "python", "node", "go"]
    assert [store.cache_path(b).name for b in CacheBucket] == ["uv", "go", "python"]


def test_store_home_prefers_prek_home(tmp_path):
    assert store_home({"PREK_HOME": str(tmp_path)}) == tmp_path


def test_store_home_falls_back_to_cache_dir(tmp_path):
    env = {
        "HOME": str(tmp_path / "home"),
        "USERPROFILE": str(tmp_path / "profile"),
        "XDG_CACHE_HOME": str(tmp_path / "xdg"),
        "LOCALAPPDATA": str(tmp_path / "local"),
    }
    home = store_home(env)
    assert home.name == "prek"
    assert home.parent in {tmp_path / "xdg", tmp_path / "local"}


def test_store_home_missing():
    assert store_home({}) is None


def test_from_settings_raises_without_home():
    with pytest.raises(HomeNotFoundError) as excinfo:
        Store.from_settings({})
    assert isinstance(excinfo.value, StoreError)
    assert str(excinfo.value) == "Home directory not found"


def test_from_settings_uses_prek_home(tmp_path):
    assert Store.from_settings({"PREK_HOME": str(tmp_path)}).path == tmp_path


def test_init_creates_directory_and_readme(tmp_path):
    root = tmp_path / "a" / "b"
    store = Store(root).init()
    assert store.path == root
    assert root.is_dir()
    assert "prek" in (root / "README").read_text(encoding="utf-8")


def test_init_keeps_existing_readme(tmp_path):
    (tmp_path / "README").write_text("custom", encoding="utf-8")
    Store(tmp_path).init()
    Store(tmp_path).init()
    assert (tmp_path / "README").read_text(encoding="utf-8") == "custom"


def test_directory_layout(tmp_path):
    store = Store(tmp_path)
    assert store.repos_dir() == tmp_path / "repos"
    assert store.hooks_dir() == tmp_path / "hooks"
    assert store.patches_dir() == tmp_path / "patches"
    assert store.tools_path(ToolBucket.NODE) == tmp_path / "tools" / "node"
    assert store.cache_path(CacheBucket.GO) == tmp_path / "cache" / "go"


def test_installed_hooks_without_hooks_dir(tmp_path):
    assert list(Store(tmp_path).installed_hooks()) == []


def test_installed_hooks_skips_invalid_entries(tmp_path):
    store = Store(tmp_path)
    hooks = store.hooks_dir()
    info = {"language": "python", "dependencies": ["a", "b"]}
    (hooks / "good").mkdir(parents=True)
    (hooks / "good" / ".prek-hook.json").write_text(json.dumps(info), encoding="utf-8")
    (hooks / "broken").mkdir()
    (hooks / "broken" / ".prek-hook.json").write_text("{not json", encoding="utf-8")
    (hooks / "empty").mkdir()
    assert list(store.installed_hooks()) == [info]