"""The on-disk store holding cloned repos, installed hooks, tools and caches."""

from __future__ import annotations

import enum
import json
import logging
import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_README = "This directory is maintained by the prek project.\n"
_HOOK_INFO_FILE = ".prek-hook.json"


class StoreError(Exception):
    """Base class for store errors."""


class HomeNotFoundError(StoreError):
    """No home directory could be found to place the store in."""

    def __init__(self) -> None:
        super().__init__("Home directory not found")


class ToolBucket(enum.Enum):
    """Directories under ``tools`` for downloaded toolchains."""

    UV = "uv"
    PYTHON = "python"
    NODE = "node"
    GO = "go"


class CacheBucket(enum.Enum):
    """Directories under ``cache`` for tool caches."""

    UV = "uv"
    GO = "go"
    PYTHON = "python"


def _cache_dir(env: Mapping[str, str]) -> Path | None:
    if os.name == "nt":
        local = env.get("LOCALAPPDATA")
        if local:
            return Path(local)
        profile = env.get("USERPROFILE")
        return Path(profile, "AppData", "Local") if profile else None
    xdg = env.get("XDG_CACHE_HOME")
    if xdg and os.path.isabs(xdg):
        return Path(xdg)
    home = env.get("HOME")
    return Path(home, ".cache") if home else None


def store_home(environ: Mapping[str, str] | None = None) -> Path | None:
    """Return the store directory: ``PREK_HOME`` or the user cache directory."""
    env = os.environ if environ is None else environ
    override = env.get("PREK_HOME")
    if override is not None:
        logger.debug("Loading store from PREK_HOME env var: %s", override)
        return Path(override)
    cache = _cache_dir(env)
    return cache / "prek" if cache is not None else None


class Store:
    """A directory managing repos, hooks, tools and caches."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @classmethod
    def from_settings(cls, environ: Mapping[str, str] | None = None) -> Store:
        """Create a store at the configured home directory."""
        home = store_home(environ)
        if home is None:
            raise HomeNotFoundError()
        return cls(home)

    @property
    def path(self) -> Path:
        return self._path

    def __repr__(self) -> str:
        return f"Store({str(self._path)!r})"

    def init(self) -> Store:
        """Create the store directory and its README if missing."""
        self._path.mkdir(parents=True, exist_ok=True)
        try:
            with (self._path / "README").open("x", encoding="utf-8") as readme:
                readme.write(_README)
        except FileExistsError:
            pass
        return self

    def installed_hooks(self) -> Iterator[dict[str, Any]]:
        """Yield the recorded install information of every installed hook."""
        try:
            entries = list(self.hooks_dir().iterdir())
        except OSError:
            return
        for entry in entries:
            try:
                with (entry / _HOOK_INFO_FILE).open(encoding="utf-8") as info:
                    data = json.load(info)
            except (OSError, ValueError):
                continue
            yield data

    def repos_dir(self) -> Path:
        return self._path / "repos"

    def hooks_dir(self) -> Path:
        return self._path / "hooks"

    def patches_dir(self) -> Path:
        return self._path / "patches"

    def tools_path(self, tool: ToolBucket) -> Path:
        """The directory for a downloaded tool."""
        return self._path / "tools" / tool.value

    def cache_path(self, bucket: CacheBucket) -> Path:
        """The cache directory for a tool."""
        return self._path / "cache" / bucket.value