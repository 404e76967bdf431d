"""Version information, optionally with the commit the build came from."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

VERSION = "0.0.23"

_U32_MAX = 2**32 - 1
_DISTANCE_PATTERN = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True)
class CommitInfo:
    """The git commit a build was made from."""

    short_commit_hash: str
    commit_hash: str
    commit_date: str
    last_tag: str | None = None
    commits_since_last_tag: int = 0


@dataclass(frozen=True)
class VersionInfo:
    """The package version and optional commit information."""

    version: str
    commit_info: CommitInfo | None = None

    def __str__(self) -> str:
        text = self.version
        info = self.commit_info
        if info is not None:
            if info.commits_since_last_tag > 0:
                text += f"+{info.commits_since_last_tag}"
            text += f" ({info.short_commit_hash} {info.commit_date})"
        return text

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable mapping of this information."""
        return asdict(self)


def _parse_distance(value: str | None) -> int:
    if value is None or not _DISTANCE_PATTERN.fullmatch(value):
        return 0
    number = int(value)
    return number if number <= _U32_MAX else 0


def version(environ: Mapping[str, str] | None = None) -> VersionInfo:
    """Return version information, reading commit details from the environment."""
    env = os.environ if environ is None else environ
    commit_hash = env.get("PREK_COMMIT_HASH")
    commit_info = None
    if commit_hash is not None:
        short_hash = env.get("PREK_COMMIT_SHORT_HASH")
        commit_date = env.get("PREK_COMMIT_DATE")
        if short_hash is None:
            raise ValueError("PREK_COMMIT_SHORT_HASH must be set with PREK_COMMIT_HASH")
        if commit_date is None:
            raise ValueError("PREK_COMMIT_DATE must be set with PREK_COMMIT_HASH")
        commit_info = CommitInfo(
            short_commit_hash=short_hash,
            commit_hash=commit_hash,
            commit_date=commit_date,
            last_tag=env.get("PREK_LAST_TAG"),
            commits_since_last_tag=_parse_distance(env.get("PREK_LAST_TAG_DISTANCE")),
        )
    return VersionInfo(version=VERSION, commit_info=commit_info)