"""Splitting filenames into command-line sized batches and running them concurrently."""

from __future__ import annotations

import asyncio
import functools
import math
import os
from collections.abc import Awaitable, Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T")

_POSIX_MAX_CLI_LENGTH = 1 << 12
# UNICODE_STRING maximum minus some headroom.
_WINDOWS_MAX_CLI_LENGTH = (1 << 15) - 2048
_MIN_PER_BATCH = 4


@dataclass(frozen=True)
class BatchHook:
    """The parts of a hook that decide how its files are batched."""

    id: str
    entry: str
    args: tuple[str, ...] = field(default_factory=tuple)
    require_serial: bool = False


def default_concurrency(environ: Mapping[str, str] | None = None) -> int:
    """Return the number of batches run at once unless a hook needs serial runs."""
    env = os.environ if environ is None else environ
    if "PREK_NO_CONCURRENCY" in env:
        return 1
    return os.cpu_count() or 1


@functools.lru_cache(maxsize=1)
def _process_concurrency() -> int:
    return default_concurrency()


def target_concurrency(serial: bool) -> int:
    """Return 1 for serial hooks, otherwise the process-wide concurrency."""
    return 1 if serial else _process_concurrency()


def _default_max_cli_length() -> int:
    return _WINDOWS_MAX_CLI_LENGTH if os.name == "nt" else _POSIX_MAX_CLI_LENGTH


def _byte_length(text: str) -> int:
    return len(os.fsencode(text))


def partitions(
    hook: BatchHook,
    filenames: Sequence[str],
    concurrency: int,
    max_cli_length: int | None = None,
) -> Iterator[list[str]]:
    """Yield consecutive batches of filenames that fit on one command line.

    An empty list of filenames yields a single empty batch. Iteration stops
    early if a filename cannot fit in a batch on its own.
    """
    if not filenames:
        yield []
        return

    limit = _default_max_cli_length() if max_cli_length is None else max_cli_length
    max_per_batch = max(_MIN_PER_BATCH, math.ceil(len(filenames) / concurrency))
    command_length = (
        _byte_length(hook.entry)
        + sum(_byte_length(arg) for arg in hook.args)
        + len(hook.args)
    )

    batch: list[str] = []
    current_length = command_length + 1
    for filename in filenames:
        length = _byte_length(filename) + 1
        if current_length + length > limit or len(batch) >= max_per_batch:
            if not batch:
                return
            yield batch
            batch = []
            current_length = command_length + 1
            if current_length + length > limit:
                return
        batch.append(filename)
        current_length += length
    if batch:
        yield batch


async def run_by_batch(
    hook: BatchHook,
    filenames: Sequence[str],
    run: Callable[[list[str]], Awaitable[T]],
) -> list[T]:
    """Run ``run`` on every batch of filenames, returning results in batch order.

    At most the hook's target concurrency of batches run at once. The first
    failure in batch order is raised and the remaining batches are cancelled.
    """
    concurrency = target_concurrency(hook.require_serial)
    semaphore = asyncio.Semaphore(concurrency)

    async def limited(batch: list[str]) -> T:
        async with semaphore:
            return await run(batch)

    tasks = [
        asyncio.ensure_future(limited(list(batch)))
        for batch in partitions(hook, filenames, concurrency)
    ]
    results: list[T] = []
    try:
        for task in tasks:
            results.append(await task)
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
    return results


def prepend_paths(
    paths: Sequence[str | os.PathLike[str]],
    environ: Mapping[str, str] | None = None,
) -> str:
    """Return a PATH value with ``paths`` placed before the current PATH entries."""
    env = os.environ if environ is None else environ
    entries = [os.fspath(path) for path in paths]
    current = env.get("PATH")
    if current is not None:
        entries.extend(current.split(os.pathsep))

    joined: list[str] = []
    for entry in entries:
        if os.name == "nt":
            if '"' in entry:
                raise ValueError(f"path segment contains `\"`: {entry!r}")
            if os.pathsep in entry:
                entry = f'"{entry}"'
        elif os.pathsep in entry:
            raise ValueError(f"path segment contains separator `{os.pathsep}`: {entry!r}")
        joined.append(entry)
    return os.pathsep.join(joined)