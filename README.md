# prek

Library pieces for running git hooks over many files, the way a
`pre-commit`-style tool does. It has no third-party dependencies.

## Installation

```
pip install .
```

For development and tests:

```
pip install ".[test]"
pytest
```

## Modules

### `prek.process`

`Cmd(program, summary)` wraps an external command with a short summary of
what it is for. The builder methods (`arg`, `args`, `env`, `envs`,
`env_remove`, `env_clear`, `current_dir`, `stdin`, `stdout`, `stderr`,
`stdout_to_stderr`, `check`) return the command itself, so calls can be
chained. `output()`, `status()`, `run()` and `spawn()` are coroutines built on
`asyncio.create_subprocess_exec`.

```python
from prek.process import Cmd

cmd = Cmd("git", "git status").args(["status", "--short"]).current_dir("repo")
output = await cmd.output()
print(output.stdout.decode())
```

- `output()` captures stdout and stderr and returns a `CommandOutput`
  (`returncode`, `stdout`, `stderr`, and the `success` property).
- `status()` waits for the command and returns its exit code; `run()` does the
  same and returns nothing.
- `spawn()` starts the command and returns the running
  `asyncio.subprocess.Process` without checking anything.

By default a non-zero exit status raises `StatusError`. Its message holds the
exit status and the non-blank lines of captured stdout and stderr
(`StatusError.details()` gives that part alone). Call `check(False)` to accept
any exit status. If the program cannot be started at all, `ExecError` is
raised, with the original `OSError` as `cause`. Both are subclasses of
`ProcessError` and carry the command's `summary`.

`str(cmd)` gives a one-line description such as `cd repo && git status --short`.
Arguments beyond roughly 100 bytes are cut off with `[...]`, and when the
program is the git found by `git_executable()`, noisy flags
(`--no-ext-diff`, `--no-textconv`, `--ignore-submodules`, `--no-color`, and
`-c core.useBuiltinFSMonitor…` / `-c protocol.version…`) are left out.
`log_command()` logs that description at debug level before each run.

### `prek.run`

- `BatchHook(id, entry, args=(), require_serial=False)` holds the parts of a
  hook that matter for batching.
- `partitions(hook, filenames, concurrency, max_cli_length=None)` yields
  consecutive batches of file names that fit on one command line together
  with the hook's entry and arguments. The default limit is 4096 bytes on
  POSIX and 30720 on Windows; each batch holds at most
  `max(4, ceil(len(filenames) / concurrency))` names. An empty list gives a
  single empty batch.
- `run_by_batch(hook, filenames, run)` awaits `run(batch)` for each batch,
  with at most `target_concurrency(hook.require_serial)` running at once, and
  returns the results in batch order. The first failure is raised and the
  remaining batches are cancelled.
- `default_concurrency(environ=None)` is the CPU count, or 1 when
  `PREK_NO_CONCURRENCY` is set; `target_concurrency(serial)` returns 1 for
  serial hooks and otherwise that value, read once per process.
- `prepend_paths(paths, environ=None)` builds a `PATH` value with the given
  directories placed before the current entries. It raises `ValueError` for
  an entry that cannot be joined.

### `prek.store`

`Store(path)` manages the cache directory for repositories, hook
environments, tools and patches.

- `Store.from_settings(environ=None)` uses `store_home()`: `PREK_HOME` if it
  is set, otherwise `prek` inside the user cache directory. It raises
  `HomeNotFoundError` (a `StoreError`) when neither can be found.
- `init()` creates the directory and writes a short `README` into it if there
  is none yet.
- `installed_hooks()` yields the parsed `.prek-hook.json` of every directory
  under `hooks/`, skipping entries that are missing or unreadable.
- `repos_dir()`, `hooks_dir()`, `patches_dir()`, `tools_path(ToolBucket)` and
  `cache_path(CacheBucket)` return paths inside the store.

### `prek.version`

`version(environ=None)` returns a `VersionInfo`. Commit details come from
`PREK_COMMIT_HASH`, `PREK_COMMIT_SHORT_HASH`, `PREK_COMMIT_DATE`,
`PREK_LAST_TAG` and `PREK_LAST_TAG_DISTANCE`; with them it prints as
`<version>[+<commits>] (<short hash> <date>)`, without them as the bare
version. `to_dict()` gives a JSON-ready mapping.

### `prek.user_warnings`

`enable()`, `disable()` and `is_enabled()` switch user-facing warnings.
`warn_user(message)` writes `warning: <message>` to stderr while warnings are
enabled; `warn_user_once(message)` does so only the first time a message is
seen and returns whether it printed.

## What this package does not do

There is no command-line program. The package does not read hook
configuration files, install git hooks, clone repositories into the store,
lock the store, set up language environments or run hooks itself; it
provides the command, batching, storage-layout, version and warning pieces
that such a tool is built from.