"""An asynchronous command builder with logging and exit-status checking."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import signal
import subprocess
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

_MAX_DISPLAY_LENGTH = 100
_GIT_SKIPPED_FLAGS = frozenset(
    {"--no-ext-diff", "--no-textconv", "--ignore-submodules", "--no-color"}
)
_GIT_SKIPPED_CONFIG_PREFIXES = ("core.useBuiltinFSMonitor", "protocol.version")
_STDERR_FD = 2
_UNSET: Any = object()


def git_executable() -> str | None:
    """Return the resolved path of the git executable, if there is one."""
    return shutil.which("git")


@dataclass(frozen=True)
class CommandOutput:
    """The exit code and captured output of a finished command."""

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def success(self) -> bool:
        return self.returncode == 0


def _describe_returncode(returncode: int) -> str:
    if returncode < 0:
        number = -returncode
        try:
            name = signal.Signals(number).name
        except ValueError:
            return f"signal: {number}"
        return f"signal: {number} ({name})"
    if os.name == "nt":
        return f"exit code: {returncode}"
    return f"exit status: {returncode}"


def _non_empty_lines(data: bytes) -> list[str]:
    text = data.decode("utf-8", errors="replace")
    return [line for line in (raw.strip() for raw in text.split("\n")) if line]


class ProcessError(Exception):
    """Base class for errors running a command."""

    def __init__(self, summary: str, message: str) -> None:
        super().__init__(message)
        self.summary = summary


class ExecError(ProcessError):
    """The command could not be started at all."""

    def __init__(self, summary: str, cause: OSError) -> None:
        super().__init__(summary, f"run command `{summary}` failed")
        self.cause = cause


class StatusError(ProcessError):
    """The command ran but exited unsuccessfully."""

    def __init__(
        self, summary: str, returncode: int, output: CommandOutput | None = None
    ) -> None:
        self.returncode = returncode
        self.output = output
        super().__init__(
            summary, f"command `{summary}` exited with an error:\n{self.details()}"
        )

    def details(self) -> str:
        """Describe the exit status and any non-blank captured output."""
        text = f"\n[status]\n{_describe_returncode(self.returncode)}\n"
        if self.output is not None:
            stdout = _non_empty_lines(self.output.stdout)
            stderr = _non_empty_lines(self.output.stderr)
            if stdout:
                text += "\n[stdout]\n" + "\n".join(stdout) + "\n"
            if stderr:
                text += "\n[stderr]\n" + "\n".join(stderr) + "\n"
        return text


def _skip_args(is_git: bool, current: str, following: str | None) -> int:
    """Return how many arguments to leave out of the displayed command."""
    if not is_git:
        return 0
    if current == "-c":
        if following is not None and following.startswith(_GIT_SKIPPED_CONFIG_PREFIXES):
            return 2
        return 0
    if current in _GIT_SKIPPED_FLAGS:
        return 1
    return 0


def _to_str(value: Any) -> str:
    return os.fsdecode(os.fspath(value))


class Cmd:
    """A command with a summary of its purpose, run asynchronously."""

    def __init__(self, program: Any, summary: str) -> None:
        self._program = _to_str(program)
        self._summary = summary
        self._args: list[str] = []
        self._env: dict[str, str | None] = {}
        self._env_cleared = False
        self._cwd: str | None = None
        self._stdin: Any = _UNSET
        self._stdout: Any = _UNSET
        self._stderr: Any = _UNSET
        self._check_status = True

    @property
    def program(self) -> str:
        return self._program

    @property
    def summary(self) -> str:
        return self._summary

    @property
    def arguments(self) -> tuple[str, ...]:
        return tuple(self._args)

    @property
    def environment(self) -> dict[str, str | None]:
        """Explicitly set variables; ``None`` marks a removed one."""
        return dict(self._env)

    @property
    def cwd(self) -> str | None:
        return self._cwd

    def arg(self, arg: Any) -> Cmd:
        self._args.append(_to_str(arg))
        return self

    def args(self, args: Iterable[Any]) -> Cmd:
        self._args.extend(_to_str(arg) for arg in args)
        return self

    def env(self, key: Any, value: Any) -> Cmd:
        self._env[_to_str(key)] = _to_str(value)
        return self

    def envs(self, variables: Mapping[Any, Any] | Iterable[tuple[Any, Any]]) -> Cmd:
        items = variables.items() if isinstance(variables, Mapping) else variables
        for key, value in items:
            self.env(key, value)
        return self

    def env_remove(self, key: Any) -> Cmd:
        self._env[_to_str(key)] = None
        return self

    def env_clear(self) -> Cmd:
        self._env.clear()
        self._env_cleared = True
        return self

    def current_dir(self, directory: Any) -> Cmd:
        self._cwd = _to_str(directory)
        return self

    def stdin(self, cfg: Any) -> Cmd:
        self._stdin = cfg
        return self

    def stdout(self, cfg: Any) -> Cmd:
        self._stdout = cfg
        return self

    def stderr(self, cfg: Any) -> Cmd:
        self._stderr = cfg
        return self

    def stdout_to_stderr(self) -> Cmd:
        """Send the command's stdout to this process's stderr."""
        self._stdout = _STDERR_FD
        return self

    def check(self, checked: bool) -> Cmd:
        """Set whether a non-zero exit status raises ``StatusError``."""
        self._check_status = checked
        return self

    def _environment(self) -> dict[str, str] | None:
        if not self._env_cleared and not self._env:
            return None
        base = {} if self._env_cleared else dict(os.environ)
        for key, value in self._env.items():
            if value is None:
                base.pop(key, None)
            else:
                base[key] = value
        return base

    async def _create(self, capture: bool) -> asyncio.subprocess.Process:
        self.log_command()
        captured = subprocess.PIPE if capture else None
        stdin = self._stdin if self._stdin is not _UNSET else (
            subprocess.DEVNULL if capture else None
        )
        stdout = self._stdout if self._stdout is not _UNSET else captured
        stderr = self._stderr if self._stderr is not _UNSET else captured
        try:
            return await asyncio.create_subprocess_exec(
                self._program,
                *self._args,
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                cwd=self._cwd,
                env=self._environment(),
            )
        except OSError as cause:
            raise ExecError(self._summary, cause) from cause

    async def run(self) -> None:
        """Run the command to completion, checking its status."""
        await self.status()

    async def spawn(self) -> asyncio.subprocess.Process:
        """Start the command and return the running process."""
        return await self._create(capture=False)

    async def output(self) -> CommandOutput:
        """Run the command, capturing stdout and stderr."""
        process = await self._create(capture=True)
        stdout, stderr = await process.communicate()
        result = CommandOutput(process.returncode, stdout or b"", stderr or b"")
        self.maybe_check_output(result)
        return result

    async def status(self) -> int:
        """Run the command and return its exit code."""
        process = await self._create(capture=False)
        returncode = await process.wait()
        self.maybe_check_status(returncode)
        return returncode

    def check_status(self, returncode: int) -> None:
        if returncode != 0:
            raise StatusError(self._summary, returncode)

    def check_output(self, output: CommandOutput) -> None:
        if not output.success:
            raise StatusError(self._summary, output.returncode, output)

    def maybe_check_status(self, returncode: int) -> None:
        if self._check_status:
            self.check_status(returncode)

    def maybe_check_output(self, output: CommandOutput) -> None:
        if self._check_status:
            self.check_output(output)

    def log_command(self) -> None:
        logger.debug("Executing `%s`", self)

    def __str__(self) -> str:
        text = f"cd {self._cwd} && " if self._cwd is not None else ""
        text += self._program

        args = self._args
        if args and args[0] == self._program:
            args = args[1:]

        git = git_executable()
        is_git = git is not None and self._program == git

        length = 0
        pending_skip = 0
        for current, following in zip(args, [*args[1:], None]):
            if pending_skip:
                pending_skip -= 1
                continue
            skip = _skip_args(is_git, current, following)
            if skip:
                pending_skip = skip - 1
                continue
            text += f" {current}"
            length += len(os.fsencode(current)) + 1
            if length > _MAX_DISPLAY_LENGTH:
                text += " [...]"
                break
        return text