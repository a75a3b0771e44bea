"""Shared plumbing for package backends that shell out to a package manager."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from ..backend import EventSink, ExitStatus, FilesEvent, FinishedEvent, PackageEvent, Role
from ..packages import Package, package_id_split

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandOutput:
    returncode: int
    stdout: str = ""
    stderr: str = ""


CommandRunner = Callable[[Sequence[str]], CommandOutput]


def run_command(command: Sequence[str], *, timeout: float | None = None) -> CommandOutput:
    """Run *command* and capture its output; never raises for a failed command."""

    try:
        completed = subprocess.run(
            list(command),
            check=False,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        return CommandOutput(returncode=127, stderr=f"{command[0]}: command not found")
    except subprocess.TimeoutExpired:
        return CommandOutput(returncode=124, stderr=f"{command[0]}: timed out")
    return CommandOutput(
        returncode=int(completed.returncode),
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


class CommandBackend:
    """Package query backend driven by a package manager's command line.

    Subclasses provide the command lines and output parsers; queries run
    synchronously and emit their events before returning.
    """

    name = "command"
    executable = ""
    roles = frozenset({Role.SEARCH_FILE, Role.GET_FILES})
    # exit codes that only mean "nothing matched"
    no_match_codes: frozenset[int] = frozenset({1})

    def __init__(
        self,
        *,
        runner: CommandRunner | None = None,
        timeout: float | None = None,
    ) -> None:
        self.timeout = timeout
        self._runner = runner

    def is_implemented(self, role: Role) -> bool:
        return role in self.roles

    def search_files(
        self,
        paths: Sequence[str],
        *,
        installed_only: bool,
        emit: EventSink,
    ) -> None:
        # package manager databases only know about installed packages
        status = ExitStatus.SUCCESS
        seen: set[str] = set()
        if paths:
            output = self._run(self.search_command(paths))
            for package in self.parse_search(output.stdout):
                if package.name in seen:
                    continue
                seen.add(package.name)
                emit(PackageEvent(package=package))
            if self._failed(output):
                status = ExitStatus.FAILED
        emit(FinishedEvent(status=status))

    def get_files(self, package_ids: Sequence[str], *, emit: EventSink) -> None:
        status = ExitStatus.SUCCESS
        for package_id in package_ids:
            try:
                name, _, arch, _ = package_id_split(package_id)
            except ValueError:
                logger.warning("invalid package id %r", package_id)
                status = ExitStatus.FAILED
                continue
            output = self._run(self.files_command(name, arch))
            if output.returncode != 0:
                status = ExitStatus.FAILED
                continue
            files = tuple(self.parse_files(output.stdout))
            emit(FilesEvent(package_id=package_id, files=files))
        emit(FinishedEvent(status=status))

    def search_command(self, paths: Sequence[str]) -> list[str]:
        raise NotImplementedError

    def files_command(self, name: str, arch: str) -> list[str]:
        raise NotImplementedError

    def parse_search(self, stdout: str) -> Iterable[Package]:
        raise NotImplementedError

    def parse_files(self, stdout: str) -> Iterable[str]:
        for line in stdout.splitlines():
            line = line.strip()
            if line.startswith("/"):
                yield line

    def _failed(self, output: CommandOutput) -> bool:
        return output.returncode != 0 and output.returncode not in self.no_match_codes

    def _run(self, command: Sequence[str]) -> CommandOutput:
        logger.debug("running %s", " ".join(command))
        if self._runner is not None:
            output = self._runner(command)
        else:
            output = run_command(command, timeout=self.timeout)
        if output.returncode != 0 and output.stderr:
            logger.debug("%s: %s", command[0], output.stderr.strip())
        return output
