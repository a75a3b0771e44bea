"""Selection of the package query backend."""

from __future__ import annotations

import shutil

from ..config import normalize_provider
from ..errors import BackendUnavailableError, DeskcacheError
from ..providers.command import CommandBackend, CommandRunner
from ..providers.dpkg import DpkgBackend
from ..providers.pacman import PacmanBackend
from ..providers.rpm import RpmBackend
from ..text import Messages

BACKENDS: dict[str, type[CommandBackend]] = {
    "dpkg": DpkgBackend,
    "rpm": RpmBackend,
    "pacman": PacmanBackend,
}
AUTO_DETECT_ORDER = ("dpkg", "rpm", "pacman")


def create_backend(
    name: str | None = "auto",
    *,
    timeout: float | None = None,
    runner: CommandRunner | None = None,
) -> CommandBackend:
    """Return the backend called *name*, or the first one found on PATH for ``auto``.

    A custom *runner* skips the PATH check, since it never launches the tool.
    """

    try:
        normalized = normalize_provider(name)
    except ValueError as exc:
        raise DeskcacheError(Messages.ERROR_UNKNOWN_PROVIDER.format(value=name)) from exc

    candidates = AUTO_DETECT_ORDER if normalized == "auto" else (normalized,)
    for candidate in candidates:
        backend_cls = BACKENDS[candidate]
        if runner is not None or shutil.which(backend_cls.executable):
            return backend_cls(runner=runner, timeout=timeout)
    tried = ", ".join(BACKENDS[candidate].executable for candidate in candidates)
    raise BackendUnavailableError(Messages.ERROR_NO_BACKEND.format(tried=tried))
