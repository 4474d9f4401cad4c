"""Delivery of policy files to their load callbacks.

Watching files for changes belongs to the deployment (inotify, a
sidecar, SIGHUP from a config manager).  This module only reads a file
and hands its bytes to a load callback, and remembers the pairing so
the file can be delivered again on request.

A *reloader* is any callable ``reloader(path, on_load, on_error)``;
:func:`load_once` is the default.  Whatever it returns is kept by the
authority and, if it has a ``reload()`` method, is called from
:meth:`PolicyAuthority.reload`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from acmepa.errors import PolicyLoadError

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)


class Reloader(Protocol):
    def __call__(
        self,
        path: str | Path,
        on_load: Callable[[bytes], Any],
        on_error: Callable[[Exception], None],
    ) -> Any: ...


class FileSource:
    """A policy file paired with its load and error callbacks."""

    def __init__(
        self,
        path: str | Path,
        on_load: Callable[[bytes], Any],
        on_error: Callable[[Exception], None],
    ) -> None:
        self.path = Path(path)
        self._on_load = on_load
        self._on_error = on_error

    def load(self) -> None:
        """Read the file and deliver it.  Errors propagate."""
        self._on_load(self.path.read_bytes())

    def reload(self) -> bool:
        """Deliver the file again; failures go to the error callback.

        Returns ``True`` if the new contents were accepted.
        """
        try:
            self.load()
        except (OSError, PolicyLoadError) as exc:
            self._on_error(exc)
            return False
        return True

    def __repr__(self) -> str:
        return f"<FileSource path={self.path}>"


def load_once(
    path: str | Path,
    on_load: Callable[[bytes], Any],
    on_error: Callable[[Exception], None],
) -> FileSource:
    """Load *path* now and return a :class:`FileSource` for later reloads.

    An initial load failure is raised to the caller rather than passed
    to *on_error*: a process must not start without its policy.
    """
    source = FileSource(path, on_load, on_error)
    source.load()
    log.debug("Loaded policy file %s", source.path)
    return source
