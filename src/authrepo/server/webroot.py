"""Map request targets to files under a fixed root directory.

The request target is percent-decoded, stripped of any query string or
fragment, joined to the root and canonicalised with :meth:`Path.resolve`.
Anything that lands outside the root -- through ``..`` segments, absolute
components or symlinks -- is rejected with
:class:`~authrepo.exceptions.PathTraversalError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote

from authrepo.exceptions import NotFoundError, PathTraversalError


class Webroot:
    """A directory from which repository artifacts are served.

    Args:
        root: The root directory. It is resolved once at construction so
            later changes of the working directory have no effect.

    Example::

        webroot = Webroot("target/repository")
        path = webroot.locate("/org/acme/lib/1.0/lib-1.0.pom")
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self._root = Path(root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, target: str) -> Path:
        """Return the canonical filesystem path for *target*.

        The path is not required to exist.

        Raises:
            PathTraversalError: If the canonical path lies outside the root.
            NotFoundError: If *target* cannot be turned into a filesystem
                path at all (e.g. it contains a NUL byte).
        """
        # A request target is a path, never an authority: "//org/x" stays "org/x".
        path = target.split("?", 1)[0].split("#", 1)[0]
        relative = unquote(path).lstrip("/")
        if "\x00" in relative:
            raise NotFoundError(f"Invalid request target {target!r}: embedded NUL byte")
        try:
            candidate = (self._root / relative).resolve()
        except (OSError, ValueError) as exc:
            raise NotFoundError(f"Invalid request target {target!r}: {exc}") from exc

        if candidate != self._root and not candidate.is_relative_to(self._root):
            raise PathTraversalError(
                f"Request target {target!r} resolves outside the webroot {self._root}"
            )
        return candidate

    def locate(self, target: str) -> Optional[Path]:
        """Return the regular file *target* refers to, or ``None`` if there is none.

        Directories count as missing.

        Raises:
            PathTraversalError: If the target escapes the root.
        """
        path = self.resolve(target)
        return path if path.is_file() else None

    def __repr__(self) -> str:
        return f"Webroot({str(self._root)!r})"
