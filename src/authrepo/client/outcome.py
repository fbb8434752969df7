"""Typed results of fetching one artifact from one repository endpoint.

Exactly one variant is produced per request:

=====================  ===============================================
Variant                Meaning
=====================  ===============================================
:class:`Resolved`      HTTP 200; the artifact was written to disk.
:class:`Unauthorized`  HTTP 401; the repository asked for credentials.
:class:`Forbidden`     HTTP 403; the supplied credentials were rejected.
:class:`NotFound`      HTTP 404; the repository lacks the artifact.
:class:`TransportError`  Anything else: connection, I/O, or unexpected status.
=====================  ===============================================

Unauthorized, Forbidden and NotFound are *rejections*: a pipeline moves on
to the next repository. A :class:`TransportError` is not, and is surfaced to
the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class Resolved:
    """The artifact was downloaded to :attr:`local_file`."""

    local_file: Path

    is_rejection = False

    def describe(self) -> str:
        return f"resolved to {self.local_file}"


@dataclass(frozen=True)
class Unauthorized:
    """The repository answered 401; :attr:`challenge` is its ``WWW-Authenticate`` value."""

    challenge: Optional[str] = None

    is_rejection = True

    def describe(self) -> str:
        if self.challenge:
            return f"unauthorized ({self.challenge})"
        return "unauthorized"


@dataclass(frozen=True)
class Forbidden:
    """The repository understood the credentials and rejected them (403)."""

    is_rejection = True

    def describe(self) -> str:
        return "forbidden, invalid credentials"


@dataclass(frozen=True)
class NotFound:
    """The repository does not contain the artifact (404)."""

    is_rejection = True

    def describe(self) -> str:
        return "not found"


@dataclass(frozen=True)
class TransportError:
    """The exchange failed below the authorisation layer."""

    cause: Exception

    is_rejection = False

    def describe(self) -> str:
        return f"transport error: {self.cause}"


ResolutionOutcome = Union[Resolved, Unauthorized, Forbidden, NotFound, TransportError]
