"""Exception hierarchy for authrepo.

All exceptions inherit from :class:`AuthrepoError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`authrepo.exit_codes`.
The top-level error handler in :func:`authrepo.app.main` catches
``AuthrepoError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    AuthrepoError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- NotFoundError          (exit 4)
    |   +-- PathTraversalError (exit 4)
    +-- ConnectionError_       (exit 6)
    +-- NoResolvedResultError  (exit 8)
    +-- ServerStartError       (exit 9)
    +-- ConfigError            (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from authrepo.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NO_RESOLVED_RESULT,
    EXIT_NOT_FOUND,
    EXIT_SERVER_START_FAILURE,
)

if TYPE_CHECKING:
    from authrepo.client.outcome import ResolutionOutcome


class AuthrepoError(Exception):
    """Base exception for all authrepo errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`authrepo.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(AuthrepoError):
    """Raised for invalid CLI arguments or malformed artifact coordinates."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(AuthrepoError):
    """Raised when an artifact does not exist (HTTP 404)."""

    exit_code = EXIT_NOT_FOUND


class PathTraversalError(NotFoundError):
    """Raised when a request target resolves outside the configured webroot."""


class ConnectionError_(AuthrepoError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class NoResolvedResultError(AuthrepoError):
    """Raised when every configured repository failed to provide an artifact.

    Args:
        message: Human-readable error description.
        outcomes: The per-repository outcomes, in the order the
            repositories were tried, as ``(repository_id, outcome)`` pairs.
    """

    exit_code = EXIT_NO_RESOLVED_RESULT

    def __init__(
        self,
        message: str,
        outcomes: Sequence[tuple[str, ResolutionOutcome]] = (),
    ):
        super().__init__(message)
        self.outcomes = list(outcomes)


class ServerStartError(AuthrepoError):
    """Raised when the repository server cannot bind its listening socket."""

    exit_code = EXIT_SERVER_START_FAILURE


class ConfigError(AuthrepoError):
    """Raised for configuration problems (missing profiles, invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
