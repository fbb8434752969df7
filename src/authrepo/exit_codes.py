"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~authrepo.exceptions.AuthrepoError` subclass.
Shell wrappers and CI scripts can inspect the exit code to tell an
unreachable repository from an artifact no repository would serve without
parsing stderr.

Example::

    $ authrepo resolve org.example:lib:1.0.0
    $ echo $?
    8   # EXIT_NO_RESOLVED_RESULT -- no repository served the artifact
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or malformed coordinates."""

EXIT_NOT_FOUND = 4
"""The requested artifact was not found (HTTP 404)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_NO_RESOLVED_RESULT = 8
"""Every configured repository rejected or lacked the requested artifact."""

EXIT_SERVER_START_FAILURE = 9
"""The repository server could not bind its listening socket."""
