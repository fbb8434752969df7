"""authrepo -- HTTP Basic-authenticated artifact repositories and the client that reads them.

The package has two halves that only talk over HTTP:

* :mod:`authrepo.server` serves files from a webroot and answers 401 to
  anonymous requests, 403 to rejected credentials and 404 to missing files.
* :mod:`authrepo.client` fetches artifacts from one or more configured
  repositories, signing every request with that repository's own
  credential, and classifies each response as a
  :mod:`~authrepo.client.outcome` variant.

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and profile management.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
