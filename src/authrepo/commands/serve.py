"""Serve command -- run an authenticated artifact repository.

Implements ``authrepo serve``. Settings come from the ``server`` section
of the global config and can be overridden per invocation::

    AUTHREPO_PASSWORD=s3cret authrepo serve --root target/repository \
        --user deployer --password-source env:AUTHREPO_PASSWORD
"""

from __future__ import annotations

from typing import Optional

import typer

from authrepo.exceptions import AuthrepoError
from authrepo.output import error, info


def serve_command(
    root: Optional[str] = typer.Option(
        None, "--root", "-r", help="Directory to serve artifacts from."
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind."),
    port: Optional[int] = typer.Option(
        None, "--port", help="TCP port to listen on (0 picks a free port)."
    ),
    user: Optional[str] = typer.Option(
        None, "--user", "-u", help="The single accepted username."
    ),
    password_source: Optional[str] = typer.Option(
        None,
        "--password-source",
        help="Password source: env:VAR, file:/path, or 'prompt'.",
    ),
    realm: Optional[str] = typer.Option(
        None, "--realm", help="Realm shown in the authentication challenge."
    ),
) -> None:
    """Serve a directory over HTTP behind Basic authentication.

    Requests without credentials get 401, wrong credentials get 403 and
    missing files get 404. Runs until interrupted with Ctrl-C.

    Raises:
        typer.Exit: With the error's exit code if the configuration is
            incomplete or the port cannot be bound.
    """
    from authrepo.config import load_global_config, resolve_credential
    from authrepo.server import ArtifactServer

    try:
        config = load_global_config().server
        overrides = {
            "webroot": root,
            "host": host,
            "port": port,
            "username": user,
            "password_source": password_source,
            "realm": realm,
        }
        config = config.model_copy(
            update={key: value for key, value in overrides.items() if value is not None}
        )

        if not config.username or not config.password_source:
            error("A username and --password-source are required to serve.")
            raise typer.Exit(code=2)

        password = resolve_credential(config.password_source)
        server = ArtifactServer.from_config(config, password)
        info(f"Serving {server.webroot.root} for user '{config.username}' (Ctrl-C to stop)")
        server.serve_forever()
    except AuthrepoError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
