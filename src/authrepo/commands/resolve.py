"""Resolve command -- download artifacts from authenticated repositories.

Implements ``authrepo resolve``. Repositories come either from the active
profile or, with ``--repo``, straight from the command line::

    authrepo resolve org.example:lib:1.0.0
    authrepo resolve org/example/lib/1.0.0/lib-1.0.0.pom \
        --repo http://localhost:12345/ --user deployer --password-source env:PW

Each resolved file path is printed on stdout, one per line.
"""

from __future__ import annotations

from typing import Optional

import typer

from authrepo.exceptions import AuthrepoError, InvalidUsageError
from authrepo.output import debug, error, print_data


def resolve_command(
    ctx: typer.Context,
    artifacts: list[str] = typer.Argument(
        ..., help="Coordinates (group:artifact[:ext[:classifier]]:version) or paths."
    ),
    repo: Optional[list[str]] = typer.Option(
        None, "--repo", help="Repository URL; repeat to try several in order."
    ),
    user: Optional[str] = typer.Option(
        None, "--user", "-u", help="Username for --repo repositories."
    ),
    password_source: Optional[str] = typer.Option(
        None,
        "--password-source",
        help="Password source for --repo repositories: env:VAR, file:/path, prompt.",
    ),
    local_repository: Optional[str] = typer.Option(
        None, "--local-repository", "-l", help="Directory to download into."
    ),
    timeout: float = typer.Option(30.0, "--timeout", help="Request timeout in seconds."),
) -> None:
    """Resolve artifacts, trying each configured repository in order.

    Raises:
        typer.Exit: With code 8 when no repository could provide an
            artifact, 6 on connection failures, 2 on bad arguments.
    """
    from authrepo.client import RepositoryClient, ResolutionPipeline
    from authrepo.config import get_local_repository_dir, resolve_profile
    from authrepo.models import ArtifactRequest, RepositoryConfig

    obj = ctx.obj or {}
    try:
        requests = [ArtifactRequest.parse(value) for value in artifacts]

        if repo:
            repositories = [
                RepositoryConfig(
                    id=f"cli-{index}",
                    url=url,
                    username=user,
                    password_source=password_source,
                )
                for index, url in enumerate(repo, 1)
            ]
            endpoints = [config.to_endpoint() for config in repositories]
            client = RepositoryClient(
                local_repository or get_local_repository_dir(), timeout=timeout
            )
            pipeline = ResolutionPipeline(endpoints, client)
        else:
            if user or password_source:
                raise InvalidUsageError("--user and --password-source require --repo")
            profile = resolve_profile(obj.get("profile"))
            if profile is None:
                raise InvalidUsageError(
                    "No repositories: pass --repo or create a profile with 'authrepo profile add'"
                )
            debug(f"Using profile: {profile.name}")
            pipeline = ResolutionPipeline.from_profile(profile, local_repository)

        for request in requests:
            print_data(str(pipeline.as_single(request)))
    except AuthrepoError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
