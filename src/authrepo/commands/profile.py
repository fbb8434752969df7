"""Profile commands -- manage resolver profiles.

Provides the ``authrepo profile`` sub-command group. A profile is a named,
ordered list of repositories, each with an optional embedded credential::

    authrepo profile add internal --url http://repo.local:12345/ \
        --user deployer --password-source env:REPO_PASSWORD
    authrepo profile list
    authrepo profile show internal
    authrepo profile remove internal
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from authrepo.exceptions import AuthrepoError
from authrepo.output import error, format_response, info, print_table, success


profile_app = typer.Typer(no_args_is_help=True)

_MASK = "********"


@profile_app.command("add")
def profile_add(
    name: str = typer.Argument(help="Profile name."),
    url: str = typer.Option(..., "--url", help="Repository base URL."),
    repo_id: Optional[str] = typer.Option(
        None, "--id", help="Repository id (defaults to repo-N)."
    ),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Username."),
    password: Optional[str] = typer.Option(
        None, "--password", help="Password embedded in the profile."
    ),
    password_source: Optional[str] = typer.Option(
        None, "--password-source", help="Password source: env:VAR, file:/path, prompt."
    ),
    local_repository: Optional[str] = typer.Option(
        None, "--local-repository", "-l", help="Download directory for this profile."
    ),
) -> None:
    """Add a repository to a profile, creating the profile if needed.

    Repositories are tried in the order they were added. Adding a
    repository whose id already exists replaces it in place.
    """
    from authrepo.config import load_profile, profile_exists, save_profile
    from authrepo.models import RepositoryConfig, ResolverProfile

    try:
        profile = load_profile(name) if profile_exists(name) else ResolverProfile(name=name)
        repo = RepositoryConfig(
            id=repo_id or f"repo-{len(profile.repositories) + 1}",
            url=url,
            username=user,
            password=password,
            password_source=password_source,
        )
        # Credential sources are read at resolve time, so only validate
        # entries that can be turned into an endpoint without them.
        if password_source is None:
            repo.to_endpoint()

        existing = [r.id for r in profile.repositories]
        if repo.id in existing:
            profile.repositories[existing.index(repo.id)] = repo
        else:
            profile.repositories.append(repo)
        if local_repository is not None:
            profile.local_repository = local_repository

        save_profile(profile)
    except AuthrepoError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Repository '{repo.id}' saved in profile '{name}'.")


@profile_app.command("list")
def profile_list() -> None:
    """List stored profiles and their repository counts."""
    from authrepo.config import list_profiles, load_profile

    names = list_profiles()
    if not names:
        info("No profiles configured.")
        return

    rows = []
    for profile_name in names:
        try:
            count = str(len(load_profile(profile_name).repositories))
        except AuthrepoError:
            count = "invalid"
        rows.append([profile_name, count])
    print_table(["profile", "repositories"], rows, title="Profiles")


@profile_app.command("show")
def profile_show(name: str = typer.Argument(help="Profile name.")) -> None:
    """Show a profile with embedded passwords masked."""
    from authrepo.config import load_profile

    try:
        profile = load_profile(name)
    except AuthrepoError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_response(_masked(profile.model_dump(mode="json")))


@profile_app.command("remove")
def profile_remove(
    name: str = typer.Argument(help="Profile name."),
    repo_id: Optional[str] = typer.Option(
        None, "--repo", help="Remove only this repository from the profile."
    ),
) -> None:
    """Delete a profile, or a single repository from it."""
    from authrepo.config import delete_profile, load_profile, save_profile

    try:
        if repo_id is None:
            delete_profile(name)
            success(f"Profile '{name}' removed.")
            return

        profile = load_profile(name)
        remaining = [r for r in profile.repositories if r.id != repo_id]
        if len(remaining) == len(profile.repositories):
            error(f"Profile '{name}' has no repository '{repo_id}'.")
            raise typer.Exit(code=2)
        profile.repositories = remaining
        save_profile(profile)
    except AuthrepoError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Repository '{repo_id}' removed from profile '{name}'.")


def _masked(data: dict[str, Any]) -> dict[str, Any]:
    for repo in data.get("repositories", []):
        if repo.get("password") is not None:
            repo["password"] = _MASK
    return data
