"""Canonical Pydantic models shared across all authrepo modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Resolution models** -- immutable values created when a resolver is
configured and discarded once the resolution call completes:
    :class:`RepositoryCredential`, :class:`RepositoryEndpoint`, and
    :class:`ArtifactRequest`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ServerConfig`, :class:`RepositoryConfig`,
    :class:`ResolverProfile`, and :class:`GlobalConfig`.

The typed result of a resolution lives in :mod:`authrepo.client.outcome`
because it wraps non-serialisable values (paths and exceptions).
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from authrepo.exceptions import ConfigError, InvalidUsageError


DEFAULT_PORT = 12345
DEFAULT_REALM = "Secure Area"
DEFAULT_EXTENSION = "jar"


# --- Resolution models ---


class RepositoryCredential(BaseModel):
    """A username/password pair attached to one repository endpoint.

    Immutable once constructed. The password is excluded from ``repr`` so
    credentials never leak into logs or tracebacks.

    Example::

        RepositoryCredential(username="deployer", password="s3cret")
    """

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)

    @field_validator("username")
    @classmethod
    def _username_has_no_colon(cls, value: str) -> str:
        # RFC 7617: the user-id cannot contain a colon.
        if ":" in value:
            raise ValueError("username must not contain ':'")
        return value


class RepositoryEndpoint(BaseModel):
    """One configured remote repository.

    Endpoints are independent values: two endpoints pointing at the same
    URL with different credentials never share state.

    Attributes:
        base_url: Root URL of the repository (``http`` or ``https``).
        credential: Optional credential sent on every request. When
            ``None`` no ``Authorization`` header is ever attached.
        id: Display label used in logs and aggregate errors. Defaults to
            ``base_url``.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str
    credential: Optional[RepositoryCredential] = None
    id: Optional[str] = None

    @field_validator("base_url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"repository URL must be http(s): {value!r}")
        # userinfo in the URL would be turned into an Authorization header
        # by the HTTP stack, bypassing ``credential``.
        if parts.username is not None or parts.password is not None:
            raise ValueError("repository URL must not embed credentials")
        return value if value.endswith("/") else value + "/"

    @property
    def label(self) -> str:
        """Human-readable identifier for this endpoint."""
        return self.id or self.base_url


class ArtifactRequest(BaseModel):
    """A file under a repository root, e.g. ``org/acme/lib/1.0/lib-1.0.jar``."""

    model_config = ConfigDict(frozen=True)

    relative_path: str

    @field_validator("relative_path")
    @classmethod
    def _normalise_path(cls, value: str) -> str:
        value = value.lstrip("/")
        if not value:
            raise ValueError("artifact path must not be empty")
        if ".." in value.split("/"):
            raise ValueError(f"artifact path must not contain '..': {value!r}")
        return value

    @classmethod
    def from_coordinates(cls, coordinates: str) -> ArtifactRequest:
        """Build a request from Maven-style coordinates.

        Accepted forms::

            groupId:artifactId:version
            groupId:artifactId:extension:version
            groupId:artifactId:extension:classifier:version

        The group id's dots become directories, giving the standard
        repository layout ``group/path/artifactId/version/file``.

        Raises:
            InvalidUsageError: If the coordinates have the wrong number of
                segments or an empty segment.
        """
        parts = coordinates.strip().split(":")
        if len(parts) not in (3, 4, 5) or not all(parts):
            raise InvalidUsageError(
                f"Invalid artifact coordinates '{coordinates}', expected "
                "groupId:artifactId[:extension[:classifier]]:version"
            )

        group_id, artifact_id = parts[0], parts[1]
        version = parts[-1]
        extension = parts[2] if len(parts) >= 4 else DEFAULT_EXTENSION
        classifier = parts[3] if len(parts) == 5 else None

        file_name = f"{artifact_id}-{version}"
        if classifier:
            file_name += f"-{classifier}"
        file_name += f".{extension}"

        group_path = group_id.replace(".", "/")
        return cls(relative_path=f"{group_path}/{artifact_id}/{version}/{file_name}")

    @classmethod
    def parse(cls, value: str) -> ArtifactRequest:
        """Interpret *value* as a relative path if it contains ``/``, else as coordinates.

        Raises:
            InvalidUsageError: If *value* is neither a valid path nor valid
                coordinates.
        """
        if "/" not in value:
            return cls.from_coordinates(value)
        try:
            return cls(relative_path=value)
        except ValidationError as exc:
            raise InvalidUsageError(f"Invalid artifact path '{value}': {exc}") from exc


# --- Configuration models ---


class ServerConfig(BaseModel):
    """Settings for the authenticated repository server."""

    host: str = Field(default="127.0.0.1", description="Interface to bind")
    port: int = Field(default=DEFAULT_PORT, description="TCP port (0 picks a free port)")
    webroot: str = Field(default=".", description="Directory artifacts are served from")
    realm: str = Field(default=DEFAULT_REALM, description="Realm in the WWW-Authenticate challenge")
    username: Optional[str] = None
    password_source: Optional[str] = Field(
        default=None,
        description="Credential source for the password: env:VAR, file:/path, prompt",
    )


class RepositoryConfig(BaseModel):
    """One repository entry inside a :class:`ResolverProfile`.

    The password may be embedded directly (``password``) or referenced
    through a credential source (``password_source``). When both are set
    the embedded value wins.
    """

    id: str
    url: str
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    password_source: Optional[str] = None

    def to_endpoint(self) -> RepositoryEndpoint:
        """Build the :class:`RepositoryEndpoint` this entry describes.

        Raises:
            ConfigError: If a password is configured without a username,
                or the credential source cannot be resolved.
        """
        password: Optional[str] = self.password
        if password is None and self.password_source is not None:
            from authrepo.config import resolve_credential

            password = resolve_credential(self.password_source)

        if self.username is None and password is not None:
            raise ConfigError(f"Repository '{self.id}' has a password but no username")

        try:
            credential = (
                RepositoryCredential(username=self.username, password=password or "")
                if self.username is not None
                else None
            )
            return RepositoryEndpoint(base_url=self.url, credential=credential, id=self.id)
        except ValidationError as exc:
            raise ConfigError(f"Invalid repository '{self.id}': {exc}") from exc


class ResolverProfile(BaseModel):
    """A named resolver configuration stored under ``profiles/``.

    Repositories are tried in the listed order.

    See Also:
        :func:`~authrepo.config.load_profile`: Deserialise a profile by name.
        :func:`~authrepo.config.save_profile`: Persist a profile to disk.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    repositories: list[RepositoryConfig] = Field(default_factory=list)
    local_repository: Optional[str] = Field(
        default=None, description="Download directory; defaults to the data directory"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")

    def endpoints(self) -> list[RepositoryEndpoint]:
        """Return the endpoints for every configured repository, in order."""
        return [repo.to_endpoint() for repo in self.repositories]


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/authrepo/config.json``."""

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    server: ServerConfig = Field(default_factory=ServerConfig)
