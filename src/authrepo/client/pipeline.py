"""Resolve artifacts against an ordered list of repositories.

The pipeline asks each repository in turn. A rejection (unauthorised,
forbidden, not found) means "this repository does not satisfy the request"
and the next one is tried; a transport failure stops the pipeline at once.
Only when every repository has rejected the request does the caller see a
:class:`~authrepo.exceptions.NoResolvedResultError`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from authrepo.client.outcome import ResolutionOutcome, Resolved, TransportError
from authrepo.client.resolver import RepositoryClient
from authrepo.exceptions import ConnectionError_, NoResolvedResultError
from authrepo.models import ArtifactRequest, RepositoryEndpoint, ResolverProfile

logger = logging.getLogger(__name__)


class ResolutionPipeline:
    """Try *endpoints* in order until one of them serves the artifact.

    Args:
        endpoints: Repositories to consult, highest priority first.
        client: The client that performs each single-repository exchange.
    """

    def __init__(self, endpoints: Sequence[RepositoryEndpoint], client: RepositoryClient) -> None:
        self._endpoints = list(endpoints)
        self._client = client

    @classmethod
    def from_profile(
        cls,
        profile: ResolverProfile,
        local_repository: Optional[Union[str, Path]] = None,
    ) -> ResolutionPipeline:
        """Build a pipeline from a stored :class:`~authrepo.models.ResolverProfile`.

        The download directory is, in order: *local_repository*, the
        profile's ``local_repository``, the default under the data directory.

        Raises:
            ConfigError: If a repository entry cannot be turned into an endpoint.
        """
        if local_repository is None:
            local_repository = profile.local_repository
        if local_repository is None:
            from authrepo.config import get_local_repository_dir

            local_repository = get_local_repository_dir()

        client = RepositoryClient(local_repository, timeout=profile.timeout)
        return cls(profile.endpoints(), client)

    @property
    def endpoints(self) -> list[RepositoryEndpoint]:
        return list(self._endpoints)

    def resolve(self, request: ArtifactRequest) -> Resolved:
        """Return the first successful resolution of *request*.

        Raises:
            ConnectionError_: If any repository fails at the transport level.
            NoResolvedResultError: If every repository rejected the request
                or none are configured.
        """
        outcomes: list[tuple[str, ResolutionOutcome]] = []

        for endpoint in self._endpoints:
            outcome = self._client.resolve(endpoint, request)
            if outcome.is_rejection:
                logger.debug(
                    "Repository %s rejected %s, trying next", endpoint.label, request.relative_path
                )
                outcomes.append((endpoint.label, outcome))
                continue
            if isinstance(outcome, TransportError):
                raise ConnectionError_(
                    f"Could not reach repository '{endpoint.label}' for "
                    f"{request.relative_path}: {outcome.cause}"
                ) from outcome.cause
            return outcome

        if not outcomes:
            raise NoResolvedResultError(
                f"Unable to resolve {request.relative_path}: no repositories configured"
            )

        details = "; ".join(f"{label}: {outcome.describe()}" for label, outcome in outcomes)
        raise NoResolvedResultError(
            f"Unable to resolve {request.relative_path}, no resolved result ({details})",
            outcomes=outcomes,
        )

    def resolve_all(self, requests: Iterable[ArtifactRequest]) -> list[Resolved]:
        """Resolve several artifacts, stopping at the first failure."""
        return [self.resolve(request) for request in requests]

    def as_single(self, request: ArtifactRequest) -> Path:
        """Resolve *request* and return the downloaded file."""
        return self.resolve(request).local_file
