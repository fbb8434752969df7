"""Resolution client for authenticated artifact repositories.

Classes:
    :class:`RepositoryClient` -- one GET against one endpoint, classified
        into a :data:`ResolutionOutcome`.
    :class:`ResolutionPipeline` -- ordered fallback across endpoints.

Example::

    from authrepo.client import RepositoryClient, ResolutionPipeline

    pipeline = ResolutionPipeline([endpoint], RepositoryClient("target/local"))
    jar = pipeline.as_single(ArtifactRequest.from_coordinates("g:a:1.0"))
"""

from authrepo.client.outcome import (
    Forbidden,
    NotFound,
    ResolutionOutcome,
    Resolved,
    TransportError,
    Unauthorized,
)
from authrepo.client.pipeline import ResolutionPipeline
from authrepo.client.resolver import RepositoryClient

__all__ = [
    "RepositoryClient",
    "ResolutionPipeline",
    "ResolutionOutcome",
    "Resolved",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "TransportError",
]
