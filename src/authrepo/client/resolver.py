"""Fetch a single artifact from a single repository endpoint.

:class:`RepositoryClient` is the only component that talks HTTP on the
resolution side. Each call to :meth:`~RepositoryClient.resolve`:

1. builds the target URL from the endpoint's base URL and the request path;
2. attaches ``Authorization: Basic ...`` built from the endpoint's own
   credential -- always when one is configured, never otherwise;
3. issues exactly one GET on a fresh :class:`httpx.Client`, so no
   connection, cookie or authentication state carries over between calls
   or endpoints;
4. classifies the response into a
   :data:`~authrepo.client.outcome.ResolutionOutcome`.

401 and 403 are never retried. Callers that need a different credential
must use a different endpoint.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union
from urllib.parse import quote

import httpx

from authrepo.auth.base import basic_auth_header
from authrepo.client.outcome import (
    Forbidden,
    NotFound,
    ResolutionOutcome,
    Resolved,
    TransportError,
    Unauthorized,
)
from authrepo.models import ArtifactRequest, RepositoryEndpoint

logger = logging.getLogger(__name__)

_DOWNLOAD_SUFFIX = ".part"


class RepositoryClient:
    """Download artifacts from repository endpoints into a local directory.

    Args:
        local_repository: Directory downloaded artifacts are written to,
            laid out by their relative path.
        timeout: Connect/read timeout in seconds for each request.
        transport: Optional :mod:`httpx` transport, e.g.
            :class:`httpx.MockTransport` in tests.
        verify_ssl: Verify TLS certificates for ``https`` repositories.

    Example::

        client = RepositoryClient("target/local-repository")
        outcome = client.resolve(endpoint, ArtifactRequest.from_coordinates("g:a:1.0"))
    """

    def __init__(
        self,
        local_repository: Union[str, Path],
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        verify_ssl: bool = True,
    ) -> None:
        self._local_repository = Path(local_repository)
        self._timeout = timeout
        self._transport = transport
        self._verify_ssl = verify_ssl

    @property
    def local_repository(self) -> Path:
        return self._local_repository

    def build_url(self, endpoint: RepositoryEndpoint, request: ArtifactRequest) -> str:
        """Return the absolute URL of *request* on *endpoint*."""
        return endpoint.base_url + quote(request.relative_path, safe="/")

    def build_headers(self, endpoint: RepositoryEndpoint) -> dict[str, str]:
        """Return the request headers for *endpoint*, including its credential."""
        headers = {"Accept": "*/*"}
        if endpoint.credential is not None:
            headers["Authorization"] = basic_auth_header(endpoint.credential)
        return headers

    def resolve(self, endpoint: RepositoryEndpoint, request: ArtifactRequest) -> ResolutionOutcome:
        """Fetch *request* from *endpoint* and classify the result.

        Never raises for HTTP or network failures; those come back as
        :class:`~authrepo.client.outcome.TransportError`.
        """
        url = self.build_url(endpoint, request)
        headers = self.build_headers(endpoint)
        logger.debug(
            "GET %s (credential: %s)",
            url,
            endpoint.credential.username if endpoint.credential else "none",
        )

        try:
            with self._open_client() as client:
                with client.stream("GET", url, headers=headers) as response:
                    outcome = self._classify(response, request)
        except (httpx.HTTPError, OSError) as exc:
            outcome = TransportError(exc)

        if isinstance(outcome, Resolved):
            logger.info("Resolved %s from %s", request.relative_path, endpoint.label)
        else:
            logger.warning(
                "Could not resolve %s from %s: %s",
                request.relative_path,
                endpoint.label,
                outcome.describe(),
            )
        return outcome

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _open_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self._timeout,
            verify=self._verify_ssl,
            transport=self._transport,
            follow_redirects=False,
        )

    def _classify(self, response: httpx.Response, request: ArtifactRequest) -> ResolutionOutcome:
        status = response.status_code
        if status == 200:
            return Resolved(self._download(response, request))
        if status == 401:
            return Unauthorized(challenge=response.headers.get("www-authenticate"))
        if status == 403:
            return Forbidden()
        if status == 404:
            return NotFound()

        response.read()
        return TransportError(
            httpx.HTTPStatusError(
                f"Unexpected HTTP {status} {response.reason_phrase} for {response.url}",
                request=response.request,
                response=response,
            )
        )

    def _download(self, response: httpx.Response, request: ArtifactRequest) -> Path:
        """Stream the body to the local repository, replacing any previous copy.

        Each download goes to its own temporary file next to the target and
        is renamed into place once complete, so concurrent downloads of the
        same artifact never write to the same file.
        """
        target = self._local_repository / request.relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        partial: Optional[str] = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=_DOWNLOAD_SUFFIX,
                delete=False,
            ) as fh:
                partial = fh.name
                for chunk in response.iter_bytes():
                    fh.write(chunk)
            os.replace(partial, target)
        except BaseException:
            if partial is not None:
                try:
                    os.unlink(partial)
                except OSError:
                    pass
            raise
        return target
