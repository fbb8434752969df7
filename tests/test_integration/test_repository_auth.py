"""End-to-end resolution against a live Basic-authenticated repository.

Each test starts the server on an ephemeral port and resolves through the
real HTTP stack, covering the four outcomes a client can observe.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from authrepo.auth import BasicCredentialValidator
from authrepo.client import (
    Forbidden,
    NotFound,
    RepositoryClient,
    ResolutionPipeline,
    Resolved,
    Unauthorized,
)
from authrepo.exceptions import ConnectionError_, NoResolvedResultError
from authrepo.models import ArtifactRequest, RepositoryEndpoint
from authrepo.server import ArtifactServer

from conftest import ARTIFACT_CONTENT, PASSWORD, POM_CONTENT, POM_PATH, USERNAME


@pytest.fixture
def client(local_repository: Path) -> RepositoryClient:
    return RepositoryClient(local_repository, timeout=5)


class TestScenarios:
    def test_correct_credentials_resolve(
        self, client, make_endpoint, artifact_request, local_repository: Path
    ) -> None:
        pipeline = ResolutionPipeline([make_endpoint(USERNAME, PASSWORD)], client)

        path = pipeline.as_single(artifact_request)

        assert path == local_repository / artifact_request.relative_path
        assert path.read_text(encoding="utf-8") == ARTIFACT_CONTENT

    def test_wrong_password_is_forbidden(self, client, make_endpoint, artifact_request) -> None:
        endpoint = make_endpoint(USERNAME, "wrongpass", id="secured")

        assert client.resolve(endpoint, artifact_request) == Forbidden()

        with pytest.raises(NoResolvedResultError) as exc_info:
            ResolutionPipeline([endpoint], client).resolve(artifact_request)
        assert exc_info.value.outcomes == [("secured", Forbidden())]
        assert "no resolved result" in str(exc_info.value)

    def test_no_credentials_is_unauthorized(self, client, make_endpoint, artifact_request) -> None:
        outcome = client.resolve(make_endpoint(), artifact_request)

        assert isinstance(outcome, Unauthorized)
        assert outcome.challenge == 'Basic realm="Secure Area"'
        with pytest.raises(NoResolvedResultError):
            ResolutionPipeline([make_endpoint()], client).resolve(artifact_request)

    def test_missing_artifact_is_not_found(
        self, client, make_endpoint, local_repository: Path
    ) -> None:
        request = ArtifactRequest(relative_path="nonexistent/artifact-9.9.9.jar")

        assert client.resolve(make_endpoint(USERNAME, PASSWORD), request) == NotFound()
        assert not (local_repository / request.relative_path).exists()


class TestCredentialIsolation:
    def test_sequential_credentials_are_independent(
        self, client, make_endpoint, artifact_request
    ) -> None:
        good = make_endpoint(USERNAME, PASSWORD)
        bad = make_endpoint(USERNAME, "wrongpass")

        assert isinstance(client.resolve(good, artifact_request), Resolved)
        assert client.resolve(bad, artifact_request) == Forbidden()
        assert isinstance(client.resolve(make_endpoint(), artifact_request), Unauthorized)
        assert isinstance(client.resolve(good, artifact_request), Resolved)

    def test_fallback_to_second_repository(
        self, client, make_endpoint, local_repository: Path
    ) -> None:
        pipeline = ResolutionPipeline(
            [
                make_endpoint(USERNAME, "wrongpass", id="first"),
                make_endpoint(USERNAME, PASSWORD, id="second"),
            ],
            client,
        )

        resolved = pipeline.resolve(ArtifactRequest(relative_path=POM_PATH))

        assert resolved.local_file.read_text(encoding="utf-8") == POM_CONTENT

    def test_two_servers_with_different_users(
        self, tmp_path: Path, webroot_dir: Path, client
    ) -> None:
        request = ArtifactRequest(relative_path=POM_PATH)
        with (
            ArtifactServer(webroot_dir, BasicCredentialValidator("alice", "a"), port=0) as a,
            ArtifactServer(webroot_dir, BasicCredentialValidator("bob", "b"), port=0) as b,
        ):
            alice = RepositoryEndpoint(
                base_url=a.url, credential={"username": "alice", "password": "a"}
            )
            bob_on_a = RepositoryEndpoint(
                base_url=a.url, credential={"username": "bob", "password": "b"}
            )
            bob = RepositoryEndpoint(base_url=b.url, credential={"username": "bob", "password": "b"})

            assert isinstance(client.resolve(alice, request), Resolved)
            assert client.resolve(bob_on_a, request) == Forbidden()
            assert isinstance(client.resolve(bob, request), Resolved)


class TestTransportFailure:
    def test_stopped_server_raises_connection_error(
        self, webroot_dir: Path, client, artifact_request
    ) -> None:
        server = ArtifactServer(webroot_dir, BasicCredentialValidator(USERNAME, PASSWORD), port=0)
        server.start()
        url = server.url
        server.stop()

        endpoint = RepositoryEndpoint(
            base_url=url, credential={"username": USERNAME, "password": PASSWORD}
        )
        with pytest.raises(ConnectionError_):
            ResolutionPipeline([endpoint], client).resolve(artifact_request)
