"""Tests for RepositoryClient using httpx.MockTransport."""

from __future__ import annotations

import base64
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import httpx
import pytest

from authrepo.client import (
    Forbidden,
    NotFound,
    RepositoryClient,
    Resolved,
    TransportError,
    Unauthorized,
)
from authrepo.models import ArtifactRequest, RepositoryCredential, RepositoryEndpoint


BASE_URL = "http://repo.example.com/maven2/"
REQUEST = ArtifactRequest(relative_path="org/acme/lib/1.0/lib-1.0.pom")


def _endpoint(username: str | None = None, password: str = "") -> RepositoryEndpoint:
    credential = None
    if username is not None:
        credential = RepositoryCredential(username=username, password=password)
    return RepositoryEndpoint(base_url=BASE_URL, credential=credential)


def _client(local: Path, handler) -> RepositoryClient:
    return RepositoryClient(local, timeout=5, transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------


class TestRequest:
    def test_url_and_auth_header(self, local_repository: Path) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="<project/>\n")

        _client(local_repository, handler).resolve(_endpoint("shrinkwrap", "shrinkwrap"), REQUEST)

        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert str(seen[0].url) == BASE_URL + REQUEST.relative_path
        token = base64.b64encode(b"shrinkwrap:shrinkwrap").decode("ascii")
        assert seen[0].headers["authorization"] == f"Basic {token}"

    def test_no_credential_no_header(self, local_repository: Path) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(401)

        _client(local_repository, handler).resolve(_endpoint(), REQUEST)
        assert "authorization" not in seen[0].headers

    def test_credentials_are_not_shared_between_endpoints(self, local_repository: Path) -> None:
        seen: list[str | None] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("authorization"))
            return httpx.Response(200, text="x")

        client = _client(local_repository, handler)
        client.resolve(_endpoint("shrinkwrap", "shrinkwrap"), REQUEST)
        client.resolve(_endpoint("shrinkwrap", "wrongpass"), REQUEST)
        client.resolve(_endpoint(), REQUEST)

        assert seen[0] != seen[1]
        assert seen[1] == "Basic " + base64.b64encode(b"shrinkwrap:wrongpass").decode("ascii")
        assert seen[2] is None

    def test_single_request_on_401(self, local_repository: Path) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(401, headers={"WWW-Authenticate": 'Basic realm="Secure Area"'})

        _client(local_repository, handler).resolve(_endpoint("u", "p"), REQUEST)
        assert calls == 1

    def test_path_is_quoted(self, local_repository: Path) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(404)

        _client(local_repository, handler).resolve(
            _endpoint(), ArtifactRequest(relative_path="dir/with space.pom")
        )
        assert seen[0].url.raw_path == b"/maven2/dir/with%20space.pom"


# ---------------------------------------------------------------------------
# Response classification
# ---------------------------------------------------------------------------


class TestClassification:
    def test_200_downloads(self, local_repository: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<project/>\n")

        outcome = _client(local_repository, handler).resolve(_endpoint("u", "p"), REQUEST)

        assert isinstance(outcome, Resolved)
        assert outcome.local_file == local_repository / REQUEST.relative_path
        assert outcome.local_file.read_bytes() == b"<project/>\n"
        assert sorted(p.name for p in outcome.local_file.parent.iterdir()) == ["lib-1.0.pom"]

    def test_200_replaces_previous_download(self, local_repository: Path) -> None:
        target = local_repository / REQUEST.relative_path
        target.parent.mkdir(parents=True)
        target.write_text("stale")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"fresh")

        _client(local_repository, handler).resolve(_endpoint("u", "p"), REQUEST)
        assert target.read_text() == "fresh"

    def test_401(self, local_repository: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, headers={"WWW-Authenticate": 'Basic realm="Secure Area"'})

        outcome = _client(local_repository, handler).resolve(_endpoint(), REQUEST)
        assert outcome == Unauthorized(challenge='Basic realm="Secure Area"')
        assert outcome.is_rejection

    def test_403(self, local_repository: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, text="Invalid credentials")

        outcome = _client(local_repository, handler).resolve(_endpoint("u", "bad"), REQUEST)
        assert outcome == Forbidden()
        assert not (local_repository / REQUEST.relative_path).exists()

    def test_404(self, local_repository: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        assert _client(local_repository, handler).resolve(_endpoint(), REQUEST) == NotFound()

    def test_unexpected_status(self, local_repository: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        outcome = _client(local_repository, handler).resolve(_endpoint(), REQUEST)
        assert isinstance(outcome, TransportError)
        assert isinstance(outcome.cause, httpx.HTTPStatusError)
        assert not outcome.is_rejection

    def test_redirect_not_followed(self, local_repository: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": "http://elsewhere.example.com/"})

        outcome = _client(local_repository, handler).resolve(_endpoint("u", "p"), REQUEST)
        assert isinstance(outcome, TransportError)

    def test_connection_error(self, local_repository: Path) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        outcome = _client(local_repository, handler).resolve(_endpoint(), REQUEST)
        assert isinstance(outcome, TransportError)
        assert isinstance(outcome.cause, httpx.ConnectError)

    def test_local_write_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file where a directory should be")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"data")

        outcome = _client(blocker, handler).resolve(_endpoint("u", "p"), REQUEST)
        assert isinstance(outcome, TransportError)
        assert isinstance(outcome.cause, OSError)


class TestConcurrentDownloads:
    def test_same_artifact_from_two_threads(self, local_repository: Path) -> None:
        # Both downloads are held open until each has written its first chunk.
        barrier = threading.Barrier(2, timeout=5)

        def body():
            yield b"<project>\n"
            barrier.wait()
            yield b"</project>\n"

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body())

        client = _client(local_repository, handler)
        endpoints = [
            RepositoryEndpoint(base_url=BASE_URL, id="first"),
            RepositoryEndpoint(base_url="http://mirror.example.com/maven2/", id="second"),
        ]

        with ThreadPoolExecutor(max_workers=2) as pool:
            outcomes = list(pool.map(lambda e: client.resolve(e, REQUEST), endpoints))

        assert all(isinstance(outcome, Resolved) for outcome in outcomes)
        target = local_repository / REQUEST.relative_path
        assert target.read_bytes() == b"<project>\n</project>\n"
        assert [p.name for p in target.parent.iterdir()] == ["lib-1.0.pom"]

    def test_failed_download_leaves_no_partial_file(self, local_repository: Path) -> None:
        def body():
            yield b"<project>\n"
            raise httpx.ReadError("connection reset")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body())

        outcome = _client(local_repository, handler).resolve(_endpoint(), REQUEST)

        assert isinstance(outcome, TransportError)
        target = local_repository / REQUEST.relative_path
        assert not target.exists()
        assert list(target.parent.iterdir()) == []


@pytest.mark.parametrize(
    "outcome, text",
    [
        (Unauthorized(), "unauthorized"),
        (Unauthorized(challenge='Basic realm="R"'), 'unauthorized (Basic realm="R")'),
        (Forbidden(), "forbidden, invalid credentials"),
        (NotFound(), "not found"),
    ],
)
def test_describe(outcome, text: str) -> None:
    assert outcome.describe() == text
