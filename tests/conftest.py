"""Shared test fixtures for authrepo.

Provides a populated webroot, a live repository server on an ephemeral
port, isolated config directories, and output-state resets. These fixtures
are discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from authrepo.auth import BasicCredentialValidator
from authrepo.models import ArtifactRequest, RepositoryCredential, RepositoryEndpoint
from authrepo.output import reset_output
from authrepo.server import ArtifactServer


USERNAME = "shrinkwrap"
PASSWORD = "shrinkwrap"

ARTIFACT_COORDINATES = "org.jboss.shrinkwrap.test:test-deps-i:1.0.0"
ARTIFACT_PATH = "org/jboss/shrinkwrap/test/test-deps-i/1.0.0/test-deps-i-1.0.0.jar"
POM_PATH = "org/jboss/shrinkwrap/test/test-deps-i/1.0.0/test-deps-i-1.0.0.pom"

POM_CONTENT = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    "<project>\n"
    "  <modelVersion>4.0.0</modelVersion>\n"
    "  <groupId>org.jboss.shrinkwrap.test</groupId>\n"
    "  <artifactId>test-deps-i</artifactId>\n"
    "  <version>1.0.0</version>\n"
    "</project>\n"
)
ARTIFACT_CONTENT = "test-deps-i 1.0.0\nplaceholder archive content\n"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and CLI log handler after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation, so a
    handler left on the ``authrepo`` logger would write to a closed stream.
    """
    yield
    reset_output()
    package_logger = logging.getLogger("authrepo")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Repository content
# ---------------------------------------------------------------------------


@pytest.fixture
def webroot_dir(tmp_path: Path) -> Path:
    """A webroot holding one artifact (jar + pom) in the Maven layout."""
    root = tmp_path / "repository"
    jar = root / ARTIFACT_PATH
    jar.parent.mkdir(parents=True)
    jar.write_text(ARTIFACT_CONTENT, encoding="utf-8")
    (root / POM_PATH).write_text(POM_CONTENT, encoding="utf-8")
    return root


@pytest.fixture
def local_repository(tmp_path: Path) -> Path:
    """An empty download directory for the resolution client."""
    path = tmp_path / "local-repository"
    path.mkdir()
    return path


# ---------------------------------------------------------------------------
# Live server
# ---------------------------------------------------------------------------


@pytest.fixture
def repository_server(webroot_dir: Path) -> ArtifactServer:
    """A running server guarding *webroot_dir* with shrinkwrap/shrinkwrap.

    Bound to an ephemeral port so tests can run in parallel; stopped on
    teardown.
    """
    server = ArtifactServer(
        webroot_dir,
        BasicCredentialValidator(USERNAME, PASSWORD),
        port=0,
    )
    server.start()
    yield server
    server.stop()


@pytest.fixture
def artifact_request() -> ArtifactRequest:
    return ArtifactRequest.from_coordinates(ARTIFACT_COORDINATES)


@pytest.fixture
def make_endpoint(repository_server: ArtifactServer):
    """Factory for endpoints pointing at the live server.

    ``make_endpoint()`` has no credential; ``make_endpoint("user", "pw")``
    carries one.
    """

    def _make(username: str | None = None, password: str | None = None, id: str | None = None):
        credential = None
        if username is not None:
            credential = RepositoryCredential(username=username, password=password or "")
        return RepositoryEndpoint(base_url=repository_server.url, credential=credential, id=id)

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories at subdirectories of tmp_path, forces the
    XDG code path, clears ``AUTHREPO_PROFILE`` and changes the working
    directory to tmp_path.
    """
    monkeypatch.setattr("authrepo.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("AUTHREPO_PROFILE", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
