"""Embedded HTTP server for an authenticated artifact repository.

:class:`ArtifactServer` owns a :class:`ArtifactHTTPServer` -- a
:class:`http.server.ThreadingHTTPServer` that handles every connection on
its own thread -- and manages its lifecycle. It can run in the background
(:meth:`~ArtifactServer.start` / :meth:`~ArtifactServer.stop`, or as a
context manager) for tests and embedding, or in the foreground via
:meth:`~ArtifactServer.serve_forever` for the ``authrepo serve`` command.

Example::

    validator = BasicCredentialValidator("shrinkwrap", "shrinkwrap")
    with ArtifactServer("target/repository", validator, port=0) as server:
        print(server.url)
"""

from __future__ import annotations

import logging
import threading
from http.server import ThreadingHTTPServer
from pathlib import Path
from typing import Optional, Union

from authrepo.auth.base import CredentialValidator
from authrepo.auth.basic import BasicCredentialValidator
from authrepo.exceptions import ConfigError, ServerStartError
from authrepo.models import DEFAULT_PORT, DEFAULT_REALM, ServerConfig
from authrepo.server.handler import ArtifactRequestHandler
from authrepo.server.webroot import Webroot

logger = logging.getLogger(__name__)

_STOP_TIMEOUT = 5.0


class ArtifactHTTPServer(ThreadingHTTPServer):
    """Threading HTTP server carrying the read-only handler configuration."""

    # A second server on an occupied port must fail to bind.
    allow_reuse_port = False

    def __init__(
        self,
        address: tuple[str, int],
        validator: CredentialValidator,
        webroot: Webroot,
        realm: str = DEFAULT_REALM,
    ) -> None:
        self.validator = validator
        self.webroot = webroot
        self.realm = realm
        super().__init__(address, ArtifactRequestHandler)


class ArtifactServer:
    """Serve a webroot over HTTP behind a credential validator.

    Args:
        webroot: Directory (or :class:`Webroot`) artifacts are served from.
        validator: Decides which ``Authorization`` headers are accepted.
        host: Interface to bind.
        port: TCP port to bind; ``0`` picks a free port, readable from
            :attr:`port` once started.
        realm: Realm advertised in the ``WWW-Authenticate`` challenge.
    """

    def __init__(
        self,
        webroot: Union[str, Path, Webroot],
        validator: CredentialValidator,
        host: str = "127.0.0.1",
        port: int = DEFAULT_PORT,
        realm: str = DEFAULT_REALM,
    ) -> None:
        self._webroot = webroot if isinstance(webroot, Webroot) else Webroot(webroot)
        self._validator = validator
        self._host = host
        self._port = port
        self._realm = realm
        self._httpd: Optional[ArtifactHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_config(cls, config: ServerConfig, password: str) -> ArtifactServer:
        """Build a single-user server from :class:`~authrepo.models.ServerConfig`.

        Raises:
            ConfigError: If the config has no username.
        """
        if not config.username:
            raise ConfigError("Server configuration requires a username")
        return cls(
            webroot=config.webroot,
            validator=BasicCredentialValidator(config.username, password),
            host=config.host,
            port=config.port,
            realm=config.realm,
        )

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def webroot(self) -> Webroot:
        return self._webroot

    @property
    def port(self) -> int:
        """The bound port once running, otherwise the configured one."""
        if self._httpd is not None:
            return self._httpd.server_address[1]
        return self._port

    @property
    def url(self) -> str:
        """Base URL of the repository, always ending in ``/``."""
        return f"http://{self._host}:{self.port}/"

    @property
    def is_running(self) -> bool:
        return self._httpd is not None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def _bind(self) -> ArtifactHTTPServer:
        try:
            return ArtifactHTTPServer(
                (self._host, self._port),
                validator=self._validator,
                webroot=self._webroot,
                realm=self._realm,
            )
        except OSError as exc:
            raise ServerStartError(
                f"Could not start server on {self._host}:{self._port}: {exc}"
            ) from exc

    def start(self) -> ArtifactServer:
        """Bind the socket and serve requests on a background daemon thread.

        Raises:
            ServerStartError: If the server is already running or the
                socket cannot be bound.
        """
        if self._httpd is not None:
            raise ServerStartError(f"Server already running at {self.url}")

        self._httpd = self._bind()
        self._thread = threading.Thread(
            target=self._httpd.serve_forever,
            name=f"authrepo-server-{self.port}",
            daemon=True,
        )
        self._thread.start()
        logger.info("HTTP server started at %s serving %s", self.url, self._webroot.root)
        return self

    def stop(self) -> None:
        """Shut the server down.

        Failures during shutdown are logged and suppressed; stopping a server
        that is not running does nothing.
        """
        httpd, thread = self._httpd, self._thread
        if httpd is None:
            return
        url = self.url
        try:
            httpd.shutdown()
            httpd.server_close()
            if thread is not None:
                thread.join(_STOP_TIMEOUT)
        except Exception as exc:
            logger.error("Could not stop HTTP server cleanly, %s", exc)
        finally:
            self._httpd = None
            self._thread = None
        logger.info("HTTP server stopped at %s", url)

    def serve_forever(self) -> None:
        """Bind and serve in the calling thread until interrupted."""
        if self._httpd is not None:
            raise ServerStartError(f"Server already running at {self.url}")

        self._httpd = self._bind()
        logger.info("HTTP server listening at %s serving %s", self.url, self._webroot.root)
        try:
            self._httpd.serve_forever()
        finally:
            self._httpd.server_close()
            self._httpd = None
            logger.info("HTTP server stopped")

    def __enter__(self) -> ArtifactServer:
        return self.start()

    def __exit__(self, *args: object) -> None:
        self.stop()

    def __repr__(self) -> str:
        state = "running" if self.is_running else "stopped"
        return f"ArtifactServer({self.url!r}, {state})"
