"""Request handler for the authenticated repository server.

Every request walks the same state machine and ends in exactly one terminal
state::

    Start -> CheckHeaderPresent --(absent/empty)--> Unauthorized (401)
          -> ValidateCredential --(rejected)-----> Forbidden    (403)
          -> LocateFile         --(missing)------> NotFound     (404)
          -> StreamFile         -----------------> OK           (200)

A missing header is a challenge (401 with ``WWW-Authenticate``); a header
that was understood and rejected is final (403). No state survives between
requests: there are no sessions, cookies or cached authorisations.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from authrepo import __version__
from authrepo.exceptions import NotFoundError

if TYPE_CHECKING:
    from authrepo.server.server import ArtifactHTTPServer

logger = logging.getLogger(__name__)

AUTH_HEADER = "Authorization"
CONTENT_TYPE = "text/xml"
UNAUTHORIZED_MESSAGE = "Unauthorized access, please provide credentials"
FORBIDDEN_MESSAGE = "Invalid credentials"
NOT_FOUND_MESSAGE = "Requested file is not found"


class ArtifactRequestHandler(BaseHTTPRequestHandler):
    """Serve files from the server's webroot behind HTTP Basic authentication.

    The handler reads its collaborators from the owning
    :class:`~authrepo.server.server.ArtifactHTTPServer`: ``validator``,
    ``webroot`` and ``realm``. These are read-only for the lifetime of the
    server, so concurrent handler threads share no mutable state.
    """

    server: ArtifactHTTPServer
    server_version = f"authrepo/{__version__}"

    def do_GET(self) -> None:
        self._handle(send_body=True)

    def do_HEAD(self) -> None:
        self._handle(send_body=False)

    # ------------------------------------------------------------------ #
    # State machine
    # ------------------------------------------------------------------ #

    def _handle(self, send_body: bool) -> None:
        logger.debug("Authorizing request for artifact %s", self.path)

        header = self.headers.get(AUTH_HEADER)
        if not header:
            logger.warning("Unauthorized access to %s, please provide credentials", self.path)
            self._send_message(
                HTTPStatus.UNAUTHORIZED,
                UNAUTHORIZED_MESSAGE,
                send_body,
                extra_headers={"WWW-Authenticate": f'Basic realm="{self.server.realm}"'},
            )
            return

        if not self.server.validator.validate(header):
            logger.warning("Invalid credentials for %s", self.path)
            self._send_message(HTTPStatus.FORBIDDEN, FORBIDDEN_MESSAGE, send_body)
            return

        file = self._locate()
        if file is None:
            self._send_message(HTTPStatus.NOT_FOUND, "", send_body)
            return

        self._stream_file(file, send_body)

    def _locate(self) -> Optional[Path]:
        try:
            file = self.server.webroot.locate(self.path)
        except NotFoundError as exc:
            logger.warning("%s: %s", NOT_FOUND_MESSAGE, exc)
            return None
        if file is None:
            logger.warning("%s: %s", NOT_FOUND_MESSAGE, self.path)
        return file

    def _stream_file(self, file: Path, send_body: bool) -> None:
        """Send *file* as ``text/xml``, copying it one line at a time.

        Line terminators are normalised to ``\\n`` and a final newline is
        always written. The file is opened before the status line goes out
        so an unreadable file can still be answered with 404.
        """
        try:
            reader = open(file, encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("%s: cannot open %s: %s", NOT_FOUND_MESSAGE, file, exc)
            self._send_message(HTTPStatus.NOT_FOUND, "", send_body)
            return

        with reader:
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-Type", CONTENT_TYPE)
            self.end_headers()
            try:
                if send_body:
                    for line in reader:
                        self.wfile.write((line.rstrip("\r\n") + "\n").encode("utf-8"))
                self.wfile.flush()
            except (BrokenPipeError, ConnectionResetError) as exc:
                logger.warning("Client closed the connection while streaming %s: %s", file, exc)
                self.close_connection = True
                return

        logger.debug("Served %s", file)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _send_message(
        self,
        status: HTTPStatus,
        message: str,
        send_body: bool,
        extra_headers: Optional[dict[str, str]] = None,
    ) -> None:
        body = message.encode("utf-8")
        self.send_response(status)
        for name, value in (extra_headers or {}).items():
            self.send_header(name, value)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if send_body and body:
            self.wfile.write(body)
        self.wfile.flush()

    def log_message(self, format: str, *args: Any) -> None:
        logger.info("%s - %s", self.address_string(), format % args)
