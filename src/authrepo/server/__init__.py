"""Authenticated artifact repository server.

Classes:
    :class:`ArtifactServer` -- lifecycle wrapper around the threading server.
    :class:`ArtifactRequestHandler` -- the per-request state machine.
    :class:`Webroot` -- request target to file mapping with traversal checks.
"""

from authrepo.server.handler import ArtifactRequestHandler
from authrepo.server.server import ArtifactHTTPServer, ArtifactServer
from authrepo.server.webroot import Webroot

__all__ = ["ArtifactServer", "ArtifactHTTPServer", "ArtifactRequestHandler", "Webroot"]
