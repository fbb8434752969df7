"""Credential validation interface and Basic-scheme encoding helpers.

This module defines the seam between the repository server's request state
machine and the rules that decide whether an ``Authorization`` header is
acceptable:

- :class:`CredentialValidator` -- the abstract base class every validator
  extends. It has a single method, :meth:`~CredentialValidator.validate`,
  so the server never needs to know how many users or which realm a
  validator covers.
- :func:`encode_basic_credentials` and :func:`basic_auth_header` -- the
  one place the ``base64(username:password)`` token is built. The client
  uses them to sign requests and the validators use them to rebuild the
  expected header, so both sides always agree on the byte encoding.

See Also:
    :mod:`authrepo.auth.basic` for the concrete validators.
"""

from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authrepo.models import RepositoryCredential

CREDENTIAL_ENCODING = "utf-8"
"""Charset used to turn ``username:password`` into bytes before Base64."""

BASIC_SCHEME = "Basic"


def encode_basic_credentials(username: str, password: str) -> str:
    """Return ``base64(username:password)`` using :data:`CREDENTIAL_ENCODING`.

    Example::

        >>> encode_basic_credentials("shrinkwrap", "shrinkwrap")
        'c2hyaW5rd3JhcDpzaHJpbmt3cmFw'
    """
    raw = f"{username}:{password}".encode(CREDENTIAL_ENCODING)
    return base64.b64encode(raw).decode("ascii")


def basic_auth_header(credential: RepositoryCredential) -> str:
    """Return the full ``Authorization`` header value for *credential*."""
    return f"{BASIC_SCHEME} {encode_basic_credentials(credential.username, credential.password)}"


class CredentialValidator(ABC):
    """Abstract base class for server-side credential checks.

    The server calls :meth:`validate` only when an ``Authorization`` header
    is present and non-empty; a missing header is answered with a 401
    challenge before any validator runs.
    """

    @abstractmethod
    def validate(self, header: str) -> bool:
        """Decide whether the raw ``Authorization`` header value is acceptable.

        Args:
            header: The header value exactly as received, e.g.
                ``"Basic c2hyaW5rd3JhcDpzaHJpbmt3cmFw"``.

        Returns:
            ``True`` to serve the request, ``False`` to answer 403.
        """
        ...
