"""Authentication subsystem for authrepo.

Provides the server-side validator interface, the Basic-scheme validators,
and the header encoding shared with the resolution client.

Public API:
    :class:`CredentialValidator` -- abstract base for validators.
    :class:`BasicCredentialValidator` -- single user/password pair.
    :class:`CredentialTable` -- several users, one realm.
    :func:`basic_auth_header` -- build ``Authorization: Basic ...`` values.
"""

from authrepo.auth.base import (
    CredentialValidator,
    basic_auth_header,
    encode_basic_credentials,
)
from authrepo.auth.basic import BasicCredentialValidator, CredentialTable

__all__ = [
    "CredentialValidator",
    "BasicCredentialValidator",
    "CredentialTable",
    "basic_auth_header",
    "encode_basic_credentials",
]
