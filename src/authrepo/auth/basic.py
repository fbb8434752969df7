"""HTTP Basic credential validators.

Both validators accept only the ``Basic`` scheme and compare the full header
against ``"Basic " + base64(username:password)`` rebuilt from configuration.
The comparison is exact and case-sensitive: a lowercase scheme name, extra
whitespace or re-padded Base64 are all rejected.
"""

from __future__ import annotations

import hmac
from typing import Mapping

from authrepo.auth.base import (
    BASIC_SCHEME,
    CREDENTIAL_ENCODING,
    CredentialValidator,
    encode_basic_credentials,
)


def _expected_header(username: str, password: str) -> bytes:
    return f"{BASIC_SCHEME} {encode_basic_credentials(username, password)}".encode(
        CREDENTIAL_ENCODING
    )


class BasicCredentialValidator(CredentialValidator):
    """Validate against a single fixed username/password pair."""

    def __init__(self, username: str, password: str) -> None:
        self._username = username
        self._expected = _expected_header(username, password)

    @property
    def username(self) -> str:
        return self._username

    def validate(self, header: str) -> bool:
        if not header.startswith(BASIC_SCHEME + " "):
            return False
        return hmac.compare_digest(header.encode(CREDENTIAL_ENCODING), self._expected)

    def __repr__(self) -> str:
        return f"BasicCredentialValidator(username={self._username!r})"


class CredentialTable(CredentialValidator):
    """Validate against several users, each with its own password.

    Args:
        users: Mapping of username to password.

    Example::

        validator = CredentialTable({"deployer": "s3cret", "reader": "r3ad"})
    """

    def __init__(self, users: Mapping[str, str]) -> None:
        self._expected = {
            _expected_header(username, password) for username, password in users.items()
        }

    def validate(self, header: str) -> bool:
        if not header.startswith(BASIC_SCHEME + " "):
            return False
        supplied = header.encode(CREDENTIAL_ENCODING)
        # Compare against every entry so timing does not reveal which user matched.
        matched = False
        for expected in self._expected:
            if hmac.compare_digest(supplied, expected):
                matched = True
        return matched
