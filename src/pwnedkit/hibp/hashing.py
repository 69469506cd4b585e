"""
Password hashing and hash mode policy for the Pwned Passwords API.

The range API accepts SHA-1 (default) or NTLM hashes. The mode decides
which digest is computed, how long a valid digest is and whether the
``mode=ntlm`` query parameter is sent.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import hashlib
import string
from enum import Enum

from Crypto.Hash import MD4

from pwnedkit.errors import (
    InvalidNTLMError,
    InvalidSHA1Error,
    NTLMLengthMismatchError,
    SHA1LengthMismatchError,
    UnsupportedHashModeError,
)

PREFIX_LENGTH = 5

HEX_DIGITS = frozenset(string.hexdigits)


class HashMode(str, Enum):
    """Hash algorithm used against the Pwned Passwords range API."""

    SHA1 = "sha1"
    NTLM = "ntlm"


DEFAULT_HASH_MODE = HashMode.SHA1

_DIGEST_LENGTHS = {
    HashMode.SHA1: 40,
    HashMode.NTLM: 32,
}

_QUERY_PARAMS = {
    HashMode.SHA1: {},
    HashMode.NTLM: {"mode": "ntlm"},
}


def sha1_hex(credential: str) -> str:
    """SHA-1 of the UTF-8 encoded credential as lowercase hex.

    Lone surrogates are encoded as-is so every str is hashable.
    """
    data = credential.encode("utf-8", errors="surrogatepass")
    return hashlib.sha1(data, usedforsecurity=False).hexdigest()


def ntlm_hex(credential: str) -> str:
    """NTLM hash (MD4 over UTF-16LE) of the credential as lowercase hex."""
    h = MD4.new()
    h.update(credential.encode("utf-16-le", errors="surrogatepass"))
    return h.hexdigest()


def resolve_mode(value: HashMode | str | None) -> HashMode:
    """Strict mode lookup. Unknown values raise UnsupportedHashModeError."""
    if value is None:
        return DEFAULT_HASH_MODE
    if isinstance(value, HashMode):
        return value
    try:
        return HashMode(str(value).lower())
    except ValueError:
        raise UnsupportedHashModeError(value) from None


def digest(credential: str, mode: HashMode | str | None = None) -> str:
    """Hash a credential for the given mode."""
    mode = resolve_mode(mode)
    if mode is HashMode.NTLM:
        return ntlm_hex(credential)
    return sha1_hex(credential)


def digest_length(mode: HashMode | str | None) -> int:
    return _DIGEST_LENGTHS[resolve_mode(mode)]


def query_params(mode: HashMode | str | None) -> dict[str, str]:
    """Extra query parameters the range endpoint needs for this mode."""
    return dict(_QUERY_PARAMS[resolve_mode(mode)])


def validate_digest(value: str, mode: HashMode | str | None) -> None:
    """Check length, then hex charset, of a full digest.

    Raises:
        SHA1LengthMismatchError / NTLMLengthMismatchError: wrong length
        InvalidSHA1Error / InvalidNTLMError: not hexadecimal
    """
    mode = resolve_mode(mode)
    if len(value) != digest_length(mode):
        if mode is HashMode.NTLM:
            raise NTLMLengthMismatchError()
        raise SHA1LengthMismatchError()

    if not HEX_DIGITS.issuperset(value):
        if mode is HashMode.NTLM:
            raise InvalidNTLMError()
        raise InvalidSHA1Error()


def split_digest(value: str) -> tuple[str, str]:
    """Split a digest into its 5 character prefix and the remaining suffix."""
    return value[:PREFIX_LENGTH], value[PREFIX_LENGTH:]
