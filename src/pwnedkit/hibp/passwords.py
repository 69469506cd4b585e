"""
Pwned Passwords API client (k-anonymity range queries).

Only the first 5 characters of a password hash are ever sent to the API.
The range endpoint answers with every known hash suffix sharing that
prefix, one ``SUFFIX:COUNT`` pair per line, and the final comparison
happens locally.

The hash mode is passed explicitly down to the prefix listing. Calling a
mode specific method such as ``check_ntlm`` never changes the mode that
the generic ``check_password`` / ``list_hashes_password`` methods use, so
one instance can be shared between concurrent tasks.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from pwnedkit.errors import PrefixLengthMismatchError, UnsupportedHashModeError
from pwnedkit.hibp.config import PASSWORD_BASE_URL
from pwnedkit.hibp.hashing import (
    DEFAULT_HASH_MODE,
    PREFIX_LENGTH,
    HashMode,
    digest,
    query_params,
    resolve_mode,
    split_digest,
    validate_digest,
)
from pwnedkit.hibp.models import Match
from pwnedkit.hibp.transport import HTTPTransport

logger = logging.getLogger(__name__)


@dataclass
class PwnedPasswordOptions:
    """Additional options for the Pwned Passwords API.

    See https://haveibeenpwned.com/API/v3#PwnedPasswordsNTLM and
    https://haveibeenpwned.com/API/v3#PwnedPasswordsPadding
    """

    # Only affects check_password / list_hashes_password
    hash_mode: HashMode | str = DEFAULT_HASH_MODE

    # Server adds decoy entries (count 0) to every range response
    with_padding: bool = False


def parse_range_line(prefix: str, line: str) -> Match | None:
    """Turn one ``SUFFIX:COUNT`` line into a Match.

    Returns None for lines that must be skipped: no colon, a count that is
    not plain ASCII decimal digits, or a count below 1. Padding entries carry a zero
    count and are dropped here too.
    """
    parts = line.split(":", 1)
    if len(parts) != 2:
        return None

    suffix, count_str = parts
    count_str = count_str.strip()
    # int() alone would also take "+5", "1_000" and non-ASCII digits
    if not (count_str.isascii() and count_str.isdigit()):
        return None
    count = int(count_str)
    if count < 1:
        return None

    return Match(
        hash=prefix.lower() + suffix.strip().lower(),
        count=count,
        present=True,
    )


def parse_range_lines(prefix: str, lines: Iterable[str]) -> list[Match]:
    """Parse a pre-fetched range response body."""
    matches = []
    for line in lines:
        match = parse_range_line(prefix, line)
        if match is not None:
            matches.append(match)
    return matches


class PwnedPassAPI:
    """Client for the Pwned Passwords range API."""

    def __init__(
        self,
        transport: HTTPTransport,
        options: PwnedPasswordOptions | None = None,
        base_url: str = PASSWORD_BASE_URL,
    ):
        self.transport = transport
        self.options = options if options is not None else PwnedPasswordOptions()
        self.base_url = base_url.rstrip("/")

    # =========================================================================
    # Generic methods (hash mode from options)
    # =========================================================================

    async def check_password(self, password: str) -> Match:
        """Check if a password has been exposed in data breaches.

        The password is hashed locally with the configured hash mode and
        only the first 5 characters of the hash are sent to the API.

        Args:
            password: Password to check (NOT stored or logged)

        Returns:
            Match for the password hash, ``Match()`` if not found

        Raises:
            UnsupportedHashModeError: configured hash mode is unknown
        """
        mode = resolve_mode(self.options.hash_mode)
        return await self._check_hash(digest(password, mode), mode)

    async def list_hashes_password(self, password: str) -> list[Match]:
        """List every hash sharing the prefix of the password's hash.

        With padding enabled the list only contains real entries; padding
        lines have a zero count and are skipped.
        """
        mode = resolve_mode(self.options.hash_mode)
        if mode is HashMode.NTLM:
            return await self.list_hashes_ntlm(digest(password, mode))
        return await self.list_hashes_sha1(digest(password, mode))

    # =========================================================================
    # Hash specific methods
    # =========================================================================

    async def check_sha1(self, sha1_hash: str) -> Match:
        """Check a pre-computed SHA-1 hash against Pwned Passwords."""
        return await self._check_hash(sha1_hash, HashMode.SHA1)

    async def check_ntlm(self, ntlm_hash: str) -> Match:
        """Check a pre-computed NTLM hash against Pwned Passwords."""
        return await self._check_hash(ntlm_hash, HashMode.NTLM)

    async def list_hashes_sha1(self, sha1_hash: str) -> list[Match]:
        """List all hashes sharing the prefix of a SHA-1 hash."""
        validate_digest(sha1_hash, HashMode.SHA1)
        prefix, _ = split_digest(sha1_hash)
        return await self.list_hashes_prefix(prefix, HashMode.SHA1)

    async def list_hashes_ntlm(self, ntlm_hash: str) -> list[Match]:
        """List all hashes sharing the prefix of an NTLM hash."""
        validate_digest(ntlm_hash, HashMode.NTLM)
        prefix, _ = split_digest(ntlm_hash)
        return await self.list_hashes_prefix(prefix, HashMode.NTLM)

    async def _check_hash(self, full_hash: str, mode: HashMode) -> Match:
        validate_digest(full_hash, mode)
        prefix, _ = split_digest(full_hash)

        wanted = full_hash.lower()
        for match in await self.list_hashes_prefix(prefix, mode):
            if match.hash == wanted:
                return match
        return Match()

    # =========================================================================
    # Range query
    # =========================================================================

    async def list_hashes_prefix(
        self,
        prefix: str,
        hash_mode: HashMode | str | None = None,
    ) -> list[Match]:
        """Query the range endpoint for a 5 character hash prefix.

        Args:
            prefix: First 5 characters of a SHA-1 or NTLM hash
            hash_mode: Hash type to query for (defaults to the configured
                mode; unknown values are queried as SHA-1)

        Returns:
            Every returned hash as a Match, in response order

        Raises:
            PrefixLengthMismatchError: prefix is not 5 characters long
            TransportError: request, status or stream failure
        """
        if len(prefix) != PREFIX_LENGTH:
            raise PrefixLengthMismatchError(prefix)

        requested = hash_mode if hash_mode is not None else self.options.hash_mode
        try:
            mode = resolve_mode(requested)
        except UnsupportedHashModeError:
            logger.debug(f"Unknown hash mode {requested!r}, querying as SHA-1")
            mode = HashMode.SHA1

        headers = {"Add-Padding": "true"} if self.options.with_padding else None
        url = f"{self.base_url}/range/{prefix}"

        lines = [
            line
            async for line in self.transport.get_lines(
                url, params=query_params(mode), headers=headers
            )
        ]
        matches = parse_range_lines(prefix, lines)
        logger.debug(f"Range {prefix} ({mode.value}): {len(matches)} hashes")
        return matches
