"""
Exception hierarchy for the HIBP client.

Validation errors are raised locally before any request is made.
Transport errors describe what went wrong talking to the API.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""


class HIBPError(Exception):
    """Base class for all errors raised by pwnedkit."""


# =============================================================================
# Validation errors (no network call made)
# =============================================================================

class HIBPValidationError(HIBPError, ValueError):
    """Input rejected before any I/O."""


class PrefixLengthMismatchError(HIBPValidationError):
    def __init__(self, prefix: str = ""):
        super().__init__("password hash prefix must be 5 characters long")
        self.length = len(prefix)


class SHA1LengthMismatchError(HIBPValidationError):
    def __init__(self) -> None:
        super().__init__("SHA1 hash size needs to be 160 bits")


class NTLMLengthMismatchError(HIBPValidationError):
    def __init__(self) -> None:
        super().__init__("NTLM hash size needs to be 128 bits")


class InvalidSHA1Error(HIBPValidationError):
    def __init__(self) -> None:
        super().__init__("not a valid SHA1 hash")


class InvalidNTLMError(HIBPValidationError):
    def __init__(self) -> None:
        super().__init__("not a valid NTLM hash")


class UnsupportedHashModeError(HIBPValidationError):
    def __init__(self, mode: object = None):
        super().__init__(f"hash mode not supported: {mode!r}")
        self.mode = mode


class NoAccountIDError(HIBPValidationError):
    def __init__(self) -> None:
        super().__init__("no account ID given")


class NoNameError(HIBPValidationError):
    def __init__(self) -> None:
        super().__init__("no name given")


# =============================================================================
# Transport errors
# =============================================================================

class TransportError(HIBPError):
    """Request could not be completed."""


class HIBPConnectionError(TransportError):
    """Request never produced a response (bad URL, DNS, refused, timeout)."""


class NonPositiveResponseError(TransportError):
    """API answered with something other than HTTP 200."""

    def __init__(self, status: int, reason: str | None = None):
        self.status = status
        self.reason = reason or ""
        super().__init__(
            f"HTTP {status} {self.reason}".rstrip()
            + ": non HTTP-200 response for HTTP request"
        )


class RateLimitError(NonPositiveResponseError):
    """HTTP 429 that was not (or could no longer be) retried."""

    def __init__(
        self,
        reason: str | None = None,
        retry_after: str | None = None,
        detail: str | None = None,
    ):
        super().__init__(429, reason or "Too Many Requests")
        self.retry_after = retry_after
        if detail:
            self.args = (f"{self.args[0]} ({detail})",)


class StreamReadError(TransportError):
    """Response body could not be read to the end."""


class ResponseDecodeError(TransportError):
    """Response body was not the JSON document we expected."""


class APIDateError(HIBPError, ValueError):
    """Date value in an API response has an unknown format."""


class ConfigError(HIBPError, ValueError):
    """Environment variable holds a value the client cannot use."""
