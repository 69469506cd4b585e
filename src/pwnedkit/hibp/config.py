"""
Configuration for the HIBP client.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import os
from dataclasses import dataclass, field

from pwnedkit import __version__
from pwnedkit.errors import ConfigError, UnsupportedHashModeError
from pwnedkit.hibp.hashing import DEFAULT_HASH_MODE, HashMode, resolve_mode

BASE_URL = "https://haveibeenpwned.com/api/v3"
PASSWORD_BASE_URL = "https://api.pwnedpasswords.com"

DEFAULT_USER_AGENT = f"pwnedkit/{__version__}"
DEFAULT_TIMEOUT = 5.0


def _env_flag(name: str, default: str = "") -> bool:
    return os.environ.get(name, default).lower() in ("true", "yes", "1")


def _env_number(name: str, parse, default):
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return parse(value.strip())
    except ValueError:
        raise ConfigError(f"Invalid {name}: {value!r} is not a number") from None


@dataclass
class ClientConfig:
    """Settings shared by every resource of one HIBP client."""

    api_key: str | None = None
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = DEFAULT_TIMEOUT

    # Sleep for Retry-After and retry on HTTP 429 instead of failing
    rate_limit_sleep: bool = False
    max_rate_limit_retries: int = 1

    # Pwned Passwords settings
    hash_mode: HashMode | str = DEFAULT_HASH_MODE
    with_padding: bool = False

    base_url: str = BASE_URL
    password_base_url: str = PASSWORD_BASE_URL

    extra_headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load configuration from environment variables.

        Raises:
            ConfigError: a numeric variable does not parse
        """
        return cls(
            api_key=os.environ.get("HIBP_API_KEY") or None,
            user_agent=os.environ.get("PWNEDKIT_USER_AGENT") or DEFAULT_USER_AGENT,
            timeout=_env_number("PWNEDKIT_TIMEOUT", float, DEFAULT_TIMEOUT),
            rate_limit_sleep=_env_flag("PWNEDKIT_RATE_LIMIT_SLEEP"),
            max_rate_limit_retries=_env_number("PWNEDKIT_MAX_RATE_LIMIT_RETRIES", int, 1),
            hash_mode=os.environ.get("PWNEDKIT_HASH_MODE", DEFAULT_HASH_MODE.value).lower(),
            with_padding=_env_flag("PWNEDKIT_PADDING"),
            base_url=os.environ.get("PWNEDKIT_BASE_URL", BASE_URL),
            password_base_url=os.environ.get("PWNEDKIT_PASSWORD_BASE_URL", PASSWORD_BASE_URL),
        )

    def validate(self) -> list[str]:
        """Validate configuration. Returns list of errors."""
        errors = []

        if not self.timeout > 0:
            errors.append("Timeout must be a positive number of seconds")
        if self.max_rate_limit_retries < 0:
            errors.append("Rate limit retries cannot be negative")
        try:
            resolve_mode(self.hash_mode)
        except UnsupportedHashModeError:
            errors.append(f"Unknown hash mode: {self.hash_mode}")
        if not self.base_url or not self.password_base_url:
            errors.append("API base URLs must not be empty")

        return errors
