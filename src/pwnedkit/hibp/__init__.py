"""
Have I Been Pwned (HIBP) API binding.

Provides breach checking for email addresses and password security
validation using the HIBP API with k-anonymity for passwords.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from pwnedkit.hibp.config import ClientConfig
from pwnedkit.hibp.hashing import HashMode
from pwnedkit.hibp.models import (
    Breach,
    Match,
    Paste,
    RiskLevel,
    SubscribedDomain,
    SubscriptionStatus,
)
from pwnedkit.hibp.passwords import PwnedPassAPI, PwnedPasswordOptions
from pwnedkit.hibp.client import (
    HIBPClient,
    breached_account_sync,
    check_password_sync,
    list_hashes_prefix_sync,
)

__all__ = [
    "HIBPClient",
    "ClientConfig",
    "HashMode",
    "PwnedPassAPI",
    "PwnedPasswordOptions",
    "Breach",
    "Match",
    "Paste",
    "RiskLevel",
    "SubscribedDomain",
    "SubscriptionStatus",
    "breached_account_sync",
    "check_password_sync",
    "list_hashes_prefix_sync",
]
