"""
Data models for Have I Been Pwned API responses.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from enum import Enum

from pwnedkit.errors import APIDateError


class RiskLevel(str, Enum):
    """Risk level based on password exposure."""

    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def parse_api_date(value: str | None) -> datetime | None:
    """Parse a HIBP date field that carries no timezone.

    Accepts ``YYYY-MM-DD`` and ``YYYY-MM-DDTHH:MM:SS``. Empty values map to None.

    Raises:
        APIDateError: for any other format
    """
    if value is None or value == "" or value == "null":
        return None
    if not isinstance(value, str):
        raise APIDateError(f"failed to parse JSON value as API date: {value!r}")

    try:
        if len(value) == 10:
            return datetime.strptime(value, "%Y-%m-%d")
        if len(value) == 19:
            return datetime.strptime(value, "%Y-%m-%dT%H:%M:%S")
    except ValueError as e:
        raise APIDateError(f"failed to parse JSON string as API date: {e}") from e

    raise APIDateError("failed to parse JSON string as API date: unknown date format")


def parse_timestamp(date_str: str | None) -> datetime | None:
    """Parse an ISO timestamp such as ``2013-12-04T00:00:00Z``."""
    if not date_str:
        return None
    try:
        # HIBP uses ISO format
        return datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None


@dataclass(frozen=True)
class Match:
    """A single hash returned by the Pwned Passwords range API.

    ``present`` is only ever True for entries parsed from a range response,
    so an empty ``Match()`` means the hash was not returned at all.
    """

    hash: str = ""
    count: int = 0
    present: bool = False

    @property
    def risk_level(self) -> RiskLevel:
        """Determine risk level based on occurrences."""
        if self.count == 0:
            return RiskLevel.SAFE
        elif self.count < 10:
            return RiskLevel.LOW
        elif self.count < 100:
            return RiskLevel.MEDIUM
        elif self.count < 10000:
            return RiskLevel.HIGH
        else:
            return RiskLevel.CRITICAL

    @property
    def risk_description(self) -> str:
        """Get human-readable risk description."""
        descriptions = {
            RiskLevel.SAFE: "This password has not been found in any known data breaches.",
            RiskLevel.LOW: f"This password has been seen {self.count} times in data breaches. Consider changing it.",
            RiskLevel.MEDIUM: f"This password has been seen {self.count} times. You should change it.",
            RiskLevel.HIGH: f"This password has been seen {self.count:,} times! Change it immediately.",
            RiskLevel.CRITICAL: f"This password has been seen {self.count:,} times! It's extremely common and must be changed.",
        }
        return descriptions[self.risk_level]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hash": self.hash,
            "count": self.count,
            "present": self.present,
            "risk_level": self.risk_level.value,
        }


@dataclass
class Breach:
    """Represents a single data breach from HIBP."""

    name: str
    title: str
    domain: str
    breach_date: datetime | None
    added_date: datetime | None
    modified_date: datetime | None
    pwn_count: int
    description: str
    logo_path: str | None
    data_classes: list[str]
    is_verified: bool
    is_fabricated: bool
    is_sensitive: bool
    is_retired: bool
    is_spam_list: bool
    is_malware: bool
    is_subscription_free: bool
    present: bool = False

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Breach":
        """Create Breach from HIBP API response.

        Truncated responses only carry ``Name``; every other field falls
        back to its empty value.
        """
        return cls(
            name=data.get("Name", ""),
            title=data.get("Title", ""),
            domain=data.get("Domain", ""),
            breach_date=parse_api_date(data.get("BreachDate")),
            added_date=parse_timestamp(data.get("AddedDate")),
            modified_date=parse_timestamp(data.get("ModifiedDate")),
            pwn_count=data.get("PwnCount", 0),
            description=data.get("Description", ""),
            logo_path=data.get("LogoPath"),
            data_classes=data.get("DataClasses") or [],
            is_verified=data.get("IsVerified", False),
            is_fabricated=data.get("IsFabricated", False),
            is_sensitive=data.get("IsSensitive", False),
            is_retired=data.get("IsRetired", False),
            is_spam_list=data.get("IsSpamList", False),
            is_malware=data.get("IsMalware", False),
            is_subscription_free=data.get("IsSubscriptionFree", False),
            present=True,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "title": self.title,
            "domain": self.domain,
            "breach_date": self.breach_date.date().isoformat() if self.breach_date else None,
            "added_date": self.added_date.isoformat() if self.added_date else None,
            "pwn_count": self.pwn_count,
            "description": self.description,
            "data_classes": self.data_classes,
            "is_verified": self.is_verified,
            "is_sensitive": self.is_sensitive,
        }


@dataclass
class Paste:
    """Represents a paste containing the email address."""

    source: str
    id: str
    title: str | None
    date: datetime | None
    email_count: int
    present: bool = False

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Paste":
        """Create Paste from HIBP API response."""
        return cls(
            source=data.get("Source", ""),
            id=data.get("Id", data.get("ID", "")),
            title=data.get("Title"),
            date=parse_timestamp(data.get("Date")),
            email_count=data.get("EmailCount", 0),
            present=True,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "id": self.id,
            "title": self.title,
            "date": self.date.isoformat() if self.date else None,
            "email_count": self.email_count,
        }


@dataclass
class SubscribedDomain:
    """A domain verified in the domain search dashboard.

    Counts are None until the first search of the domain has run.
    """

    domain_name: str
    pwn_count: int | None = None
    pwn_count_excluding_spam_lists: int | None = None
    pwn_count_excluding_spam_lists_at_last_subscription_renewal: int | None = None
    next_subscription_renewal: datetime | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "SubscribedDomain":
        return cls(
            domain_name=data.get("DomainName", ""),
            pwn_count=data.get("PwnCount"),
            pwn_count_excluding_spam_lists=data.get("PwnCountExcludingSpamLists"),
            pwn_count_excluding_spam_lists_at_last_subscription_renewal=data.get(
                "PwnCountExcludingSpamListsAtLastSubscriptionRenewal"
            ),
            next_subscription_renewal=parse_api_date(data.get("NextSubscriptionRenewal")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain_name": self.domain_name,
            "pwn_count": self.pwn_count,
            "pwn_count_excluding_spam_lists": self.pwn_count_excluding_spam_lists,
            "next_subscription_renewal": (
                self.next_subscription_renewal.isoformat()
                if self.next_subscription_renewal
                else None
            ),
        }


@dataclass
class SubscriptionStatus:
    """Details of the subscription tied to the API key."""

    subscription_name: str
    description: str
    subscribed_until: datetime | None
    rpm: int
    domain_search_max_breached_accounts: int | None = None
    present: bool = False

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "SubscriptionStatus":
        return cls(
            subscription_name=data.get("SubscriptionName", ""),
            description=data.get("Description", ""),
            subscribed_until=parse_api_date(data.get("SubscribedUntil")),
            rpm=data.get("Rpm", 0),
            domain_search_max_breached_accounts=data.get("DomainSearchMaxBreachedAccounts"),
            present=True,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "subscription_name": self.subscription_name,
            "description": self.description,
            "subscribed_until": (
                self.subscribed_until.isoformat() if self.subscribed_until else None
            ),
            "rpm": self.rpm,
            "domain_search_max_breached_accounts": self.domain_search_max_breached_accounts,
        }
