"""Shared types for search tools: result records and the error taxonomy."""

from dataclasses import dataclass, field
from typing import Any, Optional


class SearchToolError(Exception):
    """Base class for errors raised on the tool-call path."""


class RateLimitExceeded(SearchToolError):
    """Local rate-limit policy would be breached by another upstream call."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message)


class UpstreamError(SearchToolError):
    """Non-success HTTP response from the Brave Search API."""

    def __init__(self, status: int, reason: str, body: str):
        self.status = status
        self.reason = reason
        self.body = body
        super().__init__(f"Brave API error: {status} {reason}\n{body}")


class ArgumentValidationError(SearchToolError):
    """Tool arguments are missing or malformed."""


class UnknownTool(SearchToolError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


@dataclass(frozen=True)
class WebResult:
    """Single web search hit. Missing fields are empty strings."""
    title: str = ""
    description: str = ""
    url: str = ""

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "WebResult":
        return cls(
            title=raw.get("title") or "",
            description=raw.get("description") or "",
            url=raw.get("url") or "",
        )


@dataclass(frozen=True)
class PlaceOfInterest:
    """Place record from the local POI endpoint."""
    id: str
    name: Optional[str] = None
    street_address: Optional[str] = None
    address_locality: Optional[str] = None
    address_region: Optional[str] = None
    postal_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: Optional[str] = None
    rating_value: Optional[float] = None
    rating_count: Optional[int] = None
    opening_hours: list[str] = field(default_factory=list)
    price_range: Optional[str] = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "PlaceOfInterest":
        address = raw.get("address") or {}
        coordinates = raw.get("coordinates") or {}
        rating = raw.get("rating") or {}
        return cls(
            id=raw.get("id") or "",
            name=raw.get("name"),
            street_address=address.get("streetAddress"),
            address_locality=address.get("addressLocality"),
            address_region=address.get("addressRegion"),
            postal_code=address.get("postalCode"),
            latitude=coordinates.get("latitude"),
            longitude=coordinates.get("longitude"),
            phone=raw.get("phone"),
            rating_value=rating.get("ratingValue"),
            rating_count=rating.get("ratingCount"),
            opening_hours=list(raw.get("openingHours") or []),
            price_range=raw.get("priceRange"),
        )

    @property
    def address(self) -> list[str]:
        return [
            self.street_address or "",
            self.address_locality or "",
            self.address_region or "",
            self.postal_code or "",
        ]
