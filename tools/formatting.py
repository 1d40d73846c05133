"""Render normalized search records as plain text for tool responses."""
from typing import Iterable, Mapping

from tools.base import PlaceOfInterest, WebResult

NOT_AVAILABLE = "N/A"
NO_DESCRIPTION = "No description available"
NO_LOCAL_RESULTS = "No local results found"
BLOCK_SEPARATOR = "\n---\n"


def format_web_results(results: Iterable[WebResult]) -> str:
    return "\n\n".join(
        f"Title: {r.title}\nDescription: {r.description}\nURL: {r.url}" for r in results
    )


def _format_address(poi: PlaceOfInterest) -> str:
    return ", ".join(part for part in poi.address if part != "") or NOT_AVAILABLE


def _format_place(poi: PlaceOfInterest, description: str | None) -> str:
    rating = poi.rating_value if poi.rating_value is not None else NOT_AVAILABLE
    reviews = poi.rating_count if poi.rating_count is not None else 0
    hours = ", ".join(poi.opening_hours) or NOT_AVAILABLE
    return (
        f"Name: {poi.name or NOT_AVAILABLE}\n"
        f"Address: {_format_address(poi)}\n"
        f"Phone: {poi.phone or NOT_AVAILABLE}\n"
        f"Rating: {rating} ({reviews} reviews)\n"
        f"Price Range: {poi.price_range or NOT_AVAILABLE}\n"
        f"Hours: {hours}\n"
        f"Description: {description or NO_DESCRIPTION}\n"
    )


def format_local_results(pois: Iterable[PlaceOfInterest], descriptions: Mapping[str, str]) -> str:
    """
    One block per POI, fields in fixed order, placeholders for anything missing.
    Blocks are joined by a '---' line; an empty collection yields NO_LOCAL_RESULTS.
    """
    blocks = [_format_place(poi, descriptions.get(poi.id)) for poi in pois]
    return BLOCK_SEPARATOR.join(blocks) or NO_LOCAL_RESULTS
