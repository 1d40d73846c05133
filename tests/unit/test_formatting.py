"""Unit tests for result formatting: web blocks, local blocks and placeholders."""
from tools.base import PlaceOfInterest, WebResult
from tools.formatting import format_local_results, format_web_results


def test_web_single_result():
    out = format_web_results([WebResult(title="T", description="D", url="U")])
    assert out == "Title: T\nDescription: D\nURL: U"


def test_web_results_separated_by_blank_line():
    out = format_web_results([WebResult("A", "a", "u1"), WebResult("B", "b", "u2")])
    assert out == "Title: A\nDescription: a\nURL: u1\n\nTitle: B\nDescription: b\nURL: u2"


def test_web_missing_fields_default_to_empty():
    r = WebResult.from_api({"title": "Only title"})
    assert format_web_results([r]) == "Title: Only title\nDescription: \nURL: "


def test_local_empty_collection():
    assert format_local_results([], {}) == "No local results found"


def test_local_full_record():
    poi = PlaceOfInterest.from_api({
        "id": "loc1",
        "name": "Joe's Pizza",
        "address": {
            "streetAddress": "7 Carmine St",
            "addressLocality": "New York",
            "addressRegion": "NY",
            "postalCode": "10014",
        },
        "phone": "+1 212-366-1182",
        "rating": {"ratingValue": 4.5, "ratingCount": 1200},
        "openingHours": ["Mo-Fr 10:00-02:00", "Sa-Su 10:00-04:00"],
        "priceRange": "$",
    })
    out = format_local_results([poi], {"loc1": "Classic slice shop."})
    assert out == (
        "Name: Joe's Pizza\n"
        "Address: 7 Carmine St, New York, NY, 10014\n"
        "Phone: +1 212-366-1182\n"
        "Rating: 4.5 (1200 reviews)\n"
        "Price Range: $\n"
        "Hours: Mo-Fr 10:00-02:00, Sa-Su 10:00-04:00\n"
        "Description: Classic slice shop.\n"
    )


def test_local_missing_fields_use_placeholders():
    poi = PlaceOfInterest.from_api({"id": "loc2", "name": "Nowhere Cafe"})
    out = format_local_results([poi], {})
    assert "Address: N/A\n" in out
    assert "Phone: N/A\n" in out
    assert "Rating: N/A (0 reviews)\n" in out
    assert "Price Range: N/A\n" in out
    assert "Hours: N/A\n" in out
    assert "Description: No description available\n" in out


def test_local_partial_address_skips_empty_parts():
    poi = PlaceOfInterest.from_api({
        "id": "x",
        "name": "X",
        "address": {"addressLocality": "Lisbon", "postalCode": ""},
    })
    assert "Address: Lisbon\n" in format_local_results([poi], {})


def test_local_blocks_joined_by_separator():
    pois = [PlaceOfInterest(id="a", name="A"), PlaceOfInterest(id="b", name="B")]
    out = format_local_results(pois, {"a": "first", "b": "second"})
    first, second = out.split("\n---\n")
    assert first.startswith("Name: A\n")
    assert second.startswith("Name: B\n")
    assert second.endswith("Description: second\n")
