"""Convert JMRL bib records into pool record fields."""

import html

from src.core.marc import extract, extract_first, extract_required
from src.core.models import JMRLBib, RecordField

DEFAULT_LIBRARY_NAME = "Jefferson-Madison Regional Library"

SUBJECT_TAGS = ("600", "650", "651", "647")

AVAILABLE_ONLINE = "Online"
AVAILABLE_ON_SHELF = "On Shelf Now"
CHECKED_OUT = "Checked Out"


def location_value(location, library_name: str = DEFAULT_LIBRARY_NAME) -> str:
    """Display value for a JMRL location; the "none" location is the library itself."""
    if location.name == "none" or location.code == "none":
        return library_name
    return f"{library_name} - {location.name}"


def access_provider(url: str) -> str:
    """Guess the e-content provider behind an 856 access URL."""
    return "overdrive" if "overdrive" in url else "freading"


def normalize(bib: JMRLBib, library_name: str = DEFAULT_LIBRARY_NAME) -> list[RecordField]:
    """Build the ordered pool record fields for a JMRL bib.

    Args:
        bib: The upstream record
        library_name: Prefix for location values

    Returns:
        List of RecordField in display order

    Raises:
        MissingRequiredFieldError: The record has no 245/a title
    """
    var_fields = bib.var_fields
    fields = [
        RecordField(name="id", type="identifier", label="Identifier", value=bib.id,
                    display="optional", citation_part="id"),
    ]

    for loc in bib.locations:
        fields.append(RecordField(name="location", type="location", label="Location",
                                  value=location_value(loc, library_name)))

    # always present, empty when JMRL has no value
    year = "" if bib.publish_year is None else str(bib.publish_year)
    fields.append(RecordField(name="published_date", type="published_date", label="Publication Date",
                              value=year, citation_part="published_date"))
    fields.append(RecordField(name="format", type="format", label="Format",
                              value=bib.material_type.value, citation_part="format"))
    fields.append(RecordField(name="language", type="language", label="Language",
                              value=bib.language.value, visibility="detailed", citation_part="language"))

    title = extract_required(var_fields, "245", "a")
    fields.append(RecordField(name="title", type="title", label="Title",
                              value=html.unescape(title), citation_part="title"))

    subtitle = extract_first(var_fields, "245", "b")
    if subtitle:
        fields.append(RecordField(name="subtitle", type="subtitle", label="Subtitle",
                                  value=html.unescape(subtitle), citation_part="subtitle"))

    for val in extract(var_fields, "020", "a"):
        fields.append(RecordField(name="isbn", type="isbn", label="ISBN", value=val,
                                  visibility="detailed", citation_part="serial_number"))

    # call numbers are split across untagged subfields
    for val in extract(var_fields, "092"):
        fields.append(RecordField(name="call_number", type="call_number", label="Call Number",
                                  value=val, visibility="detailed", citation_part="call_number"))

    for val in extract(var_fields, "100", "a"):
        fields.append(RecordField(name="author", type="author", label="Author",
                                  value=html.unescape(val), citation_part="author"))

    for tag in SUBJECT_TAGS:
        for val in extract(var_fields, tag, "a"):
            fields.append(RecordField(name="subject", type="subject", label="Subject", value=val,
                                      visibility="detailed", citation_part="subject"))

    contents = extract_first(var_fields, "505", "a")
    if contents:
        fields.append(RecordField(name="contents", type="contents", label="Contents",
                                  value=contents, visibility="detailed"))

    summary = extract_first(var_fields, "520", "a")
    if summary:
        fields.append(RecordField(name="summary", type="summary", label="Summary",
                                  value=summary, citation_part="abstract"))

    published = extract_first(var_fields, "776", "d")
    if published:
        fields.append(RecordField(name="published", type="published", label="Published", value=published,
                                  visibility="detailed", citation_part="publisher"))

    availability = RecordField(name="availability", type="availability", label="Availability",
                               value=CHECKED_OUT)
    access_url = extract_first(var_fields, "856", "u")
    if access_url:
        fields.append(RecordField(name="access_url", type="url", label="Online Access",
                                  value=access_url, provider=access_provider(access_url)))
        if bib.available:
            availability.value = AVAILABLE_ONLINE
    elif bib.available:
        availability.value = AVAILABLE_ON_SHELF
    fields.append(availability)

    return fields
