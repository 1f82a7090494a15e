"""Helpers for pulling values out of MARC variable fields."""

from typing import Iterable, Optional

from src.core.models import JMRLVarField

TRAILING_PUNCTUATION = (":", "/", ".")


class MissingRequiredFieldError(Exception):
    """Raised when a record lacks a MARC value it cannot be shown without."""

    def __init__(self, tag: str, subfield: str = ""):
        self.tag = tag
        self.subfield = subfield
        target = f"{tag}/{subfield}" if subfield else tag
        super().__init__(f"Record is missing required MARC field {target}")


def strip_trailing_punctuation(value: str) -> str:
    """Drop one trailing ISBD separator (':', '/' or '.') and trailing spaces.

    Examples:
        "Moby Dick /" -> "Moby Dick"
        "Cats:" -> "Cats"
    """
    if not value:
        return ""
    if value[-1] in TRAILING_PUNCTUATION:
        value = value[:-1].strip()
    return value.rstrip()


def extract(var_fields: Iterable[JMRLVarField], tag: str, subfield: str = "") -> list[str]:
    """Get the values of a MARC tag, one per field instance, in document order.

    Args:
        var_fields: The record's variable fields
        tag: Three character MARC tag, e.g. "245"
        subfield: Subfield code to read. When empty, every subfield of the
            field is joined with spaces.

    Returns:
        Non-empty values with trailing punctuation stripped

    Note:
        When a field repeats the requested subfield code, the last one wins.
    """
    out = []
    for field in var_fields:
        if field.marc_tag != tag:
            continue
        val = ""
        for sub in field.subfields:
            if not subfield:
                content = strip_trailing_punctuation(sub.content)
                if content:
                    val = f"{val} {content}" if val else content
            elif sub.tag == subfield:
                val = strip_trailing_punctuation(sub.content)
        if val:
            out.append(val)
    return out


def extract_first(var_fields: Iterable[JMRLVarField], tag: str, subfield: str = "") -> Optional[str]:
    """Get the first value of a MARC tag, or None."""
    vals = extract(var_fields, tag, subfield)
    return vals[0] if vals else None


def extract_required(var_fields: Iterable[JMRLVarField], tag: str, subfield: str = "") -> str:
    """Get the first value of a MARC tag, raising MissingRequiredFieldError when absent."""
    val = extract_first(var_fields, tag, subfield)
    if val is None:
        raise MissingRequiredFieldError(tag, subfield)
    return val
