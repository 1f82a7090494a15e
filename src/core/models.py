"""Data models for JMRL API payloads and normalized pool records."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class JMRLCodeValue(BaseModel):
    """A code / value (or code / name) pair, e.g. a language or location."""

    code: str = ""
    value: str = ""
    name: str = ""


class JMRLSubfield(BaseModel):
    """One MARC subfield: a single character tag and its content."""

    tag: str = ""
    content: str = ""


class JMRLVarField(BaseModel):
    """MARC data from the JMRL fields=varFields request param."""

    model_config = ConfigDict(populate_by_name=True)

    marc_tag: str = Field(default="", alias="marcTag")
    subfields: List[JMRLSubfield] = []


class JMRLBib(BaseModel):
    """MARC and JMRL data for a single bib record."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    publish_year: Optional[int] = Field(default=None, alias="publishYear")
    language: JMRLCodeValue = Field(default_factory=JMRLCodeValue, alias="lang")
    material_type: JMRLCodeValue = Field(default_factory=JMRLCodeValue, alias="materialType")
    locations: List[JMRLCodeValue] = []
    available: bool = False
    var_fields: List[JMRLVarField] = Field(default=[], alias="varFields")


class JMRLEntry(BaseModel):
    """A search hit."""

    relevance: float = 0.0
    bib: JMRLBib


class JMRLResult(BaseModel):
    """Response data from a JMRL bib search."""

    count: int = 0
    total: int = 0
    start: int = 0
    entries: List[JMRLEntry] = []


class RecordField(BaseModel):
    """A single field of a normalized pool record."""

    name: str
    type: str = ""
    label: str = ""
    value: str = ""
    visibility: Optional[str] = None  # "detailed" hides the field from brief views
    display: Optional[str] = None
    provider: Optional[str] = None
    citation_part: Optional[str] = None
