"""Canonical citation data model shared by extraction, building and formatting."""

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from citekit.formatting.text import normalize_doi, parse_year, strip_markers, year_from_date

logger = logging.getLogger(__name__)


# ── Enums ────────────────────────────────────────────────────────────


class SourceType(str, Enum):
    """Kinds of source a citation can describe."""

    JOURNAL_ARTICLE = "journal-article"
    BOOK = "book"
    WEBPAGE = "webpage"
    GENERIC = "generic"

    @classmethod
    def coerce(cls, value) -> "SourceType":
        """Map any value onto a SourceType, falling back to generic."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.GENERIC


class Style(str, Enum):
    """Supported citation styles."""

    MLA = "mla"
    APA = "apa"
    CHICAGO = "chicago"

    @classmethod
    def parse(cls, value: "Style | str") -> "Style":
        """Accept an enum member or its case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValueError(
                f"Unknown citation style: {value!r} (valid: {valid})"
            ) from None


# ── Person ───────────────────────────────────────────────────────────


class Person(BaseModel):
    """One author. ``literal`` is always populated when any name part is."""

    model_config = ConfigDict(frozen=True)

    given: str = ""
    family: str = ""
    literal: str = ""

    @model_validator(mode="before")
    @classmethod
    def fill_literal(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        given = strip_markers(str(data.get("given") or "")).strip()
        family = strip_markers(str(data.get("family") or "")).strip()
        literal = strip_markers(str(data.get("literal") or "")).strip()
        data["given"] = given
        data["family"] = family
        data["literal"] = literal or " ".join(p for p in (given, family) if p)
        return data

    @property
    def is_empty(self) -> bool:
        return not (self.given or self.family or self.literal)


# ── Records ──────────────────────────────────────────────────────────


class PartialRecord(BaseModel):
    """Whatever the metadata extractor managed to find; every field optional."""

    type: Optional[SourceType] = None
    title: Optional[str] = None
    authors: list[Person] = Field(default_factory=list)
    container: Optional[str] = None
    website: Optional[str] = None
    publisher: Optional[str] = None
    year: Optional[int] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None
    datePublished: Optional[str] = None
    dateModified: Optional[str] = None


class CanonicalRecord(BaseModel):
    """The unified, style-agnostic citation record. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    type: SourceType = SourceType.GENERIC
    title: Optional[str] = None
    authors: list[Person] = Field(default_factory=list)
    container: Optional[str] = None
    website: Optional[str] = None
    publisher: Optional[str] = None
    year: Optional[int] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None
    datePublished: Optional[str] = None
    dateModified: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, v):
        return SourceType.coerce(v) if v else SourceType.GENERIC

    @field_validator("doi", mode="before")
    @classmethod
    def strip_doi_prefix(cls, v):
        return normalize_doi(v)

    @field_validator("year", mode="before")
    @classmethod
    def lenient_year(cls, v):
        return parse_year(v)

    @field_validator("authors", mode="before")
    @classmethod
    def authors_as_list(cls, v):
        from citekit.parsing.names import parse_name

        if not isinstance(v, (list, tuple)):
            if v is not None:
                logger.debug("Dropping non-sequence authors value: %r", v)
            return []
        people = []
        for a in v:
            if isinstance(a, str):
                people.append(parse_name(a))
            elif isinstance(a, dict):
                people.append(Person.model_validate(a))
            elif isinstance(a, Person):
                people.append(a)
        kept = [p for p in people if not p.is_empty]
        if len(kept) != len(v):
            logger.debug("Dropped %d malformed author entries", len(v) - len(kept))
        return kept

    @field_validator(
        "title", "container", "website", "publisher", "volume", "issue",
        "pages", "url", "datePublished", "dateModified",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        if v is None or isinstance(v, (dict, list)):
            return None
        s = strip_markers(str(v)).strip()
        return s or None

    @model_validator(mode="after")
    def derive_year(self):
        if self.year is None and self.datePublished:
            # Frozen model: assign through __dict__ during validation only
            self.__dict__["year"] = year_from_date(self.datePublished)
        return self

    @property
    def effective_year(self) -> int | None:
        return self.year if self.year is not None else year_from_date(self.datePublished)
