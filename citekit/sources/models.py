"""Source-specific record shapes, one per origin, tagged by ``origin``."""

import logging
import re
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from citekit.core.models import PartialRecord

logger = logging.getLogger(__name__)


# ── Lenient Base ─────────────────────────────────────────────────────


class LenientModel(BaseModel):
    """Upstream shape: a payload field with a malformed value falls back to its default.

    Subclasses name their payload fields in a ``mode="wrap"`` validator that
    delegates to ``default_on_error``. The ``origin`` tag is never wrapped.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @classmethod
    def default_on_error(cls, value, handler, info):
        try:
            return handler(value)
        except ValidationError:
            logger.debug(
                "%s.%s: ignoring malformed value %r", cls.__name__, info.field_name, value
            )
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


def _objects_only(value):
    """Drop non-mapping entries from a list of upstream objects."""
    if not isinstance(value, list):
        return value
    kept = [item for item in value if isinstance(item, dict)]
    if len(kept) != len(value):
        logger.debug("Dropped %d malformed entries", len(value) - len(kept))
    return kept


# ── DOI Registry (Crossref) ──────────────────────────────────────────


class CrossrefAuthor(LenientModel):
    given: str = ""
    family: str = ""
    name: str = ""

    @field_validator("given", "family", "name", mode="wrap")
    @classmethod
    def lenient(cls, value, handler, info):
        return cls.default_on_error(value, handler, info)


class CrossrefWork(LenientModel):
    """A work object from the DOI registry (the ``message`` of a works lookup)."""

    origin: Literal["crossref"] = "crossref"
    author: list[CrossrefAuthor] = Field(default_factory=list)
    issued: dict = Field(default_factory=dict)
    page: Optional[str] = None
    container_title: list[str] = Field(default_factory=list, alias="container-title")
    DOI: Optional[str] = None
    URL: Optional[str] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    publisher: Optional[str] = None
    title: list[str] = Field(default_factory=list)
    type: Optional[str] = None

    @field_validator(
        "author", "issued", "page", "container_title", "DOI", "URL",
        "volume", "issue", "publisher", "title", "type",
        mode="wrap",
    )
    @classmethod
    def lenient(cls, value, handler, info):
        return cls.default_on_error(value, handler, info)

    @field_validator("title", "container_title", mode="before")
    @classmethod
    def str_to_list(cls, v):
        if isinstance(v, str):
            return [v]
        if isinstance(v, list):
            return [s for s in v if isinstance(s, str)]
        return v

    @field_validator("author", mode="before")
    @classmethod
    def author_objects(cls, v):
        return _objects_only(v)

    @classmethod
    def from_response(cls, payload: dict) -> "CrossrefWork":
        """Accept either the full API envelope or its ``message``."""
        if isinstance(payload, dict) and isinstance(payload.get("message"), dict):
            payload = payload["message"]
        return cls.model_validate(payload if isinstance(payload, dict) else {})


# ── Book Registry (Open Library) ─────────────────────────────────────


class OpenLibraryName(LenientModel):
    name: str = ""

    @field_validator("name", mode="wrap")
    @classmethod
    def lenient(cls, value, handler, info):
        return cls.default_on_error(value, handler, info)


class OpenLibraryBook(LenientModel):
    """One entry of an Open Library ``jscmd=data`` books response."""

    origin: Literal["openlibrary"] = "openlibrary"
    isbn: str = ""
    title: Optional[str] = None
    authors: list[OpenLibraryName] = Field(default_factory=list)
    publish_date: Optional[str] = None
    publishers: list[OpenLibraryName] = Field(default_factory=list)
    pagination: Optional[str] = None

    @field_validator(
        "isbn", "title", "authors", "publish_date", "publishers", "pagination",
        mode="wrap",
    )
    @classmethod
    def lenient(cls, value, handler, info):
        return cls.default_on_error(value, handler, info)

    @field_validator("authors", "publishers", mode="before")
    @classmethod
    def name_objects(cls, v):
        return _objects_only(v)

    @classmethod
    def from_response(cls, payload: dict, isbn: str) -> "OpenLibraryBook":
        """Pick the ``ISBN:<digits>`` entry out of a registry response."""
        isbn = sanitize_isbn(isbn)
        key = f"ISBN:{isbn}"
        entry = payload.get(key) if isinstance(payload, dict) else None
        if not isinstance(entry, dict):
            logger.warning("Book registry response has no entry for %s", key)
            entry = {}
        return cls.model_validate({**entry, "isbn": isbn})


def sanitize_isbn(raw: str) -> str:
    """Keep only ISBN digits and the X check character."""
    return re.sub(r"[^0-9Xx]", "", str(raw or ""))


# ── Manual Entry ─────────────────────────────────────────────────────


class ManualForm(LenientModel):
    """The manual entry form. ``authors`` holds one name per line, or a list of names."""

    origin: Literal["manual"] = "manual"
    type: Optional[str] = None
    title: Optional[str] = None
    authors: str = ""
    container: Optional[str] = None
    publisher: Optional[str] = None
    year: Optional[str] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None
    datePublished: Optional[str] = None

    @field_validator(
        "type", "title", "authors", "container", "publisher", "year", "volume",
        "issue", "pages", "doi", "url", "datePublished",
        mode="wrap",
    )
    @classmethod
    def lenient(cls, value, handler, info):
        return cls.default_on_error(value, handler, info)

    @field_validator("authors", mode="before")
    @classmethod
    def join_author_list(cls, v):
        if isinstance(v, (list, tuple)):
            return "\n".join(a for a in v if isinstance(a, str))
        return v


# ── Extracted Page ───────────────────────────────────────────────────


class ExtractedPage(BaseModel):
    """Metadata extractor output for one web page."""

    origin: Literal["html"] = "html"
    record: PartialRecord = Field(default_factory=PartialRecord)


# ── Tagged Union ─────────────────────────────────────────────────────

SourceRecord = Annotated[
    Union[CrossrefWork, OpenLibraryBook, ManualForm, ExtractedPage],
    Field(discriminator="origin"),
]

_SOURCE_ADAPTER = TypeAdapter(SourceRecord)


def load_source(payload: dict) -> CrossrefWork | OpenLibraryBook | ManualForm | ExtractedPage:
    """Validate a dict tagged with ``origin`` into its source model."""
    return _SOURCE_ADAPTER.validate_python(payload)
