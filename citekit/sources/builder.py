"""Map every source origin onto a single CanonicalRecord."""

import logging
import re

from citekit.core.models import CanonicalRecord, PartialRecord, Person, SourceType
from citekit.formatting.text import clean_text
from citekit.parsing.names import parse_author_block, parse_names
from citekit.sources.models import (
    CrossrefAuthor,
    CrossrefWork,
    ExtractedPage,
    ManualForm,
    OpenLibraryBook,
)

logger = logging.getLogger(__name__)

OPEN_LIBRARY_ISBN_URL = "https://openlibrary.org/isbn/{isbn}"

_PAGE_CHARS_RE = re.compile(r"[^0-9\-–]")
_YEAR_RE = re.compile(r"\d{4}")


# ── Public API ───────────────────────────────────────────────────────


def build(
    source: CrossrefWork | OpenLibraryBook | ManualForm | ExtractedPage | PartialRecord,
) -> CanonicalRecord:
    """Build the canonical record for one source."""
    if isinstance(source, PartialRecord):
        source = ExtractedPage(record=source)

    mapper = _MAPPERS.get(type(source))
    if mapper is None:
        raise TypeError(f"Cannot build a record from {type(source).__name__}")

    record = mapper(source)
    logger.info(
        "Built %s record from %s source: %r",
        record.type.value,
        source.origin,
        record.title,
    )
    return record


# ── DOI Registry ─────────────────────────────────────────────────────


def from_crossref(work: CrossrefWork) -> CanonicalRecord:
    date_parts = _first_date_parts(work.issued)
    year = date_parts[0] if date_parts else None

    date_published = None
    if len(date_parts) >= 3:
        y, m, d = date_parts[:3]
        date_published = f"{y:04d}-{m:02d}-{d:02d}"

    authors = [_crossref_person(a) for a in work.author]

    return CanonicalRecord(
        type=_crossref_type(work.type),
        title=clean_text(work.title[0]) if work.title else None,
        authors=[a for a in authors if not a.is_empty],
        container=clean_text(work.container_title[0]) if work.container_title else None,
        publisher=work.publisher,
        year=year,
        volume=work.volume,
        issue=work.issue,
        pages=work.page,
        doi=work.DOI,
        url=work.URL,
        datePublished=date_published,
    )


def _crossref_type(value: str | None) -> SourceType:
    t = (value or "").strip().lower()
    if t == "book":
        return SourceType.BOOK
    if "journal-article" in t:
        return SourceType.JOURNAL_ARTICLE
    # The registry only indexes scholarly works
    return SourceType.JOURNAL_ARTICLE


def _crossref_person(author: CrossrefAuthor) -> Person:
    if author.given or author.family:
        return Person(given=author.given, family=author.family)
    # Organisations carry a single name
    return Person(literal=author.name)


def _first_date_parts(issued: dict) -> list[int]:
    """Leading integer run of ``issued.date-parts[0]``."""
    parts = issued.get("date-parts") if isinstance(issued, dict) else None
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], list):
        return []
    out = []
    for p in parts[0]:
        if isinstance(p, bool) or not isinstance(p, int):
            break
        out.append(p)
    return out


# ── Book Registry ────────────────────────────────────────────────────


def from_open_library(book: OpenLibraryBook) -> CanonicalRecord:
    year_match = _YEAR_RE.search(book.publish_date or "")
    pages = _PAGE_CHARS_RE.sub("", book.pagination or "")
    publisher = book.publishers[0].name if book.publishers else None

    return CanonicalRecord(
        type=SourceType.BOOK,
        title=clean_text(book.title),
        authors=parse_names(a.name for a in book.authors),
        publisher=clean_text(publisher),
        year=int(year_match.group(0)) if year_match else None,
        pages=pages or None,
        url=OPEN_LIBRARY_ISBN_URL.format(isbn=book.isbn) if book.isbn else None,
    )


# ── Manual Entry ─────────────────────────────────────────────────────


def from_manual(form: ManualForm) -> CanonicalRecord:
    return CanonicalRecord(
        type=form.type or SourceType.GENERIC,
        title=form.title,
        authors=parse_author_block(form.authors),
        container=form.container,
        publisher=form.publisher,
        year=form.year,
        volume=form.volume,
        issue=form.issue,
        pages=form.pages,
        doi=form.doi,
        url=form.url,
        datePublished=form.datePublished,
    )


# ── Extracted Page ───────────────────────────────────────────────────


def from_page(page: ExtractedPage) -> CanonicalRecord:
    data = page.record.model_dump()
    data["type"] = page.record.type or SourceType.GENERIC
    return CanonicalRecord.model_validate(data)


_MAPPERS = {
    CrossrefWork: from_crossref,
    OpenLibraryBook: from_open_library,
    ManualForm: from_manual,
    ExtractedPage: from_page,
}
