"""Tests for source models and the canonical record builder."""

import pytest
from pydantic import ValidationError

from citekit.core.models import CanonicalRecord, PartialRecord, Person, SourceType
from citekit.sources.builder import build
from citekit.sources.models import (
    CrossrefWork,
    ExtractedPage,
    ManualForm,
    OpenLibraryBook,
    load_source,
    sanitize_isbn,
)


def _work(**kw):
    defaults = {
        "author": [{"given": "Jane", "family": "Smith"}, {"given": "John", "family": "Doe"}],
        "issued": {"date-parts": [[2019, 5, 3]]},
        "page": "1-10",
        "container-title": ["Nature"],
        "DOI": "10.1038/abc",
        "URL": "https://doi.org/10.1038/abc",
        "volume": 12,
        "issue": "3",
        "publisher": "Springer",
        "title": ["A Study"],
        "type": "journal-article",
    }
    defaults.update(kw)
    return defaults


def _book_payload(isbn="9780140449136", **kw):
    entry = {
        "title": "The Odyssey",
        "authors": [{"name": "Homer"}],
        "publish_date": "March 2003",
        "publishers": [{"name": "Penguin Classics"}],
        "pagination": "xlviii, 541 p.",
    }
    entry.update(kw)
    return {f"ISBN:{isbn}": entry}


# ── DOI Registry ─────────────────────────────────────────────────────


def test_crossref_envelope_mapped():
    rec = build(CrossrefWork.from_response({"status": "ok", "message": _work()}))
    assert rec.type == SourceType.JOURNAL_ARTICLE
    assert rec.title == "A Study"
    assert [a.family for a in rec.authors] == ["Smith", "Doe"]
    assert rec.container == "Nature"
    assert rec.year == 2019
    assert rec.datePublished == "2019-05-03"
    assert rec.volume == "12"
    assert rec.pages == "1-10"
    assert rec.doi == "10.1038/abc"


def test_crossref_bare_message_accepted():
    assert build(CrossrefWork.from_response(_work())).title == "A Study"


def test_crossref_book_type_passes_through():
    assert build(CrossrefWork.from_response(_work(type="book"))).type == SourceType.BOOK


def test_crossref_other_types_default_to_journal_article():
    rec = build(CrossrefWork.from_response(_work(type="proceedings-article")))
    assert rec.type == SourceType.JOURNAL_ARTICLE


def test_crossref_year_only_date():
    rec = build(CrossrefWork.from_response(_work(issued={"date-parts": [[2020]]})))
    assert rec.year == 2020
    assert rec.datePublished is None


def test_crossref_organisation_author():
    rec = build(CrossrefWork.from_response(_work(author=[{"name": "World Health Organization"}])))
    assert rec.authors[0].literal == "World Health Organization"
    assert rec.authors[0].family == ""


def test_crossref_malformed_fields_default():
    work = CrossrefWork.from_response({"author": "oops", "issued": None, "title": 5, "DOI": None})
    rec = build(work)
    assert rec.authors == []
    assert rec.year is None
    assert rec.title is None
    assert rec.type == SourceType.JOURNAL_ARTICLE


def test_crossref_malformed_author_entries_dropped_individually():
    authors = [{"given": "Jane", "family": "Smith"}, None, "oops", {"given": "John", "family": "Doe"}]
    rec = build(CrossrefWork.from_response(_work(author=authors)))
    assert [a.family for a in rec.authors] == ["Smith", "Doe"]


def test_crossref_malformed_name_part_defaults():
    rec = build(CrossrefWork.from_response(_work(author=[{"given": None, "family": "Smith"}])))
    assert rec.authors[0].family == "Smith"
    assert rec.authors[0].given == ""


def test_crossref_title_list_skips_non_text():
    rec = build(CrossrefWork.from_response(_work(title=[None, "Real Title"])))
    assert rec.title == "Real Title"


def test_crossref_doi_url_prefix_normalized():
    rec = build(CrossrefWork.from_response(_work(DOI="https://doi.org/10.1038/abc")))
    assert rec.doi == "10.1038/abc"


# ── Book Registry ────────────────────────────────────────────────────


def test_open_library_mapped():
    book = OpenLibraryBook.from_response(_book_payload(), "978-0-14-044913-6")
    rec = build(book)
    assert rec.type == SourceType.BOOK
    assert rec.title == "The Odyssey"
    assert rec.authors[0].family == "Homer"
    assert rec.publisher == "Penguin Classics"
    assert rec.year == 2003
    assert rec.pages == "541"
    assert rec.url == "https://openlibrary.org/isbn/9780140449136"


def test_open_library_missing_entry():
    rec = build(OpenLibraryBook.from_response({}, "0140449132"))
    assert rec.type == SourceType.BOOK
    assert rec.title is None
    assert rec.authors == []
    assert rec.url == "https://openlibrary.org/isbn/0140449132"


def test_open_library_page_range_kept():
    book = OpenLibraryBook.from_response(_book_payload(pagination="pp. 12–40"), "9780140449136")
    assert build(book).pages == "12–40"


def test_open_library_malformed_entries_dropped_individually():
    payload = _book_payload(
        authors=[{"name": "Homer"}, None, "Virgil"],
        publishers=["junk", {"name": "Penguin Classics"}],
    )
    rec = build(OpenLibraryBook.from_response(payload, "9780140449136"))
    assert [a.family for a in rec.authors] == ["Homer"]
    assert rec.publisher == "Penguin Classics"


def test_sanitize_isbn():
    assert sanitize_isbn("ISBN 0-8044-2957-X") == "080442957X"


# ── Manual Entry ─────────────────────────────────────────────────────


def test_manual_form_mapped():
    form = ManualForm(
        type="book",
        title="Manual Title",
        authors="Doe, John\nJane Smith\n",
        year="1999a",
        doi="https://doi.org/10.1/ABC",
    )
    rec = build(form)
    assert rec.type == SourceType.BOOK
    assert [a.family for a in rec.authors] == ["Doe", "Smith"]
    assert rec.year == 1999
    assert rec.doi == "10.1/ABC"


def test_manual_form_defaults():
    rec = build(ManualForm(title="Only Title", year="n.d."))
    assert rec.type == SourceType.GENERIC
    assert rec.year is None
    assert rec.authors == []


def test_manual_author_list_accepted():
    form = ManualForm.model_validate({"title": "T", "authors": ["Doe, John", "Jane Smith", None]})
    rec = build(form)
    assert [a.family for a in rec.authors] == ["Doe", "Smith"]


def test_manual_unknown_type_is_generic():
    assert build(ManualForm(type="podcast")).type == SourceType.GENERIC


def test_manual_year_derived_from_date():
    rec = build(ManualForm(datePublished="2020-03-15T00:00:00Z"))
    assert rec.year == 2020


# ── Extracted Page ───────────────────────────────────────────────────


def test_partial_record_built_directly():
    rec = build(PartialRecord(title="Page", url="https://example.com"))
    assert rec.type == SourceType.GENERIC
    assert rec.title == "Page"


def test_extracted_page_keeps_type():
    page = ExtractedPage(record=PartialRecord(type=SourceType.WEBPAGE, website="Blog"))
    rec = build(page)
    assert rec.type == SourceType.WEBPAGE
    assert rec.website == "Blog"


def test_unknown_source_rejected():
    with pytest.raises(TypeError):
        build({"title": "dict is not a source"})


# ── Tagged Union ─────────────────────────────────────────────────────


def test_load_source_dispatches_on_origin():
    assert isinstance(load_source({"origin": "manual", "title": "X"}), ManualForm)
    assert isinstance(load_source({"origin": "crossref", "title": ["X"]}), CrossrefWork)
    assert isinstance(load_source({"origin": "openlibrary", "isbn": "1"}), OpenLibraryBook)
    assert isinstance(load_source({"origin": "html", "record": {"title": "X"}}), ExtractedPage)


def test_load_source_unknown_origin():
    with pytest.raises(ValidationError):
        load_source({"origin": "fax"})


# ── Canonical Record ─────────────────────────────────────────────────


def test_year_derived_from_utc_timestamp():
    rec = CanonicalRecord(datePublished="2020-03-15T00:00:00Z")
    assert rec.year == 2020
    assert rec.effective_year == 2020


def test_explicit_year_wins():
    assert CanonicalRecord(year=2018, datePublished="2020-01-01").year == 2018


def test_malformed_date_yields_no_year():
    assert CanonicalRecord(datePublished="someday").year is None


def test_authors_coerced_to_list():
    assert CanonicalRecord(authors=None).authors == []
    assert CanonicalRecord(authors="Jane Smith").authors == []
    rec = CanonicalRecord(authors=[{"given": "Jane", "family": "Smith"}, 42])
    assert rec.authors == [Person(given="Jane", family="Smith")]


def test_empty_author_mappings_dropped():
    rec = CanonicalRecord(authors=[{}, {"given": "", "family": ""}, {"given": "John", "family": "Doe"}])
    assert [a.family for a in rec.authors] == ["Doe"]


@pytest.mark.parametrize(
    "raw", ["doi.org/10.1234/abc", "dx.doi.org/10.1234/abc", "https://www.doi.org/10.1234/abc"]
)
def test_scheme_less_resolver_prefix_stripped(raw):
    assert CanonicalRecord(doi=raw).doi == "10.1234/abc"


def test_emphasis_markers_stripped_on_ingest():
    rec = CanonicalRecord(title="Bad\x02 input\x03", authors=[{"given": "Jo\x03", "family": "Doe"}])
    assert rec.title == "Bad input"
    assert rec.authors[0].given == "Jo"


def test_author_strings_parsed():
    rec = CanonicalRecord(authors=["Doe, John", "  ", "Ada Lovelace"])
    assert [(a.given, a.family) for a in rec.authors] == [("John", "Doe"), ("Ada", "Lovelace")]


def test_blank_strings_become_none():
    rec = CanonicalRecord(title="  ", volume=4)
    assert rec.title is None
    assert rec.volume == "4"


def test_record_is_immutable():
    rec = CanonicalRecord(title="Fixed")
    with pytest.raises(ValidationError):
        rec.title = "Changed"
