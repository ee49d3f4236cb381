"""Pull citation metadata out of a web page.

Signals come from three places with a fixed precedence: JSON-LD structured
data over ``<meta>`` tags over the ``<title>`` element. The extractor never
fails on missing data; every absent field is simply left as None.
"""

import logging
import re

from bs4.exceptions import ParserRejectedMarkup

from citekit.core.models import PartialRecord, SourceType
from citekit.formatting.text import clean_text, find_doi, normalize_doi, year_from_date
from citekit.parsing.meta_tags import MetaTags
from citekit.parsing.names import parse_names

logger = logging.getLogger(__name__)

# ── Tag Priorities ───────────────────────────────────────────────────

TITLE_TAGS = ("citation_title", "og:title", "twitter:title", "dc.title", "headline", "title")
SITE_NAME_TAGS = ("og:site_name", "twitter:site", "application-name")
PUBLISHER_TAGS = ("citation_publisher", "publisher", "dc.publisher")
SINGLE_AUTHOR_TAGS = ("author", "article:author", "dc.creator")
CONTAINER_TAGS = (
    "citation_journal_title",
    "citation_conference_title",
    "citation_inbook_title",
    "citation_technical_report_institution",
    "og:site_name",
)
PUBLISHED_TAGS = (
    "citation_publication_date",
    "article:published_time",
    "datePublished",
    "pubdate",
    "dc.date",
    "date",
)
MODIFIED_TAGS = ("article:modified_time", "dateModified")
DOI_TAGS = ("citation_doi", "doi", "dc.identifier")

# JSON-LD nodes whose @type contains one of these describe the page itself
_LD_NODE_TYPES = ("article", "creativework", "scholarlyarticle", "webpage")

_HTTP_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)


# ── Public API ───────────────────────────────────────────────────────


def extract(
    html: str,
    url: str | None = None,
    final_url: str | None = None,
) -> PartialRecord:
    """Extract a PartialRecord from raw HTML.

    ``url`` is the address that was requested and ``final_url`` the address
    the response came from after redirects; both are URL fallbacks behind
    the page's canonical link.
    """
    if not isinstance(html, str):
        raise TypeError(f"extract() expects HTML text, got {type(html).__name__}")

    try:
        tags = MetaTags.from_html(html)
    except ParserRejectedMarkup as exc:
        logger.warning("Could not parse markup (%s); returning empty record", exc)
        return PartialRecord()

    record = extract_from_tags(tags, html, url=url, final_url=final_url)
    logger.info(
        "Extracted %s record: %r (%d authors)",
        record.type.value if record.type else "untyped",
        record.title,
        len(record.authors),
    )
    return record


def extract_from_tags(
    tags: MetaTags,
    raw: str = "",
    url: str | None = None,
    final_url: str | None = None,
) -> PartialRecord:
    """Resolve conflicting signals from an attribute lookup into one record."""
    ld = merge_json_ld(tags.json_ld())

    title = _prefer(_ld_text(ld.get("headline")), tags.first(TITLE_TAGS) or tags.title())

    site_name = tags.first(SITE_NAME_TAGS)
    container = tags.first(CONTAINER_TAGS)
    website = (
        _ld_text(ld.get("isPartOf"))
        or _ld_text(ld.get("sourceOrganization"))
        or site_name
    )
    publisher = _prefer(_ld_text(ld.get("publisher")), tags.first(PUBLISHER_TAGS) or site_name)

    date_published = _prefer(clean_text(ld.get("datePublished")), tags.first(PUBLISHED_TAGS))
    date_modified = _prefer(clean_text(ld.get("dateModified")), tags.first(MODIFIED_TAGS))

    doi = normalize_doi(tags.first(DOI_TAGS) or find_doi(raw))

    page_url = tags.canonical_url() or clean_text(final_url) or clean_text(url)

    record_type = infer_type(
        ld_type=ld.get("@type"),
        container=container,
        doi=doi,
        website=website,
        url=page_url,
    )

    return PartialRecord(
        type=record_type,
        title=title,
        authors=parse_names(_author_strings(tags, ld)),
        container=container or website,
        website=website,
        publisher=publisher,
        year=year_from_date(date_published),
        volume=tags.first(("citation_volume",)),
        issue=tags.first(("citation_issue",)),
        pages=_pages(tags, ld),
        doi=doi,
        url=page_url,
        datePublished=date_published,
        dateModified=date_modified,
    )


def infer_type(
    ld_type,
    container: str | None,
    doi: str | None,
    website: str | None,
    url: str | None,
) -> SourceType:
    """Structured-data type first, then DOI/container heuristics, then the URL."""
    t = _type_text(ld_type)
    if "scholarlyarticle" in t or "journal" in t:
        return SourceType.JOURNAL_ARTICLE
    if "book" in t:
        return SourceType.BOOK
    if doi:
        return SourceType.JOURNAL_ARTICLE
    if container and not website:
        return SourceType.JOURNAL_ARTICLE
    if url and _HTTP_URL_RE.match(url):
        return SourceType.WEBPAGE
    return SourceType.GENERIC


# ── JSON-LD ──────────────────────────────────────────────────────────


def merge_json_ld(blocks: list) -> dict:
    """Flatten JSON-LD blocks and merge every node that describes the page.

    Later nodes override earlier ones key by key.
    """
    merged: dict = {}
    for block in blocks:
        nodes = block.get("@graph", block) if isinstance(block, dict) else block
        if not isinstance(nodes, list):
            nodes = [nodes]
        for node in nodes:
            if not isinstance(node, dict):
                continue
            node_type = _type_text(node.get("@type"))
            if any(t in node_type for t in _LD_NODE_TYPES):
                merged.update(node)
    return merged


def _type_text(value) -> str:
    if isinstance(value, list):
        return " ".join(str(v) for v in value).lower()
    return str(value or "").lower()


def _ld_text(value) -> str | None:
    """A JSON-LD value as display text: strings as-is, objects by ``name``."""
    if isinstance(value, dict):
        return clean_text(value.get("name"))
    return clean_text(value)


# ── Field Helpers ────────────────────────────────────────────────────


def _prefer(primary: str | None, fallback: str | None) -> str | None:
    return primary if primary else fallback


def _author_strings(tags: MetaTags, ld: dict) -> list[str]:
    """Repeated citation_author tags, else JSON-LD authors, else one author tag."""
    citation_authors = tags.values("citation_author")
    if citation_authors:
        return citation_authors

    ld_author = ld.get("author")
    items = ld_author if isinstance(ld_author, list) else [ld_author]
    ld_authors = [name for name in (_ld_text(a) for a in items) if name]
    if ld_authors:
        return ld_authors

    single = tags.first(SINGLE_AUTHOR_TAGS)
    return [single] if single else []


def _pages(tags: MetaTags, ld: dict) -> str | None:
    start, end = clean_text(ld.get("pageStart")), clean_text(ld.get("pageEnd"))
    if start and end:
        return f"{start}-{end}"

    first = tags.first(("citation_firstpage",))
    last = tags.first(("citation_lastpage",))
    if first and last:
        return f"{first}-{last}"
    return first or last
