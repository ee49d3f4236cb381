"""Render canonical records as MLA, APA and Chicago citations.

Composition works on plain strings in which emphasized runs are wrapped in
the markers from ``citekit.formatting.text``. The finished string is split
into ``Segment`` runs so presentation code can render emphasis however it
likes (italics in a document, markup on a web page) while ``format_citation``
returns the plain text.
"""

import re

from pydantic import BaseModel, Field

from citekit.core.config import CitationContext
from citekit.core.models import CanonicalRecord, SourceType, Style
from citekit.formatting.authors import apa_authors, chicago_authors, mla_authors
from citekit.formatting.text import (
    EMPHASIS_CLOSE,
    EMPHASIS_OPEN,
    MONTH_NAMES,
    capitalize_words,
    doi_url,
    emphasize,
    ends_with_terminal,
    ensure_period,
    escape_html,
    join_comma,
    join_no_space,
    join_space,
    parse_date,
    sentence_case,
    title_case,
)

_MARKER_SPLIT_RE = re.compile(f"([{EMPHASIS_OPEN}{EMPHASIS_CLOSE}])")


# ── Output Model ─────────────────────────────────────────────────────


class Segment(BaseModel):
    """A run of citation text, emphasized or not."""

    text: str
    emphasis: bool = False


class FormattedCitation(BaseModel):
    """A rendered citation as ordered text runs."""

    style: Style
    segments: list[Segment] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.segments)

    def render(self, open_marker: str = "<i>", close_marker: str = "</i>") -> str:
        """Join the runs, wrapping emphasized ones in the given markers."""
        return "".join(
            f"{open_marker}{s.text}{close_marker}" if s.emphasis else s.text
            for s in self.segments
        )

    def html(self) -> str:
        """HTML fragment with escaped text and emphasized runs in ``<i>``."""
        return "".join(
            f"<i>{escape_html(s.text)}</i>" if s.emphasis else escape_html(s.text)
            for s in self.segments
        )

    @classmethod
    def from_marked(cls, style: Style, marked: str) -> "FormattedCitation":
        segments: list[Segment] = []
        emphasis = False
        for piece in _MARKER_SPLIT_RE.split(marked):
            if piece == EMPHASIS_OPEN:
                emphasis = True
            elif piece == EMPHASIS_CLOSE:
                emphasis = False
            elif piece:
                if segments and segments[-1].emphasis == emphasis:
                    segments[-1] = Segment(text=segments[-1].text + piece, emphasis=emphasis)
                else:
                    segments.append(Segment(text=piece, emphasis=emphasis))
        return cls(style=style, segments=segments)


# ── Public API ───────────────────────────────────────────────────────


def render_citation(record: CanonicalRecord, style: Style | str) -> FormattedCitation:
    """Render one record in the given style with emphasis runs demarcated."""
    style = Style.parse(style)
    return FormattedCitation.from_marked(style, _COMPOSERS[style](record))


def format_citation(record: CanonicalRecord, style: Style | str) -> str:
    """Render one record in the given style as plain text."""
    return render_citation(record, style).text


def format_bibliography(
    records: list[CanonicalRecord], context: CitationContext
) -> list[str]:
    """Format every record in the context's style, preserving order."""
    return [format_citation(r, context.style) for r in records]


# ── MLA ──────────────────────────────────────────────────────────────


def format_mla(record: CanonicalRecord) -> str:
    """Authors. "Title." Container, vol. V, no. I, pp. P, Year, DOI-or-URL."""
    year = record.effective_year
    details = join_comma(
        [
            emphasize(capitalize_words(record.container)),
            f"vol. {record.volume}" if record.volume else "",
            f"no. {record.issue}" if record.issue else "",
            f"pp. {record.pages}" if record.pages else "",
            str(year) if year else "",
            _link(record),
        ]
    )
    return ensure_period(
        join_space([mla_authors(record.authors), _quoted(title_case(record.title)), details])
    )


# ── APA ──────────────────────────────────────────────────────────────


def format_apa(record: CanonicalRecord) -> str:
    """Journal branch or webpage branch; no period after a trailing link."""
    if looks_like_journal(record):
        body = _apa_journal_body(record)
    else:
        body = _apa_webpage_body(record)

    link = _link(record)
    if link:
        return join_space([body, link])
    return ensure_period(body)


def looks_like_journal(record: CanonicalRecord) -> bool:
    """Journal articles, or anything with a container plus volume/issue/pages.

    A container-only webpage that happens to carry page numbers is treated
    as a journal article.
    """
    if record.type == SourceType.JOURNAL_ARTICLE:
        return True
    return bool(record.container and (record.volume or record.issue or record.pages))


def _apa_journal_body(record: CanonicalRecord) -> str:
    year = record.effective_year
    volume_issue = join_no_space(
        [emphasize(record.volume), f"({record.issue})" if record.issue else ""]
    )
    source = join_comma(
        [emphasize(sentence_case(record.container)), volume_issue, record.pages]
    )
    return join_space(
        [
            apa_authors(record.authors),
            f"({year})." if year else "",
            ensure_period(sentence_case(record.title)),
            ensure_period(source),
        ]
    )


def _apa_webpage_body(record: CanonicalRecord) -> str:
    site = record.container or record.website or record.publisher
    return join_space(
        [
            apa_authors(record.authors),
            _apa_date(record),
            ensure_period(emphasize(sentence_case(record.title))),
            ensure_period(title_case(site)),
        ]
    )


def _apa_date(record: CanonicalRecord) -> str:
    """Spell out the full publish date when the day is known, else the year alone."""
    parts = parse_date(record.datePublished)
    if parts and parts.is_full:
        return f"({parts.year}, {MONTH_NAMES[parts.month - 1]} {parts.day})."
    year = record.effective_year
    return f"({year})." if year else ""


# ── Chicago ──────────────────────────────────────────────────────────


def format_chicago(record: CanonicalRecord) -> str:
    """Authors. Year. "Title." Container, Volume, no. Issue: Pages. DOI-or-URL."""
    year = record.effective_year

    if record.type == SourceType.WEBPAGE and not record.volume and not record.issue:
        site = record.container or record.website or record.publisher
        source = title_case(site)
    else:
        source = join_comma(
            [
                emphasize(title_case(record.container)),
                record.volume,
                f"no. {record.issue}" if record.issue else "",
            ]
        )
        if record.pages:
            source = f"{source}: {record.pages}" if source else record.pages

    return ensure_period(
        join_space(
            [
                ensure_period(chicago_authors(record.authors)),
                f"{year}." if year else "",
                _quoted(title_case(record.title)),
                ensure_period(source),
                _link(record),
            ]
        )
    )


# ── Helpers ──────────────────────────────────────────────────────────


def _link(record: CanonicalRecord) -> str:
    """DOI URL when a DOI exists, else the plain URL."""
    if record.doi:
        return doi_url(record.doi)
    return record.url or ""


def _quoted(title: str) -> str:
    if not title:
        return ""
    if ends_with_terminal(title):
        return f"“{title}”"
    return f"“{title}.”"


_COMPOSERS = {
    Style.MLA: format_mla,
    Style.APA: format_apa,
    Style.CHICAGO: format_chicago,
}
