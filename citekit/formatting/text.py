"""Text helpers shared by extraction and formatting: casing, joiners, DOIs, dates."""

import html
import re
from datetime import date, datetime, timezone
from typing import Iterable, NamedTuple

# ── Emphasis Markers ─────────────────────────────────────────────────

# Control characters that never occur in cleaned metadata. They demarcate
# emphasized runs inside composed strings until the formatter splits them
# into segments.
EMPHASIS_OPEN = "\x02"
EMPHASIS_CLOSE = "\x03"

_MARKER_RE = re.compile(f"[{EMPHASIS_OPEN}{EMPHASIS_CLOSE}]")


def emphasize(text: str | None) -> str:
    """Wrap text in emphasis markers; empty input stays empty."""
    if not text:
        return ""
    return f"{EMPHASIS_OPEN}{text}{EMPHASIS_CLOSE}"


def strip_markers(text: str) -> str:
    return _MARKER_RE.sub("", text)


# ── Casing ───────────────────────────────────────────────────────────

SMALL_WORDS = frozenset(
    {
        "a", "an", "the",
        "and", "but", "or", "for", "nor",
        "on", "at", "to", "from", "by", "of", "in", "with",
    }
)

_CASE_SPLIT_RE = re.compile(r"(\s+|-)")


def title_case(text: str | None, small_words: frozenset[str] = SMALL_WORDS) -> str:
    """Capitalize every word except small words away from the edges.

    Hyphens and whitespace are kept as separate tokens, so "state-of-the-art"
    becomes "State-of-the-Art".
    """
    if not text:
        return ""
    tokens = _CASE_SPLIT_RE.split(text.lower())
    word_positions = [
        i for i, tok in enumerate(tokens) if tok.strip() and tok != "-"
    ]
    if not word_positions:
        return text
    first, last = word_positions[0], word_positions[-1]

    out = []
    for i, tok in enumerate(tokens):
        if not tok.strip() or tok == "-":
            out.append(tok)
        elif first < i < last and tok in small_words:
            out.append(tok)
        else:
            out.append(tok[0].upper() + tok[1:])
    return "".join(out)


def capitalize_words(text: str | None) -> str:
    """Title case with no small-word exceptions."""
    return title_case(text, small_words=frozenset())


def sentence_case(text: str | None) -> str:
    """Capitalize the first character and lowercase the rest."""
    if not text:
        return ""
    s = text.strip()
    if not s:
        return ""
    return s[0].upper() + s[1:].lower()


# ── Joiners ──────────────────────────────────────────────────────────


def join_comma(parts: Iterable[str | None]) -> str:
    return ", ".join(p for p in parts if p)


def join_space(parts: Iterable[str | None]) -> str:
    return " ".join(p for p in parts if p)


def join_no_space(parts: Iterable[str | None]) -> str:
    return "".join(p for p in parts if p)


_TERMINAL = (".", "!", "?")
_CLOSING_QUOTES = "”’\"'"


def ends_with_terminal(text: str) -> bool:
    """True when the text ends in . ! or ?, looking through closing quotes."""
    return strip_markers(text).rstrip().rstrip(_CLOSING_QUOTES).endswith(_TERMINAL)


def ensure_period(text: str) -> str:
    """Append a period unless the text already ends in . ! or ?"""
    if not text:
        return text
    if ends_with_terminal(text):
        return text
    return text + "."


# ── HTML Text ────────────────────────────────────────────────────────

_SPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _SPACE_RE.sub(" ", text).strip()


def decode_entities(text: str) -> str:
    return html.unescape(text)


def clean_text(value) -> str | None:
    """Normalize ingested text; blank or non-text becomes None."""
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    cleaned = collapse_whitespace(strip_markers(decode_entities(str(value))))
    return cleaned or None


def escape_html(text: str) -> str:
    return html.escape(str(text), quote=False)


# ── DOI ──────────────────────────────────────────────────────────────

DOI_PATTERN = re.compile(r"\b10\.\d{4,9}/[-._;()/:A-Z0-9]+", re.IGNORECASE)

_DOI_PREFIX_RE = re.compile(
    r"^(?:(?:https?://)?(?:dx\.|www\.)?doi\.org/|doi:\s*)", re.IGNORECASE
)


def normalize_doi(value) -> str | None:
    """Strip resolver URL or ``doi:`` prefixes. Blank input becomes None."""
    if value is None:
        return None
    doi = _DOI_PREFIX_RE.sub("", strip_markers(str(value)).strip()).strip()
    return doi or None


def doi_url(doi: str) -> str:
    return f"https://doi.org/{doi}"


def find_doi(text: str) -> str | None:
    """Return the first bare DOI found anywhere in the text."""
    match = DOI_PATTERN.search(text)
    return match.group(0) if match else None


# ── Dates ────────────────────────────────────────────────────────────


class DateParts(NamedTuple):
    """A calendar date in UTC. Month and day are None when unknown."""

    year: int
    month: int | None = None
    day: int | None = None

    @property
    def is_full(self) -> bool:
        return self.month is not None and self.day is not None


MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_PARTIAL_ISO_RE = re.compile(r"^(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?$")

# (format, carries a day)
_TEXT_DATE_FORMATS = (
    ("%B %d, %Y", True),
    ("%b %d, %Y", True),
    ("%d %B %Y", True),
    ("%d %b %Y", True),
    ("%Y/%m/%d", True),
    ("%B %Y", False),
    ("%b %Y", False),
)


def parse_date(value) -> DateParts | None:
    """Parse an ISO-like date string into UTC calendar parts.

    Date-only strings are read as UTC dates. Timestamps with an offset are
    converted to UTC before the calendar fields are read, so
    "2021-01-01T01:00:00+05:00" falls on 2020-12-31. Anything unparseable
    yields None.
    """
    if value is None or isinstance(value, bool):
        return None
    s = str(value).strip()
    if not s:
        return None

    match = _PARTIAL_ISO_RE.match(s)
    if match:
        year, month, day = (int(g) if g else None for g in match.groups())
        try:
            date(year, month or 1, day or 1)
        except ValueError:
            return None
        return DateParts(year, month, day)

    if s[-1] in "Zz":
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return _parse_textual_date(s)

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return DateParts(dt.year, dt.month, dt.day)


def _parse_textual_date(s: str) -> DateParts | None:
    for fmt, has_day in _TEXT_DATE_FORMATS:
        try:
            dt = datetime.strptime(s, fmt)
        except ValueError:
            continue
        return DateParts(dt.year, dt.month, dt.day if has_day else None)
    return None


def year_from_date(value) -> int | None:
    parts = parse_date(value)
    return parts.year if parts else None


def parse_year(value) -> int | None:
    """Leading-integer parse of a year; non-numeric or zero yields None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value or None
    match = re.match(r"\s*(\d+)", str(value))
    if not match:
        return None
    return int(match.group(1)) or None
