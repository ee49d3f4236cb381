"""Split free-text author strings into structured names."""

import re

from citekit.core.models import Person

_SPACE_RE = re.compile(r"\s+")


def parse_name(raw: str | None) -> Person:
    """Parse one author string into a Person.

    "Family, Given" splits at the first comma. Otherwise the last
    whitespace-delimited token is the family name and the rest is the given
    name. Blank input yields an empty Person, which callers filter out.
    """
    full = _SPACE_RE.sub(" ", str(raw or "")).strip()
    if not full:
        return Person()

    if "," in full:
        family, _, rest = full.partition(",")
        return Person(given=rest.strip(), family=family.strip(), literal=full)

    tokens = full.split(" ")
    if len(tokens) == 1:
        return Person(given="", family=tokens[0], literal=full)
    return Person(given=" ".join(tokens[:-1]), family=tokens[-1], literal=full)


def parse_names(raw_names) -> list[Person]:
    """Parse a sequence of author strings, dropping blanks."""
    people = (parse_name(n) for n in raw_names if n)
    return [p for p in people if not p.is_empty]


def parse_author_block(text: str | None) -> list[Person]:
    """Parse a newline-delimited author block, one name per line."""
    if not text:
        return []
    return parse_names(line.strip() for line in str(text).splitlines())
