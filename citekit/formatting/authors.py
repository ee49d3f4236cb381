"""Author-list rendering per citation style."""

from citekit.core.models import Person
from citekit.formatting.text import ensure_period

APA_MAX_LISTED = 20
APA_LEADING_WHEN_TRUNCATED = 19
CHICAGO_MAX_LISTED = 10
CHICAGO_LEADING_WHEN_TRUNCATED = 7


# ── Single Names ─────────────────────────────────────────────────────


def name_inverted(person: Person) -> str:
    """Render as "Family, Given", or the literal name when a part is missing."""
    if person.family and person.given:
        return f"{person.family}, {person.given}"
    return person.literal or " ".join(p for p in (person.given, person.family) if p)


def name_natural(person: Person) -> str:
    """Render as "Given Family", or the literal name when a part is missing."""
    if person.family and person.given:
        return f"{person.given} {person.family}"
    return person.literal or " ".join(p for p in (person.given, person.family) if p)


def initials(given: str) -> str:
    """Reduce each given-name token to an initial: "Mary Jane" becomes "M. J."."""
    return " ".join(f"{token[0].upper()}." for token in given.split())


def name_apa(person: Person) -> str:
    if not person.family:
        return person.literal
    given = initials(person.given)
    return f"{person.family}, {given}" if given else person.family


# ── Lists ────────────────────────────────────────────────────────────


def mla_authors(people: list[Person]) -> str:
    """One name; two joined with "and"; three or more collapse to "et al."

    The result ends with a period.
    """
    people = [p for p in people if name_inverted(p)]
    if not people:
        return ""
    first = name_inverted(people[0])
    if len(people) == 1:
        return ensure_period(first)
    if len(people) == 2:
        return ensure_period(f"{first}, and {name_natural(people[1])}")
    return f"{first}, et al."


def apa_authors(people: list[Person]) -> str:
    """Up to 20 names in full; 21 or more list 19, an ellipsis, then the last."""
    names = [n for n in (name_apa(p) for p in people) if n]
    if not names:
        return ""
    if len(names) > APA_MAX_LISTED:
        leading = ", ".join(names[:APA_LEADING_WHEN_TRUNCATED])
        return ensure_period(f"{leading}, …, {names[-1]}")
    if len(names) == 1:
        return ensure_period(names[0])
    if len(names) == 2:
        return ensure_period(f"{names[0]} & {names[1]}")
    return ensure_period(", ".join(names[:-1]) + ", & " + names[-1])


def chicago_authors(people: list[Person]) -> str:
    """First name inverted, the rest natural; 11 or more keep 7 then "et al."

    No terminal period is added; the caller closes the element.
    """
    names = [
        name_inverted(p) if i == 0 else name_natural(p) for i, p in enumerate(people)
    ]
    names = [n for n in names if n]
    if not names:
        return ""
    if len(names) > CHICAGO_MAX_LISTED:
        return ", ".join(names[:CHICAGO_LEADING_WHEN_TRUNCATED]) + ", et al."
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return ", ".join(names[:-1]) + ", and " + names[-1]
