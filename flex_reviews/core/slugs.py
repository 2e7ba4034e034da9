import re

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_SEPARATOR_RUN_RE = re.compile(r"[-\s]+")
_UNIT_CODE_RE = re.compile(r"^\d+[A-Za-z]?$")


def to_slug(name: str) -> str:
    """Deterministic URL slug: lowercase, non-alphanumeric runs collapsed to one hyphen."""
    return _NON_ALNUM_RE.sub("-", name.lower()).strip("-")


def from_slug(slug: str) -> str:
    """Best-effort display name for a slug; lossy, only used to seed listing matching."""
    words: list[str] = []
    for word in slug.strip("-").split("-"):
        if not word:
            continue
        # Unit codes like "2b" or "e1" keep their upper-case form.
        if _UNIT_CODE_RE.match(word) or len(word) <= 2:
            words.append(word.upper())
        else:
            words.append(word[:1].upper() + word[1:].lower())
    return " ".join(words)


def collapse_name(value: str) -> str:
    """Lowercase and fold runs of spaces/hyphens into one space."""
    return _SEPARATOR_RUN_RE.sub(" ", value.lower()).strip()
