"""Small affix-stripping stemmer shared by indexing and querying."""

from __future__ import annotations

from collections import Counter

MIN_STEM_LENGTH = 3

SUFFIXES = (
    "aci",
    "al",
    "ance",
    "ence",
    "dom",
    "er",
    "or",
    "iti",
    "ti",
    "ment",
    "ness",
    "ship",
    "sion",
    "tion",
    "ate",
    "en",
    "ifi",
    "fi",
    "ize",
    "able",
    "ible",
    "esque",
    "ful",
    "ic",
    "ical",
    "ious",
    "ous",
    "ish",
    "ive",
    "less",
    "i",
    "ing",
    "e",
    "s",
)

PREFIXES = (
    "anti",
    "auto",
    "de",
    "dis",
    "down",
    "extra",
    "hiper",
    "inter",
    "il",
    "im",
    "in",
    "ir",
    "mega",
    "mid",
    "mis",
    "non",
    "over",
    "out",
    "post",
    "pre",
    "pro",
)


def stem(word: str) -> str:
    """Reduce a word to its normalized stem.

    Non-alphabetic characters are dropped, the rest is case folded and ``y`` is
    mapped to ``i``. Suffixes are then stripped repeatedly, followed by prefixes,
    never leaving fewer than ``MIN_STEM_LENGTH`` characters. Returns an empty
    string when the word has no alphabetic characters.
    """
    folded = "".join(char for char in word.casefold() if char.isalpha())
    folded = folded.replace("y", "i")
    return _strip_prefixes(_strip_suffixes(folded))


def normalize_terms(text: str) -> list[str]:
    """Split on whitespace and stem, dropping words that stem to nothing."""
    output: list[str] = []
    for word in text.split():
        term = stem(word)
        if term:
            output.append(term)
    return output


def term_histogram(text: str) -> Counter[str]:
    """Count normalized terms in a body of text."""
    return Counter(normalize_terms(text))


def _strip_suffixes(word: str) -> str:
    changed = True
    while changed:
        changed = False
        for suffix in SUFFIXES:
            if word.endswith(suffix) and len(word) - len(suffix) >= MIN_STEM_LENGTH:
                word = word[: -len(suffix)]
                changed = True
                break
    return word


def _strip_prefixes(word: str) -> str:
    changed = True
    while changed:
        changed = False
        for prefix in PREFIXES:
            if word.startswith(prefix) and len(word) - len(prefix) >= MIN_STEM_LENGTH:
                word = word[len(prefix) :]
                changed = True
                break
    return word
