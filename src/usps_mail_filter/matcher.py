"""Name matching against OCR text."""

from __future__ import annotations

from typing import Iterable

from .models import MatchOutcome


def contains_any(lower_text: str, terms: Iterable[str]) -> bool:
    """Return True if any non-empty term occurs in already-lowercased text."""
    return any(term and term.lower() in lower_text for term in terms)


def match(text: str, targets: Iterable[str], denies: Iterable[str] = ()) -> MatchOutcome:
    """Decide whether recognized text carries a keep signal.

    Matching is case-insensitive substring containment. A deny term anywhere
    in the text disqualifies it even when a target is also present. Targets
    are tried in the given order and the first hit is returned with its
    configured spelling.
    """
    lower_text = text.lower()
    if contains_any(lower_text, denies):
        return MatchOutcome.skip()
    for name in targets:
        if name and name.lower() in lower_text:
            return MatchOutcome.found(name)
    return MatchOutcome.no_match()
