from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from ..pipeline.state import BibEntry, SortMode
from .authors import first_author, first_author_first_name


_AUTHOR_FNS: Dict[str, Callable[[str], str]] = {
    "first_author": first_author,
    "first_author_first_name": first_author_first_name,
}


def fold_key(key: str, case_sensitive: bool = False) -> str:
    return key if case_sensitive else key.lower()


def sort_entries(
    entries: List[BibEntry],
    case_sensitive: bool = False,
    sort_by: SortMode = "key",
) -> List[BibEntry]:
    """Return entries in ascending key order; equal keys keep their input order.

    Author modes order by the first author and fall back to the key, so
    entries of the same author come out in key order.
    """
    if sort_by == "key":
        return sorted(entries, key=lambda e: fold_key(e.key, case_sensitive))

    author_fn = _AUTHOR_FNS[sort_by]

    def author_then_key(entry: BibEntry) -> Tuple[str, str]:
        return (
            fold_key(author_fn(entry.text), case_sensitive),
            fold_key(entry.key, case_sensitive),
        )

    return sorted(entries, key=author_then_key)
