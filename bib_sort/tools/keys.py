from __future__ import annotations

import re
from typing import List

from ..pipeline.state import BibEntry
from .errors import MissingKey


ENTRY_HEAD_RE = re.compile(r"@\s*[^\s{}()=,@\"#%]*\s*([{(])")
_BRACE_KEY_RE = re.compile(r"\s*([^\s,}]+)")
_PAREN_KEY_RE = re.compile(r"\s*([^\s,)]+)")


def extract_key(entry: BibEntry) -> str:
    """Return the citation key of an entry as written (case preserved)."""
    opener = ENTRY_HEAD_RE.match(entry.text)
    if not opener:
        raise MissingKey("entry has no opening '{' or '('", index=entry.index, line=entry.line)
    key_re = _BRACE_KEY_RE if opener.group(1) == "{" else _PAREN_KEY_RE
    match = key_re.match(entry.text, opener.end())
    if not match:
        raise MissingKey("entry has an empty citation key", index=entry.index, line=entry.line)
    return match.group(1)


def with_keys(entries: List[BibEntry]) -> List[BibEntry]:
    return [entry.model_copy(update={"key": extract_key(entry)}) for entry in entries]
