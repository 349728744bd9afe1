from __future__ import annotations

import re
from enum import Enum, auto
from typing import List

from ..pipeline.state import BibDocument, BibEntry
from .errors import MalformedEntry, MissingKey
from .keys import ENTRY_HEAD_RE


_ENTRY_TRAIL_RE = re.compile(r"[ \t]*(?:\r?\n)?")


class _State(Enum):
    OUTSIDE = auto()
    IN_ENTRY = auto()
    IN_QUOTED = auto()


def _starts_entry(text: str, pos: int) -> bool:
    """An ``@`` opens a record at the start of a line or when ``type{`` follows it."""
    if ENTRY_HEAD_RE.match(text, pos):
        return True
    line_start = text.rfind("\n", 0, pos) + 1
    return text[line_start:pos].strip() == ""


def split_bibtex(text: str) -> BibDocument:
    """Split raw bib text into preamble, entries and trailer without losing a character.

    Inter-entry text (comments, blank lines) is attached to the entry that
    follows it, so it moves together with that entry when sorting.  The
    whitespace and line break right after a closing delimiter stays with
    the entry it closes.
    """
    entries: List[BibEntry] = []
    preamble = ""
    state = _State.OUTSIDE
    pending = 0
    line_no, line_pos = 1, 0
    start = start_line = 0
    depth = quoted_depth = 0
    closer = "}"
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if state is _State.OUTSIDE:
            if ch == "@" and _starts_entry(text, i):
                line_no += text.count("\n", line_pos, i)
                line_pos = i
                start, start_line = i, line_no
                head = ENTRY_HEAD_RE.match(text, i)
                if not head:
                    raise MissingKey(
                        "entry has no opening '{' or '('",
                        index=len(entries),
                        line=start_line,
                        offset=start,
                    )
                opener = head.group(1)
                closer = "}" if opener == "{" else ")"
                depth = 1 if opener == "{" else 0
                state = _State.IN_ENTRY
                i = head.end()
                continue
        elif state is _State.IN_ENTRY:
            top = 1 if closer == "}" else 0
            done = False
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth < 0:
                    raise MalformedEntry(
                        "closing '}' without a matching '{'",
                        index=len(entries),
                        line=start_line,
                        offset=start,
                    )
                done = closer == "}" and depth == 0
            elif ch == ")":
                done = closer == ")" and depth == 0
            elif ch == '"' and depth == top:
                state = _State.IN_QUOTED
                quoted_depth = 0
            if done:
                trail = _ENTRY_TRAIL_RE.match(text, i + 1)
                if not entries:
                    preamble = text[:start]
                    leading = ""
                else:
                    leading = text[pending:start]
                entries.append(
                    BibEntry(
                        index=len(entries),
                        line=start_line,
                        offset=start,
                        leading=leading,
                        text=text[start : i + 1],
                        trailing=trail.group(0),
                    )
                )
                pending = trail.end()
                state = _State.OUTSIDE
                i = trail.end()
                continue
        else:
            # brace groups inside quotes are balanced; {"} is a literal quote
            if ch == "\\":
                i += 2
                continue
            if ch == "{":
                quoted_depth += 1
            elif ch == "}":
                if quoted_depth:
                    quoted_depth -= 1
            elif ch == '"' and quoted_depth == 0:
                state = _State.IN_ENTRY
        i += 1

    if state is not _State.OUTSIDE:
        raise MalformedEntry(
            "unexpected end of file, entry is never closed",
            index=len(entries),
            line=start_line,
            offset=start,
        )
    if not entries:
        return BibDocument(preamble=text)
    return BibDocument(preamble=preamble, entries=entries, trailer=text[pending:])
