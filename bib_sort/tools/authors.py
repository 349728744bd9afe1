from __future__ import annotations

import re


_AUTHOR_POS_RE = re.compile(r"\bauthor\s*=\s*", re.IGNORECASE)
_AND_RE = re.compile(r"\band\b", re.IGNORECASE)


def field_value(text: str) -> str:
    """Return the value at the start of *text*, delimiters included.

    Handles ``{...}`` with nesting, ``"..."`` and ``'...'``; a bare value
    runs to the next comma.  Backslash escapes are skipped.
    """
    stripped = text.lstrip()
    if stripped and stripped[0] not in "{\"'":
        return stripped.split(",", 1)[0].rstrip("} \t\r\n")
    start = None
    quote = None
    depth = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if start is None:
            if ch == "{":
                start, depth = i, 1
            elif ch in "\"'":
                start, quote = i, ch
        elif quote:
            if ch == quote:
                return text[start : i + 1]
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
        i += 1
    return text if start is None else text[start:]


def clean_name(text: str) -> str:
    """Drop braces, quotes and backslash escapes (``{\\"u}`` becomes ``u``)."""
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch not in "{}'\"":
            out.append(ch)
        i += 1
    return " ".join("".join(out).split())


def first_author(entry_text: str) -> str:
    """First author of the ``author`` field as written, or ``""`` when absent."""
    match = _AUTHOR_POS_RE.search(entry_text)
    if not match:
        return ""
    value = field_value(entry_text[match.end() :])
    and_match = _AND_RE.search(value)
    if and_match:
        value = value[: and_match.start()]
    return clean_name(value)


def first_author_first_name(entry_text: str) -> str:
    # "Boers, N." -> "N. Boers"
    name = first_author(entry_text)
    if "," in name:
        last, first = name.split(",", 1)
        name = f"{first.strip()} {last.strip()}".strip()
    return name
