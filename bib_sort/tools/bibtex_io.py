from __future__ import annotations

import os
import stat
import tempfile
from typing import List

from ..pipeline.state import BibDocument, BibEntry
from .errors import EncodingError, IoError


def read_bibtex(path: str, encoding: str = "utf-8") -> str:
    """Read a whole bib file, keeping line endings exactly as stored."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise IoError(path, exc.strerror or str(exc)) from exc
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as exc:
        raise EncodingError(
            f"{path} is not valid {encoding} text ({exc.reason})",
            line=data.count(b"\n", 0, exc.start) + 1,
            offset=exc.start,
        ) from exc


def _needs_break(chunk: str) -> bool:
    return bool(chunk) and not chunk.endswith("\n")


def render_bibtex(document: BibDocument, entries: List[BibEntry]) -> str:
    """Concatenate preamble, *entries* and trailer.

    A newline is added only where two pieces that were not neighbours in
    the source meet on the same line.
    """
    parts = [document.preamble]
    last_index = -1
    for entry in entries:
        if entry.index != last_index + 1 and _needs_break(parts[-1]):
            parts.append("\n")
        parts.append(entry.raw)
        last_index = entry.index
    if document.trailer and last_index != len(document.entries) - 1 and _needs_break(parts[-1]):
        parts.append("\n")
    parts.append(document.trailer)
    return "".join(parts)


def _target_mode(path: str) -> int:
    """Permissions of the existing file, else what a fresh ``open`` would use."""
    if os.path.exists(path):
        return stat.S_IMODE(os.stat(path).st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_bibtex(path: str, text: str, encoding: str = "utf-8") -> None:
    """Replace *path* atomically; the old file is untouched if anything fails."""
    dir_name = os.path.dirname(path) or "."
    tmp = None
    try:
        os.makedirs(dir_name, exist_ok=True)
        mode = _target_mode(path)
        fd, tmp = tempfile.mkstemp(prefix="bib_", suffix=".tmp", dir=dir_name)
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
        # mkstemp creates 0600
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except OSError as exc:
        if tmp and os.path.exists(tmp):
            os.remove(tmp)
        raise IoError(path, exc.strerror or str(exc), writing=True) from exc
