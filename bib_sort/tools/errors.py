from __future__ import annotations

from typing import Optional


class BibSortError(Exception):
    """Base class for every error reported to the user."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class ParseError(BibSortError):
    offset_unit = "char"

    def __init__(
        self,
        message: str,
        *,
        index: Optional[int] = None,
        line: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.index = index
        self.line = line
        self.offset = offset

    def location(self) -> str:
        parts = []
        if self.index is not None:
            parts.append(f"entry #{self.index + 1}")
        if self.line is not None:
            parts.append(f"line {self.line}")
        if self.offset is not None:
            parts.append(f"{self.offset_unit} offset {self.offset}")
        return ", ".join(parts)

    def __str__(self) -> str:
        where = self.location()
        return f"{self.message} ({where})" if where else self.message


class MalformedEntry(ParseError):
    pass


class MissingKey(ParseError):
    pass


class EncodingError(ParseError):
    offset_unit = "byte"


class IoError(BibSortError):
    def __init__(self, path: str, reason: str, *, writing: bool = False) -> None:
        self.path = path
        self.reason = reason
        self.writing = writing
        action = "write" if writing else "read"
        super().__init__(f"cannot {action} {path}: {reason}")
