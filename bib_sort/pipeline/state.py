from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


SortMode = Literal["key", "first_author", "first_author_first_name"]
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class SortConfig(BaseModel):
    input_path: Optional[str] = None
    output_path: Optional[str] = None
    case_sensitive: bool = False
    sort_by: SortMode = "key"
    encoding: Literal["utf-8"] = "utf-8"
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        name = value.strip().upper()
        if name not in _LOG_LEVELS:
            raise ValueError(f"unknown log level: {value}")
        return name


class BibEntry(BaseModel):
    """One ``@type{key, ...}`` record and the text that travels with it."""

    model_config = ConfigDict(frozen=True)

    index: int
    line: int
    offset: int
    text: str
    leading: str = ""
    trailing: str = ""
    key: str = ""

    @property
    def raw(self) -> str:
        return self.leading + self.text + self.trailing


class BibDocument(BaseModel):
    preamble: str = ""
    entries: List[BibEntry] = Field(default_factory=list)
    trailer: str = ""

    @property
    def text(self) -> str:
        """Reassemble the document in original order."""
        return self.preamble + "".join(e.raw for e in self.entries) + self.trailer


class PipelineState(BaseModel):
    config: SortConfig = Field(default_factory=SortConfig)
    source_text: str = ""
    document: BibDocument = Field(default_factory=BibDocument)
    sorted_entries: List[BibEntry] = Field(default_factory=list)
    output_text: str = ""
