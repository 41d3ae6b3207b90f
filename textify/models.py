"""Data models for textify."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FileKind(str, Enum):
    """Extraction strategy selected for a file."""

    IMAGE = "image"
    PDF = "pdf"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class SourceFile:
    """A single uploaded file: raw bytes plus its declared media type."""

    data: bytes
    media_type: str
    name: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ExtractionProgress:
    """Coarse completion percentage and status line for one extraction."""

    percent: int
    message: str


IDLE = ExtractionProgress(0, "")


@dataclass(frozen=True)
class TextItem:
    """One rendered text fragment from a PDF page's text layer."""

    text: str


@dataclass(frozen=True)
class RasterPage:
    """PNG rendering of a single PDF page, held in memory only."""

    page_number: int
    width: int
    height: int
    png_bytes: bytes


@dataclass
class ExtractionResult:
    """Result of a successful extraction."""

    text: str
    kind: FileKind
    media_type: str
    file_name: str
    character_count: int
    ocr_used: bool
    page_count: Optional[int] = None  # None for images
    fallback_used: bool = False
