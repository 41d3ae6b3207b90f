"""High-level synchronous API."""

import asyncio
import mimetypes
from pathlib import Path
from typing import Optional

from textify.config import OCRConfig
from textify.extractor import TextExtractor
from textify.models import ExtractionResult, SourceFile
from textify.progress import ProgressObserver


def extract_text(
    file_path: Optional[str] = None,
    file_bytes: Optional[bytes] = None,
    file_name: Optional[str] = None,
    media_type: Optional[str] = None,
    ocr_config: Optional[OCRConfig] = None,
    observer: Optional[ProgressObserver] = None,
) -> ExtractionResult:
    """Extract text from an image or PDF.

    Convenience wrapper around TextExtractor for code that is not running an
    event loop. Accepts either a file path or raw bytes.

    Args:
        file_path: Path to an image or PDF (alternative to file_bytes)
        file_bytes: Raw file bytes (alternative to file_path)
        file_name: Original filename (required if using file_bytes)
        media_type: Media type, guessed from the file extension if not provided
        ocr_config: OCR configuration (optional, uses defaults if not provided)
        observer: Optional progress observer

    Returns:
        ExtractionResult with extracted text and metadata

    Raises:
        ValueError: If neither or both of file_path and file_bytes are
            provided, or if file_bytes is provided without file_name
        ConfigurationError: If ocr_config names a different tesseract binary or
            tessdata directory than the one the process was initialized with
        TextifyError: If extraction fails (see TextExtractor.extract)

    Examples:
        >>> result = extract_text(file_path="scan.png")
        >>> print(result.text)

        >>> with open("report.pdf", "rb") as f:
        ...     result = extract_text(file_bytes=f.read(), file_name="report.pdf")
    """
    if file_path and file_bytes:
        raise ValueError("Provide either file_path or file_bytes, not both")

    if not file_path and not file_bytes:
        raise ValueError("Must provide either file_path or file_bytes")

    if file_path:
        path = Path(file_path)
        if not path.exists():
            raise ValueError(f"File not found: {file_path}")

        file_bytes = path.read_bytes()
        file_name = path.name

    if not file_name:
        raise ValueError("file_name is required when using file_bytes")

    if not media_type:
        guessed_type, _ = mimetypes.guess_type(file_name)
        media_type = guessed_type or ""

    extractor = TextExtractor(config=ocr_config)
    source = SourceFile(data=file_bytes, media_type=media_type, name=file_name)
    return asyncio.run(extractor.extract(source, observer=observer))
