"""Text extraction from images and PDFs with OCR fallback."""

from textify.cancellation import CancellationToken
from textify.config import OCRConfig, load_config
from textify.detector import FileKindDetector, classify
from textify.exceptions import (
    ConfigurationError,
    CorruptOrProtectedPdfError,
    ExtractionCancelledError,
    ImageProcessingError,
    InvalidPayloadError,
    NoTextFoundError,
    TextifyError,
    UnsupportedFileKindError,
)
from textify.extractor import TextExtractor
from textify.handler import UploadHandler
from textify.logger import setup_logging
from textify.models import (
    ExtractionProgress,
    ExtractionResult,
    FileKind,
    RasterPage,
    SourceFile,
    TextItem,
)
from textify.ocr import TesseractEngine, initialize_engines
from textify.parser import extract_text
from textify.pdf import PdfDocument
from textify.progress import CallbackObserver, NullObserver, ProgressObserver

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "extract_text",
    # Core classes
    "TextExtractor",
    "UploadHandler",
    "FileKindDetector",
    "classify",
    "CancellationToken",
    # Adapters
    "TesseractEngine",
    "PdfDocument",
    "initialize_engines",
    # Progress
    "ProgressObserver",
    "CallbackObserver",
    "NullObserver",
    # Data models
    "SourceFile",
    "FileKind",
    "ExtractionProgress",
    "ExtractionResult",
    "RasterPage",
    "TextItem",
    # Configuration
    "OCRConfig",
    "load_config",
    "setup_logging",
    # Exceptions
    "TextifyError",
    "UnsupportedFileKindError",
    "NoTextFoundError",
    "ImageProcessingError",
    "CorruptOrProtectedPdfError",
    "ExtractionCancelledError",
    "InvalidPayloadError",
    "ConfigurationError",
]
