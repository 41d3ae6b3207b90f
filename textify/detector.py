"""File kind classification."""

from typing import Optional

from textify.logger import get_logger
from textify.models import FileKind, SourceFile

logger = get_logger(__name__)


PDF_MEDIA_TYPE = "application/pdf"

PDF_SIGNATURE = b"%PDF"
PNG_SIGNATURE = b"\x89PNG"
JPEG_SIGNATURE = b"\xff\xd8\xff"
GIF_SIGNATURES = (b"GIF87a", b"GIF89a")
TIFF_SIGNATURES = (b"II*\x00", b"MM\x00*")
BMP_SIGNATURE = b"BM"


def classify(media_type: str) -> FileKind:
    """Map a declared media type to a FileKind.

    Any media type containing "image" is an image, exactly
    "application/pdf" is a PDF, everything else is unsupported.
    """
    if "image" in media_type:
        return FileKind.IMAGE
    if media_type == PDF_MEDIA_TYPE:
        return FileKind.PDF
    return FileKind.UNSUPPORTED


def sniff_kind(data: bytes) -> Optional[FileKind]:
    """Detect a FileKind from the file signature, if recognizable."""
    head = data[:12]
    if head.startswith(PDF_SIGNATURE):
        return FileKind.PDF
    if head.startswith(PNG_SIGNATURE) or head.startswith(JPEG_SIGNATURE):
        return FileKind.IMAGE
    if head.startswith(GIF_SIGNATURES) or head.startswith(TIFF_SIGNATURES):
        return FileKind.IMAGE
    if head.startswith(b"RIFF") and head[8:12] == b"WEBP":
        return FileKind.IMAGE
    if head.startswith(BMP_SIGNATURE):
        return FileKind.IMAGE
    return None


class FileKindDetector:
    """Classifies source files and reports suspicious declared types."""

    def detect(self, source: SourceFile) -> FileKind:
        kind = classify(source.media_type)
        sniffed = sniff_kind(source.data)

        if sniffed is not None and kind is not FileKind.UNSUPPORTED and sniffed is not kind:
            # Classification trusts the declared type; the engines report the failure
            logger.warning(
                "Declared media type disagrees with file signature",
                extra_data={
                    "file_name": source.name,
                    "declared_media_type": source.media_type,
                    "declared_kind": kind.value,
                    "sniffed_kind": sniffed.value,
                },
            )

        logger.debug(
            "Classified source file",
            extra_data={
                "file_name": source.name,
                "media_type": source.media_type,
                "kind": kind.value,
                "file_size_bytes": source.size,
            },
        )
        return kind
