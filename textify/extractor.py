"""Text extraction from images and PDFs.

Images go straight to OCR. PDFs are read from their text layer first; when
every page comes back empty the document is treated as a scan, page 1 is
rasterized and OCR'd instead.
"""

from typing import Awaitable, Callable, Optional

from textify.cancellation import CancellationToken
from textify.config import OCRConfig
from textify.detector import FileKindDetector
from textify.exceptions import (
    CorruptOrProtectedPdfError,
    ImageProcessingError,
    NoTextFoundError,
    TextifyError,
    UnsupportedFileKindError,
)
from textify.logger import Timer, extraction_context, get_logger
from textify.models import ExtractionResult, FileKind, RasterPage, SourceFile
from textify.ocr import OCREngine, TesseractEngine, initialize_engines
from textify.pdf import PdfDocument
from textify.progress import ProgressObserver, ProgressTracker, SyntheticProgress

logger = get_logger(__name__)

FALLBACK_PAGE = 1
SCANNED_PDF_TITLE = "Scanned PDF detected"
SCANNED_PDF_DESCRIPTION = "This appears to be a scanned PDF. Trying OCR to extract text..."


class TextExtractor:
    """Extracts plain text from a single image or PDF per call.

    The extractor holds no per-call state, so one instance may serve any
    number of sequential or concurrent ``extract`` calls.
    """

    def __init__(
        self,
        config: Optional[OCRConfig] = None,
        detector: Optional[FileKindDetector] = None,
        engine_factory: Optional[Callable[[OCRConfig], OCREngine]] = None,
        pdf_opener: Optional[Callable[[bytes], Awaitable[PdfDocument]]] = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            config: OCR configuration. If None, uses defaults.
            detector: File kind detector. If None, creates default.
            engine_factory: Builds one OCR engine per image recognition.
                Defaults to TesseractEngine.
            pdf_opener: Coroutine function parsing PDF bytes. Defaults to
                PdfDocument.open.
        """
        self.config = config or OCRConfig()
        self.detector = detector or FileKindDetector()
        self.engine_factory = engine_factory or TesseractEngine
        self.pdf_opener = pdf_opener or PdfDocument.open

        initialize_engines(self.config)

    async def extract(
        self,
        source: SourceFile,
        observer: Optional[ProgressObserver] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExtractionResult:
        """Extract text from a source file.

        Args:
            source: File bytes with declared media type
            observer: Receives progress pairs and notices. The last progress
                event of every call past classification is ``(0, "")``.
            cancel_token: Checked between steps; cancelling makes the call
                raise ExtractionCancelledError after releasing resources.

        Returns:
            ExtractionResult whose text is non-empty after stripping

        Raises:
            UnsupportedFileKindError: Media type is neither image nor PDF
            NoTextFoundError: OCR recognized no text
            ImageProcessingError: OCR engine failed
            CorruptOrProtectedPdfError: PDF could not be opened, read or rendered
            ExtractionCancelledError: cancel_token fired mid-extraction
        """
        with extraction_context():
            kind = self.detector.detect(source)
            if kind is FileKind.UNSUPPORTED:
                logger.warning(
                    "Rejected unsupported file",
                    extra_data={"file_name": source.name, "media_type": source.media_type},
                )
                raise UnsupportedFileKindError()

            tracker = ProgressTracker(observer)
            token = cancel_token or CancellationToken()

            with Timer("extraction") as timer:
                try:
                    if kind is FileKind.IMAGE:
                        result = await self._extract_image_file(source, tracker, token)
                    else:
                        result = await self._extract_pdf_file(source, tracker, token)
                except TextifyError as exc:
                    logger.warning(
                        "Extraction failed",
                        extra_data={
                            "file_name": source.name,
                            "kind": kind.value,
                            "error_type": type(exc).__name__,
                            "extraction_time_ms": timer.get_elapsed_ms(),
                        },
                    )
                    raise
                except Exception as exc:
                    logger.error(
                        "Unexpected extraction error",
                        extra_data={
                            "file_name": source.name,
                            "kind": kind.value,
                            "error_type": type(exc).__name__,
                            "error": str(exc),
                        },
                        exc_info=True,
                    )
                    if kind is FileKind.IMAGE:
                        raise ImageProcessingError() from exc
                    raise CorruptOrProtectedPdfError() from exc
                finally:
                    tracker.reset()

            logger.info(
                "Successfully extracted text",
                extra_data={
                    "file_name": source.name,
                    "kind": kind.value,
                    "character_count": result.character_count,
                    "ocr_used": result.ocr_used,
                    "fallback_used": result.fallback_used,
                    "extraction_time_ms": timer.get_elapsed_ms(),
                },
            )
            return result

    async def _extract_image_file(
        self, source: SourceFile, tracker: ProgressTracker, token: CancellationToken
    ) -> ExtractionResult:
        text = await self.recognize_image(source.data, tracker, token)
        return ExtractionResult(
            text=text,
            kind=FileKind.IMAGE,
            media_type=source.media_type,
            file_name=source.name,
            character_count=len(text),
            ocr_used=True,
        )

    async def _extract_pdf_file(
        self, source: SourceFile, tracker: ProgressTracker, token: CancellationToken
    ) -> ExtractionResult:
        tracker.report(message="Loading PDF...")
        token.raise_if_cancelled()

        try:
            with Timer("pdf_open") as open_timer:
                pdf = await self.pdf_opener(source.data)
        except Exception as exc:
            logger.error(
                "Failed to open PDF",
                extra_data={
                    "file_name": source.name,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            raise CorruptOrProtectedPdfError() from exc

        logger.debug(
            "PDF loaded",
            extra_data={
                "file_name": source.name,
                "page_count": pdf.page_count,
                "open_time_ms": open_timer.get_elapsed_ms(),
            },
        )

        try:
            page_count = pdf.page_count
            if page_count < 1:
                raise CorruptOrProtectedPdfError()

            text = await self.read_text_layer(pdf, tracker, token)
            if text:
                return ExtractionResult(
                    text=text,
                    kind=FileKind.PDF,
                    media_type=source.media_type,
                    file_name=source.name,
                    character_count=len(text),
                    ocr_used=False,
                    page_count=page_count,
                )

            tracker.notice(SCANNED_PDF_TITLE, SCANNED_PDF_DESCRIPTION)
            tracker.report(message=f"Scanned PDF detected. Running OCR on page {FALLBACK_PAGE}...")
            logger.info(
                "PDF text layer is empty, falling back to OCR",
                extra_data={"file_name": source.name, "page_count": page_count},
            )
            if page_count > 1:
                logger.warning(
                    "Only the first page of a scanned PDF is OCR'd",
                    extra_data={"file_name": source.name, "skipped_pages": page_count - 1},
                )

            raster = await self._rasterize_fallback_page(pdf, token)
            text = await self.recognize_image(raster.png_bytes, tracker, token)
            return ExtractionResult(
                text=text,
                kind=FileKind.PDF,
                media_type=source.media_type,
                file_name=source.name,
                character_count=len(text),
                ocr_used=True,
                page_count=page_count,
                fallback_used=True,
            )
        finally:
            await self._close_pdf(pdf)

    async def read_text_layer(
        self, pdf: PdfDocument, tracker: ProgressTracker, token: CancellationToken
    ) -> str:
        """Concatenate the text layer of every page, in page order.

        Items on a page are joined by a single space and each page is
        followed by a blank line. The result is stripped and may be empty;
        deciding what to do with an empty text layer is left to the caller.

        Raises:
            CorruptOrProtectedPdfError: If a page cannot be read
        """
        total = pdf.page_count
        tracker.report(message=f"Extracting text from {total} page{'s' if total > 1 else ''}...")

        full_text = ""
        for number in range(1, total + 1):
            token.raise_if_cancelled()
            tracker.report(
                percent=(number - 1) / total * 100,
                message=f"Processing page {number} of {total}",
            )

            try:
                with Timer("pdf_page_text") as timer:
                    page = await pdf.get_page(number)
                    items = await page.get_text_content()
            except Exception as exc:
                logger.error(
                    "Failed to read PDF page text",
                    extra_data={
                        "page_number": number,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
                raise CorruptOrProtectedPdfError() from exc

            full_text += " ".join(item.text for item in items) + "\n\n"

            logger.debug(
                f"Text layer read for page {number}",
                extra_data={
                    "page_number": number,
                    "item_count": len(items),
                    "page_time_ms": timer.get_elapsed_ms(),
                },
            )
            tracker.report(percent=number / total * 100)

        return full_text.strip()

    async def _rasterize_fallback_page(
        self, pdf: PdfDocument, token: CancellationToken
    ) -> RasterPage:
        token.raise_if_cancelled()
        try:
            with Timer("pdf_render") as timer:
                page = await pdf.get_page(FALLBACK_PAGE)
                raster = await page.render(self.config.render_scale)
        except Exception as exc:
            logger.error(
                "Failed to rasterize PDF page for OCR",
                extra_data={
                    "page_number": FALLBACK_PAGE,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            raise CorruptOrProtectedPdfError() from exc

        logger.debug(
            "Rasterized PDF page",
            extra_data={
                "page_number": raster.page_number,
                "dimensions": f"{raster.width}x{raster.height}",
                "png_size_bytes": len(raster.png_bytes),
                "render_time_ms": timer.get_elapsed_ms(),
            },
        )
        return raster

    async def recognize_image(
        self, image_bytes: bytes, tracker: ProgressTracker, token: CancellationToken
    ) -> str:
        """Run OCR on encoded image bytes with a dedicated engine instance.

        Returns the recognized text as produced by the engine, unstripped.

        Raises:
            ImageProcessingError: If the engine fails to start or recognize
            NoTextFoundError: If the recognized text is blank
        """
        tracker.report(message="Processing image...")
        token.raise_if_cancelled()

        engine = self.engine_factory(self.config)
        try:
            await engine.start()
            token.raise_if_cancelled()

            async with SyntheticProgress(
                tracker,
                interval=self.config.progress_interval,
                step=self.config.progress_step,
                cap=self.config.progress_cap,
            ):
                text = await engine.recognize(image_bytes)

            tracker.report(percent=100)
        except TextifyError:
            raise
        except Exception as exc:
            logger.error(
                "OCR engine failed",
                extra_data={
                    "image_size_bytes": len(image_bytes),
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
                exc_info=True,
            )
            raise ImageProcessingError() from exc
        finally:
            await self._release_engine(engine)

        if not text.strip():
            raise NoTextFoundError()
        return text

    @staticmethod
    async def _close_pdf(pdf: PdfDocument) -> None:
        try:
            await pdf.close()
        except Exception as exc:
            logger.warning(
                "Failed to close PDF document",
                extra_data={"error_type": type(exc).__name__, "error": str(exc)},
            )

    @staticmethod
    async def _release_engine(engine: OCREngine) -> None:
        try:
            await engine.terminate()
        except Exception as exc:
            logger.warning(
                "Failed to terminate OCR engine",
                extra_data={"error_type": type(exc).__name__, "error": str(exc)},
            )
