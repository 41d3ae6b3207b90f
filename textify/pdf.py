"""PyMuPDF document adapter.

PyMuPDF is not thread-safe, so every call on every document runs on one
shared worker thread. Closing goes through the same thread and therefore
waits for any read still in progress.
"""

import asyncio
import contextvars
import functools
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

import fitz  # PyMuPDF

from textify.cancellation import finish_uncancelled
from textify.logger import get_logger
from textify.models import RasterPage, TextItem

logger = get_logger(__name__)

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def _pymupdf_executor() -> ThreadPoolExecutor:
    global _executor

    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pymupdf")
        return _executor


def _submit(fn: Callable[..., Any], *args) -> "asyncio.Future[Any]":
    loop = asyncio.get_running_loop()
    context = contextvars.copy_context()
    return loop.run_in_executor(_pymupdf_executor(), functools.partial(context.run, fn, *args))


class PdfPage:
    """A single page of an open PdfDocument. Numbers are one-indexed."""

    def __init__(self, page: fitz.Page, number: int):
        self._page = page
        self.number = number

    async def get_text_content(self) -> list[TextItem]:
        """Return the page's text spans in reading order."""
        return await _submit(self._text_items)

    def _text_items(self) -> list[TextItem]:
        content = self._page.get_text("dict")
        items = []
        for block in content.get("blocks", []):
            if block.get("type") != 0:  # image block
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    items.append(TextItem(text=span.get("text", "")))
        return items

    async def render(self, scale: float) -> RasterPage:
        """Rasterize the page to PNG at ``scale`` times 72 DPI."""
        return await _submit(self._render, scale)

    def _render(self, scale: float) -> RasterPage:
        pixmap = self._page.get_pixmap(matrix=fitz.Matrix(scale, scale))
        return RasterPage(
            page_number=self.number,
            width=pixmap.width,
            height=pixmap.height,
            png_bytes=pixmap.tobytes("png"),
        )


class PdfDocument:
    """Async wrapper around an in-memory PyMuPDF document."""

    def __init__(self, document: fitz.Document):
        self._document = document

    @classmethod
    async def open(cls, data: bytes) -> "PdfDocument":
        """Parse a PDF byte buffer.

        Raises:
            ValueError: If the document is encrypted
            fitz.FileDataError: If the buffer is not a readable PDF
        """
        future = _submit(_open_document, data)
        try:
            document = await finish_uncancelled(future)
        except asyncio.CancelledError:
            # The open finished on the worker; release what it produced
            if future.exception() is None:
                await finish_uncancelled(_submit(future.result().close))
            raise
        return cls(document)

    @property
    def page_count(self) -> int:
        return self._document.page_count

    @property
    def closed(self) -> bool:
        return self._document.is_closed

    async def get_page(self, number: int) -> PdfPage:
        if self.closed:
            raise ValueError("PDF document is closed")
        if not 1 <= number <= self.page_count:
            raise IndexError(f"Page {number} out of range 1-{self.page_count}")
        page = await _submit(self._document.load_page, number - 1)
        return PdfPage(page, number)

    async def close(self) -> None:
        """Close the document once pending reads on it have finished."""
        if self.closed:
            return
        await finish_uncancelled(_submit(self._document.close))


def _open_document(data: bytes) -> fitz.Document:
    document = fitz.open(stream=data, filetype="pdf")
    if document.needs_pass:
        document.close()
        raise ValueError("PDF is password-protected")

    logger.debug(
        "Opened PDF document",
        extra_data={"page_count": document.page_count, "file_size_bytes": len(data)},
    )
    return document
