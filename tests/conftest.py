"""Shared test fixtures."""

import io
from typing import Optional

import pytest
from PIL import Image

from fakes import FakeEngineFactory, FakePdfOpener, RecordingObserver, build_pdf
from textify.config import OCRConfig
from textify.extractor import TextExtractor


@pytest.fixture
def fast_config() -> OCRConfig:
    """Config with a fast synthetic progress ticker."""
    return OCRConfig(progress_interval=0.001)


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def make_extractor(fast_config: OCRConfig):
    """Build an extractor wired to fake adapters."""

    def _make(
        engine_factory: Optional[FakeEngineFactory] = None,
        pdf_opener: Optional[FakePdfOpener] = None,
    ) -> TextExtractor:
        return TextExtractor(
            config=fast_config,
            engine_factory=engine_factory or FakeEngineFactory(),
            pdf_opener=pdf_opener or FakePdfOpener(error=AssertionError("PDF opened")),
        )

    return _make


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def text_pdf_bytes() -> bytes:
    return build_pdf("Foo", "Bar")


@pytest.fixture
def blank_pdf_bytes() -> bytes:
    return build_pdf("", "")
