"""Unit tests for file kind classification."""

import logging

import pytest

from textify.detector import FileKindDetector, classify, sniff_kind
from textify.models import FileKind, SourceFile


class TestClassify:
    @pytest.mark.parametrize(
        "media_type", ["image/png", "image/jpeg", "image/webp", "image/svg+xml", "x-image/custom"]
    )
    def test_anything_mentioning_image(self, media_type: str) -> None:
        assert classify(media_type) is FileKind.IMAGE

    def test_exact_pdf(self) -> None:
        assert classify("application/pdf") is FileKind.PDF

    @pytest.mark.parametrize(
        "media_type",
        ["", "text/plain", "application/json", "application/pdf; charset=binary", "APPLICATION/PDF"],
    )
    def test_everything_else_unsupported(self, media_type: str) -> None:
        assert classify(media_type) is FileKind.UNSUPPORTED


class TestSniffKind:
    def test_pdf_signature(self) -> None:
        assert sniff_kind(b"%PDF-1.7\n...") is FileKind.PDF

    def test_png_signature(self, png_bytes: bytes) -> None:
        assert sniff_kind(png_bytes) is FileKind.IMAGE

    def test_jpeg_signature(self) -> None:
        assert sniff_kind(b"\xff\xd8\xff\xe0\x00\x10JFIF") is FileKind.IMAGE

    def test_webp_signature(self) -> None:
        assert sniff_kind(b"RIFF\x24\x00\x00\x00WEBPVP8 ") is FileKind.IMAGE

    def test_unknown_signature(self) -> None:
        assert sniff_kind(b"hello") is None
        assert sniff_kind(b"") is None


class TestFileKindDetector:
    def test_uses_declared_type(self) -> None:
        source = SourceFile(data=b"%PDF-1.4", media_type="image/png", name="odd.png")

        assert FileKindDetector().detect(source) is FileKind.IMAGE

    def test_warns_on_signature_mismatch(self, caplog: pytest.LogCaptureFixture) -> None:
        source = SourceFile(data=b"%PDF-1.4", media_type="image/png", name="odd.png")

        with caplog.at_level(logging.WARNING, logger="textify.detector"):
            FileKindDetector().detect(source)

        assert "disagrees with file signature" in caplog.text
        assert "file_name=odd.png" in caplog.text

    def test_no_warning_when_consistent(
        self, png_bytes: bytes, caplog: pytest.LogCaptureFixture
    ) -> None:
        source = SourceFile(data=png_bytes, media_type="image/png", name="ok.png")

        with caplog.at_level(logging.WARNING, logger="textify.detector"):
            FileKindDetector().detect(source)

        assert caplog.text == ""
