"""Tesseract OCR engine adapter."""

import asyncio
import contextvars
import functools
import io
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Protocol

import pytesseract
from PIL import Image

from textify.cancellation import finish_uncancelled
from textify.config import OCRConfig
from textify.exceptions import ConfigurationError
from textify.logger import Timer, get_logger

logger = get_logger(__name__)

_engine_settings: Optional[tuple[str, Optional[str]]] = None
_engine_settings_lock = threading.Lock()


def initialize_engines(config: OCRConfig) -> None:
    """Apply process-wide Tesseract settings once.

    pytesseract keeps the binary path in module state and tesseract reads
    ``TESSDATA_PREFIX`` from the environment, so both are set a single time
    at startup. Repeating the call with the same settings is a no-op.

    Raises:
        ConfigurationError: If called again with different settings
    """
    global _engine_settings

    settings = (config.tesseract_cmd, config.tessdata_prefix)
    with _engine_settings_lock:
        if _engine_settings is not None:
            if _engine_settings != settings:
                raise ConfigurationError(
                    "OCR engines are already initialized with different settings"
                )
            return

        if config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = config.tesseract_cmd
        if config.tessdata_prefix:
            os.environ["TESSDATA_PREFIX"] = config.tessdata_prefix
        _engine_settings = settings

    logger.info(
        "Initialized OCR engine settings",
        extra_data={
            "tesseract_cmd": config.tesseract_cmd,
            "tessdata_prefix": config.tessdata_prefix,
        },
    )


class OCREngine(Protocol):
    """Lifecycle of one OCR engine instance: start, recognize, terminate."""

    async def start(self) -> None: ...

    async def recognize(self, image_bytes: bytes) -> str: ...

    async def terminate(self) -> None: ...


class TesseractEngine:
    """One Tesseract worker owned by a single extraction.

    Recognition runs on a dedicated worker thread so the event loop stays
    responsive while tesseract works. ``terminate`` must be called on every
    exit path, including when ``start`` failed.
    """

    def __init__(self, config: Optional[OCRConfig] = None):
        self.config = config or OCRConfig()
        self._executor: Optional[ThreadPoolExecutor] = None

    async def start(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tesseract")
        loop = asyncio.get_running_loop()
        # Fails fast with TesseractNotFoundError when the binary is missing
        version = await loop.run_in_executor(self._executor, pytesseract.get_tesseract_version)

        logger.debug(
            "Tesseract worker started",
            extra_data={"tesseract_version": version, "languages": self.config.languages},
        )

    async def recognize(self, image_bytes: bytes) -> str:
        if self._executor is None:
            raise RuntimeError("Tesseract worker is not running")

        loop = asyncio.get_running_loop()
        context = contextvars.copy_context()
        return await loop.run_in_executor(
            self._executor, functools.partial(context.run, self._recognize, image_bytes)
        )

    def _recognize(self, image_bytes: bytes) -> str:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.load()

            logger.debug(
                "Starting OCR on image",
                extra_data={
                    "image_format": image.format,
                    "image_dimensions": f"{image.size[0]}x{image.size[1]}",
                },
            )

            with Timer("image_ocr") as timer:
                text = pytesseract.image_to_string(
                    image,
                    lang=self.config.languages,
                    config=self.config.tesseract_config,
                    timeout=self.config.ocr_timeout,
                )

        logger.info(
            "Image OCR completed",
            extra_data={
                "characters_extracted": len(text.strip()),
                "ocr_time_ms": timer.get_elapsed_ms(),
            },
        )
        return text

    async def terminate(self) -> None:
        if self._executor is None:
            return
        executor, self._executor = self._executor, None
        # Queued work is dropped; a recognition already running is waited for
        loop = asyncio.get_running_loop()
        await finish_uncancelled(
            loop.run_in_executor(
                None, functools.partial(executor.shutdown, wait=True, cancel_futures=True)
            )
        )
        logger.debug("Tesseract worker terminated")
