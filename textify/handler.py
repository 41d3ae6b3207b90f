"""Upload handling for base64 and data-URL payloads."""

import base64
import binascii
import re
from typing import Optional

from textify.cancellation import CancellationToken
from textify.exceptions import InvalidPayloadError
from textify.extractor import TextExtractor
from textify.logger import Timer, get_logger
from textify.models import ExtractionResult, SourceFile
from textify.progress import ProgressObserver

logger = get_logger(__name__)

# Browsers' FileReader.readAsDataURL output: data:<type>;base64,<payload>
DATA_URL_PATTERN = re.compile(r"^data:(?P<media_type>[^;,]*)(?:;[^,]*)?;base64,(?P<payload>.*)$", re.S)


class UploadHandler:
    def __init__(self, extractor: Optional[TextExtractor] = None) -> None:
        """Initialize upload handler.

        Args:
            extractor: Text extractor. If None, creates default.
        """
        self.extractor = extractor or TextExtractor()

    def decode_payload(self, encoded: str, media_type: str = "") -> tuple[bytes, str]:
        """Decode plain base64 or a base64 data URL.

        Args:
            encoded: Base64 string or ``data:`` URL
            media_type: Declared media type; a data URL's type fills it in
                when empty

        Returns:
            Tuple of (decoded bytes, media type)

        Raises:
            InvalidPayloadError: If decoding fails
        """
        payload = encoded.strip()
        match = DATA_URL_PATTERN.match(payload)
        if match:
            payload = match.group("payload")
            if not media_type:
                media_type = match.group("media_type")

        try:
            with Timer("base64_decode") as timer:
                decoded = base64.b64decode(payload, validate=True)
        except (ValueError, binascii.Error) as exc:
            logger.error(
                "Failed to decode base64 payload",
                extra_data={
                    "error_type": type(exc).__name__,
                    "encoded_length": len(encoded),
                },
            )
            raise InvalidPayloadError() from exc

        if not decoded:
            raise InvalidPayloadError()

        logger.debug(
            "Decoded upload payload",
            extra_data={
                "decoded_size_bytes": len(decoded),
                "data_url": bool(match),
                "decode_time_ms": timer.get_elapsed_ms(),
            },
        )
        return decoded, media_type

    async def extract(
        self,
        encoded: str,
        media_type: str,
        file_name: str,
        observer: Optional[ProgressObserver] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ExtractionResult:
        """Decode an uploaded file and extract its text.

        Raises:
            InvalidPayloadError: If the payload is not valid base64
            TextifyError: Any failure raised by TextExtractor.extract
        """
        data, media_type = self.decode_payload(encoded, media_type)
        source = SourceFile(data=data, media_type=media_type, name=file_name)
        return await self.extractor.extract(source, observer=observer, cancel_token=cancel_token)
