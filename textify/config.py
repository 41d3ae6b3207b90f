"""Configuration for textify using pydantic-settings."""

from typing import Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from textify.exceptions import ConfigurationError

ENV_PREFIX = "TEXTIFY_"


class OCRConfig(BaseSettings):
    """Configuration for OCR and PDF processing.

    Every field can be set from a ``TEXTIFY_<FIELD_NAME>`` environment
    variable; keyword arguments take precedence over the environment.

    Examples:
        >>> config = OCRConfig()

        >>> # German and English text, sharper page rendering
        >>> config = OCRConfig(languages="deu+eng", render_scale=2.0)
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, frozen=True)

    tesseract_cmd: str = "tesseract"
    """Path to tesseract binary. Default: "tesseract" (assumes in PATH)."""

    tessdata_prefix: Optional[str] = None
    """Optional path to tessdata directory. If None, uses system default."""

    languages: str = "eng"
    """OCR languages in Tesseract format (e.g., "eng", "eng+fra")."""

    psm_mode: int = 3
    """Page segmentation mode (0-13). Default: 3 (fully automatic).

    Common modes:
    - 3: Fully automatic page segmentation
    - 6: Uniform block of text
    - 11: Sparse text
    """

    use_oem_1: bool = True
    """Use Tesseract OEM 1 (LSTM engine only)."""

    ocr_timeout: float = 0.0
    """Seconds before a Tesseract run is killed. 0 disables the timeout."""

    render_scale: float = 1.5
    """Zoom factor used when rasterizing a scanned PDF page for OCR.

    1.0 renders at 72 DPI, 1.5 at 108 DPI. Higher values help small print
    at the cost of memory and OCR time.
    """

    progress_interval: float = 0.3
    """Seconds between synthetic progress increments while OCR runs."""

    progress_step: int = 5
    """Percentage points added per synthetic progress increment."""

    progress_cap: int = 90
    """Ceiling for synthetic progress; 100 is only reported on completion."""

    @field_validator("psm_mode")
    @classmethod
    def check_psm_mode(cls, v: int) -> int:
        if not 0 <= v <= 13:
            raise ValueError(f"must be within 0-13, got {v}")
        return v

    @field_validator("ocr_timeout")
    @classmethod
    def check_timeout(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator("render_scale", "progress_interval", "progress_step")
    @classmethod
    def check_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("progress_cap")
    @classmethod
    def check_cap(cls, v: int) -> int:
        if not 0 < v <= 100:
            raise ValueError("must be within 1-100")
        return v

    @property
    def tesseract_config(self) -> str:
        """Command-line flags passed through to tesseract."""
        flags = f"--psm {self.psm_mode}"
        if self.use_oem_1:
            flags += " --oem 1"
        return flags


def load_config(env_prefix: str = ENV_PREFIX, **overrides) -> OCRConfig:
    """Load the OCR config from the environment.

    Args:
        env_prefix: Prefix of the environment variables to read
        **overrides: Field values that take precedence over the environment

    Raises:
        ConfigurationError: If a value has the wrong type or is out of range
    """
    try:
        return OCRConfig(_env_prefix=env_prefix, **overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid textify configuration: {exc}") from exc
