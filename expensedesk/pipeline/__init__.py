"""
Receipt text extraction pipeline.

Orchestrates: read text from image → parse suggestions. Extraction is a
convenience only: any failure yields empty suggestions and manual entry
carries on.
"""
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError
from pytesseract import TesseractError, TesseractNotFoundError

from expensedesk.pipeline.ocr import read_text
from expensedesk.pipeline.parser import parse_receipt_text
from expensedesk.pipeline.prefill import apply_suggestions  # noqa: F401
from expensedesk.schemas import ExtractionSuggestions

logger = logging.getLogger(__name__)


def extract_suggestions(
    image_bytes: bytes, lang: str = "eng", tesseract_cmd: Optional[str] = None
) -> ExtractionSuggestions:
    """Run text extraction on an image. Never raises."""
    logger.info("Extraction start: %d bytes", len(image_bytes))
    try:
        text = read_text(image_bytes, lang=lang, tesseract_cmd=tesseract_cmd)
    except (
        TesseractNotFoundError,
        TesseractError,
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        RuntimeError,
        ValueError,
    ):
        logger.warning("Text extraction failed, continuing without pre-fill", exc_info=True)
        return ExtractionSuggestions()

    suggestions = parse_receipt_text(text)
    logger.info(
        "Extraction done: store=%s date=%s items=%d",
        suggestions.store, suggestions.date, len(suggestions.items),
    )
    return suggestions
