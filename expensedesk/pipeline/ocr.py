"""
Optical text reading via Tesseract.
"""
from __future__ import annotations

import io
from typing import Optional

import pytesseract
from PIL import Image


def read_text(image_bytes: bytes, lang: str = "eng", tesseract_cmd: Optional[str] = None) -> str:
    if tesseract_cmd:
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
    img = Image.open(io.BytesIO(image_bytes)).convert("RGB")
    return pytesseract.image_to_string(img, lang=lang, config="--oem 3 --psm 6")
