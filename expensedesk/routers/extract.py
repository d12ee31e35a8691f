"""
Receipt image text extraction.

POST /api/extract — image upload → pre-fill suggestions (empty on failure)
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from expensedesk.config import settings
from expensedesk.pipeline import extract_suggestions
from expensedesk.routers.deps import current_user
from expensedesk.schemas import ExtractionSuggestions, User

logger = logging.getLogger(__name__)
router = APIRouter()

IMAGE_TYPES = {"image/png", "image/jpeg", "image/jpg", "image/webp", "image/tiff"}


@router.post("/extract", response_model=ExtractionSuggestions)
async def extract(
    receipt: UploadFile = File(...),
    user: User = Depends(current_user),
):
    if receipt.content_type not in IMAGE_TYPES:
        raise HTTPException(status_code=400, detail="Upload a PNG/JPEG image.")

    # at most one byte past the cap
    image_bytes = await receipt.read(settings.MAX_UPLOAD_BYTES + 1)
    if not image_bytes:
        raise HTTPException(status_code=400, detail="Empty upload")
    if len(image_bytes) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Image too large")

    # Tesseract runs as a subprocess; keep it off the event loop
    return await run_in_threadpool(
        extract_suggestions,
        image_bytes,
        lang=settings.OCR_LANG,
        tesseract_cmd=settings.TESSERACT_CMD,
    )
