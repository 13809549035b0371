"""
Document Service - course form verification

A course form passes when its text mentions the student's matric number and
every part of their name longer than two characters.
"""

import asyncio
import io
import re
from typing import List, Optional

import pdfplumber

from app.core.config import settings
from app.core.exceptions import FileTooLargeError, InvalidFileTypeError, ValidationError
from app.core.logging_config import logger
from app.modules.verification.activation_gate import VerificationOutcome
from app.services.storage_service import StorageService, storage_service

ALLOWED_DOCUMENT_TYPES = ["application/pdf"]
COURSE_FORM_FOLDER = "course-forms"


def extract_text_from_pdf(content: bytes) -> str:
    """Extract text from every page of a PDF"""
    text = ""
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                text += page_text + "\n"
    return text


def name_parts(full_name: str) -> List[str]:
    """Name parts significant enough to look for (longer than two characters)"""
    return [part for part in re.split(r"\s+", (full_name or "").strip()) if len(part) > 2]


def document_matches(text: str, matric_number: str, full_name: str) -> bool:
    """Case-insensitive check that the text mentions the matric number and each name part"""
    haystack = (text or "").upper()
    if not matric_number or matric_number.upper() not in haystack:
        return False
    return all(part.upper() in haystack for part in name_parts(full_name))


def validate_upload(content: bytes, content_type: Optional[str], allowed: List[str], max_size: int) -> None:
    if content_type not in allowed:
        raise InvalidFileTypeError(content_type or "unknown", allowed)
    if not content:
        raise ValidationError("Uploaded file is empty")
    if len(content) > max_size:
        raise FileTooLargeError(len(content), max_size)


class DocumentService:
    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or storage_service

    async def verify_course_form(
        self,
        content: bytes,
        content_type: Optional[str],
        matric_number: str,
        full_name: str,
    ) -> VerificationOutcome:
        """
        Store the course form and check it belongs to the student.

        Raises ValidationError for malformed uploads and UpstreamError when
        storage fails. A readable form that does not match is a failed
        outcome, not an error.
        """
        validate_upload(content, content_type, ALLOWED_DOCUMENT_TYPES, settings.MAX_DOCUMENT_SIZE)

        key = self.storage.build_key(COURSE_FORM_FOLDER, content_type, owner=matric_number)
        url = await self.storage.upload_bytes(content, key, content_type)

        try:
            text = await asyncio.to_thread(extract_text_from_pdf, content)
        except Exception as e:
            logger.warning(f"[Document] Could not read course form for {matric_number}: {e}")
            return VerificationOutcome(verified=False, url=url, reason="Course form could not be read")

        if not text.strip():
            return VerificationOutcome(
                verified=False, url=url, reason="Course form contains no readable text"
            )

        if not document_matches(text, matric_number, full_name):
            return VerificationOutcome(
                verified=False, url=url,
                reason="Course form does not match your matric number and name"
            )

        logger.info(f"[Document] Course form verified for {matric_number}")
        return VerificationOutcome(verified=True, url=url)


document_service = DocumentService()
